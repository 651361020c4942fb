import pytest

from boolmap.expression import Not, Or, Variable
from boolmap.generator import GeneratorOptions, generate_random_tree
from boolmap.parser import parse
from boolmap.render import to_boolean_string
from boolmap.rules import (
    ALL_RULES,
    BASIC_RULES,
    CLEANUP_RULES,
    DEFAULT_RULES,
    rules_by_family,
)
from boolmap.simplifier import RuleEngine, simplify, simplify_detailed


@pytest.mark.parametrize(
    "text, expected",
    [
        ("!(A*B)", "!A+!B"),
        ("!(A+B)", "!A*!B"),
        ("!!A", "A"),
        ("A*!A", "0"),
        ("A+!A", "1"),
        ("A*B*!A", "0"),
        ("A+B+!B", "1"),
        ("A*1", "A"),
        ("A*0", "0"),
        ("A+0", "A"),
        ("A+1", "1"),
        ("!1", "0"),
        ("!0", "1"),
        ("A*A", "A"),
        ("A+A", "A"),
        ("A*B*A", "A*B"),
        ("A+A*B", "A"),
        ("A*(A+B)", "A"),
        ("A*B+B*A", "A*B"),
        ("A*B+A*!B", "A"),
        ("(A+B)*(A+!B)", "A"),
        ("A*B+A*C", "A*(B+C)"),
        ("(A+B)*(A+C)", "A+B*C"),
        ("A^0", "A"),
        ("A^1", "!A"),
        ("A^A", "0"),
        ("A^!A", "1"),
        ("A<=>A", "1"),
        ("A<=>0", "!A"),
        ("A@A", "!A"),
        ("A@0", "1"),
        ("A#0", "!A"),
        ("A#1", "0"),
        ("!(A@B)", "A*B"),
        ("!(A#B)", "A+B"),
        ("!(A^B)", "A<=>B"),
        ("!(A<=>B)", "A^B"),
        ("A@B", "!A+!B"),
        ("A#B", "!A*!B"),
        ("A^B", "A^B"),
        ("A*B+!A*C+B*C", "A*B+!A*C"),
        ("(A+B)*(!A+C)*(B+C)", "(A+B)*(!A+C)"),
        ("A*B+!A*C+B*C*D", "A*B+!A*C"),
    ],
)
def test_simplify(text, expected):
    assert to_boolean_string(simplify(parse(text))) == expected


def test_simplify_detailed_records_steps():
    result = simplify_detailed(parse("!(A*B)"))
    assert result.simplified_string == "!A+!B"
    assert result.simplified_latex == r"\lnot A \lor \lnot B"
    assert result.iterations == 1
    assert [step.rule_name for step in result.steps] == ["De Morgan (AND)"]
    assert result.rule_application_counts == {"De Morgan (AND)": 1}
    assert result.steps[0].before == parse("!(A*B)")
    assert result.steps[0].after == Or(Not(Variable("A")), Not(Variable("B")))
    assert result.steps[0].describe() == "De Morgan (AND): !(A*B) -> !A+!B"
    assert not result.max_iterations_reached
    assert result.changed


def test_no_change_yields_no_steps():
    result = simplify_detailed(parse("A*B+C"))
    assert result.expression == result.original
    assert result.steps == []
    assert result.iterations == 0


def test_iteration_limit_is_a_flag():
    result = RuleEngine(max_iterations=1).run(parse("!!(A*A)"))
    assert result.max_iterations_reached
    assert result.iterations == 1
    assert to_boolean_string(result.expression) == "A*A"


def test_iteration_limit_not_flagged_at_fixed_point():
    result = RuleEngine(max_iterations=1).run(parse("!!A"))
    assert not result.max_iterations_reached
    assert result.expression == Variable("A")


def test_invalid_iteration_bound():
    with pytest.raises(ValueError):
        RuleEngine(max_iterations=0)


def test_rule_can_apply_and_apply():
    de_morgan = next(rule for rule in DEFAULT_RULES if rule.name == "De Morgan (AND)")
    assert de_morgan.can_apply(parse("C+!(A*B)"))
    assert not de_morgan.can_apply(parse("A*B"))
    expr = parse("A*B")
    assert de_morgan.apply(expr) is expr


def test_cleanup_rules_complement_absorption():
    assert to_boolean_string(simplify(parse("A+!A*B"), CLEANUP_RULES)) == "A+B"
    assert to_boolean_string(simplify(parse("A*(!A+B)"), CLEANUP_RULES)) == "A*B"


def test_basic_rules_do_not_apply_de_morgan():
    expr = parse("!(A*B)")
    assert simplify(expr, BASIC_RULES) == expr


def test_rule_families():
    families = rules_by_family()
    assert {"constants", "idempotence", "contradiction", "redundancy", "double_negation",
            "de_morgan", "distributive", "derived", "consensus"} <= set(families)
    assert sum(len(rules) for rules in families.values()) == len(ALL_RULES)


@pytest.mark.parametrize("seed", range(30))
def test_simplify_preserves_semantics_and_is_idempotent(seed, equivalent):
    expr = generate_random_tree(GeneratorOptions(complexity=4, include_constants=True), seed)
    result = simplify_detailed(expr)
    assert not result.max_iterations_reached
    assert equivalent(expr, result.expression)
    assert simplify(result.expression) == result.expression


def test_redundancy_inside_larger_chain(equivalent):
    expr = parse("C+A*B+A*!B")
    assert to_boolean_string(simplify(expr)) == "C+A"
    assert equivalent(expr, simplify(expr))


def test_consensus_term_is_dropped_in_one_step():
    result = simplify_detailed(parse("A*B+!A*C+B*C"))
    assert [step.rule_name for step in result.steps] == ["Consensus"]
    assert result.simplified_string == "A*B+!A*C"


def test_consensus_needs_a_single_clash():
    expr = parse("A*B+!A*!B+B*!B")
    consensus = next(rule for rule in DEFAULT_RULES if rule.name == "Consensus")
    assert not consensus.can_apply(parse("A*B+!A*!B+C"))
    assert to_boolean_string(simplify(expr)) == "A*B+!A*!B"

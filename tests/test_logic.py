import pytest
from sympy import Integer, Symbol
from sympy.logic import boolalg

from boolmap.errors import ConversionError
from boolmap.expression import FALSE, TRUE, Variable
from boolmap.logic import (
    equivalent as sympy_equivalent,
    from_sympy,
    get_variables,
    minterms_to_expression,
    prime_format,
    simplify_from_minterms,
    simplify_to_dnf,
    to_sympy,
    truth_minterms,
    validate_expression_variables,
    validate_minterm_range,
    validate_variable_count,
)
from boolmap.evaluator import Evaluator
from boolmap.parser import parse
from boolmap.render import to_boolean_string


def test_get_variables():
    assert [str(s) for s in get_variables(3)] == ["A", "B", "C"]
    with pytest.raises(ValueError):
        get_variables(0)
    with pytest.raises(ValueError):
        get_variables(27)


@pytest.mark.parametrize(
    "text",
    ["A*B+!C", "A^B", "A@B", "A#B", "A=B", "!(A+B)*C", "1", "0", "A*1"],
)
def test_sympy_round_trip_keeps_function(text, equivalent):
    expr = parse(text)
    assert equivalent(expr, from_sympy(to_sympy(expr)))


def test_to_sympy_structure():
    a, b = Symbol("A"), Symbol("B")
    assert to_sympy(parse("A*!B")) == boolalg.And(a, boolalg.Not(b))
    assert to_sympy(parse("1")) == boolalg.true


def test_from_sympy_constants_and_implies():
    assert from_sympy(boolalg.true) == TRUE
    assert from_sympy(False) == FALSE
    implied = from_sympy(boolalg.Implies(Symbol("A"), Symbol("B")))
    assert to_boolean_string(implied) == "!A+B"


def test_from_sympy_rejects_unknown():
    with pytest.raises(ConversionError):
        from_sympy(Integer(2))


@pytest.mark.parametrize("text", ["A*B+!C", "A^B^C", "(A+B)*(!A+C)", "A=B"])
def test_truth_minterms_agree_with_evaluator(text):
    expr = parse(text)
    assert tuple(truth_minterms(expr)) == Evaluator().minterms(expr)


def test_minterms_to_expression():
    expr = minterms_to_expression([3, 0], ["A", "B"])
    assert to_boolean_string(expr) == "!A*!B+A*B"
    assert minterms_to_expression([], ["A"]) == FALSE


def test_simplify_to_dnf():
    expr = parse("A*B+A*!B+C*0")
    assert simplify_to_dnf(expr) == Variable("A")


@pytest.mark.parametrize(
    "text, expected",
    [("A+!A", TRUE), ("A*!A", FALSE), ("(A+B)*(!A+B)*(A+!B)*(!A+!B)", FALSE), ("1", TRUE)],
)
def test_simplify_to_dnf_collapses_constant_functions(text, expected):
    assert simplify_to_dnf(parse(text)) == expected


def test_simplify_to_dnf_keeps_function(equivalent):
    for text in ["A*B+!A*C+B*C", "A^B^C", "!(A=B)+C*D", "(A+B)*(!A+C)"]:
        expr = parse(text)
        assert equivalent(expr, simplify_to_dnf(expr))


def test_equivalent():
    assert sympy_equivalent(parse("!(A*B)"), parse("!A+!B"))
    assert not sympy_equivalent(parse("A+B"), parse("A*B"))


def test_prime_format():
    assert prime_format(parse("A*!B+C"), ["A", "B", "C"], already_simplified=True) == "AB' + C"
    assert prime_format(parse("A*B+A*!B")) == "A"
    assert prime_format(parse("A+!A")) == "1"


def test_simplify_from_minterms():
    expr, text = simplify_from_minterms(["A", "B", "C"], [4, 5, 6, 7])
    assert expr == Variable("A")
    assert text == "A"


def test_simplify_from_minterms_full_and_empty():
    assert simplify_from_minterms(["A", "B"], [0, 1, 2, 3]) == (TRUE, "1")
    assert simplify_from_minterms(["A", "B"], []) == (FALSE, "0")


def test_simplify_from_minterms_with_dontcares():
    expr, _ = simplify_from_minterms(["A", "B"], [3], dontcares=[1])
    assert expr == Variable("B")


def test_validate_variable_count():
    assert validate_variable_count(parse("A*B"), 2, 4) == ["A", "B"]
    with pytest.raises(ValueError):
        validate_variable_count(parse("A"), 2, 4)


def test_validate_expression_variables():
    validate_expression_variables(parse("A*B"), ["A", "B", "C"])
    with pytest.raises(ValueError, match="D"):
        validate_expression_variables(parse("A*D"), ["A", "B"])


def test_validate_minterm_range():
    validate_minterm_range([0, 7], 3)
    with pytest.raises(ValueError, match=r"\[8\]"):
        validate_minterm_range([8, 1], 3)

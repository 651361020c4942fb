import random

import pytest

import boolmap
from boolmap import (
    BooleanEngine,
    EngineConfig,
    MinimizationOptions,
    MinimizationResult,
    ParseError,
    ResultFormat,
    Variable,
)
from boolmap.expression import BINARY_TYPES, Constant, Not, iter_nodes, node_count
from boolmap.generator import GeneratorOptions, generate_random_tree

WIDE = GeneratorOptions(complexity=4)


def _mixed_tree(rng, depth):
    """Random tree over every binary operator; the leftmost leaf is a variable."""
    if depth == 0:
        leaf = Variable(rng.choice("ABCD"))
        return Not(leaf) if rng.random() < 0.3 else leaf
    kind = rng.choice(BINARY_TYPES)
    left = _mixed_tree(rng, depth - 1)
    if rng.random() < 0.1:
        right = Constant(rng.random() < 0.5)
    else:
        right = _mixed_tree(rng, rng.randint(0, depth - 1))
    node = kind(left, right)
    return Not(node) if rng.random() < 0.2 else node


def test_package_level_round_trip():
    expr = boolmap.parse("A*B+A*!B")
    assert boolmap.to_boolean_string(boolmap.minimize(expr)) == "A"
    assert boolmap.to_latex_string(expr) == "A \\land B \\lor A \\land \\lnot B"
    assert boolmap.extract_variables(expr) == ["A", "B"]
    assert boolmap.evaluate(expr, {"A": True})
    assert boolmap.minterms(expr) == (2, 3)
    assert [row.result for row in boolmap.truth_table(expr)] == [False, False, True, True]
    assert boolmap.build_kmap(expr).minterms == (2, 3)
    assert boolmap.variable_importance(expr) == {"A": 1.0, "B": 0.0}
    assert boolmap.simplify_detailed(expr).simplified_string == "A"
    assert boolmap.simplify(expr) == Variable("A")
    assert boolmap.get_default_engine() is boolmap.get_default_engine()


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        boolmap.parse("A+")
    with pytest.raises(ParseError):
        boolmap.parse("")


def test_engine_facade(engine, equivalent):
    expr = engine.parse("A*(B+C)")
    assert engine.to_boolean_string(engine.to_dnf(expr)) == "A*B+A*C"
    assert engine.to_boolean_string(engine.canonical_sop(expr)) == "A*!B*C+A*B*!C+A*B*C"
    assert equivalent(expr, engine.canonical_pos(expr))
    assert engine.optimal_variable_order(expr) == ["A", "B", "C"]
    assert engine.truth_table(expr, ["A"])[1].assignment == {"A": True}
    assert engine.minterms(expr, ["A", "B", "C", "D"]) == (10, 11, 12, 13, 14, 15)


def test_engine_minimize_formats(engine):
    expr = engine.parse("A+!A*B")
    result = engine.minimize(expr, MinimizationOptions(result_format=ResultFormat.BOTH))
    assert isinstance(result, MinimizationResult)
    assert engine.to_boolean_string(result.minimal) == "A+B"


def test_engine_kmap_cache(engine):
    expr = engine.parse("A*B+C")
    first = engine.build_kmap(expr)
    assert engine.build_kmap(engine.parse("A*B+C")) is first
    assert engine.kmap_cache.hits == 1
    engine.clear_caches()
    assert len(engine.kmap_cache) == 0
    assert engine.build_kmap(expr) is not first


def test_engines_keep_separate_caches():
    small = BooleanEngine(EngineConfig(evaluation_cache_size=1))
    other = BooleanEngine()
    expr = small.parse("A+B")
    small.evaluate(expr, {"A": True})
    small.evaluate(expr, {"B": True})
    assert len(small.evaluator.evaluation_cache) == 1
    assert len(other.evaluator.evaluation_cache) == 0


def test_engine_config_validation():
    with pytest.raises(ValueError):
        EngineConfig(max_rule_iterations=0)
    with pytest.raises(ValueError):
        EngineConfig(importance_samples=0)


def test_engine_simplify_uses_configured_bound():
    engine = BooleanEngine(EngineConfig(max_rule_iterations=1))
    result = engine.simplify_detailed(engine.parse("!!(A*1)"))
    assert result.iterations == 1
    assert result.max_iterations_reached


@pytest.mark.parametrize("seed", range(40))
def test_minimize_preserves_function_and_never_grows(engine, seed, equivalent):
    expr = generate_random_tree(WIDE, seed)
    result = engine.minimize(expr)
    assert equivalent(expr, result, engine.extract_variables(expr))
    assert node_count(result) <= node_count(expr)


@pytest.mark.parametrize("seed", range(40))
def test_render_parse_round_trip(engine, seed, equivalent):
    expr = generate_random_tree(WIDE, seed)
    assert engine.parse(engine.to_boolean_string(expr)) == expr
    assert equivalent(expr, engine.parse(engine.to_latex_string(expr)))


@pytest.mark.parametrize("seed", range(20))
def test_simplify_is_idempotent(engine, seed, equivalent):
    expr = generate_random_tree(WIDE, seed)
    once = engine.simplify(expr)
    assert engine.simplify(once) == once
    assert equivalent(expr, once, engine.extract_variables(expr))


@pytest.mark.parametrize("seed", range(60))
def test_every_operator_survives_the_pipeline(engine, seed, equivalent):
    expr = _mixed_tree(random.Random(seed), 3)
    names = engine.extract_variables(expr)
    assert engine.parse(engine.to_boolean_string(expr)) == expr

    once = engine.simplify(expr)
    assert equivalent(expr, once, names)
    assert engine.simplify(once) == once

    minimal = engine.minimize(expr)
    assert equivalent(expr, minimal, names)
    assert node_count(minimal) <= node_count(expr)


def test_mixed_trees_use_every_operator():
    seen = {
        type(node) for seed in range(60) for node in iter_nodes(_mixed_tree(random.Random(seed), 3))
    }
    assert set(BINARY_TYPES) <= seen

"""Expression evaluation, truth tables and variable importance."""

from __future__ import annotations

from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .cache import LRUCache
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import EvalError
from .expression import (
    And,
    Binary,
    BooleanExpression,
    Constant,
    Nand,
    Nor,
    Not,
    Or,
    Variable,
    Xnor,
    Xor,
    extract_variables,
)

IMPORTANCE_SEED = 0


class TruthTableRow(NamedTuple):
    assignment: Dict[str, bool]
    result: bool


def _check_binary(expr: Binary) -> None:
    if expr.left is None or expr.right is None:
        raise EvalError(f"{expr.kind} node is missing an operand.")


def evaluate_node(expr: BooleanExpression, assignment: Mapping[str, bool]) -> bool:
    """Evaluate ``expr`` without caching; unassigned variables read as False."""
    if isinstance(expr, Constant):
        return bool(expr.value)
    if isinstance(expr, Variable):
        return bool(assignment.get(expr.name, False))
    if isinstance(expr, Not):
        if expr.operand is None:
            raise EvalError("NOT node is missing its operand.")
        return not evaluate_node(expr.operand, assignment)
    if isinstance(expr, Binary):
        _check_binary(expr)
        left = evaluate_node(expr.left, assignment)
        right = evaluate_node(expr.right, assignment)
        if isinstance(expr, And):
            return left and right
        if isinstance(expr, Or):
            return left or right
        if isinstance(expr, Xor):
            return left != right
        if isinstance(expr, Nand):
            return not (left and right)
        if isinstance(expr, Nor):
            return not (left or right)
        if isinstance(expr, Xnor):
            return left == right
    raise EvalError(f"Unknown expression node: {expr!r}")


def evaluate_columns(expr: BooleanExpression, columns: Mapping[str, np.ndarray], size: int) -> np.ndarray:
    """Evaluate ``expr`` over whole columns of assignments at once."""
    if isinstance(expr, Constant):
        return np.full(size, bool(expr.value))
    if isinstance(expr, Variable):
        column = columns.get(expr.name)
        return np.zeros(size, dtype=bool) if column is None else column
    if isinstance(expr, Not):
        if expr.operand is None:
            raise EvalError("NOT node is missing its operand.")
        return ~evaluate_columns(expr.operand, columns, size)
    if isinstance(expr, Binary):
        _check_binary(expr)
        left = evaluate_columns(expr.left, columns, size)
        right = evaluate_columns(expr.right, columns, size)
        if isinstance(expr, And):
            return left & right
        if isinstance(expr, Or):
            return left | right
        if isinstance(expr, Xor):
            return left ^ right
        if isinstance(expr, Nand):
            return ~(left & right)
        if isinstance(expr, Nor):
            return ~(left | right)
        if isinstance(expr, Xnor):
            return ~(left ^ right)
    raise EvalError(f"Unknown expression node: {expr!r}")


def assignment_columns(variables: Sequence[str]) -> Dict[str, np.ndarray]:
    """Columns of the full truth table; the first variable is the most significant bit."""
    n = len(variables)
    index = np.arange(1 << n)
    return {
        name: ((index >> (n - 1 - pos)) & 1).astype(bool)
        for pos, name in enumerate(variables)
    }


def truth_vector(expr: BooleanExpression, variables: Optional[Sequence[str]] = None) -> np.ndarray:
    """Return the output column of the truth table as a boolean array."""
    names = list(variables) if variables is not None else extract_variables(expr)
    return evaluate_columns(expr, assignment_columns(names), 1 << len(names))


def _importance(
    expr: BooleanExpression,
    variables: Sequence[str],
    exact_limit: int,
    samples: int,
) -> Dict[str, float]:
    n = len(variables)
    if n == 0:
        return {}
    if n <= exact_limit:
        vector = truth_vector(expr, variables)
        index = np.arange(1 << n)
        return {
            name: float(np.mean(vector != vector[index ^ (1 << (n - 1 - pos))]))
            for pos, name in enumerate(variables)
        }
    rng = np.random.default_rng(IMPORTANCE_SEED)
    matrix = rng.integers(0, 2, size=(samples, n)).astype(bool)
    columns = {name: matrix[:, pos] for pos, name in enumerate(variables)}
    base = evaluate_columns(expr, columns, samples)
    scores: Dict[str, float] = {}
    for name in variables:
        flipped = dict(columns)
        flipped[name] = ~columns[name]
        scores[name] = float(np.mean(base != evaluate_columns(expr, flipped, samples)))
    return scores


class Evaluator:
    """Evaluation entry points backed by bounded caches.

    Caches are keyed by the expression tree itself; frozen nodes hash and
    compare structurally, so equal trees share entries.
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.evaluation_cache = LRUCache(config.evaluation_cache_size)
        self.minterm_cache = LRUCache(config.minterm_cache_size)
        self.importance_cache = LRUCache(config.importance_cache_size)

    def evaluate(self, expr: BooleanExpression, assignment: Mapping[str, bool]) -> bool:
        key = (expr, tuple(sorted((name, bool(value)) for name, value in assignment.items())))
        return self.evaluation_cache.get_or_compute(key, lambda: evaluate_node(expr, assignment))

    def truth_vector(self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None) -> np.ndarray:
        return truth_vector(expr, variables)

    def truth_table(
        self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None
    ) -> List[TruthTableRow]:
        names = list(variables) if variables is not None else extract_variables(expr)
        n = len(names)
        vector = truth_vector(expr, names)
        rows = []
        for idx in range(1 << n):
            assignment = {name: bool((idx >> (n - 1 - pos)) & 1) for pos, name in enumerate(names)}
            rows.append(TruthTableRow(assignment, bool(vector[idx])))
        return rows

    def minterms(
        self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None
    ) -> Tuple[int, ...]:
        names = tuple(variables) if variables is not None else tuple(extract_variables(expr))

        def compute() -> Tuple[int, ...]:
            return tuple(int(idx) for idx in np.flatnonzero(truth_vector(expr, names)))

        return self.minterm_cache.get_or_compute((expr, names), compute)

    def variable_importance(
        self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None
    ) -> Dict[str, float]:
        """Fraction of assignments in which flipping each variable flips the output."""
        names = tuple(variables) if variables is not None else tuple(extract_variables(expr))
        scores = self.importance_cache.get_or_compute(
            (expr, names),
            lambda: _importance(
                expr,
                names,
                self.config.importance_exact_max_variables,
                self.config.importance_samples,
            ),
        )
        return dict(scores)

    def optimal_variable_order(self, expr: BooleanExpression) -> List[str]:
        scores = self.variable_importance(expr)
        return sorted(scores, key=lambda name: (-scores[name], name))

    def clear_caches(self) -> None:
        self.evaluation_cache.clear()
        self.minterm_cache.clear()
        self.importance_cache.clear()


__all__ = [
    "Evaluator",
    "TruthTableRow",
    "assignment_columns",
    "evaluate_columns",
    "evaluate_node",
    "truth_vector",
]

"""Canonical sum-of-products / product-of-sums and algebraic normal forms."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .evaluator import truth_vector
from .expression import BooleanExpression, Not, Variable, and_all, extract_variables, or_all
from .logic import minterms_to_expression
from .rules import CNF_EXPANSION_RULES, EXPANSION_RULES
from .simplifier import simplify

NORMAL_FORM_MAX_ITERATIONS = 1000


def _names(expr: BooleanExpression, variables: Optional[Sequence[str]]):
    return list(variables) if variables is not None else extract_variables(expr)


def canonical_sop(expr: BooleanExpression, variables: Optional[Sequence[str]] = None) -> BooleanExpression:
    """OR of one full minterm per true row of the truth table."""
    names = _names(expr, variables)
    mins = np.flatnonzero(truth_vector(expr, names))
    return minterms_to_expression((int(m) for m in mins), names)


def canonical_pos(expr: BooleanExpression, variables: Optional[Sequence[str]] = None) -> BooleanExpression:
    """AND of one full maxterm per false row of the truth table."""
    names = _names(expr, variables)
    n = len(names)
    clauses = []
    for value in np.flatnonzero(~truth_vector(expr, names)):
        literals = []
        for pos, name in enumerate(names):
            bit = (int(value) >> (n - 1 - pos)) & 1
            literals.append(Not(Variable(name)) if bit else Variable(name))
        clauses.append(or_all(literals))
    return and_all(clauses)


def to_dnf(expr: BooleanExpression, max_iterations: int = NORMAL_FORM_MAX_ITERATIONS) -> BooleanExpression:
    """Expand derived operators and distribute AND over OR."""
    return simplify(expr, EXPANSION_RULES, max_iterations)


def to_cnf(expr: BooleanExpression, max_iterations: int = NORMAL_FORM_MAX_ITERATIONS) -> BooleanExpression:
    """Expand derived operators and distribute OR over AND."""
    return simplify(expr, CNF_EXPANSION_RULES, max_iterations)


__all__ = ["canonical_pos", "canonical_sop", "to_cnf", "to_dnf"]

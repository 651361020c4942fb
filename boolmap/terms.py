"""Algebraic term combination on sum-of-products chains."""

from __future__ import annotations

from typing import List, Optional

from .config import DEFAULT_MAX_RULE_ITERATIONS
from .expression import And, BooleanExpression, Or, and_all, flatten, or_all, transform
from .rules import BASIC_RULES, chain_factors, find_adjacent_pair, unique
from .simplifier import simplify


def _merge_adjacent(terms: List[BooleanExpression]) -> Optional[List[BooleanExpression]]:
    factor_lists = [chain_factors(term, And) for term in terms]
    found = find_adjacent_pair(factor_lists)
    if found is None:
        return None
    i, j, common = found
    merged = and_all(common)
    return [merged if pos == i else term for pos, term in enumerate(terms) if pos != j]


def _factor_common(terms: List[BooleanExpression]) -> Optional[List[BooleanExpression]]:
    factor_lists = [chain_factors(term, And) for term in terms]
    for i in range(len(terms)):
        for j in range(i + 1, len(terms)):
            common = [f for f in factor_lists[i] if f in factor_lists[j]]
            rest_i = [f for f in factor_lists[i] if f not in common]
            rest_j = [f for f in factor_lists[j] if f not in common]
            if common and rest_i and rest_j:
                factored = And(and_all(common), Or(and_all(rest_i), and_all(rest_j)))
                return [factored if pos == i else term for pos, term in enumerate(terms) if pos != j]
    return None


def combine_once(node: BooleanExpression) -> BooleanExpression:
    """Merge or factor one pair of terms in the OR chain rooted at ``node``."""
    if not isinstance(node, Or):
        return node
    terms = unique(flatten(node, Or))
    updated = _merge_adjacent(terms)
    if updated is None:
        updated = _factor_common(terms)
    if updated is None:
        return node
    return or_all(updated)


def combine_terms(
    expr: BooleanExpression, max_passes: int = DEFAULT_MAX_RULE_ITERATIONS
) -> BooleanExpression:
    """Repeatedly merge adjacent terms (``XY+X!Y=X``), factoring when none merge."""
    current = simplify(expr, BASIC_RULES, max_passes)
    for _ in range(max_passes):
        updated = simplify(transform(current, combine_once), BASIC_RULES, max_passes)
        if updated == current:
            break
        current = updated
    return current


__all__ = ["combine_once", "combine_terms"]

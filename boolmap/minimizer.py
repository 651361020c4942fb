"""Strategy selection and the best-effort minimization pipeline.

Each strategy produces a candidate, the default rule set tidies it into the
*intermediate* form and a final absorption pass yields the *minimal* form.
Both are checked against the input before they are returned; any failure
falls back to the input expression.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from .config import (
    DEFAULT_CONFIG,
    EngineConfig,
    MinimizationOptions,
    MinimizationStrategy,
    ResultFormat,
)
from .errors import MinimizationFailure
from .evaluator import truth_vector
from .expression import BooleanExpression, Or, extract_variables, node_count
from .kmap_engine import MAX_KMAP_VARIABLES, MIN_KMAP_VARIABLES, kmap_minimize
from .logic import equivalent
from .qmc import qmc_minimize
from .render import to_boolean_string
from .rules import CLEANUP_RULES, DEFAULT_RULES
from .simplifier import simplify
from .terms import combine_terms

logger = logging.getLogger(__name__)

TERM_COMBINATION_MAX_VARIABLES = 2
KMAP_AUTO_MAX_VARIABLES = 4


@dataclass(frozen=True)
class MinimizationResult:
    intermediate: BooleanExpression
    minimal: BooleanExpression

    @property
    def expression(self) -> BooleanExpression:
        return self.minimal


def select_strategy(
    expr: BooleanExpression,
    variables: Sequence[str],
    config: EngineConfig = DEFAULT_CONFIG,
) -> MinimizationStrategy:
    """Pick an algorithm from the number of distinct variables."""
    n = len(variables)
    if n <= TERM_COMBINATION_MAX_VARIABLES:
        return MinimizationStrategy.TERM_COMBINATION
    if n <= KMAP_AUTO_MAX_VARIABLES:
        if isinstance(expr, Or):
            return MinimizationStrategy.KARNAUGH_MAP
        return MinimizationStrategy.TERM_COMBINATION
    if n > config.max_qmc_variables:
        return MinimizationStrategy.TERM_COMBINATION
    return MinimizationStrategy.QUINE_MCCLUSKEY


def _applicable(strategy: MinimizationStrategy, n: int, config: EngineConfig) -> bool:
    if strategy is MinimizationStrategy.KARNAUGH_MAP:
        return MIN_KMAP_VARIABLES <= n <= MAX_KMAP_VARIABLES
    if strategy is MinimizationStrategy.QUINE_MCCLUSKEY:
        return n <= config.max_qmc_variables
    return True


class Minimizer:
    def __init__(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def verify(self, original: BooleanExpression, candidate: BooleanExpression, variables: List[str]) -> None:
        """Raise :class:`MinimizationFailure` unless both trees agree everywhere."""
        names = sorted(set(variables) | set(extract_variables(candidate)))
        if len(names) <= self.config.verify_max_variables:
            same = np.array_equal(truth_vector(original, names), truth_vector(candidate, names))
        else:
            same = equivalent(original, candidate)
        if not same:
            raise MinimizationFailure(
                f"{to_boolean_string(candidate)} is not equivalent to {to_boolean_string(original)}"
            )

    def run_strategy(
        self, strategy: MinimizationStrategy, expr: BooleanExpression, variables: List[str], max_iterations: int
    ) -> BooleanExpression:
        if strategy is MinimizationStrategy.KARNAUGH_MAP:
            return kmap_minimize(expr, variables)
        if strategy is MinimizationStrategy.QUINE_MCCLUSKEY:
            return qmc_minimize(expr, variables)
        return combine_terms(expr, max_iterations)

    def minimize_detailed(
        self, expr: BooleanExpression, options: Optional[MinimizationOptions] = None
    ) -> MinimizationResult:
        """Run the pipeline; errors propagate to the caller."""
        options = options or MinimizationOptions()
        variables = extract_variables(expr)
        strategy = options.strategy
        if strategy is MinimizationStrategy.AUTO:
            strategy = select_strategy(expr, variables, self.config)
        elif not _applicable(strategy, len(variables), self.config):
            logger.debug(
                "%s not applicable to %d variables, using term combination",
                strategy.value,
                len(variables),
            )
            strategy = MinimizationStrategy.TERM_COMBINATION
        logger.debug("minimizing %s with %s", to_boolean_string(expr), strategy.value)

        max_iterations = options.max_iterations or self.config.max_rule_iterations
        reduced = self.run_strategy(strategy, expr, variables, max_iterations)
        intermediate = simplify(reduced, DEFAULT_RULES, max_iterations)
        minimal = simplify(intermediate, CLEANUP_RULES, max_iterations)

        self.verify(expr, intermediate, variables)
        self.verify(expr, minimal, variables)

        size = node_count(expr)
        if node_count(intermediate) > size:
            intermediate = expr
        if node_count(minimal) > node_count(intermediate):
            minimal = intermediate
        return MinimizationResult(intermediate, minimal)

    def minimize(
        self, expr: BooleanExpression, options: Optional[MinimizationOptions] = None
    ) -> Union[BooleanExpression, MinimizationResult]:
        """Best-effort minimization; on any failure the input is returned."""
        options = options or MinimizationOptions()
        try:
            result = self.minimize_detailed(expr, options)
        except Exception as exc:
            logger.warning("minimization failed, returning input unchanged: %s", exc)
            result = MinimizationResult(expr, expr)
        if options.result_format is ResultFormat.BOTH:
            return result
        if options.result_format is ResultFormat.INTERMEDIATE:
            return result.intermediate
        return result.minimal


__all__ = ["MinimizationResult", "Minimizer", "select_strategy"]

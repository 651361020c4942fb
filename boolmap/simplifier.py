"""Fixed-point rule application with a recorded step history."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .config import DEFAULT_MAX_RULE_ITERATIONS
from .expression import BooleanExpression
from .render import to_boolean_string, to_latex_string
from .rules import DEFAULT_RULES, SimplificationRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimplificationStep:
    rule_name: str
    rule_formula: str
    before: BooleanExpression
    after: BooleanExpression

    def describe(self) -> str:
        return f"{self.rule_name}: {to_boolean_string(self.before)} -> {to_boolean_string(self.after)}"


@dataclass
class SimplificationResult:
    original: BooleanExpression
    expression: BooleanExpression
    steps: List[SimplificationStep] = field(default_factory=list)
    iterations: int = 0
    rule_application_counts: Dict[str, int] = field(default_factory=dict)
    max_iterations_reached: bool = False

    @property
    def simplified_string(self) -> str:
        return to_boolean_string(self.expression)

    @property
    def simplified_latex(self) -> str:
        return to_latex_string(self.expression)

    @property
    def changed(self) -> bool:
        return bool(self.steps)


class RuleEngine:
    """Apply rules until nothing changes or the iteration bound is hit.

    Each iteration scans ``rules`` in order and applies the first one that
    changes the rendered expression, then restarts the scan.
    """

    def __init__(
        self,
        rules: Optional[Sequence[SimplificationRule]] = None,
        max_iterations: int = DEFAULT_MAX_RULE_ITERATIONS,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        self.rules = list(DEFAULT_RULES if rules is None else rules)
        self.max_iterations = max_iterations

    def _step(self, expr: BooleanExpression, rendered: str):
        for rule in self.rules:
            if not rule.can_apply(expr):
                continue
            updated = rule.apply(expr)
            updated_text = to_boolean_string(updated)
            if updated_text != rendered:
                return rule, updated, updated_text
        return None

    def run(self, expr: BooleanExpression) -> SimplificationResult:
        current = expr
        rendered = to_boolean_string(current)
        steps: List[SimplificationStep] = []
        counts: Counter = Counter()
        iterations = 0
        reached = False

        while True:
            found = self._step(current, rendered)
            if found is None:
                break
            if iterations >= self.max_iterations:
                reached = True
                logger.debug(
                    "rule engine stopped after %d iterations at %s", iterations, rendered
                )
                break
            rule, updated, updated_text = found
            steps.append(SimplificationStep(rule.name, rule.formula, current, updated))
            counts[rule.name] += 1
            iterations += 1
            current, rendered = updated, updated_text

        return SimplificationResult(
            original=expr,
            expression=current,
            steps=steps,
            iterations=iterations,
            rule_application_counts=dict(counts),
            max_iterations_reached=reached,
        )


def simplify_detailed(
    expr: BooleanExpression,
    rules: Optional[Sequence[SimplificationRule]] = None,
    max_iterations: int = DEFAULT_MAX_RULE_ITERATIONS,
) -> SimplificationResult:
    return RuleEngine(rules, max_iterations).run(expr)


def simplify(
    expr: BooleanExpression,
    rules: Optional[Sequence[SimplificationRule]] = None,
    max_iterations: int = DEFAULT_MAX_RULE_ITERATIONS,
) -> BooleanExpression:
    """Rewrite ``expr`` to a fixed point of ``rules`` (the default rule set)."""
    return simplify_detailed(expr, rules, max_iterations).expression


__all__ = [
    "RuleEngine",
    "SimplificationResult",
    "SimplificationStep",
    "simplify",
    "simplify_detailed",
]

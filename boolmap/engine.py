"""Engine facade owning configuration and caches.

Module-level functions delegate to one shared default engine; create a
:class:`BooleanEngine` directly for isolated caches or different limits.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from . import canonical
from .cache import LRUCache
from .config import DEFAULT_CONFIG, EngineConfig, MinimizationOptions
from .evaluator import Evaluator, TruthTableRow
from .expression import BooleanExpression
from .expression import extract_variables as _extract_variables
from .kmap_engine import KMap
from .kmap_engine import build_kmap as _build_kmap
from .minimizer import MinimizationResult, Minimizer
from .parser import parse as _parse
from .render import to_boolean_string as _to_boolean_string
from .render import to_latex_string as _to_latex_string
from .simplifier import SimplificationResult, simplify_detailed as _simplify_detailed


class BooleanEngine:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.evaluator = Evaluator(self.config)
        self.minimizer = Minimizer(self.config)
        self.kmap_cache = LRUCache(self.config.kmap_cache_size)

    def parse(self, text: str) -> BooleanExpression:
        return _parse(text)

    def evaluate(self, expr: BooleanExpression, assignment: Mapping[str, bool]) -> bool:
        return self.evaluator.evaluate(expr, assignment)

    def simplify_detailed(self, expr: BooleanExpression) -> SimplificationResult:
        return _simplify_detailed(expr, max_iterations=self.config.max_rule_iterations)

    def simplify(self, expr: BooleanExpression) -> BooleanExpression:
        return self.simplify_detailed(expr).expression

    def minimize(
        self, expr: BooleanExpression, options: Optional[MinimizationOptions] = None
    ) -> Union[BooleanExpression, MinimizationResult]:
        return self.minimizer.minimize(expr, options)

    def to_boolean_string(self, expr: BooleanExpression) -> str:
        return _to_boolean_string(expr)

    def to_latex_string(self, expr: BooleanExpression) -> str:
        return _to_latex_string(expr)

    def extract_variables(self, expr: BooleanExpression) -> List[str]:
        return _extract_variables(expr)

    def truth_table(
        self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None
    ) -> List[TruthTableRow]:
        return self.evaluator.truth_table(expr, variables)

    def minterms(
        self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None
    ) -> Tuple[int, ...]:
        return self.evaluator.minterms(expr, variables)

    def build_kmap(self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None) -> KMap:
        names = tuple(variables) if variables is not None else tuple(_extract_variables(expr))
        return self.kmap_cache.get_or_compute((expr, names), lambda: _build_kmap(expr, names))

    def variable_importance(
        self, expr: BooleanExpression, variables: Optional[Sequence[str]] = None
    ) -> Dict[str, float]:
        return self.evaluator.variable_importance(expr, variables)

    def optimal_variable_order(self, expr: BooleanExpression) -> List[str]:
        return self.evaluator.optimal_variable_order(expr)

    def canonical_sop(self, expr: BooleanExpression) -> BooleanExpression:
        return canonical.canonical_sop(expr)

    def canonical_pos(self, expr: BooleanExpression) -> BooleanExpression:
        return canonical.canonical_pos(expr)

    def to_dnf(self, expr: BooleanExpression) -> BooleanExpression:
        return canonical.to_dnf(expr)

    def clear_caches(self) -> None:
        self.evaluator.clear_caches()
        self.kmap_cache.clear()


_default_engine = BooleanEngine()


def get_default_engine() -> BooleanEngine:
    return _default_engine


def parse(text: str) -> BooleanExpression:
    return _default_engine.parse(text)


def evaluate(expr: BooleanExpression, assignment: Mapping[str, bool]) -> bool:
    return _default_engine.evaluate(expr, assignment)


def simplify(expr: BooleanExpression) -> BooleanExpression:
    return _default_engine.simplify(expr)


def simplify_detailed(expr: BooleanExpression) -> SimplificationResult:
    return _default_engine.simplify_detailed(expr)


def minimize(
    expr: BooleanExpression, options: Optional[MinimizationOptions] = None
) -> Union[BooleanExpression, MinimizationResult]:
    return _default_engine.minimize(expr, options)


def to_boolean_string(expr: BooleanExpression) -> str:
    return _to_boolean_string(expr)


def to_latex_string(expr: BooleanExpression) -> str:
    return _to_latex_string(expr)


def extract_variables(expr: BooleanExpression) -> List[str]:
    return _extract_variables(expr)


def truth_table(expr: BooleanExpression) -> List[TruthTableRow]:
    return _default_engine.truth_table(expr)


def minterms(expr: BooleanExpression) -> Tuple[int, ...]:
    return _default_engine.minterms(expr)


def build_kmap(expr: BooleanExpression) -> KMap:
    return _default_engine.build_kmap(expr)


def variable_importance(expr: BooleanExpression) -> Dict[str, float]:
    return _default_engine.variable_importance(expr)


__all__ = [
    "BooleanEngine",
    "build_kmap",
    "evaluate",
    "extract_variables",
    "get_default_engine",
    "minimize",
    "minterms",
    "parse",
    "simplify",
    "simplify_detailed",
    "to_boolean_string",
    "to_latex_string",
    "truth_table",
    "variable_importance",
]

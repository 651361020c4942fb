"""Seeded random and law-patterned expression generation."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .expression import (
    And,
    BooleanExpression,
    Constant,
    Not,
    Or,
    Variable,
)
from .render import LATEX_SYMBOLS, precedence, to_boolean_string, to_latex_string

PATTERNS = ("de_morgan", "absorption", "idempotent", "distributive", "complement")


@dataclass(frozen=True)
class GeneratorOptions:
    available_variables: Tuple[str, ...] = ("A", "B", "C", "D", "E")
    complexity: int = 3
    negation_probability: float = 0.3
    and_probability: float = 0.5
    nested_probability: float = 0.4
    expression_negation_probability: float = 0.2
    include_constants: bool = False
    constant_probability: float = 0.1
    output_format: str = "standard"
    use_overline_notation: bool = False

    def __post_init__(self) -> None:
        if not self.available_variables:
            raise ValueError("At least one variable is required.")
        if self.output_format not in ("standard", "latex"):
            raise ValueError("output_format must be 'standard' or 'latex'.")


DEFAULT_GENERATOR_OPTIONS = GeneratorOptions()


def _overline_latex(expr: BooleanExpression) -> str:
    if isinstance(expr, Constant):
        return "1" if expr.value else "0"
    if isinstance(expr, Variable):
        return expr.name
    if isinstance(expr, Not):
        return f"\\overline{{{_overline_latex(expr.operand)}}}"
    level = precedence(expr)
    left = _overline_latex(expr.left)
    right = _overline_latex(expr.right)
    if precedence(expr.left) < level:
        left = f"({left})"
    if precedence(expr.right) <= level:
        right = f"({right})"
    return f"{left}{LATEX_SYMBOLS[type(expr)]}{right}"


def render(expr: BooleanExpression, options: GeneratorOptions = DEFAULT_GENERATOR_OPTIONS) -> str:
    if options.output_format == "standard":
        return to_boolean_string(expr)
    if options.use_overline_notation:
        return _overline_latex(expr)
    return to_latex_string(expr)


class _TreeBuilder:
    def __init__(self, rng: random.Random, options: GeneratorOptions) -> None:
        self.rng = rng
        self.options = options
        limit = min(2 + options.complexity, len(options.available_variables))
        self.variables = options.available_variables[:max(1, limit)]

    def variable(self) -> Variable:
        return Variable(self.rng.choice(self.variables))

    def literal(self) -> BooleanExpression:
        var = self.variable()
        if self.rng.random() < self.options.negation_probability:
            return Not(var)
        return var

    def leaf(self) -> BooleanExpression:
        if self.options.include_constants and self.rng.random() < self.options.constant_probability:
            return Constant(self.rng.random() < 0.5)
        return self.literal()

    def term(self, level: int, force: bool = False) -> BooleanExpression:
        if level <= 1 and not force:
            return self.leaf()
        kind = And if self.rng.random() < self.options.and_probability else Or
        nested = level > 1
        left = self.term(level - 1) if nested and self.rng.random() < self.options.nested_probability else self.leaf()
        right = self.term(level - 1) if nested and self.rng.random() < self.options.nested_probability else self.leaf()
        node: BooleanExpression = kind(left, right)
        if self.rng.random() < self.options.expression_negation_probability:
            node = Not(node)
        return node


def generate_random_tree(
    options: GeneratorOptions = DEFAULT_GENERATOR_OPTIONS, seed: Optional[int] = None
) -> BooleanExpression:
    """Random tree with at least one binary operator."""
    builder = _TreeBuilder(random.Random(seed), options)
    return builder.term(max(1, options.complexity), force=True)


def generate_random_expression(
    options: GeneratorOptions = DEFAULT_GENERATOR_OPTIONS, seed: Optional[int] = None
) -> str:
    """Random expression rendered in the requested notation; always parseable."""
    return render(generate_random_tree(options, seed), options)


def generate_patterned_tree(pattern: str, seed: Optional[int] = None) -> BooleanExpression:
    """Tree that one specific law simplifies."""
    if pattern not in PATTERNS:
        raise ValueError(f"Unknown pattern {pattern!r}; expected one of {', '.join(PATTERNS)}.")
    rng = random.Random(seed)
    names = DEFAULT_GENERATOR_OPTIONS.available_variables[:3]
    first = rng.randrange(len(names))
    a = Variable(names[first])
    b = Variable(names[(first + 1) % len(names)])
    c = Variable(names[(first + 2) % len(names)])
    use_and = rng.random() < 0.5
    kind = And if use_and else Or
    if pattern == "de_morgan":
        return Not(kind(a, b))
    if pattern == "absorption":
        return Or(a, And(a, b)) if use_and else And(a, Or(a, b))
    if pattern == "idempotent":
        return kind(a, a)
    if pattern == "distributive":
        return And(a, Or(b, c)) if use_and else Or(a, And(b, c))
    return kind(a, Not(a))


def generate_patterned_expression(
    pattern: str,
    seed: Optional[int] = None,
    options: GeneratorOptions = DEFAULT_GENERATOR_OPTIONS,
) -> str:
    return render(generate_patterned_tree(pattern, seed), options)


__all__ = [
    "DEFAULT_GENERATOR_OPTIONS",
    "GeneratorOptions",
    "PATTERNS",
    "generate_patterned_expression",
    "generate_patterned_tree",
    "generate_random_expression",
    "generate_random_tree",
    "render",
]

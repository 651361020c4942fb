"""Canonical ASCII and LaTeX rendering of expression trees."""

from __future__ import annotations

from typing import Dict, Type

from .errors import MalformedExpression
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
)

# Binding strength, mirrored by the parser's grammar levels.
PRECEDENCE: Dict[Type[Binary], int] = {
    Or: 1,
    Nor: 1,
    Xor: 2,
    Xnor: 2,
    And: 3,
    Nand: 3,
}
NOT_PRECEDENCE = 4
LEAF_PRECEDENCE = 5

ASCII_SYMBOLS: Dict[Type[Binary], str] = {
    And: "*",
    Or: "+",
    Xor: "^",
    Nand: "@",
    Nor: "#",
    Xnor: "<=>",
}

LATEX_SYMBOLS: Dict[Type[Binary], str] = {
    And: r" \land ",
    Or: r" \lor ",
    Xor: r" \oplus ",
    Nand: r" \uparrow ",
    Nor: r" \downarrow ",
    Xnor: r" \leftrightarrow ",
}


def precedence(expr: BooleanExpression) -> int:
    if isinstance(expr, Binary):
        return PRECEDENCE[type(expr)]
    if isinstance(expr, Not):
        return NOT_PRECEDENCE
    return LEAF_PRECEDENCE


def _render(expr: BooleanExpression, symbols: Dict[Type[Binary], str], negation: str) -> str:
    if isinstance(expr, Constant):
        return "1" if expr.value else "0"
    if isinstance(expr, Variable):
        if not expr.name:
            raise MalformedExpression("Variable node has an empty name.")
        return expr.name
    if isinstance(expr, Not):
        if expr.operand is None:
            raise MalformedExpression("NOT node is missing its operand.")
        inner = _render(expr.operand, symbols, negation)
        if isinstance(expr.operand, Binary):
            inner = f"({inner})"
        return f"{negation}{inner}"
    if isinstance(expr, Binary):
        if expr.left is None or expr.right is None:
            raise MalformedExpression(f"{expr.kind} node is missing an operand.")
        level = PRECEDENCE[type(expr)]
        left = _render(expr.left, symbols, negation)
        right = _render(expr.right, symbols, negation)
        # The parser is left-associative, so a right operand on the same
        # level keeps its parentheses.
        if precedence(expr.left) < level:
            left = f"({left})"
        if precedence(expr.right) <= level:
            right = f"({right})"
        return f"{left}{symbols[type(expr)]}{right}"
    raise MalformedExpression(f"Unknown expression node: {expr!r}")


def to_boolean_string(expr: BooleanExpression) -> str:
    """Render ``expr`` in the canonical ASCII notation (``!A+B*C``)."""
    return _render(expr, ASCII_SYMBOLS, "!")


def to_latex_string(expr: BooleanExpression) -> str:
    """Render ``expr`` as LaTeX (``\\lnot A \\lor B \\land C``)."""
    return _render(expr, LATEX_SYMBOLS, r"\lnot ")


__all__ = [
    "ASCII_SYMBOLS",
    "LATEX_SYMBOLS",
    "PRECEDENCE",
    "precedence",
    "to_boolean_string",
    "to_latex_string",
]

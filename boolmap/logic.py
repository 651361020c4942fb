"""SymPy bridge: conversion, reference minimization and validation helpers."""

from __future__ import annotations

import itertools
from typing import Iterable, List, Sequence, Tuple

from sympy.logic import boolalg
from sympy import Symbol, symbols
from sympy.logic.boolalg import SOPform, BooleanFalse, BooleanTrue
from sympy.logic.inference import satisfiable

from .errors import ConversionError
from .expression import (
    FALSE,
    TRUE,
    And,
    BooleanExpression,
    Constant,
    Nand,
    Nor,
    Not,
    Or,
    Variable,
    Xnor,
    Xor,
    and_all,
    extract_variables,
    flatten,
    or_all,
)
from .render import to_boolean_string

_TO_SYMPY = {
    And: boolalg.And,
    Or: boolalg.Or,
    Xor: boolalg.Xor,
    Nand: boolalg.Nand,
    Nor: boolalg.Nor,
    Xnor: boolalg.Xnor,
}


def get_variables(n: int):
    """Return SymPy symbols (A, B, C, ...) for the requested variable count."""
    if n < 1:
        raise ValueError("Number of variables must be positive.")
    if n > 26:
        raise ValueError("At most 26 single-letter variables are available.")
    return symbols(" ".join(chr(65 + i) for i in range(n)), seq=True)


def to_sympy(expr: BooleanExpression):
    """Convert an expression tree into the equivalent SymPy boolean."""
    if isinstance(expr, Constant):
        return boolalg.true if expr.value else boolalg.false
    if isinstance(expr, Variable):
        return Symbol(expr.name)
    if isinstance(expr, Not):
        return boolalg.Not(to_sympy(expr.operand))
    builder = _TO_SYMPY.get(type(expr))
    if builder is None:
        raise ConversionError(f"Cannot convert {expr!r} to SymPy.")
    return builder(to_sympy(expr.left), to_sympy(expr.right))


def _fold(args, kind) -> BooleanExpression:
    return _fold_items([from_sympy(arg) for arg in args], kind)


def _fold_items(items: List[BooleanExpression], kind) -> BooleanExpression:
    result = items[0]
    for item in items[1:]:
        result = kind(result, item)
    return result


def from_sympy(sym) -> BooleanExpression:
    """Convert a SymPy boolean back into an expression tree."""
    if sym is True or isinstance(sym, BooleanTrue):
        return TRUE
    if sym is False or isinstance(sym, BooleanFalse):
        return FALSE
    if isinstance(sym, Symbol):
        return Variable(str(sym))
    if isinstance(sym, boolalg.Not):
        return Not(from_sympy(sym.args[0]))
    if isinstance(sym, boolalg.And):
        return _fold(sym.args, And)
    if isinstance(sym, boolalg.Or):
        return _fold(sym.args, Or)
    if isinstance(sym, boolalg.Xor):
        return _fold(sym.args, Xor)
    if isinstance(sym, (boolalg.Nand, boolalg.Nor)):
        kind = Nand if isinstance(sym, boolalg.Nand) else Nor
        if len(sym.args) == 2:
            return kind(from_sympy(sym.args[0]), from_sympy(sym.args[1]))
        inner = _fold(sym.args, And if kind is Nand else Or)
        return Not(inner)
    if isinstance(sym, (boolalg.Xnor, boolalg.Equivalent)):
        items = [from_sympy(arg) for arg in sym.args]
        if len(items) == 2:
            return Xnor(items[0], items[1])
        # n-ary equivalence: every argument equal
        return Or(and_all(items), and_all(Not(item) for item in items))
    if isinstance(sym, boolalg.Implies):
        return Or(Not(from_sympy(sym.args[0])), from_sympy(sym.args[1]))
    raise ConversionError(f"Unsupported SymPy expression: {sym}")


def _symbols_for(expr: BooleanExpression, variables=None) -> Tuple[Symbol, ...]:
    if variables is None:
        variables = extract_variables(expr)
    return tuple(Symbol(str(v)) for v in variables)


def truth_minterms(expr: BooleanExpression, variables=None) -> List[int]:
    """Return indices whose assignments make the expression evaluate to True."""
    sym_expr = to_sympy(expr)
    vars_tuple = _symbols_for(expr, variables)
    mins = []
    for idx, bits in enumerate(itertools.product([0, 1], repeat=len(vars_tuple))):
        subs = {var: bool(bit) for var, bit in zip(vars_tuple, bits)}
        if bool(sym_expr.xreplace(subs)):
            mins.append(idx)
    return mins


def minterms_to_expression(minterms: Iterable[int], variables: Sequence[str]) -> BooleanExpression:
    """Build the OR of full minterms (canonical sum of products)."""
    n = len(variables)
    clauses = []
    for value in sorted(set(minterms)):
        literals = []
        for idx, name in enumerate(variables):
            bit = (value >> (n - 1 - idx)) & 1
            literals.append(Variable(name) if bit else Not(Variable(name)))
        clauses.append(and_all(literals))
    return or_all(clauses)


def simplify_to_dnf(expr: BooleanExpression) -> BooleanExpression:
    """Minimal sum of products of ``expr`` computed by SymPy's ``SOPform``."""
    variables = extract_variables(expr)
    mins = truth_minterms(expr, variables)
    if not variables:
        return TRUE if mins else FALSE
    return from_sympy(SOPform(_symbols_for(expr, variables), mins))


def equivalent(a: BooleanExpression, b: BooleanExpression) -> bool:
    """True when no assignment distinguishes ``a`` from ``b``."""
    return not satisfiable(boolalg.Xor(to_sympy(a), to_sympy(b)))


def _literal_name(literal: BooleanExpression) -> str:
    if isinstance(literal, Not) and isinstance(literal.operand, Variable):
        return f"{literal.operand.name}'"
    if isinstance(literal, Variable):
        return literal.name
    return to_boolean_string(literal)


def prime_format(
    expr: BooleanExpression,
    variables: Sequence[str] = None,
    already_simplified: bool = False,
) -> str:
    """Format a (simplified) expression into SOP text following ``variables``."""
    if not already_simplified:
        expr = simplify_to_dnf(expr)
    if isinstance(expr, Constant):
        return "1" if expr.value else "0"
    if variables is None:
        variables = extract_variables(expr)
    order = {name: pos for pos, name in enumerate(variables)}

    def rank(literal):
        base = literal.operand if isinstance(literal, Not) else literal
        name = base.name if isinstance(base, Variable) else ""
        return order.get(name, len(order))

    result = []
    for term in flatten(expr, Or):
        literals = sorted(flatten(term, And), key=rank)
        result.append("".join(_literal_name(item) for item in literals if item != TRUE) or "1")
    return " + ".join(result)


def validate_variable_count(expr: BooleanExpression, low: int, high: int) -> List[str]:
    """Return the variables of ``expr`` or raise when their count is outside [low, high]."""
    names = extract_variables(expr)
    if not low <= len(names) <= high:
        raise ValueError(
            f"Expression uses {len(names)} variables; expected between {low} and {high}."
        )
    return names


def validate_expression_variables(expr: BooleanExpression, variables: Sequence[str]) -> None:
    """Ensure the expression uses only names within ``variables``."""
    extras = set(extract_variables(expr)) - set(variables)
    if extras:
        names = ", ".join(sorted(extras))
        raise ValueError(f"Expression contains variables outside the selected set: {names}")


def validate_minterm_range(minterms: Iterable[int], n: int) -> None:
    """Ensure all minterms are within the range for the current variable count."""
    max_valid = (1 << n) - 1
    invalid = [m for m in minterms if m < 0 or m > max_valid]
    if invalid:
        raise ValueError(
            f"Minterms out of range for {n} variables (0-{max_valid}): {sorted(set(invalid))}"
        )


def simplify_from_minterms(variables: Sequence[str], minterms, dontcares=None):
    """Return simplified expression built from minterms and optional don't cares."""
    validate_minterm_range(minterms, len(variables))
    vars_tuple = [Symbol(name) for name in variables]
    simplified = from_sympy(SOPform(vars_tuple, list(minterms), list(dontcares or [])))
    sop_text = prime_format(simplified, variables, already_simplified=True)
    return simplified, sop_text


__all__ = [
    "equivalent",
    "from_sympy",
    "get_variables",
    "minterms_to_expression",
    "prime_format",
    "simplify_from_minterms",
    "simplify_to_dnf",
    "to_sympy",
    "truth_minterms",
    "validate_expression_variables",
    "validate_minterm_range",
    "validate_variable_count",
]

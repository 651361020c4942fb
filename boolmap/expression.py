"""Expression tree model and generic traversal helpers.

Nodes are frozen dataclasses, so two trees compare equal exactly when they
have the same shape, operators and leaves. Every transformation builds new
nodes; unchanged subtrees are shared between the old and the new tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Iterable, Iterator, List, Tuple, Type, Union


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Constant:
    value: bool


@dataclass(frozen=True)
class Not:
    operand: "BooleanExpression"


@dataclass(frozen=True)
class Binary:
    """Common base of the six binary operators."""

    left: "BooleanExpression"
    right: "BooleanExpression"

    kind: ClassVar[str] = "BINARY"


@dataclass(frozen=True)
class And(Binary):
    kind: ClassVar[str] = "AND"


@dataclass(frozen=True)
class Or(Binary):
    kind: ClassVar[str] = "OR"


@dataclass(frozen=True)
class Xor(Binary):
    kind: ClassVar[str] = "XOR"


@dataclass(frozen=True)
class Nand(Binary):
    kind: ClassVar[str] = "NAND"


@dataclass(frozen=True)
class Nor(Binary):
    kind: ClassVar[str] = "NOR"


@dataclass(frozen=True)
class Xnor(Binary):
    kind: ClassVar[str] = "XNOR"


BooleanExpression = Union[Variable, Constant, Not, Binary]
Rewrite = Callable[[BooleanExpression], BooleanExpression]

TRUE = Constant(True)
FALSE = Constant(False)

BINARY_TYPES: Tuple[Type[Binary], ...] = (And, Or, Xor, Nand, Nor, Xnor)


def structurally_equal(a: BooleanExpression, b: BooleanExpression) -> bool:
    """Compare two trees node by node."""
    return a == b


def children(expr: BooleanExpression) -> Tuple[BooleanExpression, ...]:
    if isinstance(expr, Not):
        return (expr.operand,)
    if isinstance(expr, Binary):
        return (expr.left, expr.right)
    return ()


def rebuild(expr: BooleanExpression, new_children: Iterable[BooleanExpression]) -> BooleanExpression:
    """Return a node of the same type as ``expr`` with ``new_children``."""
    parts = tuple(new_children)
    if isinstance(expr, Not):
        return Not(parts[0])
    if isinstance(expr, Binary):
        return type(expr)(parts[0], parts[1])
    return expr


def transform(expr: BooleanExpression, fn: Rewrite) -> BooleanExpression:
    """Apply ``fn`` to every node bottom-up, rebuilding only changed parents.

    When neither the children nor ``fn`` change anything, the very same
    object is returned, so callers can detect "no change" with ``is``.
    """
    if isinstance(expr, Not):
        operand = transform(expr.operand, fn)
        if operand is not expr.operand:
            expr = Not(operand)
    elif isinstance(expr, Binary):
        left = transform(expr.left, fn)
        right = transform(expr.right, fn)
        if left is not expr.left or right is not expr.right:
            expr = type(expr)(left, right)
    return fn(expr)


def iter_nodes(expr: BooleanExpression) -> Iterator[BooleanExpression]:
    """Yield every node in pre-order."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def node_count(expr: BooleanExpression) -> int:
    return sum(1 for _ in iter_nodes(expr))


def depth(expr: BooleanExpression) -> int:
    kids = children(expr)
    if not kids:
        return 1
    return 1 + max(depth(kid) for kid in kids)


def flatten(expr: BooleanExpression, kind: Type[Binary]) -> List[BooleanExpression]:
    """Collect the operands of a chain of ``kind`` nodes, left to right."""
    operands: List[BooleanExpression] = []
    stack = [expr]
    while stack:
        node = stack.pop()
        if type(node) is kind:
            stack.append(node.right)
            stack.append(node.left)
        else:
            operands.append(node)
    return operands


def _fold(kind: Type[Binary], items: Iterable[BooleanExpression], empty: Constant) -> BooleanExpression:
    result = None
    for item in items:
        result = item if result is None else kind(result, item)
    return empty if result is None else result


def and_all(items: Iterable[BooleanExpression]) -> BooleanExpression:
    """Left-folded AND of ``items``; the empty product is ``1``."""
    return _fold(And, items, TRUE)


def or_all(items: Iterable[BooleanExpression]) -> BooleanExpression:
    """Left-folded OR of ``items``; the empty sum is ``0``."""
    return _fold(Or, items, FALSE)


def negate(expr: BooleanExpression) -> BooleanExpression:
    """Complement without stacking negations."""
    if isinstance(expr, Constant):
        return Constant(not expr.value)
    if isinstance(expr, Not):
        return expr.operand
    return Not(expr)


def is_literal(expr: BooleanExpression) -> bool:
    if isinstance(expr, Variable):
        return True
    return isinstance(expr, Not) and isinstance(expr.operand, Variable)


def is_complement(a: BooleanExpression, b: BooleanExpression) -> bool:
    if isinstance(a, Constant) and isinstance(b, Constant):
        return a.value != b.value
    if isinstance(a, Not) and a.operand == b:
        return True
    return isinstance(b, Not) and b.operand == a


def extract_variables(expr: BooleanExpression) -> List[str]:
    """Return the unique variable names of ``expr`` in sorted order."""
    return sorted({node.name for node in iter_nodes(expr) if isinstance(node, Variable)})


__all__ = [
    "And",
    "BINARY_TYPES",
    "Binary",
    "BooleanExpression",
    "Constant",
    "FALSE",
    "Nand",
    "Nor",
    "Not",
    "Or",
    "Rewrite",
    "TRUE",
    "Variable",
    "Xnor",
    "Xor",
    "and_all",
    "children",
    "depth",
    "extract_variables",
    "flatten",
    "is_complement",
    "is_literal",
    "iter_nodes",
    "negate",
    "node_count",
    "or_all",
    "rebuild",
    "structurally_equal",
    "transform",
]

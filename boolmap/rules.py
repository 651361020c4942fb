"""Boolean-algebra rewrite rules grouped by law family.

Each rule wraps a *local* rewrite: a function that receives one node and
returns either a replacement or the very same node when the law does not
match. Chain rules (idempotence, absorption, ...) look at the whole
flattened AND/OR chain rooted at the node they are given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Type

from .expression import (
    FALSE,
    TRUE,
    And,
    Binary,
    BooleanExpression,
    Constant,
    Nand,
    Nor,
    Not,
    Or,
    Rewrite,
    Xnor,
    Xor,
    and_all,
    flatten,
    is_complement,
    iter_nodes,
    negate,
    or_all,
    transform,
)

CONSTANTS = "constants"
IDEMPOTENCE = "idempotence"
CONTRADICTION = "contradiction"
REDUNDANCY = "redundancy"
CONSENSUS = "consensus"
DOUBLE_NEGATION = "double_negation"
DE_MORGAN = "de_morgan"
DISTRIBUTIVE = "distributive"
DERIVED = "derived"


@dataclass(frozen=True)
class SimplificationRule:
    name: str
    formula: str
    family: str
    rewrite: Rewrite

    def can_apply(self, expr: BooleanExpression) -> bool:
        return any(self.rewrite(node) is not node for node in iter_nodes(expr))

    def apply(self, expr: BooleanExpression) -> BooleanExpression:
        return transform(expr, self.rewrite)


def _dual(kind: Type[Binary]) -> Type[Binary]:
    return Or if kind is And else And


def _build(kind: Type[Binary], items: Sequence[BooleanExpression]) -> BooleanExpression:
    return and_all(items) if kind is And else or_all(items)


def unique(items: Sequence[BooleanExpression]) -> List[BooleanExpression]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def chain_factors(term: BooleanExpression, kind: Type[Binary]) -> List[BooleanExpression]:
    return unique(flatten(term, kind))


# --- constants ---------------------------------------------------------------


def _and_identity(node):
    if isinstance(node, And):
        if node.right == TRUE:
            return node.left
        if node.left == TRUE:
            return node.right
    return node


def _and_annihilation(node):
    if isinstance(node, And) and FALSE in (node.left, node.right):
        return FALSE
    return node


def _or_identity(node):
    if isinstance(node, Or):
        if node.right == FALSE:
            return node.left
        if node.left == FALSE:
            return node.right
    return node


def _or_annihilation(node):
    if isinstance(node, Or) and TRUE in (node.left, node.right):
        return TRUE
    return node


def _constant_negation(node):
    if isinstance(node, Not) and isinstance(node.operand, Constant):
        return Constant(not node.operand.value)
    return node


# --- double negation ----------------------------------------------------------


def _double_negation(node):
    if isinstance(node, Not) and isinstance(node.operand, Not):
        return node.operand.operand
    return node


# --- contradiction / tautology ------------------------------------------------


def _has_complementary_pair(operands: Sequence[BooleanExpression]) -> bool:
    seen = set()
    seen_negated = set()
    for operand in operands:
        if operand in seen_negated:
            return True
        seen.add(operand)
        seen_negated.add(negate(operand))
    return False


def _contradiction(node):
    if isinstance(node, And) and _has_complementary_pair(flatten(node, And)):
        return FALSE
    return node


def _tautology(node):
    if isinstance(node, Or) and _has_complementary_pair(flatten(node, Or)):
        return TRUE
    return node


# --- idempotence --------------------------------------------------------------


def _chain_idempotence(kind: Type[Binary]) -> Rewrite:
    def rewrite(node):
        if type(node) is not kind:
            return node
        operands = flatten(node, kind)
        distinct = unique(operands)
        if len(distinct) == len(operands):
            return node
        return _build(kind, distinct)

    return rewrite


# --- derived operators --------------------------------------------------------


def _derived_identities(node):
    if not isinstance(node, (Xor, Xnor, Nand, Nor)):
        return node
    left, right = node.left, node.right
    if isinstance(right, Constant) and not isinstance(left, Constant):
        left, right = right, left
    if isinstance(left, Constant):
        value = left.value
        if isinstance(node, Xor):
            return negate(right) if value else right
        if isinstance(node, Xnor):
            return right if value else negate(right)
        if isinstance(node, Nand):
            return negate(right) if value else TRUE
        return FALSE if value else negate(right)
    if left == right:
        if isinstance(node, Xor):
            return FALSE
        if isinstance(node, Xnor):
            return TRUE
        return negate(left)
    if is_complement(left, right):
        if isinstance(node, (Xor, Nand)):
            return TRUE
        return FALSE
    return node


_NEGATED_DERIVED: Dict[type, Type[Binary]] = {
    Nand: And,
    Nor: Or,
    Xor: Xnor,
    Xnor: Xor,
}


def _negated_derived(node):
    if isinstance(node, Not) and type(node.operand) in _NEGATED_DERIVED:
        inner = node.operand
        return _NEGATED_DERIVED[type(inner)](inner.left, inner.right)
    return node


def _xor_expansion(node):
    if isinstance(node, Xor):
        a, b = node.left, node.right
        return Or(And(a, Not(b)), And(Not(a), b))
    return node


def _xnor_expansion(node):
    if isinstance(node, Xnor):
        a, b = node.left, node.right
        return Or(And(a, b), And(Not(a), Not(b)))
    return node


# --- De Morgan ------------------------------------------------------------------


def _de_morgan_and(node):
    if isinstance(node, Not) and isinstance(node.operand, And):
        return Or(Not(node.operand.left), Not(node.operand.right))
    return node


def _de_morgan_or(node):
    if isinstance(node, Not) and isinstance(node.operand, Or):
        return And(Not(node.operand.left), Not(node.operand.right))
    return node


def _nand_de_morgan(node):
    if isinstance(node, Nand):
        return Or(Not(node.left), Not(node.right))
    return node


def _nor_de_morgan(node):
    if isinstance(node, Nor):
        return And(Not(node.left), Not(node.right))
    return node


# --- absorption, redundancy, factoring ------------------------------------------


def _chain_absorption(kind: Type[Binary]) -> Rewrite:
    """X+XY=X for OR chains, X(X+Y)=X for AND chains."""
    inner = _dual(kind)

    def rewrite(node):
        if type(node) is not kind:
            return node
        terms = unique(flatten(node, kind))
        factor_sets = [frozenset(flatten(term, inner)) for term in terms]
        # A term is dropped when another term's factors are a subset of its
        # own; of two terms with equal factor sets the first one is kept.
        kept = [
            term
            for idx, term in enumerate(terms)
            if not any(
                other < factor_sets[idx] or (other == factor_sets[idx] and pos < idx)
                for pos, other in enumerate(factor_sets)
                if pos != idx
            )
        ]
        if len(kept) == len(terms):
            return node
        return _build(kind, kept)

    return rewrite


def find_adjacent_pair(
    factor_lists: Sequence[List[BooleanExpression]],
) -> Optional[Tuple[int, int, List[BooleanExpression]]]:
    """Find two terms equal except for one complementary factor."""
    sets = [frozenset(factors) for factors in factor_lists]
    for i in range(len(factor_lists)):
        for j in range(i + 1, len(factor_lists)):
            if len(sets[i]) != len(sets[j]):
                continue
            only_i = sets[i] - sets[j]
            only_j = sets[j] - sets[i]
            if len(only_i) == 1 and len(only_j) == 1:
                (a,) = only_i
                (b,) = only_j
                if is_complement(a, b):
                    common = [f for f in factor_lists[i] if f != a]
                    return i, j, common
    return None


def _chain_redundancy(kind: Type[Binary]) -> Rewrite:
    """XY+X!Y=X for OR chains, (X+Y)(X+!Y)=X for AND chains."""
    inner = _dual(kind)

    def rewrite(node):
        if type(node) is not kind:
            return node
        terms = unique(flatten(node, kind))
        found = find_adjacent_pair([chain_factors(term, inner) for term in terms])
        if found is None:
            return node
        i, j, common = found
        merged = _build(inner, common)
        result = [merged if pos == i else term for pos, term in enumerate(terms) if pos != j]
        return _build(kind, result)

    return rewrite


def _consensus_of(first: List[BooleanExpression], second: List[BooleanExpression]):
    """Factors of the consensus term, or None unless exactly one pair clashes."""
    clashes = [(a, b) for a in first for b in second if is_complement(a, b)]
    if len(clashes) != 1:
        return None
    a, b = clashes[0]
    return {f for f in first if f != a} | {f for f in second if f != b}


def _chain_consensus(kind: Type[Binary]) -> Rewrite:
    """XY+!XZ+YZ=XY+!XZ for OR chains, (X+Y)(!X+Z)(Y+Z)=(X+Y)(!X+Z) for AND chains."""
    inner = _dual(kind)

    def rewrite(node):
        if type(node) is not kind:
            return node
        terms = unique(flatten(node, kind))
        if len(terms) < 3:
            return node
        factor_lists = [chain_factors(term, inner) for term in terms]
        for i in range(len(terms)):
            for j in range(i + 1, len(terms)):
                consensus = _consensus_of(factor_lists[i], factor_lists[j])
                if consensus is None:
                    continue
                for k, factors in enumerate(factor_lists):
                    if k in (i, j) or not consensus <= set(factors):
                        continue
                    return _build(kind, [term for pos, term in enumerate(terms) if pos != k])
        return node

    return rewrite


def _chain_factoring(kind: Type[Binary]) -> Rewrite:
    """XY+XZ=X(Y+Z) for OR chains, (X+Y)(X+Z)=X+YZ for AND chains."""
    inner = _dual(kind)

    def rewrite(node):
        if type(node) is not kind:
            return node
        terms = unique(flatten(node, kind))
        factor_lists = [chain_factors(term, inner) for term in terms]
        for i in range(len(terms)):
            for j in range(i + 1, len(terms)):
                common = [f for f in factor_lists[i] if f in factor_lists[j]]
                rest_i = [f for f in factor_lists[i] if f not in common]
                rest_j = [f for f in factor_lists[j] if f not in common]
                if not common or not rest_i or not rest_j:
                    continue
                factored = inner(
                    _build(inner, common),
                    kind(_build(inner, rest_i), _build(inner, rest_j)),
                )
                result = [factored if pos == i else term for pos, term in enumerate(terms) if pos != j]
                return _build(kind, result)
        return node

    return rewrite


def _chain_complement_absorption(kind: Type[Binary]) -> Rewrite:
    """X+!XY=X+Y for OR chains, X(!X+Y)=XY for AND chains."""
    inner = _dual(kind)

    def rewrite(node):
        if type(node) is not kind:
            return node
        terms = unique(flatten(node, kind))
        for i, single in enumerate(terms):
            if type(single) is inner:
                continue
            for j, term in enumerate(terms):
                if i == j:
                    continue
                factors = chain_factors(term, inner)
                remaining = [f for f in factors if not is_complement(f, single)]
                if len(remaining) == len(factors):
                    continue
                result = list(terms)
                result[j] = _build(inner, remaining)
                return _build(kind, result)
        return node

    return rewrite


def _distribute_and(node):
    if isinstance(node, And):
        if isinstance(node.right, Or):
            x, (y, z) = node.left, (node.right.left, node.right.right)
            return Or(And(x, y), And(x, z))
        if isinstance(node.left, Or):
            (y, z), x = (node.left.left, node.left.right), node.right
            return Or(And(y, x), And(z, x))
    return node


def _distribute_or(node):
    if isinstance(node, Or):
        if isinstance(node.right, And):
            x, (y, z) = node.left, (node.right.left, node.right.right)
            return And(Or(x, y), Or(x, z))
        if isinstance(node.left, And):
            (y, z), x = (node.left.left, node.left.right), node.right
            return And(Or(y, x), Or(z, x))
    return node


# --- rule objects -----------------------------------------------------------------

AND_IDENTITY = SimplificationRule("AND Identity", "X∧1 = X", CONSTANTS, _and_identity)
AND_ANNIHILATION = SimplificationRule("AND Annihilation", "X∧0 = 0", CONSTANTS, _and_annihilation)
OR_IDENTITY = SimplificationRule("OR Identity", "X∨0 = X", CONSTANTS, _or_identity)
OR_ANNIHILATION = SimplificationRule("OR Annihilation", "X∨1 = 1", CONSTANTS, _or_annihilation)
CONSTANT_NEGATION = SimplificationRule("Constant Negation", "¬1 = 0, ¬0 = 1", CONSTANTS, _constant_negation)

DOUBLE_NEGATION_RULE = SimplificationRule("Double Negation", "¬¬A = A", DOUBLE_NEGATION, _double_negation)

CONTRADICTION_RULE = SimplificationRule("Contradiction", "A∧¬A = 0", CONTRADICTION, _contradiction)
TAUTOLOGY_RULE = SimplificationRule("Tautology", "A∨¬A = 1", CONTRADICTION, _tautology)

AND_IDEMPOTENCE = SimplificationRule("AND Idempotence", "X∧X = X", IDEMPOTENCE, _chain_idempotence(And))
OR_IDEMPOTENCE = SimplificationRule("OR Idempotence", "X∨X = X", IDEMPOTENCE, _chain_idempotence(Or))

DERIVED_IDENTITIES = SimplificationRule(
    "Derived Operator Identities",
    "A⊕0 = A, A⊕A = 0, A↑1 = ¬A, A↓0 = ¬A, ...",
    DERIVED,
    _derived_identities,
)
NEGATED_DERIVED = SimplificationRule(
    "Negated Derived Operators",
    "¬(A↑B) = A∧B, ¬(A↓B) = A∨B, ¬(A⊕B) = A↔B, ¬(A↔B) = A⊕B",
    DERIVED,
    _negated_derived,
)
XOR_EXPANSION = SimplificationRule("XOR Expansion", "A⊕B = A¬B ∨ ¬AB", DERIVED, _xor_expansion)
XNOR_EXPANSION = SimplificationRule("XNOR Expansion", "A↔B = AB ∨ ¬A¬B", DERIVED, _xnor_expansion)

DE_MORGAN_AND = SimplificationRule("De Morgan (AND)", "¬(A∧B) = ¬A∨¬B", DE_MORGAN, _de_morgan_and)
DE_MORGAN_OR = SimplificationRule("De Morgan (OR)", "¬(A∨B) = ¬A∧¬B", DE_MORGAN, _de_morgan_or)
NAND_DE_MORGAN = SimplificationRule("NAND De Morgan", "A↑B = ¬A∨¬B", DE_MORGAN, _nand_de_morgan)
NOR_DE_MORGAN = SimplificationRule("NOR De Morgan", "A↓B = ¬A∧¬B", DE_MORGAN, _nor_de_morgan)

OR_ABSORPTION = SimplificationRule("Absorption", "X∨XY = X", DISTRIBUTIVE, _chain_absorption(Or))
AND_ABSORPTION = SimplificationRule("Absorption (dual)", "X(X∨Y) = X", DISTRIBUTIVE, _chain_absorption(And))
OR_REDUNDANCY = SimplificationRule("Redundancy", "XY∨X¬Y = X", REDUNDANCY, _chain_redundancy(Or))
AND_REDUNDANCY = SimplificationRule(
    "Redundancy (dual)", "(X∨Y)(X∨¬Y) = X", REDUNDANCY, _chain_redundancy(And)
)
OR_CONSENSUS = SimplificationRule("Consensus", "XY∨¬XZ∨YZ = XY∨¬XZ", CONSENSUS, _chain_consensus(Or))
AND_CONSENSUS = SimplificationRule(
    "Consensus (dual)", "(X∨Y)(¬X∨Z)(Y∨Z) = (X∨Y)(¬X∨Z)", CONSENSUS, _chain_consensus(And)
)
OR_FACTORING = SimplificationRule("Factoring", "XY∨XZ = X(Y∨Z)", DISTRIBUTIVE, _chain_factoring(Or))
AND_FACTORING = SimplificationRule(
    "Factoring (dual)", "(X∨Y)(X∨Z) = X∨YZ", DISTRIBUTIVE, _chain_factoring(And)
)
OR_COMPLEMENT_ABSORPTION = SimplificationRule(
    "Complement Absorption", "X∨¬XY = X∨Y", DISTRIBUTIVE, _chain_complement_absorption(Or)
)
AND_COMPLEMENT_ABSORPTION = SimplificationRule(
    "Complement Absorption (dual)", "X(¬X∨Y) = XY", DISTRIBUTIVE, _chain_complement_absorption(And)
)
AND_DISTRIBUTION = SimplificationRule("Distribution", "X(Y∨Z) = XY∨XZ", DISTRIBUTIVE, _distribute_and)
OR_DISTRIBUTION = SimplificationRule(
    "Distribution (dual)", "X∨YZ = (X∨Y)(X∨Z)", DISTRIBUTIVE, _distribute_or
)

CONSTANT_RULES = [AND_IDENTITY, AND_ANNIHILATION, OR_IDENTITY, OR_ANNIHILATION, CONSTANT_NEGATION]
CONTRADICTION_RULES = [CONTRADICTION_RULE, TAUTOLOGY_RULE]
IDEMPOTENCE_RULES = [AND_IDEMPOTENCE, OR_IDEMPOTENCE]
DE_MORGAN_RULES = [DE_MORGAN_AND, DE_MORGAN_OR, NAND_DE_MORGAN, NOR_DE_MORGAN]

# Terminating set: no rule here undoes another one.
DEFAULT_RULES: List[SimplificationRule] = [
    *CONSTANT_RULES,
    DOUBLE_NEGATION_RULE,
    *CONTRADICTION_RULES,
    *IDEMPOTENCE_RULES,
    DERIVED_IDENTITIES,
    NEGATED_DERIVED,
    *DE_MORGAN_RULES,
    OR_ABSORPTION,
    AND_ABSORPTION,
    OR_REDUNDANCY,
    AND_REDUNDANCY,
    OR_CONSENSUS,
    AND_CONSENSUS,
    OR_FACTORING,
    AND_FACTORING,
]

BASIC_RULES: List[SimplificationRule] = [
    *IDEMPOTENCE_RULES,
    *CONTRADICTION_RULES,
    *CONSTANT_RULES,
]

# Flattens to a sum of products; used by DNF conversion.
EXPANSION_RULES: List[SimplificationRule] = [
    *CONSTANT_RULES,
    DOUBLE_NEGATION_RULE,
    DERIVED_IDENTITIES,
    NEGATED_DERIVED,
    XOR_EXPANSION,
    XNOR_EXPANSION,
    *DE_MORGAN_RULES,
    AND_DISTRIBUTION,
    *IDEMPOTENCE_RULES,
    *CONTRADICTION_RULES,
]

# Product-of-sums counterpart of EXPANSION_RULES.
CNF_EXPANSION_RULES: List[SimplificationRule] = [
    rule if rule is not AND_DISTRIBUTION else OR_DISTRIBUTION for rule in EXPANSION_RULES
]

CLEANUP_RULES: List[SimplificationRule] = [
    *CONSTANT_RULES,
    DOUBLE_NEGATION_RULE,
    *CONTRADICTION_RULES,
    *IDEMPOTENCE_RULES,
    OR_COMPLEMENT_ABSORPTION,
    AND_COMPLEMENT_ABSORPTION,
    OR_ABSORPTION,
    AND_ABSORPTION,
]

ALL_RULES: List[SimplificationRule] = unique(
    [*DEFAULT_RULES, *EXPANSION_RULES, *CLEANUP_RULES, OR_DISTRIBUTION]
)


def rules_by_family(rules: Sequence[SimplificationRule] = ALL_RULES) -> Dict[str, List[SimplificationRule]]:
    grouped: Dict[str, List[SimplificationRule]] = {}
    for rule in rules:
        grouped.setdefault(rule.family, []).append(rule)
    return grouped




__all__ = [
    "ALL_RULES",
    "BASIC_RULES",
    "CLEANUP_RULES",
    "CNF_EXPANSION_RULES",
    "DEFAULT_RULES",
    "EXPANSION_RULES",
    "SimplificationRule",
    "chain_factors",
    "find_adjacent_pair",
    "rules_by_family",
    "unique",
]

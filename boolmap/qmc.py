"""Quine-McCluskey minimization.

Prime implicants are found by repeatedly merging implicants whose
count-of-ones differ by one. The cover takes every essential prime and then
greedily the prime covering most of the still uncovered minterms; the greedy
step is not guaranteed to find a minimum cover.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

import numpy as np

from .evaluator import truth_vector
from .expression import (
    FALSE,
    BooleanExpression,
    Not,
    Variable,
    and_all,
    extract_variables,
    or_all,
)


@dataclass(frozen=True)
class Implicant:
    minterms: FrozenSet[int]
    bits: str

    @classmethod
    def from_minterm(cls, minterm: int, nvars: int) -> "Implicant":
        bits = format(minterm, f"0{nvars}b") if nvars else ""
        return cls(frozenset([minterm]), bits)

    @property
    def ones(self) -> int:
        return self.bits.count("1")

    @property
    def free(self) -> int:
        return self.bits.count("-")

    def combine(self, other: "Implicant") -> Optional["Implicant"]:
        """Merge with ``other`` when the two differ in exactly one fixed bit."""
        diff = None
        for pos, (a, b) in enumerate(zip(self.bits, other.bits)):
            if a == b:
                continue
            if a == "-" or b == "-" or diff is not None:
                return None
            diff = pos
        if diff is None:
            return None
        bits = self.bits[:diff] + "-" + self.bits[diff + 1 :]
        return Implicant(self.minterms | other.minterms, bits)

    def to_term(self, variables: Sequence[str]) -> BooleanExpression:
        literals: List[BooleanExpression] = []
        for bit, name in zip(self.bits, variables):
            if bit == "1":
                literals.append(Variable(name))
            elif bit == "0":
                literals.append(Not(Variable(name)))
        return and_all(literals)


def _sort_key(implicant: Implicant):
    return (-implicant.free, implicant.bits)


def prime_implicants(
    minterms: Iterable[int], nvars: int, dontcares: Iterable[int] = ()
) -> List[Implicant]:
    current: Set[Implicant] = {
        Implicant.from_minterm(m, nvars) for m in set(minterms) | set(dontcares)
    }
    primes: Set[Implicant] = set()
    while current:
        groups: Dict[int, List[Implicant]] = defaultdict(list)
        for implicant in current:
            groups[implicant.ones].append(implicant)
        merged: Set[Implicant] = set()
        next_level: Set[Implicant] = set()
        for count in sorted(groups):
            for a in groups[count]:
                for b in groups.get(count + 1, ()):
                    combined = a.combine(b)
                    if combined is not None:
                        next_level.add(combined)
                        merged.add(a)
                        merged.add(b)
        primes |= current - merged
        current = next_level
    return sorted(primes, key=_sort_key)


def prime_chart(primes: Sequence[Implicant], minterms: Iterable[int]) -> Dict[int, List[Implicant]]:
    return {m: [p for p in primes if m in p.minterms] for m in sorted(set(minterms))}


def select_cover(primes: Sequence[Implicant], minterms: Iterable[int]) -> List[Implicant]:
    chart = prime_chart(primes, minterms)
    chosen: List[Implicant] = []
    for covering in chart.values():
        if len(covering) == 1 and covering[0] not in chosen:
            chosen.append(covering[0])

    remaining = set(chart)
    for implicant in chosen:
        remaining -= implicant.minterms
    while remaining:
        best = max(primes, key=lambda p: (len(p.minterms & remaining), p.free))
        chosen.append(best)
        remaining -= best.minterms
    return chosen


def minimize_minterms(
    variables: Sequence[str], minterms: Iterable[int], dontcares: Iterable[int] = ()
) -> BooleanExpression:
    """Return a sum of prime implicants covering ``minterms``."""
    mins = sorted(set(minterms))
    if not mins:
        return FALSE
    primes = prime_implicants(mins, len(variables), dontcares)
    cover = select_cover(primes, mins)
    return or_all(implicant.to_term(variables) for implicant in cover)


def qmc_minimize(
    expr: BooleanExpression,
    variables: Optional[Sequence[str]] = None,
    dontcares: Iterable[int] = (),
) -> BooleanExpression:
    names = list(variables) if variables is not None else extract_variables(expr)
    vector = truth_vector(expr, names)
    mins = [int(idx) for idx in np.flatnonzero(vector)]
    return minimize_minterms(names, mins, dontcares)


__all__ = [
    "Implicant",
    "minimize_minterms",
    "prime_chart",
    "prime_implicants",
    "qmc_minimize",
    "select_cover",
]

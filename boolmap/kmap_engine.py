"""Karnaugh map layout, grouping and group-to-term conversion."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .evaluator import truth_vector
from .expression import (
    FALSE,
    TRUE,
    And,
    BooleanExpression,
    Constant,
    Not,
    Or,
    Variable,
    and_all,
    extract_variables,
    flatten,
    or_all,
)

MIN_KMAP_VARIABLES = 2
MAX_KMAP_VARIABLES = 6

Cell = Tuple[int, int]


def gray_code(bits: int) -> List[int]:
    """Reflected Gray code sequence of the given width."""
    return [i ^ (i >> 1) for i in range(1 << bits)]


def map_dimensions(nvars: int) -> Tuple[int, int]:
    """Return (rows, cols) for K-map based on variable count."""
    if not MIN_KMAP_VARIABLES <= nvars <= MAX_KMAP_VARIABLES:
        raise ValueError(
            f"K-map available for {MIN_KMAP_VARIABLES}-{MAX_KMAP_VARIABLES} variables."
        )
    row_bits = nvars // 2
    return 1 << row_bits, 1 << (nvars - row_bits)


@dataclass(frozen=True)
class KMapLayout:
    """Row variables are the leading ones; both axes follow reflected Gray order."""

    variables: Tuple[str, ...]
    row_bits: int
    col_bits: int
    row_codes: Tuple[int, ...]
    col_codes: Tuple[int, ...]

    @property
    def nrows(self) -> int:
        return len(self.row_codes)

    @property
    def ncols(self) -> int:
        return len(self.col_codes)

    def cell_minterm(self, r: int, c: int) -> int:
        return (self.row_codes[r] << self.col_bits) | self.col_codes[c]

    def minterm_cell(self, idx: int) -> Cell:
        row_code = idx >> self.col_bits
        col_code = idx & ((1 << self.col_bits) - 1)
        return self.row_codes.index(row_code), self.col_codes.index(col_code)

    def index_grid(self) -> np.ndarray:
        rows = np.array(self.row_codes, dtype=np.int64)[:, None]
        cols = np.array(self.col_codes, dtype=np.int64)[None, :]
        return (rows << self.col_bits) | cols


def make_layout(variables: Sequence[str]) -> KMapLayout:
    nvars = len(variables)
    map_dimensions(nvars)
    row_bits = nvars // 2
    col_bits = nvars - row_bits
    return KMapLayout(
        variables=tuple(variables),
        row_bits=row_bits,
        col_bits=col_bits,
        row_codes=tuple(gray_code(row_bits)),
        col_codes=tuple(gray_code(col_bits)),
    )


def idx_to_rc(layout: KMapLayout, idx: int) -> Cell:
    """Translate a minterm index to (row, col) coordinates."""
    return layout.minterm_cell(idx)


def map_minterms_to_cells(layout: KMapLayout, minterms: Iterable[int]) -> Set[Cell]:
    """Convert minterm indices to a set of (row, col) cells."""
    return {layout.minterm_cell(m) for m in minterms}


@dataclass(frozen=True)
class GroupRect:
    """Descriptor for a grouped rectangle on the K-map."""

    r0: int
    rows: int
    c0: int
    cols: int
    cells: FrozenSet[Cell]
    minterms: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def size(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class KMap:
    layout: KMapLayout
    values: np.ndarray = field(compare=False)
    minterms: Tuple[int, ...]

    @property
    def ones_cells(self) -> Set[Cell]:
        return {(int(r), int(c)) for r, c in zip(*np.nonzero(self.values))}


def build_kmap(
    expr: BooleanExpression,
    variables: Optional[Sequence[str]] = None,
) -> KMap:
    """Lay out the truth table of ``expr`` on a Gray-coded grid."""
    names = list(variables) if variables is not None else extract_variables(expr)
    layout = make_layout(names)
    vector = truth_vector(expr, names)
    values = vector[layout.index_grid()]
    minterms = tuple(int(idx) for idx in np.flatnonzero(vector))
    return KMap(layout=layout, values=values, minterms=minterms)


def kmap_from_minterms(variables: Sequence[str], minterms: Iterable[int]) -> KMap:
    layout = make_layout(variables)
    vector = np.zeros(1 << len(variables), dtype=bool)
    mins = sorted(set(minterms))
    vector[mins] = True
    return KMap(layout=layout, values=vector[layout.index_grid()], minterms=tuple(mins))


def rect_cells(
    r0: int, rows: int, c0: int, cols: int, nrows: int, ncols: int
) -> Set[Cell]:
    """Return the set of cells covered by a rectangle (with wrap-around)."""
    return {
        ((r0 + dr) % nrows, (c0 + dc) % ncols)
        for dr in range(rows)
        for dc in range(cols)
    }


def _power_sizes(limit: int) -> List[int]:
    sizes = [1]
    while sizes[-1] * 2 <= limit:
        sizes.append(sizes[-1] * 2)
    return sizes


def all_rects(nrows: int, ncols: int) -> List[Tuple[int, int, int, int]]:
    """Generate every rectangle placement, largest area first."""
    rects: List[Tuple[int, int, int, int]] = []
    for rows in reversed(_power_sizes(nrows)):
        for cols in reversed(_power_sizes(ncols)):
            # A full-length side has a single distinct placement.
            row_starts = range(1) if rows == nrows else range(nrows)
            col_starts = range(1) if cols == ncols else range(ncols)
            for r0 in row_starts:
                for c0 in col_starts:
                    rects.append((r0, rows, c0, cols))
    rects.sort(key=lambda r: r[1] * r[3], reverse=True)
    return rects


def is_subcube(minterms: FrozenSet[int]) -> bool:
    """True when ``minterms`` is exactly the set fixed by some partial assignment."""
    if not minterms:
        return False
    base = min(minterms)
    free_mask = 0
    for m in minterms:
        free_mask |= m ^ base
    return len(minterms) == 1 << bin(free_mask).count("1")


def candidate_groups(kmap: KMap) -> List[GroupRect]:
    """All-true subcube rectangles not contained in a larger candidate."""
    layout = kmap.layout
    nrows, ncols = layout.nrows, layout.ncols
    candidates: List[GroupRect] = []
    seen: Set[FrozenSet[Cell]] = set()
    for r0, rows, c0, cols in all_rects(nrows, ncols):
        cells = frozenset(rect_cells(r0, rows, c0, cols, nrows, ncols))
        if cells in seen or not all(kmap.values[r, c] for r, c in cells):
            continue
        if any(cells < group.cells for group in candidates):
            continue
        minterms = frozenset(layout.cell_minterm(r, c) for r, c in cells)
        if not is_subcube(minterms):
            continue
        seen.add(cells)
        candidates.append(GroupRect(r0, rows, c0, cols, cells, minterms))
    return candidates


def select_group_rectangles(
    candidates: Sequence[GroupRect], ones_cells: Set[Cell]
) -> List[GroupRect]:
    """Pick essential groups, then greedily the group covering most new cells."""
    if not ones_cells:
        return []

    chosen: List[GroupRect] = []
    covered_all: Set[Cell] = set()

    for cell in sorted(ones_cells):
        containing = [g for g in candidates if cell in g.cells]
        if len(containing) == 1 and containing[0] not in chosen:
            chosen.append(containing[0])
            covered_all |= containing[0].cells

    remaining = ones_cells - covered_all
    while remaining:
        best = max(candidates, key=lambda g: len(g.cells & remaining))
        if not (best.cells & remaining):
            break
        chosen.append(best)
        covered_all |= best.cells
        remaining = ones_cells - covered_all

    return chosen


def group_kmap(kmap: KMap) -> List[GroupRect]:
    return select_group_rectangles(candidate_groups(kmap), kmap.ones_cells)


def group_to_term(group: GroupRect, layout: KMapLayout) -> BooleanExpression:
    """AND of the literals whose value is constant over the group."""
    n = len(layout.variables)
    literals: List[BooleanExpression] = []
    for pos, name in enumerate(layout.variables):
        bits = {(m >> (n - 1 - pos)) & 1 for m in group.minterms}
        if bits == {1}:
            literals.append(Variable(name))
        elif bits == {0}:
            literals.append(Not(Variable(name)))
    return and_all(literals)


def label_group(group: GroupRect, layout: KMapLayout) -> str:
    """Return the SOP term label for a group, complements marked with a prime."""
    term = group_to_term(group, layout)
    if term == TRUE:
        return "1"
    pieces = []
    for literal in flatten(term, And):
        if isinstance(literal, Not):
            pieces.append(f"{literal.operand.name}'")
        else:
            pieces.append(literal.name)
    return "".join(pieces)


def kmap_minimize(
    expr: BooleanExpression, variables: Optional[Sequence[str]] = None
) -> BooleanExpression:
    """Minimize ``expr`` by grouping the true cells of its Karnaugh map."""
    kmap = build_kmap(expr, variables)
    total = kmap.layout.nrows * kmap.layout.ncols
    if not kmap.minterms:
        return FALSE
    if len(kmap.minterms) == total:
        return TRUE
    groups = group_kmap(kmap)
    return or_all(group_to_term(group, kmap.layout) for group in groups)


def _circular_runs(coords: Set[int], size: int) -> List[Tuple[int, int]]:
    """Split axis positions into maximal wrap-around runs of (start, length)."""
    if len(coords) == size:
        return [(0, size)]
    runs = []
    for start in sorted(coords):
        if (start - 1) % size in coords:
            continue
        length = 1
        while (start + length) % size in coords:
            length += 1
        runs.append((start, length))
    return runs


def _term_to_minterms(term: BooleanExpression, variables: Sequence[str]) -> List[int]:
    fixed = {}
    for factor in flatten(term, And):
        if isinstance(factor, Variable):
            fixed[factor.name] = 1
        elif isinstance(factor, Not) and isinstance(factor.operand, Variable):
            fixed[factor.operand.name] = 0
        elif factor == TRUE:
            continue
        else:
            raise ValueError("Unsupported factor within implicant.")

    mins = []
    free_vars = [v for v in variables if v not in fixed]
    for bits in itertools.product([0, 1], repeat=len(free_vars)):
        assignment = dict(fixed)
        assignment.update(zip(free_vars, bits))
        idx = 0
        for var in variables:
            idx = (idx << 1) | assignment[var]
        mins.append(idx)
    return mins


def expression_to_groups(expr: BooleanExpression, layout: KMapLayout) -> List[GroupRect]:
    """Translate a sum-of-products expression into explicit K-map rectangles.

    On 5 and 6 variable maps a single term may cover cells that are not
    adjacent on the grid; it then yields one rectangle per contiguous piece.
    """
    if isinstance(expr, Constant):
        if not expr.value:
            return []
        cells = frozenset(
            (r, c) for r in range(layout.nrows) for c in range(layout.ncols)
        )
        minterms = frozenset(range(1 << len(layout.variables)))
        return [GroupRect(0, layout.nrows, 0, layout.ncols, cells, minterms)]

    groups: List[GroupRect] = []
    for term in flatten(expr, Or):
        mins = _term_to_minterms(term, layout.variables)
        cells = {layout.minterm_cell(idx) for idx in mins}
        row_runs = _circular_runs({r for r, _ in cells}, layout.nrows)
        col_runs = _circular_runs({c for _, c in cells}, layout.ncols)
        for r0, rows_len in row_runs:
            for c0, cols_len in col_runs:
                piece = frozenset(rect_cells(r0, rows_len, c0, cols_len, layout.nrows, layout.ncols))
                piece_mins = frozenset(layout.cell_minterm(r, c) for r, c in piece)
                groups.append(GroupRect(r0, rows_len, c0, cols_len, piece, piece_mins))
    return groups


__all__ = [
    "GroupRect",
    "KMap",
    "KMapLayout",
    "all_rects",
    "build_kmap",
    "candidate_groups",
    "expression_to_groups",
    "gray_code",
    "group_kmap",
    "group_to_term",
    "idx_to_rc",
    "is_subcube",
    "kmap_from_minterms",
    "kmap_minimize",
    "label_group",
    "make_layout",
    "map_dimensions",
    "map_minterms_to_cells",
    "rect_cells",
    "select_group_rectangles",
]

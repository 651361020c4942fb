import numpy as np
import pytest

from boolmap.expression import FALSE, TRUE
from boolmap.kmap_engine import (
    all_rects,
    build_kmap,
    candidate_groups,
    expression_to_groups,
    gray_code,
    group_kmap,
    idx_to_rc,
    is_subcube,
    kmap_from_minterms,
    kmap_minimize,
    label_group,
    make_layout,
    map_dimensions,
    map_minterms_to_cells,
    rect_cells,
)
from boolmap.parser import parse
from boolmap.qmc import qmc_minimize
from boolmap.render import to_boolean_string


def test_gray_code():
    assert gray_code(1) == [0, 1]
    assert gray_code(2) == [0, 1, 3, 2]
    assert gray_code(3) == [0, 1, 3, 2, 6, 7, 5, 4]


@pytest.mark.parametrize("bits", [1, 2, 3])
def test_gray_neighbours_differ_in_one_bit(bits):
    codes = gray_code(bits)
    for a, b in zip(codes, codes[1:] + codes[:1]):
        assert bin(a ^ b).count("1") == 1


@pytest.mark.parametrize(
    "nvars, dims",
    [(2, (2, 2)), (3, (2, 4)), (4, (4, 4)), (5, (4, 8)), (6, (8, 8))],
)
def test_map_dimensions(nvars, dims):
    assert map_dimensions(nvars) == dims


@pytest.mark.parametrize("nvars", [0, 1, 7])
def test_map_dimensions_out_of_range(nvars):
    with pytest.raises(ValueError):
        map_dimensions(nvars)


@pytest.mark.parametrize("nvars", [2, 3, 4, 5, 6])
def test_layout_cells_are_a_bijection(nvars):
    layout = make_layout([chr(65 + i) for i in range(nvars)])
    seen = set()
    for r in range(layout.nrows):
        for c in range(layout.ncols):
            m = layout.cell_minterm(r, c)
            assert idx_to_rc(layout, m) == (r, c)
            seen.add(m)
    assert seen == set(range(1 << nvars))
    assert sorted(layout.index_grid().ravel().tolist()) == list(range(1 << nvars))


def test_three_variable_layout_order():
    layout = make_layout(["A", "B", "C"])
    assert layout.index_grid().tolist() == [[0, 1, 3, 2], [4, 5, 7, 6]]
    assert map_minterms_to_cells(layout, [0, 6]) == {(0, 0), (1, 3)}


def test_build_kmap_values():
    kmap = build_kmap(parse("A*B+C"))
    assert kmap.layout.variables == ("A", "B", "C")
    assert kmap.minterms == (1, 3, 5, 6, 7)
    assert kmap.values.tolist() == [[False, True, True, False], [False, True, True, True]]
    assert kmap.ones_cells == {(0, 1), (0, 2), (1, 1), (1, 2), (1, 3)}


def test_build_kmap_with_explicit_variables():
    kmap = build_kmap(parse("A"), ["A", "B"])
    assert kmap.minterms == (2, 3)
    assert kmap_from_minterms(["A", "B"], [3, 2, 2]).minterms == (2, 3)


def test_rect_cells_wrap_around():
    assert rect_cells(0, 1, 3, 2, 2, 4) == {(0, 3), (0, 0)}


def test_all_rects_largest_first():
    rects = all_rects(2, 4)
    areas = [rows * cols for _, rows, _, cols in rects]
    assert areas == sorted(areas, reverse=True)
    assert rects[0] == (0, 2, 0, 4)
    assert (1, 1, 3, 1) in rects


def test_is_subcube():
    assert is_subcube(frozenset({4, 5, 6, 7}))
    assert is_subcube(frozenset({1}))
    assert not is_subcube(frozenset({1, 2}))
    assert not is_subcube(frozenset())


def test_candidates_are_true_prime_subcubes():
    kmap = build_kmap(parse("A*B*C*D*E+!A*!B*!C*!D+B*!C*E+D*!E"))
    ones = kmap.ones_cells
    candidates = candidate_groups(kmap)
    assert candidates
    for group in candidates:
        assert group.cells <= ones
        assert is_subcube(group.minterms)
        assert not any(group.cells < other.cells for other in candidates)
    covered = set().union(*(group.cells for group in group_kmap(kmap)))
    assert covered == ones


def test_wrap_around_group():
    kmap = build_kmap(parse("!C"), ["A", "B", "C"])
    groups = group_kmap(kmap)
    assert len(groups) == 1
    assert groups[0].minterms == frozenset({0, 2, 4, 6})


def test_label_group():
    kmap = kmap_from_minterms(["A", "B", "C"], [4, 5, 6, 7])
    (group,) = group_kmap(kmap)
    assert label_group(group, kmap.layout) == "A"
    kmap = kmap_from_minterms(["A", "B", "C"], [4, 5])
    (group,) = group_kmap(kmap)
    assert label_group(group, kmap.layout) == "AB'"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("A*B+A*!B", "A"),
        ("A*B*C+A*B*!C+A*!B*C+A*!B*!C", "A"),
        ("!A*!B*!C+!A*B*!C+A*!B*!C+A*B*!C", "!C"),
        ("A*B+C", "C+A*B"),
    ],
)
def test_kmap_minimize(text, expected):
    assert to_boolean_string(kmap_minimize(parse(text))) == expected


def test_kmap_minimize_constants():
    assert kmap_minimize(parse("A*!A+B*!B")) == FALSE
    assert kmap_minimize(parse("A+!A+B")) == TRUE


@pytest.mark.parametrize(
    "text",
    [
        "A*B+C*D+!A*!D",
        "A^B^C^D",
        "A*B*C*D*E+!A*!B*!C*!D*!E+C*!E",
        "A*!B*C+D*E*F+!A*!F+B*!D",
    ],
)
def test_kmap_minimize_preserves_function(text, equivalent):
    expr = parse(text)
    assert equivalent(expr, kmap_minimize(expr))


def test_expression_to_groups():
    layout = make_layout(["A", "B", "C"])
    groups = expression_to_groups(parse("A*!B+C"), layout)
    assert [(g.r0, g.rows, g.c0, g.cols) for g in groups] == [(1, 1, 0, 2), (0, 2, 1, 2)]
    assert groups[1].minterms == frozenset({1, 3, 5, 7})


def test_expression_to_groups_constants():
    layout = make_layout(["A", "B"])
    assert expression_to_groups(FALSE, layout) == []
    (group,) = expression_to_groups(TRUE, layout)
    assert group.size == 4


def test_expression_to_groups_rejects_non_sop():
    layout = make_layout(["A", "B"])
    with pytest.raises(ValueError):
        expression_to_groups(parse("A*(A^B)"), layout)


def test_kmap_values_match_truth_vector():
    expr = parse("A@B+C#D")
    kmap = build_kmap(expr)
    grid = kmap.layout.index_grid()
    ones = np.zeros(16, dtype=bool)
    ones[list(kmap.minterms)] = True
    assert np.array_equal(kmap.values, ones[grid])


def test_expression_to_groups_splits_non_adjacent_cells():
    variables = ["A", "B", "C", "D", "E"]
    layout = make_layout(variables)
    minimal = qmc_minimize(parse("A*E+!A*E+B*E*C"), variables)
    groups = expression_to_groups(minimal, layout)
    assert [(g.r0, g.rows, g.c0, g.cols) for g in groups] == [(0, 4, 1, 2), (0, 4, 5, 2)]
    covered = frozenset().union(*(g.minterms for g in groups))
    assert covered == frozenset(range(1, 32, 2))
    for group in groups:
        assert group.cells == frozenset(layout.minterm_cell(m) for m in group.minterms)


@pytest.mark.parametrize("text", ["A*!C*E+!B*D", "!D*!E+A*B*C", "C*E+!A*!C*!E*F"])
def test_expression_to_groups_cover_exactly_the_term_minterms(text):
    expr = parse(text)
    variables = ["A", "B", "C", "D", "E", "F"]
    groups = expression_to_groups(expr, make_layout(variables))
    covered = frozenset().union(*(g.minterms for g in groups))
    assert covered == frozenset(build_kmap(expr, variables).minterms)

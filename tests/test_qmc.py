import pytest

from boolmap.expression import FALSE, TRUE
from boolmap.parser import parse
from boolmap.qmc import (
    Implicant,
    minimize_minterms,
    prime_chart,
    prime_implicants,
    qmc_minimize,
    select_cover,
)
from boolmap.render import to_boolean_string


def test_implicant_combine():
    a = Implicant.from_minterm(4, 3)
    b = Implicant.from_minterm(5, 3)
    merged = a.combine(b)
    assert merged.bits == "10-"
    assert merged.minterms == frozenset({4, 5})
    assert merged.free == 1
    assert merged.ones == 1


def test_implicant_combine_rejects():
    assert Implicant.from_minterm(0, 3).combine(Implicant.from_minterm(3, 3)) is None
    assert Implicant.from_minterm(1, 3).combine(Implicant.from_minterm(1, 3)) is None
    dashed = Implicant(frozenset({0, 1}), "00-")
    assert dashed.combine(Implicant(frozenset({2, 6}), "-10")) is None


def test_implicant_to_term():
    assert to_boolean_string(Implicant(frozenset({4, 5}), "10-").to_term(["A", "B", "C"])) == "A*!B"
    assert Implicant(frozenset(range(4)), "--").to_term(["A", "B"]) == TRUE


def test_prime_implicants_classic():
    primes = prime_implicants([0, 1, 2, 5, 6, 7], 3)
    assert sorted(p.bits for p in primes) == ["-01", "-10", "0-0", "00-", "1-1", "11-"]


def test_prime_implicants_with_dontcares():
    primes = prime_implicants([1, 3], 2, dontcares=[0, 2])
    assert [p.bits for p in primes] == ["--"]


def test_prime_chart():
    primes = prime_implicants([4, 5, 6, 7], 3)
    chart = prime_chart(primes, [4, 5, 6, 7])
    assert list(chart) == [4, 5, 6, 7]
    assert all(len(covering) == 1 for covering in chart.values())


def test_select_cover_takes_essentials():
    primes = prime_implicants([0, 2, 5, 7], 3)
    cover = select_cover(primes, [0, 2, 5, 7])
    assert sorted(p.bits for p in cover) == ["0-0", "1-1"]


def test_select_cover_covers_cyclic_chart():
    mins = [0, 1, 2, 5, 6, 7]
    cover = select_cover(prime_implicants(mins, 3), mins)
    covered = set().union(*(p.minterms for p in cover))
    assert covered == set(mins)
    assert len(cover) <= 4


@pytest.mark.parametrize(
    "minterms, expected",
    [
        ([], "0"),
        ([4, 5, 6, 7], "A"),
        ([0, 1, 2, 3, 4, 5, 6, 7], "1"),
        ([3, 7], "B*C"),
        ([0, 2, 5, 7], "!A*!C+A*C"),
    ],
)
def test_minimize_minterms(minterms, expected):
    assert to_boolean_string(minimize_minterms(["A", "B", "C"], minterms)) == expected


def test_minimize_minterms_with_dontcares():
    result = minimize_minterms(["A", "B"], [3], dontcares=[1])
    assert to_boolean_string(result) == "B"


@pytest.mark.parametrize(
    "text",
    [
        "A*B*C*D*E+A*B*C*D*!E+!A*!B*C+D*E",
        "A^B^C^D^E",
        "(A+B)*(C+D)*(E+!A)*(F+!B)",
        "A*!B*C*!D+!A*B*!C*D+A*B*C*D+E",
    ],
)
def test_qmc_minimize_preserves_function(text, equivalent):
    expr = parse(text)
    assert equivalent(expr, qmc_minimize(expr))


def test_qmc_minimize_constant_false():
    assert qmc_minimize(parse("A*!A")) == FALSE

import math

import pytest

from splitly.services.settlement import PRECISION, Transfer, is_fully_settled, outstanding_debt, simplify


def apply(balances, transfers):
    after = dict(balances)
    for t in transfers:
        after[t.from_member] += t.amount
        after[t.to_member] -= t.amount
    return after


def test_simplify_triangle():
    balances = {"A": -30, "B": -20, "C": 50}

    transfers = simplify(balances)

    assert transfers == [
        Transfer(from_member="A", to_member="C", amount=30),
        Transfer(from_member="B", to_member="C", amount=20),
    ]
    assert outstanding_debt(transfers) == 50


def test_simplify_single_pair():
    assert simplify({"A": -15, "B": 15}) == [Transfer(from_member="A", to_member="B", amount=15)]


def test_simplify_all_settled():
    assert simplify({"A": 0, "B": 0.005, "C": -0.005}) == []


def test_simplify_empty():
    assert simplify({}) == []


def test_simplify_absorbs_float_residue():
    balances = {"A": 0.1 + 0.2 - 0.3, "B": -10.0, "C": 10.0}
    assert simplify(balances) == [Transfer(from_member="B", to_member="C", amount=10.0)]


def test_simplify_conserves_balances():
    balances = {
        "ann": 42.17,
        "bob": -13.5,
        "cid": -28.67,
        "dee": 7.25,
        "eve": -7.25,
    }

    transfers = simplify(balances)
    after = apply(balances, transfers)

    assert all(abs(value) <= PRECISION for value in after.values())
    assert all(t.amount > PRECISION for t in transfers)
    assert all(t.from_member != t.to_member for t in transfers)
    assert len(transfers) <= 3 + 2 - 1


def test_simplify_again_after_settling_is_empty():
    balances = {"A": -12.34, "B": -0.66, "C": 5.0, "D": 8.0}
    after = apply(balances, simplify(balances))

    assert simplify(after) == []


def test_simplify_breaks_ties_by_member_id():
    first = simplify({"b": -10, "a": -10, "d": 10, "c": 10})
    second = simplify({"c": 10, "a": -10, "d": 10, "b": -10})

    assert first == second
    assert first == [
        Transfer(from_member="a", to_member="c", amount=10),
        Transfer(from_member="b", to_member="d", amount=10),
    ]


def test_simplify_leaves_remainder_of_unbalanced_input():
    transfers = simplify({"A": -50, "B": 30})

    assert transfers == [Transfer(from_member="A", to_member="B", amount=30)]


def test_simplify_ignores_nan_balance():
    transfers = simplify({"A": math.nan, "B": -5, "C": 5})

    assert transfers == [Transfer(from_member="B", to_member="C", amount=5)]


def test_simplify_custom_precision():
    assert simplify({"A": -0.5, "B": 0.5}, precision=1.0) == []


def test_simplify_does_not_mutate_input():
    balances = {"A": -30, "B": 30}
    simplify(balances)
    assert balances == {"A": -30, "B": 30}


def test_is_fully_settled():
    assert is_fully_settled([])
    assert not is_fully_settled([Transfer(from_member="A", to_member="B", amount=1.5)])


@pytest.mark.parametrize("precision", [0, -0.01, math.nan, math.inf])
def test_simplify_rejects_invalid_precision(precision):
    with pytest.raises(ValueError):
        simplify({"A": -30, "B": -20, "C": 50}, precision=precision)


def test_simplify_skips_infinite_balances():
    transfers = simplify({"A": -math.inf, "B": math.inf, "C": -5, "D": 5})

    assert transfers == [Transfer(from_member="C", to_member="D", amount=5)]

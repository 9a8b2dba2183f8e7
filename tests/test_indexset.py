import pytest

from dutysearch.core.indexset import IndexSet


def test_iterates_in_ascending_order():
    s = IndexSet.of(5, 0, 3)
    assert list(s) == [0, 3, 5]
    assert len(s) == 3
    assert 3 in s and 4 not in s
    assert s.bits == 0b101001


def test_full_and_empty():
    assert list(IndexSet.full(3)) == [0, 1, 2]
    assert IndexSet.full(0).is_empty()
    assert not IndexSet()


def test_subset_and_disjoint():
    small = IndexSet.of(1)
    big = IndexSet.of(0, 1, 2)
    assert small.issubset(big)
    assert big.issuperset(small)
    assert not big.issubset(small)
    assert IndexSet().issubset(small)
    assert IndexSet.of(0).isdisjoint(IndexSet.of(1, 2))
    assert not small.isdisjoint(big)


def test_powerset_descent_visits_every_subset_once():
    cursor = IndexSet.full(3)
    seen = []
    while not cursor.is_empty():
        seen.append(cursor.bits)
        cursor = cursor.decreased_in_powerset_order()
    assert seen == [7, 6, 5, 4, 3, 2, 1]
    assert cursor.decreased_in_powerset_order().is_empty()


def test_negative_index_rejected():
    with pytest.raises(ValueError):
        IndexSet.of(-1)

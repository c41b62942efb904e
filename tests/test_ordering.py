"""Tests for the list ordering helpers."""

import pytest

from curation_desk.core.exceptions import IndexOutOfRange
from curation_desk.core.ordering import clamp_index, insert_at, reorder


def test_reorder_moves_first_to_last():
    assert reorder(["A", "B", "C"], 0, 2) == ["B", "C", "A"]


def test_reorder_moves_last_to_first():
    assert reorder(["A", "B", "C"], 2, 0) == ["C", "A", "B"]


def test_reorder_same_index_keeps_order():
    assert reorder(["A", "B", "C"], 1, 1) == ["A", "B", "C"]


def test_reorder_does_not_mutate_input():
    items = ["A", "B", "C"]
    reorder(items, 0, 2)
    assert items == ["A", "B", "C"]


@pytest.mark.parametrize("from_index,to_index", [(-1, 0), (3, 0), (0, 3), (0, -1)])
def test_reorder_rejects_out_of_range(from_index, to_index):
    with pytest.raises(IndexOutOfRange):
        reorder(["A", "B", "C"], from_index, to_index)


def test_reorder_out_of_range_is_an_index_error():
    with pytest.raises(IndexError):
        reorder([], 0, 0)


def test_insert_at_middle():
    assert insert_at(["A", "C"], "B", 1) == ["A", "B", "C"]


def test_insert_at_clamps_past_end():
    assert insert_at(["A", "B"], "C", 10) == ["A", "B", "C"]


def test_insert_at_clamps_negative():
    assert insert_at(["B", "C"], "A", -4) == ["A", "B", "C"]


def test_insert_at_into_empty_list():
    assert insert_at([], "A", 0) == ["A"]


def test_insert_at_does_not_mutate_input():
    items = ["A"]
    insert_at(items, "B", 0)
    assert items == ["A"]


def test_clamp_index():
    assert clamp_index(-1, 3) == 0
    assert clamp_index(2, 3) == 2
    assert clamp_index(7, 3) == 3


@pytest.mark.parametrize("i,j", [(0, 1), (1, 0), (1, 2), (0, 3), (3, 0), (2, 2)])
def test_reorder_back_restores_order(i, j):
    items = ["A", "B", "C", "D"]
    moved = reorder(items, i, j)

    assert sorted(moved) == items
    assert reorder(moved, j, i) == items


@pytest.mark.parametrize("index", [0, 1, 2, 5])
def test_insert_at_grows_by_one(index):
    result = insert_at(["A", "B"], "X", index)
    assert len(result) == 3
    assert "X" in result
    if index >= 2:
        assert result[-1] == "X"

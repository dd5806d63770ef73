"""Tests for change set partitioning."""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gitbatch import DEFAULT_FILES_PER_COMMIT, ChangeEntry, InvalidBatchSizeError, partition


def test_250_in_groups_of_100():
    changes = [ChangeEntry(path=f"f{i}", content=str(i)) for i in range(250)]
    groups = partition(changes, 100)
    assert [len(g) for g in groups] == [100, 100, 50]
    assert [c for g in groups for c in g] == changes


def test_default_group_size():
    changes = list(range(DEFAULT_FILES_PER_COMMIT + 1))
    assert [len(g) for g in partition(changes)] == [DEFAULT_FILES_PER_COMMIT, 1]


def test_empty_input_has_no_groups():
    assert partition([], 10) == []


def test_exact_multiple():
    assert partition([1, 2, 3, 4], 2) == [[1, 2], [3, 4]]


def test_group_larger_than_input():
    assert partition([1, 2, 3], 10) == [[1, 2, 3]]


def test_returns_reusable_list():
    groups = partition([1, 2, 3], 2)
    assert list(groups) == list(groups)


@pytest.mark.parametrize("size", [0, -1, 2.5, True, "3"])
def test_invalid_group_size(size):
    with pytest.raises(InvalidBatchSizeError):
        partition([1, 2], size)


def test_invalid_group_size_is_value_error():
    with pytest.raises(ValueError):
        partition([1], 0)


@given(
    items=st.lists(st.integers(), max_size=300),
    size=st.integers(min_value=1, max_value=120),
)
def test_partition_properties(items, size):
    groups = partition(items, size)
    assert len(groups) == math.ceil(len(items) / size)
    assert all(1 <= len(g) <= size for g in groups)
    assert all(len(g) == size for g in groups[:-1])
    assert [x for g in groups for x in g] == items

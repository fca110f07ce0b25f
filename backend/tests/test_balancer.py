from __future__ import annotations

from unconference.algorithm.balancer import balance_groups


def test_balance_moves_from_large_to_small_until_ideal():
    groups = {"a": ["1", "2", "3", "4", "5", "6"], "b": ["x"], "c": []}
    moved = balance_groups(groups, ideal_size=3, max_size=6)

    assert moved == 3
    assert groups == {"a": ["1", "2", "3"], "b": ["x", "6", "5"], "c": ["4"]}


def test_balance_is_noop_without_small_groups():
    groups = {"a": ["1", "2", "3", "4", "5", "6"], "b": ["7", "8", "9", "10", "11", "12"]}
    assert balance_groups(groups, ideal_size=4, max_size=6) == 0
    assert [len(m) for m in groups.values()] == [6, 6]


def test_balance_leaves_large_group_above_ideal_when_capacity_runs_out():
    groups = {"a": ["1", "2", "3", "4", "5", "6", "7"], "b": ["x", "y"]}
    balance_groups(groups, ideal_size=3, max_size=7)

    assert groups["b"] == ["x", "y", "7"]
    assert len(groups["a"]) == 6


def test_balance_does_not_revisit_filled_small_group():
    groups = {"a": ["1", "2", "3", "4", "5"], "b": ["6", "7", "8", "9", "10"], "c": ["x"]}
    balance_groups(groups, ideal_size=3, max_size=5)

    # c reaches ideal from a's surplus and is dropped; b keeps its surplus.
    assert groups["c"] == ["x", "5", "4"]
    assert groups["a"] == ["1", "2", "3"]
    assert len(groups["b"]) == 5

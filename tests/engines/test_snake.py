"""
Tests for the snake distributor.

Covers the boundary-revisiting traversal, per-call cursor independence,
archive reversal and the empty-destination failure.
"""

from collections import Counter
from decimal import Decimal

import pytest

from rebalance_engines.snake import DistributionCursor, SnakeDistributor, destinations_for
from rebalance_kernel.domain.inventory import Category
from rebalance_kernel.exceptions import NoDestinationsError

from tests.fakes import make_record


def _records(count, category=Category.STANDARD):
    return [make_record(f"item{i}", weight=i, category=category) for i in range(count)]


class TestDistributionCursor:
    def test_walks_forward_then_turns_in_place(self):
        cursor = DistributionCursor(max_index=2)
        visited = []
        for _ in range(9):
            visited.append(cursor.index)
            cursor.advance()
        assert visited == [0, 1, 2, 2, 1, 0, 0, 1, 2]

    def test_single_destination_never_moves(self):
        cursor = DistributionCursor(max_index=0)
        for _ in range(5):
            cursor.advance()
            assert cursor.index == 0


class TestSnakeDistribute:
    def test_seven_items_over_three_destinations(self):
        assignments = SnakeDistributor().distribute(_records(7), ["A", "B", "C"], 10)
        assert [a.target_bucket for a in assignments] == ["A", "B", "C", "C", "B", "A", "A"]

    def test_preserves_input_order_and_carries_limit(self):
        records = _records(5)
        assignments = SnakeDistributor().distribute(records, ["A", "B"], 25)
        assert [a.item_id for a in assignments] == [r.item_id for r in records]
        assert {a.bad_item_limit for a in assignments} == {25}
        assert {a.category for a in assignments} == {Category.STANDARD}

    def test_single_destination_takes_everything(self):
        assignments = SnakeDistributor().distribute(_records(4), ["ONLY"], 0)
        assert [a.target_bucket for a in assignments] == ["ONLY"] * 4

    def test_empty_records_gives_no_assignments(self):
        assert SnakeDistributor().distribute([], ["A"], 0) == ()

    def test_empty_destinations_raises(self):
        with pytest.raises(NoDestinationsError):
            SnakeDistributor().distribute(_records(3), [], 0)

    def test_each_call_starts_a_fresh_cursor(self):
        distributor = SnakeDistributor()
        first = distributor.distribute(_records(2), ["A", "B", "C"], 0)
        second = distributor.distribute(_records(2), ["A", "B", "C"], 0)
        assert [a.target_bucket for a in first] == ["A", "B"]
        assert [a.target_bucket for a in second] == ["A", "B"]

    def test_counts_differ_by_at_most_one_per_full_sweep(self):
        # 2n items over n destinations: every destination gets exactly 2
        assignments = SnakeDistributor().distribute(_records(8), ["A", "B", "C", "D"], 0)
        assert set(Counter(a.target_bucket for a in assignments).values()) == {2}

    def test_balances_weight_across_a_full_sweep(self):
        records = [make_record(f"i{w}", weight=w) for w in range(1, 7)]
        assignments = SnakeDistributor().distribute(records, ["A", "B", "C"], 0)
        weights = {r.item_id: r.weight for r in records}
        totals = Counter()
        for a in assignments:
            totals[a.target_bucket] += weights[a.item_id]
        # 1+6, 2+5, 3+4
        assert set(totals.values()) == {Decimal("7")}


class TestArchiveDestinations:
    def test_archive_pass_is_reversed_by_default(self):
        assert destinations_for(Category.ARCHIVE, ("A", "B", "C")) == ("C", "B", "A")

    def test_standard_pass_keeps_staging_order(self):
        assert destinations_for(Category.STANDARD, ("A", "B", "C")) == ("A", "B", "C")

    def test_reversal_can_be_turned_off(self):
        result = destinations_for(Category.ARCHIVE, ("A", "B", "C"), reverse_archive=False)
        assert result == ("A", "B", "C")

    def test_archive_pass_starts_from_the_far_end(self):
        records = _records(4, category=Category.ARCHIVE)
        destinations = destinations_for(Category.ARCHIVE, ("A", "B", "C"))
        assignments = SnakeDistributor().distribute(records, destinations, 0)
        assert [a.target_bucket for a in assignments] == ["C", "B", "A", "A"]

    def test_reversal_does_not_mutate_staging(self):
        staging = ["A", "B", "C"]
        destinations_for(Category.ARCHIVE, staging)
        assert staging == ["A", "B", "C"]

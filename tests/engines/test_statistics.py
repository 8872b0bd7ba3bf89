"""Tests for statistics aggregation and weight ordering."""

from decimal import Decimal

import pytest

from rebalance_engines.statistics import StatisticsAggregator, compute_weight
from rebalance_kernel.domain.inventory import ItemStatistics

from tests.fakes import FakeStatistics, make_record


class TestComputeWeight:
    def test_sums_primary_and_deleted(self):
        stats = ItemStatistics(primary_size=Decimal("100.5"), deleted_size=Decimal("20"))
        assert compute_weight(stats) == Decimal("120.5")

    def test_deleted_defaults_to_zero(self):
        assert compute_weight(ItemStatistics(primary_size=Decimal("7"))) == Decimal("7")


class TestAggregate:
    def test_weights_and_sorts_ascending(self):
        records = [make_record("big"), make_record("small"), make_record("mid")]
        stats = FakeStatistics({"big": (900, 100), "small": (10, 0), "mid": (400, 50)})
        result = StatisticsAggregator(stats.get_statistics).aggregate(records)

        assert result.item_ids == ("small", "mid", "big")
        assert [r.weight for r in result.records] == [
            Decimal("10"), Decimal("450"), Decimal("1000"),
        ]
        assert result.total_weight == Decimal("1460")

    def test_ties_keep_discovery_order(self):
        records = [make_record(f"tie{i}") for i in range(5)]
        stats = FakeStatistics({f"tie{i}": (10, 0) for i in range(5)})
        result = StatisticsAggregator(stats.get_statistics).aggregate(records)
        assert result.item_ids == tuple(f"tie{i}" for i in range(5))

    def test_unavailable_item_is_kept_with_unknown_weight(self):
        records = [make_record("known"), make_record("missing")]
        stats = FakeStatistics({"known": (5, 0)})
        result = StatisticsAggregator(stats.get_statistics).aggregate(records)

        assert result.unavailable == ("missing",)
        assert len(result.records) == 2
        # Unknown weight sorts as zero, ahead of the known item
        assert result.records[0].item_id == "missing"
        assert result.records[0].weight is None

    def test_without_lookup_uses_existing_weights(self):
        records = [make_record("b", weight=3), make_record("a", weight=1), make_record("c")]
        result = StatisticsAggregator().aggregate(records)
        assert result.item_ids == ("c", "a", "b")
        assert result.unavailable == ()

    def test_other_lookup_errors_propagate(self):
        def broken(record):
            raise RuntimeError("platform down")

        with pytest.raises(RuntimeError):
            StatisticsAggregator(broken).aggregate([make_record("x")])

    def test_every_record_is_returned_once(self):
        records = [make_record(f"r{i}") for i in range(20)]
        stats = FakeStatistics({f"r{i}": (20 - i, 0) for i in range(0, 20, 2)})
        result = StatisticsAggregator(stats.get_statistics).aggregate(records)
        assert sorted(result.item_ids) == sorted(r.item_id for r in records)

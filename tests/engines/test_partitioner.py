"""Tests for the batch partitioner: exact, order-preserving slicing."""

import pytest

from rebalance_engines.partitioner import BatchPartitioner, iter_batches
from rebalance_kernel.domain.inventory import Assignment, Category
from rebalance_kernel.exceptions import InvalidBatchCapacityError


def _assignments(count, category=Category.STANDARD):
    return [
        Assignment(item_id=f"item{i}", target_bucket="A", bad_item_limit=0, category=category)
        for i in range(count)
    ]


class TestPartition:
    def test_seven_by_three(self):
        batches = BatchPartitioner().partition(_assignments(7), 3, Category.STANDARD)
        assert [b.size for b in batches] == [3, 3, 1]
        assert [b.batch_index for b in batches] == [1, 2, 3]

    def test_concatenation_reproduces_input(self):
        assignments = _assignments(10)
        batches = BatchPartitioner().partition(assignments, 4, Category.STANDARD)
        flattened = [a for b in batches for a in b.assignments]
        assert flattened == assignments

    def test_exact_multiple_has_no_short_batch(self):
        batches = BatchPartitioner().partition(_assignments(6), 3, Category.STANDARD)
        assert [b.size for b in batches] == [3, 3]

    def test_fewer_items_than_capacity(self):
        batches = BatchPartitioner().partition(_assignments(2), 50, Category.STANDARD)
        assert len(batches) == 1
        assert batches[0].size == 2
        assert batches[0].capacity == 50

    def test_empty_input_gives_no_batches(self):
        assert BatchPartitioner().partition([], 3, Category.STANDARD) == ()

    def test_batches_carry_category_and_name(self):
        batches = BatchPartitioner().partition(
            _assignments(3, Category.ARCHIVE), 2, Category.ARCHIVE,
        )
        assert {b.category for b in batches} == {Category.ARCHIVE}
        assert [b.batch_name for b in batches] == ["Archive-001", "Archive-002"]

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_non_positive_capacity_raises(self, capacity):
        with pytest.raises(InvalidBatchCapacityError) as exc_info:
            BatchPartitioner().partition(_assignments(3), capacity, Category.STANDARD)
        assert exc_info.value.capacity == capacity


class TestIterBatches:
    def test_yields_lazily(self):
        batches = iter_batches(iter(_assignments(5)), 2, Category.STANDARD)
        first = next(batches)
        assert first.batch_index == 1
        assert [a.item_id for a in first.assignments] == ["item0", "item1"]
        assert [b.size for b in batches] == [2, 1]

    def test_invalid_capacity_raises_on_first_iteration(self):
        batches = iter_batches(_assignments(1), 0, Category.STANDARD)
        with pytest.raises(InvalidBatchCapacityError):
            next(batches)

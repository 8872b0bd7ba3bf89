"""
Module: rebalance_engines.partitioner
Responsibility:
    Slice one category's ordered assignments into capacity-bounded batches
    with sequential 1-based indices.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Concatenating the emitted batches reproduces the input exactly:
      nothing duplicated, dropped, or reordered.
    - Every batch but the last holds exactly ``capacity`` assignments; the
      last holds the remainder (1..capacity).

Failure modes:
    - InvalidBatchCapacityError if capacity <= 0, raised before any batch
      is built.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from rebalance_engines.tracer import traced_engine
from rebalance_kernel.domain.inventory import Assignment, Batch, Category
from rebalance_kernel.exceptions import InvalidBatchCapacityError
from rebalance_kernel.logging_config import get_logger

logger = get_logger("engines.partitioner")


def iter_batches(
    assignments: Iterable[Assignment],
    capacity: int,
    category: Category,
) -> Iterator[Batch]:
    """Lazily yield batches as each buffer fills."""
    if capacity <= 0:
        raise InvalidBatchCapacityError(category.value, capacity)

    buffer: list[Assignment] = []
    batch_index = 0
    for assignment in assignments:
        buffer.append(assignment)
        if len(buffer) == capacity:
            batch_index += 1
            yield Batch(
                category=category,
                batch_index=batch_index,
                capacity=capacity,
                assignments=tuple(buffer),
            )
            buffer = []

    if buffer:
        batch_index += 1
        yield Batch(
            category=category,
            batch_index=batch_index,
            capacity=capacity,
            assignments=tuple(buffer),
        )


class BatchPartitioner:
    """
    Group ordered assignments into batches.

    Contract:
        ``partition()`` materializes every batch for one category.
    Non-goals:
        Does not reorder or rebalance; it only cuts the sequence.
    """

    @traced_engine(
        "partitioner", "1.0", fingerprint_fields=("assignments", "capacity", "category"),
    )
    def partition(
        self,
        assignments: Sequence[Assignment],
        capacity: int,
        category: Category,
    ) -> tuple[Batch, ...]:
        # Validate eagerly, generators defer the raise to first iteration
        if capacity <= 0:
            raise InvalidBatchCapacityError(category.value, capacity)

        batches = tuple(iter_batches(assignments, capacity, category))

        logger.info("batches_partitioned", extra={
            "batch_category": category.value,
            "assignment_count": len(assignments),
            "batch_count": len(batches),
            "capacity": capacity,
        })
        return batches

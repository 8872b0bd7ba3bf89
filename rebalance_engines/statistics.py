"""
Module: rebalance_engines.statistics
Responsibility:
    Turn raw per-item size facts into one comparable weight and order a
    category's items by ascending weight.

Architecture position:
    Engines -- pure calculation layer.  The size lookup is passed in as a
    callable; this module never talks to the platform itself.

Invariants enforced:
    - weight = primary_size + deleted_size.
    - Items whose lookup fails keep weight=None and stay in the output;
      they sort as weight zero.
    - Stable ordering: ties keep discovery order, so a frozen inventory
      always yields the same sequence.

Failure modes:
    - StatisticsUnavailableError from the lookup is absorbed per item.
      Any other exception from the lookup propagates.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from rebalance_engines.tracer import traced_engine
from rebalance_kernel.domain.inventory import InventoryRecord, ItemStatistics
from rebalance_kernel.exceptions import StatisticsUnavailableError
from rebalance_kernel.logging_config import get_logger

logger = get_logger("engines.statistics")

StatisticsLookup = Callable[[InventoryRecord], ItemStatistics]


def compute_weight(stats: ItemStatistics) -> Decimal:
    """Combined primary and deleted-item size."""
    return stats.primary_size + stats.deleted_size


@dataclass(frozen=True)
class AggregationResult:
    """Weighted, ascending-sorted records for one pass."""

    records: tuple[InventoryRecord, ...]
    unavailable: tuple[str, ...] = ()  # item ids with no statistics

    @property
    def total_weight(self) -> Decimal:
        return sum((r.sort_weight for r in self.records), Decimal("0"))

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(r.item_id for r in self.records)


class StatisticsAggregator:
    """
    Weigh and sort inventory records.

    Contract:
        ``aggregate()`` returns every input record exactly once, weighted
        and sorted ascending by weight (stable).
    Non-goals:
        Does not group by category; callers pass one category at a time.
    """

    def __init__(self, lookup: StatisticsLookup | None = None) -> None:
        self._lookup = lookup

    @traced_engine("statistics", "1.0", fingerprint_fields=("records",))
    def aggregate(self, records: Sequence[InventoryRecord]) -> AggregationResult:
        """
        Weigh each record and sort the sequence by ascending weight.

        Without a lookup the records' existing weights are used as-is.
        """
        weighted: list[InventoryRecord] = []
        unavailable: list[str] = []

        for record in records:
            if self._lookup is None:
                weighted.append(record)
                continue
            try:
                stats = self._lookup(record)
            except StatisticsUnavailableError as exc:
                logger.warning("statistics_unavailable", extra={
                    "item_id": record.item_id,
                    "item_category": record.category.value,
                    "reason": exc.reason,
                })
                unavailable.append(record.item_id)
                weighted.append(replace(record, weight=None))
                continue
            weighted.append(replace(record, weight=compute_weight(stats)))

        # sorted() is stable: equal weights keep discovery order
        ordered = tuple(sorted(weighted, key=lambda r: r.sort_weight))

        logger.info("statistics_aggregated", extra={
            "item_count": len(ordered),
            "unavailable_count": len(unavailable),
        })
        return AggregationResult(records=ordered, unavailable=tuple(unavailable))

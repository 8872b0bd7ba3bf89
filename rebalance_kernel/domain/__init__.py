"""
Pure domain layer.

Records and value objects with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from rebalance_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rebalance_kernel.domain.modes import RunMode
from rebalance_kernel.domain.inventory import (
    BATCHED_CATEGORIES,
    CATEGORY_STRATEGY,
    SINGLE_ITEM_CATEGORIES,
    Assignment,
    Batch,
    Category,
    DistributionStrategy,
    InventoryRecord,
    ItemStatistics,
)

__all__ = [
    "BATCHED_CATEGORIES",
    "CATEGORY_STRATEGY",
    "SINGLE_ITEM_CATEGORIES",
    "Assignment",
    "Batch",
    "Category",
    "Clock",
    "DeterministicClock",
    "DistributionStrategy",
    "InventoryRecord",
    "ItemStatistics",
    "RunMode",
    "SystemClock",
]

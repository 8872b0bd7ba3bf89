"""
rebalance_kernel.domain.inventory -- Pure records the rebalance engines act on.

ZERO I/O.  All types are frozen dataclasses.

Invariants enforced:
    - InventoryRecord.weight is non-negative when known.
    - Assignment.bad_item_limit is non-negative.
    - Batch holds 1..capacity assignments, all of the batch's category,
      with a 1-based batch_index.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


# =============================================================================
# Categories and strategies
# =============================================================================


class Category(str, Enum):
    """Kind of item held in a source bucket."""

    STANDARD = "Standard"  # User mailboxes
    ARCHIVE = "Archive"  # Archive mailboxes, moved separately from primaries
    PUBLIC_FOLDER = "PublicFolder"
    ARBITRATION = "Arbitration"  # System mailboxes
    AUDIT_LOG = "AuditLog"

    @classmethod
    def from_value(cls, value: str | Category) -> Category:
        if isinstance(value, Category):
            return value
        lowered = value.strip().lower().replace("_", "")
        for member in cls:
            if member.value.lower() == lowered or member.name.lower().replace("_", "") == lowered:
                return member
        raise ValueError(f"Unknown category: {value!r}")


class DistributionStrategy(str, Enum):
    """How a category's items are spread over the staging buckets."""

    SNAKE = "snake"  # Weight-ordered boustrophedon sweep, batched
    UNIFORM_RANDOM = "uniform_random"  # Independent uniform draw, one unit per item


CATEGORY_STRATEGY: dict[Category, DistributionStrategy] = {
    Category.STANDARD: DistributionStrategy.SNAKE,
    Category.ARCHIVE: DistributionStrategy.SNAKE,
    Category.PUBLIC_FOLDER: DistributionStrategy.UNIFORM_RANDOM,
    Category.ARBITRATION: DistributionStrategy.UNIFORM_RANDOM,
    Category.AUDIT_LOG: DistributionStrategy.UNIFORM_RANDOM,
}

# Snake-distributed categories, in processing order.
BATCHED_CATEGORIES: tuple[Category, ...] = tuple(
    c for c in Category if CATEGORY_STRATEGY[c] is DistributionStrategy.SNAKE
)

# Uniformly distributed categories, in processing order.
SINGLE_ITEM_CATEGORIES: tuple[Category, ...] = tuple(
    c for c in Category if CATEGORY_STRATEGY[c] is DistributionStrategy.UNIFORM_RANDOM
)


# =============================================================================
# Inventory
# =============================================================================


@dataclass(frozen=True)
class ItemStatistics:
    """Raw size facts for one item, already in a common unit."""

    primary_size: Decimal
    deleted_size: Decimal = Decimal("0")

    @property
    def total_size(self) -> Decimal:
        return self.primary_size + self.deleted_size


@dataclass(frozen=True)
class InventoryRecord:
    """One item to relocate.

    ``weight`` is None when size statistics could not be retrieved; such
    items are still distributed and sort as weight zero.
    """

    item_id: str  # Address, GUID or other stable identifier
    category: Category
    source_bucket: str
    weight: Decimal | None = None

    def __post_init__(self) -> None:
        if self.weight is not None and self.weight < Decimal("0"):
            raise ValueError(
                f"Weight cannot be negative for {self.item_id}: {self.weight}"
            )

    @property
    def sort_weight(self) -> Decimal:
        return self.weight if self.weight is not None else Decimal("0")


# =============================================================================
# Distribution output
# =============================================================================


@dataclass(frozen=True)
class Assignment:
    """One item bound to one staging bucket."""

    item_id: str
    target_bucket: str
    bad_item_limit: int
    category: Category = Category.STANDARD

    def __post_init__(self) -> None:
        if self.bad_item_limit < 0:
            raise ValueError(
                f"bad_item_limit cannot be negative: {self.bad_item_limit}"
            )

    @property
    def unit_key(self) -> str:
        return f"{self.category.value}:{self.item_id}"

    def as_row(self) -> tuple[str, str, int]:
        """Export shape consumed by job submission: (item, target, limit)."""
        return (self.item_id, self.target_bucket, self.bad_item_limit)


@dataclass(frozen=True)
class Batch:
    """A closed, capacity-bounded group of assignments of one category."""

    category: Category
    batch_index: int  # 1-based, independent per category
    capacity: int
    assignments: tuple[Assignment, ...]

    def __post_init__(self) -> None:
        if self.batch_index < 1:
            raise ValueError(f"batch_index must be 1-based, got {self.batch_index}")
        if not 0 < len(self.assignments) <= self.capacity:
            raise ValueError(
                f"Batch {self.batch_name} holds {len(self.assignments)} "
                f"assignments, capacity {self.capacity}"
            )
        for assignment in self.assignments:
            if assignment.category is not self.category:
                raise ValueError(
                    f"Assignment {assignment.item_id} is {assignment.category.value}, "
                    f"batch is {self.category.value}"
                )

    @property
    def batch_name(self) -> str:
        return f"{self.category.value}-{self.batch_index:03d}"

    @property
    def size(self) -> int:
        return len(self.assignments)

    @property
    def target_buckets(self) -> tuple[str, ...]:
        """Distinct targets in first-seen order."""
        return tuple(dict.fromkeys(a.target_bucket for a in self.assignments))

    def rows(self) -> tuple[tuple[str, str, int], ...]:
        return tuple(a.as_row() for a in self.assignments)

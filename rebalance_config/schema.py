"""
RebalanceConfig schema.

The human-authored, reviewable description of one rebalance run.  YAML
files are parsed into these types by the loader and checked by the
validator before any distribution work starts.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rebalance_kernel.domain.inventory import Category
from rebalance_kernel.domain.modes import RunMode


@dataclass(frozen=True)
class BatchCapacity:
    """Maximum assignments per batch, per batched category."""

    standard: int = 100
    archive: int = 50

    def for_category(self, category: Category) -> int:
        if category is Category.STANDARD:
            return self.standard
        if category is Category.ARCHIVE:
            return self.archive
        raise KeyError(f"{category.value} items are not batched")


@dataclass(frozen=True)
class RebalanceConfig:
    """Everything a run needs besides the inventory itself."""

    source_buckets: tuple[str, ...]
    staging_buckets: tuple[str, ...]
    bad_item_limit: int = 0
    batch_capacity: BatchCapacity = field(default_factory=BatchCapacity)
    mode: RunMode = RunMode.PLAN
    exclude_sources_from_intake: bool = False
    reverse_archive_destinations: bool = True  # Tunable, not an invariant
    random_seed: int | None = None
    database_url: str | None = None  # Run ledger; None disables recording

"""
MigrationPlanner -- turns an inventory snapshot into a MigrationPlan.

Contract:
    Validates configuration and inventory, weighs and sorts the batched
    categories, distributes every category with the strategy its lookup
    table entry names, and partitions the batched categories.

Architecture: rebalance_batch/services.  Imports from rebalance_engines,
    rebalance_config and rebalance_kernel.

Invariants enforced:
    - Configuration errors surface before any item is weighed or assigned.
    - Completeness: every inventory item appears in exactly one assignment.
    - Each snake pass gets its own distributor call, hence its own cursor.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from uuid import UUID, uuid4

from rebalance_config.loader import compute_checksum
from rebalance_config.schema import RebalanceConfig
from rebalance_config.validator import validate_configuration
from rebalance_engines.partitioner import BatchPartitioner
from rebalance_engines.snake import SnakeDistributor, destinations_for
from rebalance_engines.statistics import StatisticsAggregator
from rebalance_engines.uniform import UniformRandomDistributor
from rebalance_kernel.domain.inventory import (
    CATEGORY_STRATEGY,
    Assignment,
    Batch,
    Category,
    DistributionStrategy,
    InventoryRecord,
)
from rebalance_kernel.domain.modes import RunMode
from rebalance_kernel.exceptions import DuplicateItemError
from rebalance_kernel.logging_config import LogContext, get_logger

from rebalance_batch.collaborators import StatisticsProvider
from rebalance_batch.domain.types import MigrationPlan

logger = get_logger("batch.planner")


def group_by_category(
    inventory: Sequence[InventoryRecord],
) -> dict[Category, tuple[InventoryRecord, ...]]:
    """Split the inventory per category, keeping discovery order."""
    groups: dict[Category, list[InventoryRecord]] = {c: [] for c in Category}
    for record in inventory:
        groups[record.category].append(record)
    return {c: tuple(records) for c, records in groups.items()}


class MigrationPlanner:
    """Builds plans; never submits anything.

    Contract:
        - ``validate()`` raises for unusable configuration or inventory.
        - ``plan()`` returns a complete ``MigrationPlan``.
    """

    def __init__(
        self,
        config: RebalanceConfig,
        statistics_provider: StatisticsProvider | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._statistics = statistics_provider
        self._snake = SnakeDistributor()
        self._uniform = UniformRandomDistributor(
            rng or random.Random(config.random_seed)
        )
        self._partitioner = BatchPartitioner()

    def validate(self, inventory: Sequence[InventoryRecord]) -> None:
        """
        Raises:
            ConfigurationError: any configuration check fails.
            DuplicateItemError: an item id was discovered twice.
        """
        validate_configuration(self._config)

        seen: set[str] = set()
        for record in inventory:
            if record.item_id in seen:
                raise DuplicateItemError(record.item_id)
            seen.add(record.item_id)

        sources = set(self._config.source_buckets)
        strays = sorted({r.source_bucket for r in inventory} - sources)
        if strays:
            logger.warning("inventory_from_unlisted_sources", extra={
                "buckets": strays,
            })

    def plan(
        self,
        inventory: Sequence[InventoryRecord],
        run_id: UUID | None = None,
        mode: RunMode | None = None,
        *,
        validated: bool = False,
    ) -> MigrationPlan:
        """Validate, then distribute and partition every category.

        ``validated=True`` skips validation for callers that already ran
        ``validate()`` on the same inventory.
        """
        if not validated:
            self.validate(inventory)

        config = self._config
        groups = group_by_category(inventory)
        batches: list[Batch] = []
        singles: list[Assignment] = []
        unavailable: list[str] = []

        for category, records in groups.items():
            with LogContext.bind(category=category.value):
                strategy = CATEGORY_STRATEGY[category]
                if strategy is DistributionStrategy.SNAKE:
                    category_batches, missing = self._plan_snake(category, records)
                    batches.extend(category_batches)
                    unavailable.extend(missing)
                else:
                    singles.extend(
                        self._uniform.distribute(
                            records, config.staging_buckets, config.bad_item_limit,
                        )
                    )

        plan = MigrationPlan(
            run_id=run_id or uuid4(),
            mode=mode or config.mode,
            batches=tuple(batches),
            single_assignments=tuple(singles),
            unavailable_statistics=tuple(unavailable),
            config_checksum=compute_checksum(config),
        )

        logger.info("migration_planned", extra={
            "item_count": plan.item_count,
            "batch_count": len(plan.batches),
            "single_count": len(plan.single_assignments),
            "unavailable_count": len(unavailable),
        })
        return plan

    def _plan_snake(
        self,
        category: Category,
        records: Sequence[InventoryRecord],
    ) -> tuple[tuple[Batch, ...], tuple[str, ...]]:
        config = self._config
        lookup = self._statistics.get_statistics if self._statistics else None
        aggregated = StatisticsAggregator(lookup).aggregate(records)

        destinations = destinations_for(
            category,
            config.staging_buckets,
            reverse_archive=config.reverse_archive_destinations,
        )
        assignments = self._snake.distribute(
            aggregated.records, destinations, config.bad_item_limit,
        )
        batches = self._partitioner.partition(
            assignments,
            config.batch_capacity.for_category(category),
            category,
        )
        return batches, aggregated.unavailable

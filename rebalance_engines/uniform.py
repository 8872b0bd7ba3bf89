"""
Module: rebalance_engines.uniform
Responsibility:
    Assign low-volume auxiliary items (public folders, arbitration and
    audit log mailboxes) to a destination drawn uniformly at random.

Architecture position:
    Engines -- pure calculation layer.  The random source is injected;
    pass a seeded ``random.Random`` for reproducible plans.

Invariants enforced:
    - Each item draws independently, uniformly, with replacement.
    - Output order equals input order.

Failure modes:
    - NoDestinationsError if the destination list is empty.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from rebalance_engines.tracer import traced_engine
from rebalance_kernel.domain.inventory import Assignment, InventoryRecord
from rebalance_kernel.exceptions import NoDestinationsError
from rebalance_kernel.logging_config import get_logger

logger = get_logger("engines.uniform")


class UniformRandomDistributor:
    """Independent uniform draw per item."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    @traced_engine("uniform_random", "1.0", fingerprint_fields=("records", "destinations"))
    def distribute(
        self,
        records: Sequence[InventoryRecord],
        destinations: Sequence[str],
        bad_item_limit: int,
    ) -> tuple[Assignment, ...]:
        if not destinations:
            raise NoDestinationsError()

        pool = tuple(destinations)
        assignments = tuple(
            Assignment(
                item_id=record.item_id,
                target_bucket=self._rng.choice(pool),
                bad_item_limit=bad_item_limit,
                category=record.category,
            )
            for record in records
        )

        logger.info("uniform_distribution_completed", extra={
            "item_count": len(assignments),
            "destination_count": len(pool),
        })
        return assignments

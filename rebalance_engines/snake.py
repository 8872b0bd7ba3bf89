"""
Module: rebalance_engines.snake
Responsibility:
    Spread a weight-sorted item sequence over an ordered destination list
    with a back-and-forth (boustrophedon) sweep, so small and large items
    alternate destinations and each destination ends up with a similar
    count and aggregate weight.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Traversal 0,1,..,n-1,n-1,..,0,0,1,..: at a boundary the direction
      flips and the boundary destination takes the next item as well.
    - Every call owns a fresh DistributionCursor; no two passes share one.
    - Output order equals input order.

Failure modes:
    - NoDestinationsError if the destination list is empty, raised before
      any item is processed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rebalance_engines.tracer import traced_engine
from rebalance_kernel.domain.inventory import Assignment, Category, InventoryRecord
from rebalance_kernel.exceptions import NoDestinationsError
from rebalance_kernel.logging_config import get_logger

logger = get_logger("engines.snake")


@dataclass
class DistributionCursor:
    """Position and heading of one snake sweep."""

    max_index: int
    index: int = 0
    direction: int = 1

    def advance(self) -> None:
        nxt = self.index + self.direction
        if nxt < 0 or nxt > self.max_index:
            # Turn in place: the boundary destination is revisited
            self.direction = -self.direction
        else:
            self.index = nxt


def destinations_for(
    category: Category,
    staging: Sequence[str],
    reverse_archive: bool = True,
) -> tuple[str, ...]:
    """Destination order for a category's snake pass.

    The archive pass walks a reversed copy of the staging list so it starts
    from the opposite end to the standard pass.  ``reverse_archive=False``
    turns that policy off.
    """
    if category is Category.ARCHIVE and reverse_archive:
        return tuple(reversed(staging))
    return tuple(staging)


class SnakeDistributor:
    """
    Assign each item to one destination by a bidirectional round-robin sweep.

    Contract:
        ``distribute()`` returns one Assignment per input record, in input
        order.  Feed it records sorted ascending by weight.
    Guarantees:
        - Deterministic: same records and destinations, same assignments.
    """

    @traced_engine("snake", "1.0", fingerprint_fields=("records", "destinations"))
    def distribute(
        self,
        records: Sequence[InventoryRecord],
        destinations: Sequence[str],
        bad_item_limit: int,
    ) -> tuple[Assignment, ...]:
        if not destinations:
            raise NoDestinationsError()

        cursor = DistributionCursor(max_index=len(destinations) - 1)
        assignments: list[Assignment] = []
        for record in records:
            assignments.append(
                Assignment(
                    item_id=record.item_id,
                    target_bucket=destinations[cursor.index],
                    bad_item_limit=bad_item_limit,
                    category=record.category,
                )
            )
            cursor.advance()

        logger.info("snake_distribution_completed", extra={
            "item_count": len(assignments),
            "destination_count": len(destinations),
            "first_destination": destinations[0],
        })
        return tuple(assignments)

"""
rebalance_batch.domain -- Pure types and value objects for a rebalance run.

ZERO I/O.  All types are frozen dataclasses.
"""

from rebalance_batch.domain.types import (
    UNIT_TRANSITIONS,
    CategoryTally,
    IntakeResult,
    MigrationPlan,
    RunStatus,
    RunSummary,
    UnitResult,
    UnitStatus,
    WorkUnit,
    transition,
)

__all__ = [
    "UNIT_TRANSITIONS",
    "CategoryTally",
    "IntakeResult",
    "MigrationPlan",
    "RunStatus",
    "RunSummary",
    "UnitResult",
    "UnitStatus",
    "WorkUnit",
    "transition",
]

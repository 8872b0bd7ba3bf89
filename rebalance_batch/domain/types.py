"""
rebalance_batch.domain.types -- Pure frozen dataclasses for a rebalance run.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.

Invariants enforced:
    - Unit lifecycle: PLANNED -> SUBMITTING -> SUBMITTED | FAILED, enforced
      by ``transition()``.
    - A WorkUnit wraps exactly one Batch or exactly one Assignment.
    - MigrationPlan.units preserves planning order: batched categories
      first (each in batch_index order), then single-item categories.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from rebalance_kernel.domain.inventory import (
    BATCHED_CATEGORIES,
    SINGLE_ITEM_CATEGORIES,
    Assignment,
    Batch,
    Category,
)
from rebalance_kernel.domain.modes import RunMode
from rebalance_kernel.exceptions import InvalidUnitTransitionError


# =============================================================================
# Status enums
# =============================================================================


class UnitStatus(str, Enum):
    """Lifecycle of one batch or single-item assignment."""

    PLANNED = "planned"  # Materialized, not submitted
    SUBMITTING = "submitting"  # Handed to the job submitter
    SUBMITTED = "submitted"  # Accepted by the platform
    FAILED = "failed"  # Rejected or errored during submission


class RunStatus(str, Enum):
    """Run-level outcome."""

    PLANNED = "planned"  # Plan mode, nothing submitted
    COMPLETED = "completed"  # Every unit submitted
    PARTIALLY_COMPLETED = "partially_completed"  # Some units failed
    FAILED = "failed"  # No unit submitted


UNIT_TRANSITIONS: dict[UnitStatus, frozenset[UnitStatus]] = {
    UnitStatus.PLANNED: frozenset({UnitStatus.SUBMITTING}),
    UnitStatus.SUBMITTING: frozenset({UnitStatus.SUBMITTED, UnitStatus.FAILED}),
    UnitStatus.SUBMITTED: frozenset(),
    UnitStatus.FAILED: frozenset(),
}


def transition(unit_key: str, current: UnitStatus, target: UnitStatus) -> UnitStatus:
    """Return ``target`` if the lifecycle allows it.

    Raises:
        InvalidUnitTransitionError: if ``current`` cannot reach ``target``.
    """
    if target not in UNIT_TRANSITIONS[current]:
        raise InvalidUnitTransitionError(unit_key, current.value, target.value)
    return target


# =============================================================================
# Plan DTOs
# =============================================================================


@dataclass(frozen=True)
class WorkUnit:
    """One submission: a whole batch, or one auxiliary assignment."""

    unit_index: int  # 0-indexed position in submission order
    category: Category
    batch: Batch | None = None
    assignment: Assignment | None = None

    def __post_init__(self) -> None:
        if (self.batch is None) == (self.assignment is None):
            raise ValueError("WorkUnit needs exactly one of batch or assignment")

    @property
    def unit_key(self) -> str:
        if self.batch is not None:
            return self.batch.batch_name
        return self.assignment.unit_key

    @property
    def batch_index(self) -> int | None:
        return self.batch.batch_index if self.batch is not None else None

    @property
    def item_count(self) -> int:
        return self.batch.size if self.batch is not None else 1

    @property
    def target_buckets(self) -> tuple[str, ...]:
        if self.batch is not None:
            return self.batch.target_buckets
        return (self.assignment.target_bucket,)


@dataclass(frozen=True)
class MigrationPlan:
    """Everything a run will submit, in submission order."""

    run_id: UUID
    mode: RunMode
    batches: tuple[Batch, ...] = ()
    single_assignments: tuple[Assignment, ...] = ()
    unavailable_statistics: tuple[str, ...] = ()
    config_checksum: str | None = None

    def batches_for(self, category: Category) -> tuple[Batch, ...]:
        return tuple(b for b in self.batches if b.category is category)

    def assignments_for(self, category: Category) -> tuple[Assignment, ...]:
        """Every assignment of a category, batched or not, in plan order."""
        if category in SINGLE_ITEM_CATEGORIES:
            return tuple(a for a in self.single_assignments if a.category is category)
        return tuple(a for b in self.batches_for(category) for a in b.assignments)

    @property
    def units(self) -> tuple[WorkUnit, ...]:
        units: list[WorkUnit] = []
        for category in BATCHED_CATEGORIES:
            for batch in self.batches_for(category):
                units.append(WorkUnit(len(units), category, batch=batch))
        for category in SINGLE_ITEM_CATEGORIES:
            for assignment in self.assignments_for(category):
                units.append(WorkUnit(len(units), category, assignment=assignment))
        return tuple(units)

    @property
    def item_count(self) -> int:
        return sum(b.size for b in self.batches) + len(self.single_assignments)


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass(frozen=True)
class UnitResult:
    """Final state of one unit after the run."""

    unit_index: int
    unit_key: str
    category: Category
    status: UnitStatus
    item_count: int = 1
    batch_index: int | None = None
    target_buckets: tuple[str, ...] = ()
    external_ref: str | None = None  # Job reference returned by the submitter
    error_code: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of excluding one source bucket from future intake."""

    bucket: str
    excluded: bool
    error_code: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class CategoryTally:
    """Per-category unit counts."""

    category: Category
    planned: int = 0
    submitted: int = 0
    failed: int = 0


@dataclass(frozen=True)
class RunSummary:
    """Immutable result of one rebalance run.

    Returned by ``RebalanceOrchestrator.run()``.
    """

    run_id: UUID
    mode: RunMode
    status: RunStatus
    tallies: tuple[CategoryTally, ...] = ()
    unit_results: tuple[UnitResult, ...] = ()
    intake_results: tuple[IntakeResult, ...] = ()
    item_count: int = 0
    config_checksum: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0

    def tally_for(self, category: Category) -> CategoryTally:
        for tally in self.tallies:
            if tally.category is category:
                return tally
        return CategoryTally(category=category)

    @property
    def planned(self) -> int:
        return sum(t.planned for t in self.tallies)

    @property
    def submitted(self) -> int:
        return sum(t.submitted for t in self.tallies)

    @property
    def failed(self) -> int:
        return sum(t.failed for t in self.tallies)

    @property
    def failed_units(self) -> tuple[UnitResult, ...]:
        return tuple(r for r in self.unit_results if r.status is UnitStatus.FAILED)

    @property
    def submitted_units(self) -> tuple[UnitResult, ...]:
        return tuple(r for r in self.unit_results if r.status is UnitStatus.SUBMITTED)

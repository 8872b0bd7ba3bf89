"""
RunRecorder -- persists finished runs to the run ledger.

Contract:
    ``record_run()`` writes one MigrationRunModel, one MigrationUnitModel
    per unit result and, when the plan is given, one
    MigrationAssignmentModel per planned assignment.  Queries read the
    same rows back as DTOs.

Architecture: rebalance_batch/services.  Imports from rebalance_batch.models
    and rebalance_batch.domain.

Non-goals:
    - Does NOT call ``session.commit()`` -- caller controls boundaries.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from rebalance_kernel.domain.clock import Clock, SystemClock
from rebalance_kernel.domain.inventory import Assignment
from rebalance_kernel.exceptions import RunNotFoundError
from rebalance_kernel.logging_config import get_logger

from rebalance_batch.domain.types import MigrationPlan, RunSummary, UnitResult
from rebalance_batch.models.run import (
    MigrationAssignmentModel,
    MigrationRunModel,
    MigrationUnitModel,
)

logger = get_logger("batch.recorder")


class RunRecorder:
    """Run ledger writer and reader."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ) -> None:
        self._session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or uuid4()

    # -------------------------------------------------------------------------
    # Record
    # -------------------------------------------------------------------------

    def record_run(
        self,
        summary: RunSummary,
        plan: MigrationPlan | None = None,
    ) -> None:
        now = self._clock.now()

        run_model = MigrationRunModel.from_dto(summary, created_by_id=self._actor_id)
        run_model.created_at = now
        self._session.add(run_model)
        # Parent row first so unit foreign keys resolve
        self._session.flush()

        for result in summary.unit_results:
            unit_model = MigrationUnitModel.from_dto(
                result, run_id=summary.run_id, created_by_id=self._actor_id,
            )
            unit_model.created_at = now
            self._session.add(unit_model)

        assignment_count = 0
        if plan is not None:
            for position, (unit_key, assignment) in enumerate(_plan_rows(plan)):
                self._session.add(MigrationAssignmentModel(
                    run_id=summary.run_id,
                    position=position,
                    unit_key=unit_key,
                    item_id=assignment.item_id,
                    category=assignment.category.value,
                    target_bucket=assignment.target_bucket,
                    bad_item_limit=assignment.bad_item_limit,
                    created_by_id=self._actor_id,
                    created_at=now,
                ))
                assignment_count += 1

        self._session.flush()

        logger.info("run_recorded", extra={
            "run_id": str(summary.run_id),
            "unit_count": len(summary.unit_results),
            "assignment_count": assignment_count,
        })

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_run(self, run_id: UUID) -> RunSummary:
        """Get a recorded run, unit results included.

        Raises:
            RunNotFoundError: If run_id does not exist.
        """
        model = self._session.get(MigrationRunModel, run_id)
        if model is None:
            raise RunNotFoundError(str(run_id))
        return model.to_dto(unit_results=self.get_run_units(run_id))

    def get_run_units(self, run_id: UUID) -> tuple[UnitResult, ...]:
        """Get all unit results for a run, in submission order."""
        models = self._session.execute(
            select(MigrationUnitModel)
            .where(MigrationUnitModel.run_id == run_id)
            .order_by(MigrationUnitModel.unit_index)
        ).scalars().all()

        return tuple(m.to_dto() for m in models)

    def get_run_assignments(self, run_id: UUID) -> tuple[Assignment, ...]:
        """Get the planned assignments of a run, in plan order."""
        models = self._session.execute(
            select(MigrationAssignmentModel)
            .where(MigrationAssignmentModel.run_id == run_id)
            .order_by(MigrationAssignmentModel.position)
        ).scalars().all()

        return tuple(m.to_dto() for m in models)


def _plan_rows(plan: MigrationPlan):
    for unit in plan.units:
        if unit.batch is not None:
            for assignment in unit.batch.assignments:
                yield unit.unit_key, assignment
        else:
            yield unit.unit_key, unit.assignment

"""
SubmissionExecutor -- per-unit isolated submission of a MigrationPlan.

Contract:
    Walks every unit of a plan in order.  In plan mode each unit stays
    PLANNED.  In apply mode each unit moves PLANNED -> SUBMITTING and then
    to SUBMITTED or FAILED.

Architecture: rebalance_batch/services.  Imports from rebalance_batch.domain,
    rebalance_batch.collaborators, and kernel services.

Invariants enforced:
    - Isolation: one failed unit never stops the remaining units.
    - No retry: a failed unit is reported, never resubmitted.
    - All timestamps from the injected Clock.
"""

from __future__ import annotations

import time

from rebalance_kernel.domain.clock import Clock, SystemClock
from rebalance_kernel.domain.modes import RunMode
from rebalance_kernel.exceptions import ConfigurationError, SubmissionError
from rebalance_kernel.logging_config import LogContext, get_logger

from rebalance_batch.collaborators import JobSubmitter
from rebalance_batch.domain.types import (
    MigrationPlan,
    UnitResult,
    UnitStatus,
    WorkUnit,
    transition,
)

logger = get_logger("batch.executor")


class SubmissionExecutor:
    """Submission engine with per-unit failure isolation.

    Contract:
        - ``execute()`` returns one UnitResult per plan unit, in plan order.

    Non-goals:
        - Does NOT build plans -- that is the planner's job.
        - Does NOT persist results -- that is the recorder's job.
    """

    def __init__(
        self,
        submitter: JobSubmitter | None = None,
        clock: Clock | None = None,
    ):
        self._submitter = submitter
        self._clock = clock or SystemClock()

    # -------------------------------------------------------------------------
    # Execute
    # -------------------------------------------------------------------------

    def execute(self, plan: MigrationPlan, mode: RunMode) -> tuple[UnitResult, ...]:
        """Run every unit of ``plan`` under ``mode``.

        Raises:
            ConfigurationError: apply mode without a job submitter.
        """
        self.check_ready(mode)

        results: list[UnitResult] = []
        for unit in plan.units:
            with LogContext.bind(category=unit.category.value, unit_key=unit.unit_key):
                if mode is RunMode.PLAN:
                    results.append(self._planned_result(unit))
                else:
                    results.append(self._submit_unit(unit))

        return tuple(results)

    def check_ready(self, mode: RunMode) -> None:
        """
        Raises:
            ConfigurationError: apply mode without a job submitter.
        """
        if mode is RunMode.APPLY and self._submitter is None:
            raise ConfigurationError("Apply mode requires a job submitter")

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _planned_result(self, unit: WorkUnit) -> UnitResult:
        logger.debug("unit_planned", extra={
            "item_count": unit.item_count,
            "target_buckets": list(unit.target_buckets),
        })
        return UnitResult(
            unit_index=unit.unit_index,
            unit_key=unit.unit_key,
            category=unit.category,
            status=UnitStatus.PLANNED,
            item_count=unit.item_count,
            batch_index=unit.batch_index,
            target_buckets=unit.target_buckets,
        )

    def _submit_unit(self, unit: WorkUnit) -> UnitResult:
        unit_start = time.monotonic()
        started_at = self._clock.now()
        status = transition(unit.unit_key, UnitStatus.PLANNED, UnitStatus.SUBMITTING)

        external_ref: str | None = None
        error_code: str | None = None
        error_message: str | None = None

        try:
            if unit.batch is not None:
                external_ref = self._submitter.submit_batch(unit.batch)
            else:
                external_ref = self._submitter.submit_assignment(unit.assignment)
            status = transition(unit.unit_key, status, UnitStatus.SUBMITTED)
            logger.info("unit_submitted", extra={
                "item_count": unit.item_count,
                "external_ref": external_ref,
            })
        except SubmissionError as exc:
            status = transition(unit.unit_key, status, UnitStatus.FAILED)
            error_code = exc.code
            error_message = str(exc)
            logger.warning("unit_submission_failed", extra={
                "error_code": error_code,
                "error_message": error_message,
            })
        except Exception as exc:
            status = transition(unit.unit_key, status, UnitStatus.FAILED)
            error_code = "UNHANDLED_EXCEPTION"
            error_message = str(exc)
            logger.error("unit_submission_errored", exc_info=True)

        return UnitResult(
            unit_index=unit.unit_index,
            unit_key=unit.unit_key,
            category=unit.category,
            status=status,
            item_count=unit.item_count,
            batch_index=unit.batch_index,
            target_buckets=unit.target_buckets,
            external_ref=external_ref,
            error_code=error_code,
            error_message=error_message,
            started_at=started_at,
            completed_at=self._clock.now(),
            duration_ms=int((time.monotonic() - unit_start) * 1000),
        )

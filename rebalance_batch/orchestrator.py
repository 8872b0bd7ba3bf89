"""
RebalanceOrchestrator -- drives one rebalance run end to end.

Contract:
    Wires the planner, the submission executor and, when a session is
    given, the run recorder.  ``run()`` validates, optionally excludes the
    source buckets from intake, plans, submits (apply mode only) and
    returns a RunSummary with per-category tallies.

Architecture: rebalance_batch (top-level).  This is the canonical entry
    point for running a rebalance.

Invariants enforced:
    - Configuration errors stop the run before any intake change or
      assignment.
    - Mode is an explicit argument handed down to the executor; nothing
      reads it from global state.
    - Intake exclusion failures are logged and reported, never fatal.
"""

from __future__ import annotations

import random
import time
from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from rebalance_config.schema import RebalanceConfig
from rebalance_kernel.domain.clock import Clock, SystemClock
from rebalance_kernel.domain.inventory import Category, InventoryRecord
from rebalance_kernel.domain.modes import RunMode
from rebalance_kernel.logging_config import LogContext, get_logger

from rebalance_batch.collaborators import (
    IntakeController,
    JobSubmitter,
    StatisticsProvider,
)
from rebalance_batch.domain.types import (
    CategoryTally,
    IntakeResult,
    MigrationPlan,
    RunStatus,
    RunSummary,
    UnitResult,
    UnitStatus,
)
from rebalance_batch.services.executor import SubmissionExecutor
from rebalance_batch.services.planner import MigrationPlanner
from rebalance_batch.services.recorder import RunRecorder

logger = get_logger("batch.orchestrator")


def summarize_units(
    unit_results: Sequence[UnitResult],
) -> tuple[CategoryTally, ...]:
    """Per-category planned/submitted/failed counts, every category listed."""
    tallies: list[CategoryTally] = []
    for category in Category:
        results = [r for r in unit_results if r.category is category]
        tallies.append(CategoryTally(
            category=category,
            planned=len(results),
            submitted=sum(1 for r in results if r.status is UnitStatus.SUBMITTED),
            failed=sum(1 for r in results if r.status is UnitStatus.FAILED),
        ))
    return tuple(tallies)


def resolve_run_status(mode: RunMode, tallies: Sequence[CategoryTally]) -> RunStatus:
    if mode is RunMode.PLAN:
        return RunStatus.PLANNED
    submitted = sum(t.submitted for t in tallies)
    failed = sum(t.failed for t in tallies)
    if failed == 0:
        return RunStatus.COMPLETED
    if submitted == 0:
        return RunStatus.FAILED
    return RunStatus.PARTIALLY_COMPLETED


class RebalanceOrchestrator:
    """Runs the pipeline in plan or apply mode.

    Contract:
        - ``plan()`` builds a MigrationPlan without side effects.
        - ``run()`` executes the whole pipeline and returns a RunSummary.

    Non-goals:
        - Does NOT retry failed units or monitor submitted jobs.
        - Does NOT manage session lifecycle -- caller controls commits.
    """

    def __init__(
        self,
        config: RebalanceConfig,
        submitter: JobSubmitter | None = None,
        statistics_provider: StatisticsProvider | None = None,
        intake_controller: IntakeController | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        session: Session | None = None,
        actor_id: UUID | None = None,
    ) -> None:
        self._config = config
        self._intake = intake_controller
        self._clock = clock or SystemClock()
        self._planner = MigrationPlanner(
            config, statistics_provider=statistics_provider, rng=rng,
        )
        self._executor = SubmissionExecutor(submitter=submitter, clock=self._clock)
        self._session = session
        self._actor_id = actor_id or uuid4()
        self._last_plan: MigrationPlan | None = None

    # -------------------------------------------------------------------------
    # Plan
    # -------------------------------------------------------------------------

    def plan(
        self,
        inventory: Sequence[InventoryRecord],
        run_id: UUID | None = None,
    ) -> MigrationPlan:
        return self._planner.plan(inventory, run_id=run_id, mode=RunMode.PLAN)

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(
        self,
        inventory: Sequence[InventoryRecord],
        mode: RunMode | None = None,
    ) -> RunSummary:
        """Execute a full rebalance run.

        Args:
            inventory: Discovered records across all source buckets.
            mode: Overrides the configured mode when given.

        Raises:
            ConfigurationError: invalid configuration or inventory, or apply
                mode without a job submitter.  Raised before any work.
        """
        effective_mode = mode or self._config.mode
        start_time = time.monotonic()
        started_at = self._clock.now()
        run_id = uuid4()

        with LogContext.bind(run_id=str(run_id)):
            self._planner.validate(inventory)
            self._executor.check_ready(effective_mode)

            logger.info("run_started", extra={
                "mode": effective_mode.value,
                "inventory_count": len(inventory),
                "source_count": len(self._config.source_buckets),
                "staging_count": len(self._config.staging_buckets),
            })

            intake_results: tuple[IntakeResult, ...] = ()
            if effective_mode is RunMode.APPLY and self._config.exclude_sources_from_intake:
                intake_results = self._exclude_sources()

            plan = self._planner.plan(
                inventory, run_id=run_id, mode=effective_mode, validated=True,
            )
            self._last_plan = plan
            unit_results = self._executor.execute(plan, effective_mode)

            tallies = summarize_units(unit_results)
            summary = RunSummary(
                run_id=run_id,
                mode=effective_mode,
                status=resolve_run_status(effective_mode, tallies),
                tallies=tallies,
                unit_results=unit_results,
                intake_results=intake_results,
                item_count=plan.item_count,
                config_checksum=plan.config_checksum,
                started_at=started_at,
                completed_at=self._clock.now(),
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )

            if self._session is not None:
                RunRecorder(
                    self._session, clock=self._clock, actor_id=self._actor_id,
                ).record_run(summary, plan=plan)

            logger.info("run_completed", extra={
                "mode": effective_mode.value,
                "status": summary.status.value,
                "planned": summary.planned,
                "submitted": summary.submitted,
                "failed": summary.failed,
                "duration_ms": summary.duration_ms,
            })

        return summary

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _exclude_sources(self) -> tuple[IntakeResult, ...]:
        if self._intake is None:
            logger.warning("intake_exclusion_skipped", extra={
                "reason": "no intake controller configured",
            })
            return ()

        results: list[IntakeResult] = []
        for bucket in self._config.source_buckets:
            with LogContext.bind(bucket=bucket):
                try:
                    self._intake.exclude_from_intake(bucket)
                except Exception as exc:
                    logger.warning("intake_exclusion_failed", extra={
                        "error_message": str(exc),
                    })
                    results.append(IntakeResult(
                        bucket=bucket,
                        excluded=False,
                        error_code=getattr(exc, "code", "UNHANDLED_EXCEPTION"),
                        error_message=str(exc),
                    ))
                    continue
                logger.info("intake_excluded")
                results.append(IntakeResult(bucket=bucket, excluded=True))
        return tuple(results)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> RebalanceConfig:
        return self._config

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def actor_id(self) -> UUID:
        return self._actor_id

    @property
    def last_plan(self) -> MigrationPlan | None:
        """Plan built by the most recent run(), None before the first."""
        return self._last_plan

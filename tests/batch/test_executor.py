"""
Tests for SubmissionExecutor -- per-unit isolated submission.

Validates:
- Plan mode leaves every unit PLANNED and never calls the submitter
- Apply mode submits every unit in plan order
- A failing unit never stops the remaining units
- Timestamps come from the injected clock
"""

import pytest

from rebalance_batch.domain.types import UnitStatus
from rebalance_batch.services.executor import SubmissionExecutor
from rebalance_batch.services.planner import MigrationPlanner
from rebalance_kernel.domain.inventory import Category
from rebalance_kernel.domain.modes import RunMode
from rebalance_kernel.exceptions import ConfigurationError

from tests.fakes import RecordingSubmitter


@pytest.fixture
def plan(config, mixed_inventory):
    return MigrationPlanner(config).plan(mixed_inventory)


class TestPlanMode:
    def test_units_stay_planned(self, plan, clock):
        submitter = RecordingSubmitter()
        results = SubmissionExecutor(submitter, clock).execute(plan, RunMode.PLAN)

        assert len(results) == len(plan.units)
        assert {r.status for r in results} == {UnitStatus.PLANNED}
        assert submitter.call_count == 0

    def test_plan_mode_needs_no_submitter(self, plan, clock):
        results = SubmissionExecutor(None, clock).execute(plan, RunMode.PLAN)
        assert len(results) == 9

    def test_planned_results_describe_the_unit(self, plan, clock):
        results = SubmissionExecutor(None, clock).execute(plan, RunMode.PLAN)
        first = results[0]
        assert first.unit_key == "Standard-001"
        assert first.batch_index == 1
        assert first.item_count == 3
        assert first.target_buckets == ("A", "B", "C")


class TestApplyMode:
    def test_submits_every_unit_in_order(self, plan, clock):
        submitter = RecordingSubmitter()
        results = SubmissionExecutor(submitter, clock).execute(plan, RunMode.APPLY)

        assert {r.status for r in results} == {UnitStatus.SUBMITTED}
        assert [b.batch_name for b in submitter.batches] == [
            "Standard-001", "Standard-002", "Standard-003", "Archive-001", "Archive-002",
        ]
        assert len(submitter.assignments) == 4
        assert [r.unit_index for r in results] == list(range(9))

    def test_external_ref_recorded(self, plan, clock):
        results = SubmissionExecutor(RecordingSubmitter(), clock).execute(plan, RunMode.APPLY)
        assert results[0].external_ref == "job-Standard-001"

    def test_timestamps_from_clock(self, plan, clock):
        results = SubmissionExecutor(RecordingSubmitter(), clock).execute(plan, RunMode.APPLY)
        assert results[0].started_at == clock.now()
        assert results[0].completed_at == clock.now()

    def test_apply_without_submitter_raises(self, plan, clock):
        with pytest.raises(ConfigurationError):
            SubmissionExecutor(None, clock).execute(plan, RunMode.APPLY)


class TestFailureIsolation:
    def test_submission_error_fails_only_that_unit(self, plan, clock):
        submitter = RecordingSubmitter(fail_keys={"Standard-002"})
        results = SubmissionExecutor(submitter, clock).execute(plan, RunMode.APPLY)

        failed = [r for r in results if r.status is UnitStatus.FAILED]
        assert [r.unit_key for r in failed] == ["Standard-002"]
        assert failed[0].error_code == "SUBMISSION_ERROR"
        assert "platform rejected the job" in failed[0].error_message
        assert failed[0].external_ref is None
        # Later units still ran
        assert submitter.call_count == 8

    def test_unexpected_exception_is_contained(self, plan, clock):
        crash_key = plan.assignments_for(Category.PUBLIC_FOLDER)[0].unit_key
        submitter = RecordingSubmitter(crash_keys={crash_key})
        results = SubmissionExecutor(submitter, clock).execute(plan, RunMode.APPLY)

        by_key = {r.unit_key: r for r in results}
        assert by_key[crash_key].status is UnitStatus.FAILED
        assert by_key[crash_key].error_code == "UNHANDLED_EXCEPTION"
        assert sum(1 for r in results if r.status is UnitStatus.SUBMITTED) == 8

    def test_failed_unit_is_not_retried(self, plan, clock):
        submitter = RecordingSubmitter(fail_keys={"Archive-001"})
        SubmissionExecutor(submitter, clock).execute(plan, RunMode.APPLY)
        assert "Archive-001" not in [b.batch_name for b in submitter.batches]
        assert submitter.call_count == 8

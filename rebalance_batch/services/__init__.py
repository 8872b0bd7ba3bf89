"""rebalance_batch.services -- Planner, submission executor and run recorder."""

from rebalance_batch.services.executor import SubmissionExecutor
from rebalance_batch.services.planner import MigrationPlanner, group_by_category
from rebalance_batch.services.recorder import RunRecorder

__all__ = [
    "MigrationPlanner",
    "RunRecorder",
    "SubmissionExecutor",
    "group_by_category",
]

"""
File-based JobSubmitter.

Contract:
    ``CsvOutboxSubmitter`` satisfies the JobSubmitter protocol by writing
    each unit to a CSV file in an outbox directory, ready for the
    platform's bulk job import.  The returned external reference is the
    written file's path.

Failure modes:
    - ``SubmissionError`` -- the file could not be written.
"""

from __future__ import annotations

from pathlib import Path

from rebalance_kernel.domain.inventory import Assignment, Batch
from rebalance_kernel.exceptions import SubmissionError
from rebalance_kernel.logging_config import get_logger

from rebalance_batch.export import write_assignment_csv, write_batch_csv

logger = get_logger("batch.submitters")


class CsvOutboxSubmitter:
    """Writes batches and single assignments as CSV files."""

    def __init__(self, outbox_dir: str | Path):
        self._outbox = Path(outbox_dir)

    @property
    def outbox_dir(self) -> Path:
        return self._outbox

    def submit_batch(self, batch: Batch) -> str | None:
        try:
            path = write_batch_csv(batch, self._outbox)
        except OSError as exc:
            raise SubmissionError(batch.batch_name, str(exc)) from exc
        logger.debug("batch_written", extra={"path": str(path), "size": batch.size})
        return str(path)

    def submit_assignment(self, assignment: Assignment) -> str | None:
        try:
            path = write_assignment_csv(assignment, self._outbox)
        except OSError as exc:
            raise SubmissionError(assignment.unit_key, str(exc)) from exc
        logger.debug("assignment_written", extra={"path": str(path)})
        return str(path)

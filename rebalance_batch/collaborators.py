"""
Collaborator protocols for the platform the rebalancer drives.

Contract:
    ``StatisticsProvider``, ``JobSubmitter`` and ``IntakeController`` are the
    three seams between the rebalance engine and the mail platform.  Each
    call is synchronous; the engine applies no timeout and no retry.

Architecture:
    rebalance_batch.  Imports only from rebalance_kernel.domain and stdlib.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rebalance_kernel.domain.inventory import (
    Assignment,
    Batch,
    InventoryRecord,
    ItemStatistics,
)


@runtime_checkable
class StatisticsProvider(Protocol):
    """Looks up size facts for one inventory item.

    Contract:
        - Returns sizes already expressed in one common unit.
        - Raises ``StatisticsUnavailableError`` when the lookup fails; the
          item then proceeds with an unknown weight.
    """

    def get_statistics(self, record: InventoryRecord) -> ItemStatistics: ...


@runtime_checkable
class JobSubmitter(Protocol):
    """Creates migration jobs on the platform.

    Contract:
        - ``submit_batch()`` creates one job for a whole batch.
        - ``submit_assignment()`` creates one job for a single auxiliary item.
        - Both return an optional external job reference, and raise
          (preferably ``SubmissionError``) when the platform rejects the job.

    Non-goals:
        - Does NOT retry or monitor created jobs.
    """

    def submit_batch(self, batch: Batch) -> str | None: ...

    def submit_assignment(self, assignment: Assignment) -> str | None: ...


@runtime_checkable
class IntakeController(Protocol):
    """Stops the platform from provisioning new items onto a bucket.

    Contract:
        - Idempotent: excluding an already-excluded bucket succeeds.
        - Raises on failure; the orchestrator logs and carries on.
    """

    def exclude_from_intake(self, bucket: str) -> None: ...

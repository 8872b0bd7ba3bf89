"""rebalance_batch.models -- ORM models for the run ledger."""

from rebalance_batch.models.run import (
    MigrationAssignmentModel,
    MigrationRunModel,
    MigrationUnitModel,
)

__all__ = [
    "MigrationAssignmentModel",
    "MigrationRunModel",
    "MigrationUnitModel",
]

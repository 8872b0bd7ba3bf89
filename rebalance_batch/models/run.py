"""
ORM models for the run ledger.

Contract:
    MigrationRunModel, MigrationUnitModel and MigrationAssignmentModel
    persist a run's outcome, its per-unit results, and the exact
    item-to-bucket assignments it planned.  Run and unit models have
    ``to_dto()`` / ``from_dto()`` round-trip methods.

Architecture: rebalance_batch/models. Imports from rebalance_kernel.db.base only.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rebalance_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from rebalance_batch.domain.types import RunSummary, UnitResult
    from rebalance_kernel.domain.inventory import Assignment


class MigrationRunModel(TrackedBase):
    """One rebalance run."""

    __tablename__ = "migration_runs"

    __table_args__ = (
        Index("ix_migration_runs_status", "status"),
        Index("ix_migration_runs_created_at", "created_at"),
    )

    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    item_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    planned_units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    submitted_units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failed_units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tallies: Mapped[list | None] = mapped_column(JSON, nullable=True)
    intake_results: Mapped[list | None] = mapped_column(JSON, nullable=True)
    config_checksum: Mapped[str | None] = mapped_column(String(64), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    duration_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    units: Mapped[list["MigrationUnitModel"]] = relationship(
        "MigrationUnitModel",
        back_populates="run",
        foreign_keys="MigrationUnitModel.run_id",
        order_by="MigrationUnitModel.unit_index",
    )

    def to_dto(self, unit_results: tuple[UnitResult, ...] = ()) -> RunSummary:
        from rebalance_batch.domain.types import (
            CategoryTally,
            IntakeResult,
            RunStatus,
            RunSummary,
        )
        from rebalance_kernel.domain.inventory import Category
        from rebalance_kernel.domain.modes import RunMode

        return RunSummary(
            run_id=self.id,
            mode=RunMode(self.mode),
            status=RunStatus(self.status),
            tallies=tuple(
                CategoryTally(
                    category=Category(t["category"]),
                    planned=t["planned"],
                    submitted=t["submitted"],
                    failed=t["failed"],
                )
                for t in (self.tallies or [])
            ),
            unit_results=unit_results,
            intake_results=tuple(
                IntakeResult(
                    bucket=r["bucket"],
                    excluded=r["excluded"],
                    error_code=r.get("error_code"),
                    error_message=r.get("error_message"),
                )
                for r in (self.intake_results or [])
            ),
            item_count=self.item_count,
            config_checksum=self.config_checksum,
            started_at=self.started_at,
            completed_at=self.completed_at,
            duration_ms=self.duration_ms,
        )

    @classmethod
    def from_dto(cls, dto: RunSummary, created_by_id: UUID) -> MigrationRunModel:
        return cls(
            id=dto.run_id,
            mode=dto.mode.value,
            status=dto.status.value,
            item_count=dto.item_count,
            planned_units=dto.planned,
            submitted_units=dto.submitted,
            failed_units=dto.failed,
            tallies=[
                {
                    "category": t.category.value,
                    "planned": t.planned,
                    "submitted": t.submitted,
                    "failed": t.failed,
                }
                for t in dto.tallies
            ] or None,
            intake_results=[
                {
                    "bucket": r.bucket,
                    "excluded": r.excluded,
                    "error_code": r.error_code,
                    "error_message": r.error_message,
                }
                for r in dto.intake_results
            ] or None,
            config_checksum=dto.config_checksum,
            started_at=dto.started_at,
            completed_at=dto.completed_at,
            duration_ms=dto.duration_ms,
            created_by_id=created_by_id,
            updated_by_id=None,
        )


class MigrationUnitModel(TrackedBase):
    """Outcome of one batch or single-item submission within a run."""

    __tablename__ = "migration_units"

    __table_args__ = (
        Index("ix_migration_units_run_status", "run_id", "status"),
        Index("ix_migration_units_unit_key", "unit_key"),
    )

    run_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("migration_runs.id", ondelete="CASCADE"),
        nullable=False,
    )
    unit_index: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_key: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    item_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    batch_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_buckets: Mapped[list | None] = mapped_column(JSON, nullable=True)
    external_ref: Mapped[str | None] = mapped_column(String(500), nullable=True)
    error_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    duration_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    run: Mapped["MigrationRunModel"] = relationship(
        "MigrationRunModel",
        back_populates="units",
        foreign_keys=[run_id],
    )

    def to_dto(self) -> UnitResult:
        from rebalance_batch.domain.types import UnitResult, UnitStatus
        from rebalance_kernel.domain.inventory import Category

        return UnitResult(
            unit_index=self.unit_index,
            unit_key=self.unit_key,
            category=Category(self.category),
            status=UnitStatus(self.status),
            item_count=self.item_count,
            batch_index=self.batch_index,
            target_buckets=tuple(self.target_buckets or ()),
            external_ref=self.external_ref,
            error_code=self.error_code,
            error_message=self.error_message,
            started_at=self.started_at,
            completed_at=self.completed_at,
            duration_ms=self.duration_ms,
        )

    @classmethod
    def from_dto(
        cls, dto: UnitResult, run_id: UUID, created_by_id: UUID,
    ) -> MigrationUnitModel:
        return cls(
            run_id=run_id,
            unit_index=dto.unit_index,
            unit_key=dto.unit_key,
            category=dto.category.value,
            status=dto.status.value,
            item_count=dto.item_count,
            batch_index=dto.batch_index,
            target_buckets=list(dto.target_buckets) or None,
            external_ref=dto.external_ref,
            error_code=dto.error_code,
            error_message=dto.error_message,
            started_at=dto.started_at,
            completed_at=dto.completed_at,
            duration_ms=dto.duration_ms,
            created_by_id=created_by_id,
            updated_by_id=None,
        )


class MigrationAssignmentModel(TrackedBase):
    """One planned item-to-bucket assignment, in plan order."""

    __tablename__ = "migration_assignments"

    __table_args__ = (
        Index("ix_migration_assignments_run_position", "run_id", "position"),
        Index("ix_migration_assignments_item_id", "item_id"),
    )

    run_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("migration_runs.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_key: Mapped[str] = mapped_column(String(300), nullable=False)
    item_id: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    target_bucket: Mapped[str] = mapped_column(String(200), nullable=False)
    bad_item_limit: Mapped[int] = mapped_column(Integer, nullable=False)

    def to_dto(self) -> Assignment:
        from rebalance_kernel.domain.inventory import Assignment, Category

        return Assignment(
            item_id=self.item_id,
            target_bucket=self.target_bucket,
            bad_item_limit=self.bad_item_limit,
            category=Category(self.category),
        )

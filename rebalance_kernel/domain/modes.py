"""Run mode shared by configuration and orchestration."""

from __future__ import annotations

from enum import Enum


class RunMode(str, Enum):
    """Whether a run only plans, or plans and submits."""

    PLAN = "plan"  # Materialize batches and report counts
    APPLY = "apply"  # Also submit every batch / single assignment

    @classmethod
    def from_value(cls, value: str | RunMode) -> RunMode:
        if isinstance(value, RunMode):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown run mode {value!r}; expected one of "
                f"{[m.value for m in cls]}"
            ) from None

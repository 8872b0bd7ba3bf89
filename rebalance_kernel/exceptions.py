"""
Typed Exception Hierarchy for the Rebalancer.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A rebalance run distinguishes errors that must stop the run (bad
configuration) from errors that must be counted and reported (a rejected
job submission).  Callers decide which is which by exception TYPE, never
by parsing message text:

    try:
        summary = orchestrator.run(inventory)
    except ConfigurationError as e:   # fatal, nothing was assigned
        log.error(f"Configuration rejected: {e.code}")
        return 2

Every exception carries:
  1. A ``code`` class attribute (machine-readable, stable).
  2. Structured attributes for the values that triggered it.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RebalanceError (base)
    |
    +-- ConfigurationError
    |   +-- NoDestinationsError
    |   +-- NoSourcesError
    |   +-- OverlappingBucketsError
    |   +-- InvalidBatchCapacityError
    |   +-- InvalidErrorLimitError
    |   +-- DuplicateItemError
    |
    +-- StatisticsUnavailableError
    +-- SubmissionError
    +-- InvalidUnitTransitionError
    +-- RunNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | Generic invalid configuration
                | NO_DESTINATIONS             | Staging bucket list is empty
                | NO_SOURCES                  | Source bucket list is empty
                | OVERLAPPING_BUCKETS         | Bucket in both source and staging
                | INVALID_BATCH_CAPACITY      | Batch capacity <= 0
                | INVALID_ERROR_LIMIT         | Bad item limit < 0
                | DUPLICATE_ITEM              | Same item id discovered twice
----------------|-----------------------------|-----------------------------------------
Statistics      | STATISTICS_UNAVAILABLE      | Size lookup failed (recoverable)
----------------|-----------------------------|-----------------------------------------
Submission      | SUBMISSION_ERROR            | Platform rejected a job (recoverable)
                | INVALID_UNIT_TRANSITION     | Illegal unit state change
----------------|-----------------------------|-----------------------------------------
Ledger          | RUN_NOT_FOUND               | Run id not in the run ledger
"""

from collections.abc import Sequence


class RebalanceError(Exception):
    """
    Base exception for all rebalancer errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "REBALANCE_ERROR"


# Configuration exceptions -- fatal, raised before any assignment work


class ConfigurationError(RebalanceError):
    """Base exception for invalid run configuration."""

    code: str = "CONFIGURATION_ERROR"


class NoDestinationsError(ConfigurationError):
    """The staging bucket list is empty."""

    code: str = "NO_DESTINATIONS"

    def __init__(self, context: str = "staging"):
        self.context = context
        super().__init__(f"No destinations: {context} bucket list is empty")


class NoSourcesError(ConfigurationError):
    """The source bucket list is empty."""

    code: str = "NO_SOURCES"

    def __init__(self):
        super().__init__("No source buckets configured")


class OverlappingBucketsError(ConfigurationError):
    """A bucket appears more than once across the source and staging lists."""

    code: str = "OVERLAPPING_BUCKETS"

    def __init__(self, buckets: Sequence[str]):
        self.buckets = tuple(buckets)
        super().__init__(
            f"Buckets must appear exactly once across source and staging: "
            f"{', '.join(self.buckets)}"
        )


class InvalidBatchCapacityError(ConfigurationError):
    """Batch capacity must be a positive integer."""

    code: str = "INVALID_BATCH_CAPACITY"

    def __init__(self, category: str, capacity: int):
        self.category = category
        self.capacity = capacity
        super().__init__(
            f"Batch capacity for {category} must be positive, got {capacity}"
        )


class InvalidErrorLimitError(ConfigurationError):
    """Per-item error limit must be non-negative."""

    code: str = "INVALID_ERROR_LIMIT"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Bad item limit must be non-negative, got {limit}")


class DuplicateItemError(ConfigurationError):
    """The same item id was discovered more than once."""

    code: str = "DUPLICATE_ITEM"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item discovered more than once: {item_id}")


# Recoverable exceptions


class StatisticsUnavailableError(RebalanceError):
    """Size statistics could not be retrieved for an item."""

    code: str = "STATISTICS_UNAVAILABLE"

    def __init__(self, item_id: str, reason: str = ""):
        self.item_id = item_id
        self.reason = reason
        message = f"Statistics unavailable for {item_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SubmissionError(RebalanceError):
    """The job submission collaborator rejected a unit of work."""

    code: str = "SUBMISSION_ERROR"

    def __init__(self, unit_key: str, reason: str):
        self.unit_key = unit_key
        self.reason = reason
        super().__init__(f"Submission of {unit_key} rejected: {reason}")


class InvalidUnitTransitionError(RebalanceError):
    """A unit of work was moved to a state its current state cannot reach."""

    code: str = "INVALID_UNIT_TRANSITION"

    def __init__(self, unit_key: str, from_status: str, to_status: str):
        self.unit_key = unit_key
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Unit {unit_key} cannot move from {from_status} to {to_status}"
        )


class RunNotFoundError(RebalanceError):
    """No run with the given id exists in the run ledger."""

    code: str = "RUN_NOT_FOUND"

    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Run not found: {run_id}")

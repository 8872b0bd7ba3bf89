"""
Configuration validation (``rebalance_config.validator``).

Every check here runs before any inventory is weighed or assigned, so a
rejected configuration never produces a partial plan.
"""

from __future__ import annotations

from collections import Counter

from rebalance_config.schema import RebalanceConfig
from rebalance_kernel.exceptions import (
    InvalidBatchCapacityError,
    InvalidErrorLimitError,
    NoDestinationsError,
    NoSourcesError,
    OverlappingBucketsError,
)
from rebalance_kernel.domain.inventory import Category


def validate_configuration(config: RebalanceConfig) -> None:
    """
    Reject unusable configurations.

    Raises:
        NoSourcesError: no source buckets.
        NoDestinationsError: no staging buckets.
        OverlappingBucketsError: a bucket is both source and staging, or is
            listed twice.
        InvalidBatchCapacityError: a batch capacity is not positive.
        InvalidErrorLimitError: bad_item_limit is negative.
    """
    if not config.source_buckets:
        raise NoSourcesError()
    if not config.staging_buckets:
        raise NoDestinationsError()

    counts = Counter(config.source_buckets) + Counter(config.staging_buckets)
    repeated = sorted(bucket for bucket, n in counts.items() if n > 1)
    if repeated:
        raise OverlappingBucketsError(repeated)

    for category in (Category.STANDARD, Category.ARCHIVE):
        capacity = config.batch_capacity.for_category(category)
        if capacity <= 0:
            raise InvalidBatchCapacityError(category.value, capacity)

    if config.bad_item_limit < 0:
        raise InvalidErrorLimitError(config.bad_item_limit)

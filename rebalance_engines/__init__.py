"""
Module: rebalance_engines
Responsibility:
    Package entrypoint that re-exports the pure distribution engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import rebalance_kernel (domain, exceptions, logging).
    MUST NOT import rebalance_batch or rebalance_config.

Invariants enforced:
    - Determinism: identical inputs always produce identical outputs,
      except the uniform distributor, whose randomness comes from an
      injected ``random.Random``.
    - Order preservation: weight order survives distribution and
      partitioning untouched.

Usage:
    from rebalance_engines import SnakeDistributor, BatchPartitioner
"""

from rebalance_engines.partitioner import BatchPartitioner, iter_batches
from rebalance_engines.snake import (
    DistributionCursor,
    SnakeDistributor,
    destinations_for,
)
from rebalance_engines.statistics import (
    AggregationResult,
    StatisticsAggregator,
    compute_weight,
)
from rebalance_engines.tracer import traced_engine
from rebalance_engines.uniform import UniformRandomDistributor

__all__ = [
    "AggregationResult",
    "BatchPartitioner",
    "DistributionCursor",
    "SnakeDistributor",
    "StatisticsAggregator",
    "UniformRandomDistributor",
    "compute_weight",
    "destinations_for",
    "iter_batches",
    "traced_engine",
]

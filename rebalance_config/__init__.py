"""
rebalance_config -- single public entrypoint for run configuration.

Responsibility:
    Provides the one way to obtain a validated ``RebalanceConfig`` from
    disk: ``load_config()``.  Programmatic callers may build a
    ``RebalanceConfig`` directly and run it through
    ``validate_configuration()``.

Invariants enforced:
    - A config returned by ``load_config()`` has already passed validation.
    - Deterministic identity: the same settings always produce the same
      checksum.

Failure modes:
    - ``FileNotFoundError`` -- no file at the given path.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``KeyError`` -- missing bucket lists.
    - ``ConfigurationError`` subclasses -- validation failures.

Audit relevance:
    Every successful ``load_config()`` call emits a
    ``REBALANCE_CONFIG_TRACE`` log entry with the path, checksum and
    bucket counts.
"""

from __future__ import annotations

from pathlib import Path

from rebalance_config.loader import compute_checksum, load_yaml_file, parse_config
from rebalance_config.schema import BatchCapacity, RebalanceConfig
from rebalance_config.validator import validate_configuration
from rebalance_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = [
    "BatchCapacity",
    "RebalanceConfig",
    "compute_checksum",
    "load_config",
    "validate_configuration",
]


def load_config(path: str | Path) -> RebalanceConfig:
    """Load, parse and validate a YAML run configuration."""
    config_path = Path(path)
    config = parse_config(load_yaml_file(config_path))
    validate_configuration(config)

    _logger.info(
        "REBALANCE_CONFIG_TRACE",
        extra={
            "trace_type": "REBALANCE_CONFIG_TRACE",
            "config_path": str(config_path),
            "checksum": compute_checksum(config),
            "source_count": len(config.source_buckets),
            "staging_count": len(config.staging_buckets),
            "mode": config.mode.value,
        },
    )
    return config

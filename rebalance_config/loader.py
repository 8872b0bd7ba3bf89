"""
Configuration Loader (``rebalance_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``rebalance_config.schema`` dataclasses.  Callers normally go through
``rebalance_config.load_config()``, which also validates.

Expected layout::

    rebalance:
      source_buckets: [DB01, DB02]
      staging_buckets: [DB10, DB11, DB12]
      bad_item_limit: 10
      batch_capacity:
        standard: 100
        archive: 50
      mode: plan
      exclude_sources_from_intake: false
      reverse_archive_destinations: true
      random_seed: 7
      database_url: sqlite:///rebalance.db

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Wrongly typed values  -> ``ValueError`` / ``TypeError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from rebalance_config.schema import BatchCapacity, RebalanceConfig
from rebalance_kernel.domain.modes import RunMode


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_bucket_list(value: Any, key: str) -> tuple[str, ...]:
    """Accept a YAML list or a comma-separated string of bucket names."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value)
    raise TypeError(f"{key} must be a list of bucket names, got {type(value).__name__}")


def parse_batch_capacity(data: dict[str, Any] | None) -> BatchCapacity:
    defaults = BatchCapacity()
    if not data:
        return defaults
    return BatchCapacity(
        standard=int(data.get("standard", defaults.standard)),
        archive=int(data.get("archive", defaults.archive)),
    )


def parse_config(data: dict[str, Any]) -> RebalanceConfig:
    """
    Parse a ``RebalanceConfig`` from the loaded YAML document.

    The settings may sit under a top-level ``rebalance`` key or at the
    document root.

    Raises:
        KeyError: if ``source_buckets`` or ``staging_buckets`` is missing.
        ValueError: if ``mode`` is not a known run mode.
    """
    section = data.get("rebalance", data)

    seed = section.get("random_seed")
    return RebalanceConfig(
        source_buckets=parse_bucket_list(section["source_buckets"], "source_buckets"),
        staging_buckets=parse_bucket_list(section["staging_buckets"], "staging_buckets"),
        bad_item_limit=int(section.get("bad_item_limit", 0)),
        batch_capacity=parse_batch_capacity(section.get("batch_capacity")),
        mode=RunMode.from_value(section.get("mode", RunMode.PLAN.value)),
        exclude_sources_from_intake=bool(section.get("exclude_sources_from_intake", False)),
        reverse_archive_destinations=bool(section.get("reverse_archive_destinations", True)),
        random_seed=int(seed) if seed is not None else None,
        database_url=section.get("database_url"),
    )


def config_to_dict(config: RebalanceConfig) -> dict[str, Any]:
    """Plain-data view of a config, in the loader's YAML layout."""
    return {
        "source_buckets": list(config.source_buckets),
        "staging_buckets": list(config.staging_buckets),
        "bad_item_limit": config.bad_item_limit,
        "batch_capacity": {
            "standard": config.batch_capacity.standard,
            "archive": config.batch_capacity.archive,
        },
        "mode": config.mode.value,
        "exclude_sources_from_intake": config.exclude_sources_from_intake,
        "reverse_archive_destinations": config.reverse_archive_destinations,
        "random_seed": config.random_seed,
    }


def compute_checksum(config: RebalanceConfig) -> str:
    """
    Deterministic SHA-256 of the planning-relevant settings.

    ``database_url`` is left out: where a run is recorded does not change
    what it plans.
    """
    canonical = json.dumps(config_to_dict(config), sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

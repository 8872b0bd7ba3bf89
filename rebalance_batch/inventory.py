"""
Inventory CSV intake.

Reads the discovered inventory from a CSV export with the columns
``item_id``, ``category``, ``source_bucket`` and, optionally,
``primary_size`` and ``deleted_size``.  Sizes are decimal numbers in one
common unit.  A UTF-8 byte order mark is stripped when present.

``load_inventory_csv()`` returns records with unknown weights;
``CsvStatisticsProvider`` serves the size columns of the same file to the
statistics aggregator.
"""

from __future__ import annotations

import csv
from decimal import Decimal, InvalidOperation
from pathlib import Path

from rebalance_kernel.domain.inventory import Category, InventoryRecord, ItemStatistics
from rebalance_kernel.exceptions import StatisticsUnavailableError
from rebalance_kernel.logging_config import get_logger

logger = get_logger("batch.inventory")

REQUIRED_COLUMNS = ("item_id", "category", "source_bucket")


def _read_rows(path: Path) -> list[dict[str, str]]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or ())]
        if missing:
            raise ValueError(f"{path}: missing inventory columns {missing}")
        return [row for row in reader if (row.get("item_id") or "").strip()]


def load_inventory_csv(path: str | Path) -> list[InventoryRecord]:
    """Load inventory records in file order.

    Raises:
        FileNotFoundError: no file at ``path``.
        ValueError: a required column is missing or a category is unknown.
    """
    source = Path(path)
    records = [
        InventoryRecord(
            item_id=row["item_id"].strip(),
            category=Category.from_value(row["category"]),
            source_bucket=row["source_bucket"].strip(),
        )
        for row in _read_rows(source)
    ]
    logger.info("inventory_loaded", extra={
        "path": str(source),
        "record_count": len(records),
    })
    return records


def _parse_size(raw: str | None) -> Decimal | None:
    """Blank cells are None; anything else must be a finite, non-negative number."""
    if raw is None or not raw.strip():
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise ValueError(f"not a number: {raw!r}") from None
    if not value.is_finite() or value < 0:
        raise ValueError(f"not a finite non-negative size: {raw!r}")
    return value


class CsvStatisticsProvider:
    """StatisticsProvider backed by the size columns of an inventory CSV.

    A blank, malformed, negative or non-finite primary size makes the item
    unavailable, as does an invalid deleted size.  A blank deleted size
    counts as zero.
    """

    def __init__(self, path: str | Path):
        self._sizes: dict[str, tuple[str | None, str | None]] = {
            row["item_id"].strip(): (row.get("primary_size"), row.get("deleted_size"))
            for row in _read_rows(Path(path))
        }

    def get_statistics(self, record: InventoryRecord) -> ItemStatistics:
        sizes = self._sizes.get(record.item_id)
        if sizes is None:
            raise StatisticsUnavailableError(record.item_id, "not in inventory file")
        try:
            primary = _parse_size(sizes[0])
            deleted = _parse_size(sizes[1])
        except ValueError as exc:
            raise StatisticsUnavailableError(record.item_id, str(exc)) from exc
        if primary is None:
            raise StatisticsUnavailableError(record.item_id, "no primary size")
        return ItemStatistics(
            primary_size=primary,
            deleted_size=deleted if deleted is not None else Decimal("0"),
        )

"""
CSV export of planned work for the platform's migration job import.

Each batch becomes one CSV file with a header row and one row per
assignment, in batch order.  Single-item assignments are exported one
file each.  Standard and Archive files name the target column
differently; every other category uses the Standard shape.
"""

from __future__ import annotations

import csv
import hashlib
import re
from pathlib import Path

from rebalance_kernel.domain.inventory import Assignment, Batch, Category

STANDARD_HEADERS: tuple[str, str, str] = ("EmailAddress", "TargetDatabase", "BadItemLimit")
ARCHIVE_HEADERS: tuple[str, str, str] = (
    "EmailAddress", "TargetArchiveDatabase", "BadItemLimit",
)

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def csv_headers(category: Category) -> tuple[str, str, str]:
    if category is Category.ARCHIVE:
        return ARCHIVE_HEADERS
    return STANDARD_HEADERS


def batch_rows(batch: Batch) -> list[tuple[str, str, int]]:
    """(item_id, target_bucket, bad_item_limit) per assignment, in batch order."""
    return list(batch.rows())


def _write_rows(path: Path, headers: tuple[str, ...], rows) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(headers)
        writer.writerows(rows)
    return path


def write_batch_csv(batch: Batch, directory: str | Path) -> Path:
    """Write ``batch`` to ``<directory>/<batch_name>.csv`` and return the path."""
    path = Path(directory) / f"{batch.batch_name}.csv"
    return _write_rows(path, csv_headers(batch.category), batch_rows(batch))


def assignment_filename(assignment: Assignment) -> str:
    """File name for a single-item assignment, unique per item id.

    Ids that are already filename-safe are used as-is.  Any other id is
    cleaned and suffixed with a short hash of the raw id, so ids that clean
    to the same text still get separate files.
    """
    item_id = assignment.item_id
    safe_id = _UNSAFE_FILENAME.sub("_", item_id).strip("_")
    if safe_id != item_id:
        digest = hashlib.sha256(item_id.encode("utf-8")).hexdigest()[:8]
        safe_id = f"{safe_id or 'item'}-{digest}"
    return f"{assignment.category.value}-{safe_id}.csv"


def write_assignment_csv(assignment: Assignment, directory: str | Path) -> Path:
    """Write one single-item assignment to its own file."""
    path = Path(directory) / assignment_filename(assignment)
    return _write_rows(path, csv_headers(assignment.category), [assignment.as_row()])

#!/usr/bin/env python3
"""
Plan or apply a storage bucket rebalance from a config file and an inventory CSV.

The inventory CSV has the columns item_id, category, source_bucket and,
optionally, primary_size and deleted_size (one common unit).  In apply
mode each batch or single item is "submitted" by writing its migration
CSV into the outbox directory.

Usage:
    python3 scripts/rebalance.py --config <yaml> --inventory <csv> [options]

Examples:
    # Plan only, print the per-category summary
    python3 scripts/rebalance.py --config rebalance.yaml --inventory inventory.csv

    # Plan and export the planned CSVs for review
    python3 scripts/rebalance.py --config rebalance.yaml --inventory inventory.csv --outbox plan_out

    # Apply: write every unit to the outbox and record the run
    python3 scripts/rebalance.py --config rebalance.yaml --inventory inventory.csv \\
        --mode apply --outbox outbox --database-url sqlite:///rebalance.db

Exit codes:
    0  planned, completed or partially completed
    1  every unit failed, or an input file is missing
    2  configuration error
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rebalance items from source buckets onto staging buckets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        required=True,
        type=Path,
        help="Path to the YAML run configuration.",
    )
    parser.add_argument(
        "--inventory",
        required=True,
        type=Path,
        help="Path to the inventory CSV.",
    )
    parser.add_argument(
        "--mode",
        choices=("plan", "apply"),
        default=None,
        help="Run mode (default: the mode in the config file).",
    )
    parser.add_argument(
        "--outbox",
        type=Path,
        default=None,
        help="Directory for migration CSVs. Required in apply mode.",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Run ledger database URL (default: database_url from config, else none).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the uniform random distributor (overrides config).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level.",
    )
    return parser.parse_args(argv)


def _print_summary(summary) -> None:
    print(f"Run {summary.run_id} [{summary.mode.value}] -> {summary.status.value}")
    print(f"  Items: {summary.item_count}")
    print(f"  {'Category':<14}{'Planned':>9}{'Submitted':>11}{'Failed':>8}")
    for tally in summary.tallies:
        print(
            f"  {tally.category.value:<14}{tally.planned:>9}"
            f"{tally.submitted:>11}{tally.failed:>8}"
        )
    for result in summary.failed_units[:10]:
        print(f"  FAILED {result.unit_key}: {result.error_code} {result.error_message}")
    if len(summary.failed_units) > 10:
        print(f"  ... and {len(summary.failed_units) - 10} more failed units.")


def _export_plan(plan, outbox: Path) -> int:
    from rebalance_batch.export import write_assignment_csv, write_batch_csv

    written = 0
    for batch in plan.batches:
        write_batch_csv(batch, outbox)
        written += 1
    for assignment in plan.single_assignments:
        write_assignment_csv(assignment, outbox)
        written += 1
    return written


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from rebalance_batch.domain.types import RunStatus
    from rebalance_batch.inventory import CsvStatisticsProvider, load_inventory_csv
    from rebalance_batch.orchestrator import RebalanceOrchestrator
    from rebalance_batch.submitters import CsvOutboxSubmitter
    from rebalance_config import load_config
    from rebalance_kernel.db.engine import create_tables, init_engine_from_url, session_scope
    from rebalance_kernel.domain.clock import SystemClock
    from rebalance_kernel.domain.modes import RunMode
    from rebalance_kernel.exceptions import ConfigurationError
    from rebalance_kernel.logging_config import configure_logging

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    for path in (args.config, args.inventory):
        if not path.is_file():
            print(f"ERROR: File not found: {path}", file=sys.stderr)
            return 1

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"ERROR: [{e.code}] {e}", file=sys.stderr)
        return 2
    except (KeyError, ValueError) as e:
        print(f"ERROR: Invalid config: {e}", file=sys.stderr)
        return 2

    if args.seed is not None:
        config = replace(config, random_seed=args.seed)
    mode = RunMode.from_value(args.mode) if args.mode else config.mode

    try:
        inventory = load_inventory_csv(args.inventory)
    except ValueError as e:
        print(f"ERROR: Invalid inventory: {e}", file=sys.stderr)
        return 2
    statistics = CsvStatisticsProvider(args.inventory)
    submitter = CsvOutboxSubmitter(args.outbox) if args.outbox else None

    if config.exclude_sources_from_intake and mode is RunMode.APPLY:
        print("NOTE: intake exclusion needs a platform connection; skipped.")

    database_url = args.database_url or config.database_url

    def _run(session=None):
        orchestrator = RebalanceOrchestrator(
            config,
            submitter=submitter if mode is RunMode.APPLY else None,
            statistics_provider=statistics,
            clock=SystemClock(),
            session=session,
        )
        return orchestrator, orchestrator.run(inventory, mode=mode)

    try:
        if database_url:
            init_engine_from_url(database_url)
            create_tables()
            with session_scope() as session:
                orchestrator, summary = _run(session)
        else:
            orchestrator, summary = _run()
    except ConfigurationError as e:
        print(f"ERROR: [{e.code}] {e}", file=sys.stderr)
        return 2

    if mode is RunMode.PLAN and args.outbox and orchestrator.last_plan is not None:
        written = _export_plan(orchestrator.last_plan, args.outbox)
        print(f"Exported {written} planned files to {args.outbox}")

    _print_summary(summary)
    return 1 if summary.status is RunStatus.FAILED else 0


if __name__ == "__main__":
    sys.exit(main())

"""Tests for the structured logging system (rebalance_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from rebalance_kernel.logging_config import (
    CONTEXT_FIELDS,
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    """Parse all JSON log lines from a stream."""
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "rebalance.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("batch_submitted", extra={"item_count": 42, "target": "DB10"})

        record = _parse_log(stream)
        assert record["item_count"] == 42
        assert record["target"] == "DB10"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(run_id="run-1", category="Archive")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["run_id"] == "run-1"
        assert record["category"] == "Archive"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_rebalance_exception_code_extracted(self):
        """Rebalance exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from rebalance_kernel.exceptions import SubmissionError

        try:
            raise SubmissionError("Standard-002", "queue full")
        except SubmissionError:
            logger.error("submission_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "SUBMISSION_ERROR"
        assert record["exc_type"] == "SubmissionError"
        assert record["exc_unit_key"] == "Standard-002"
        assert record["exc_reason"] == "queue full"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "run_id" not in record
        assert "unit_key" not in record

    def test_uuid_and_decimal_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_values", extra={"plan_id": uid, "weight": Decimal("12.50")})

        record = _parse_log(stream)
        assert record["plan_id"] == str(uid)
        assert record["weight"] == "12.50"

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # Default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(run_id="x", bucket="DB01")
        assert LogContext.get_all() == {"run_id": "x", "bucket": "DB01"}

    def test_clear(self):
        LogContext.set(run_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(category="Standard")
        with LogContext.bind(category="Archive"):
            assert LogContext.get_all()["category"] == "Archive"
        assert LogContext.get_all()["category"] == "Standard"

    def test_bind_restores_none(self):
        """bind() restores to None if there was no previous value."""
        assert "unit_key" not in LogContext.get_all()
        with LogContext.bind(unit_key="Standard-001"):
            assert LogContext.get_all()["unit_key"] == "Standard-001"
        assert "unit_key" not in LogContext.get_all()

    def test_bind_ignores_none_values(self):
        with LogContext.bind(run_id=None, bucket="DB02"):
            assert LogContext.get_all() == {"bucket": "DB02"}

    def test_all_fields(self):
        LogContext.set(
            run_id="r",
            category="c",
            unit_key="u",
            bucket="b",
        )
        ctx = LogContext.get_all()
        assert set(ctx) == set(CONTEXT_FIELDS)
        assert ctx["unit_key"] == "u"

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="batch_id"):
            LogContext.set(batch_id="b")
        with pytest.raises(TypeError, match="batch_id"):
            LogContext.bind(batch_id="b")

    def test_nested_bind_restores_outer(self):
        with LogContext.bind(run_id="r1", category="Standard"):
            with LogContext.bind(category="Archive", unit_key="Archive-001"):
                assert LogContext.get_all() == {
                    "run_id": "r1", "category": "Archive", "unit_key": "Archive-001",
                }
            assert LogContext.get_all() == {"run_id": "r1", "category": "Standard"}
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("rebalance")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("batch.executor")
        assert logger.name == "rebalance.batch.executor"

    def test_logger_hierarchy(self):
        """Child loggers inherit the rebalance root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "rebalance.deep.nested.module"

    def test_run_logs_carry_run_id(self, config, mixed_inventory, clock):
        from rebalance_batch.orchestrator import RebalanceOrchestrator

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        summary = RebalanceOrchestrator(config, clock=clock).run(mixed_inventory)

        logs = _parse_all_logs(stream)
        completed = [r for r in logs if r["message"] == "run_completed"]
        assert len(completed) == 1
        assert completed[0]["run_id"] == str(summary.run_id)
        assert completed[0]["status"] == "planned"

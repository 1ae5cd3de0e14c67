"""Tests for the structured logging system (procure_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from procure_kernel.logging_config import (
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
        assert record["logger"] == "procure_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("compared", extra={"blocker_count": 2, "vendor_name": "B"})

        record = _parse_log(stream)
        assert record["blocker_count"] == 2
        assert record["vendor_name"] == "B"

    def test_decimal_serialized_as_string(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("total", extra={"overall_total": Decimal("1118.00")})

        assert _parse_log(stream)["overall_total"] == "1118.00"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        with LogContext.bind(indent_id="IND-9", actor_id="admin-1"):
            logger.info("test_msg")
        logger.info("after")

        inside, after = _parse_all_logs(stream)
        assert inside["indent_id"] == "IND-9"
        assert inside["actor_id"] == "admin-1"
        assert "indent_id" not in after

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

    def test_procurement_exception_code_extracted(self):
        """Procurement exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from procure_kernel.exceptions import UnknownVendorSelectionError

        try:
            raise UnknownVendorSelectionError("L1", "Z", ("A", "B"))
        except UnknownVendorSelectionError:
            logger.error("selection_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "UNKNOWN_VENDOR_SELECTION"
        assert record["exc_type"] == "UnknownVendorSelectionError"
        assert record["exc_line_item_id"] == "L1"
        assert record["exc_vendor_name"] == "Z"
        assert record["exc_available"] == ["A", "B"]

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "indent_id" not in record
        assert "actor_id" not in record

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug record is dropped
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= set(record)


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_empty_by_default(self):
        assert LogContext.get_all() == {}

    def test_clear(self):
        with LogContext.bind(indent_id="x"):
            LogContext.clear()
            assert LogContext.get_all() == {}

    def test_nested_bind_restores_outer(self):
        with LogContext.bind(actor_id="outer", indent_id="IND-1"):
            with LogContext.bind(actor_id="inner"):
                assert LogContext.get_all() == {"actor_id": "inner", "indent_id": "IND-1"}
            assert LogContext.get_all()["actor_id"] == "outer"
        assert LogContext.get_all() == {}

    def test_bind_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(indent_id="temp"):
                raise RuntimeError("boom")
        assert "indent_id" not in LogContext.get_all()

    def test_bind_skips_none_values(self):
        with LogContext.bind(indent_id="IND-1", actor_id=None):
            assert LogContext.get_all() == {"indent_id": "IND-1"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            with LogContext.bind(trace_id="t"):
                pass


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
        root = logging.getLogger("procure_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("engines.pricing")
        assert logger.name == "procure_kernel.engines.pricing"

    def test_logger_hierarchy(self):
        """Child loggers inherit the procure_kernel root config."""
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "procure_kernel.deep.nested.module"

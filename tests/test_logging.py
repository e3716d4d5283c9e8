"""Tests for the structured logging system (cashbook_kernel/logging_config.py)."""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from io import StringIO

import pytest

from cashbook_kernel.exceptions import MissingCollectionError, UnknownModuleError
from cashbook_kernel.logging_config import (
    LogContext,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def stream() -> StringIO:
    """A configured cashbook logger writing JSON lines into a buffer."""
    buffer = StringIO()
    configure_logging(stream=buffer)
    return buffer


def _lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestJsonLines:
    """Each record becomes one JSON object."""

    def test_envelope(self, stream):
        get_logger("engines.balance").info("balance_computed")

        (line,) = _lines(stream)
        assert line["level"] == "INFO"
        assert line["message"] == "balance_computed"
        assert line["logger"] == "cashbook.engines.balance"
        assert datetime.fromisoformat(line["ts"]).tzinfo is not None

    def test_extras_merged(self, stream):
        get_logger("engines.normalizer").warning(
            "data_quality_issue",
            extra={"issue_code": "INVALID_AMOUNT", "source_id": "e1"},
        )

        (line,) = _lines(stream)
        assert line["issue_code"] == "INVALID_AMOUNT"
        assert line["source_id"] == "e1"
        assert "lineno" not in line

    def test_money_and_dates_serialized(self, stream):
        get_logger("test").info(
            "safe",
            extra={
                "current_safe": Decimal("20000.50"),
                "as_of": datetime(2024, 1, 11, 9, 30),
                "day": date(2024, 1, 11),
            },
        )

        (line,) = _lines(stream)
        assert line["current_safe"] == "20000.50"
        assert line["as_of"] == "2024-01-11T09:30:00"
        assert line["day"] == "2024-01-11"

    def test_debug_dropped_at_default_level(self, stream):
        logger = get_logger("test")
        logger.debug("hidden")
        logger.info("shown")

        assert [line["message"] for line in _lines(stream)] == ["shown"]

    def test_plain_exception(self, stream):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").exception("failed")

        (line,) = _lines(stream)
        assert line["exc_type"] == "ValueError"
        assert line["exc_message"] == "boom"
        assert "exc_code" not in line
        assert "Traceback" in line["traceback"]

    def test_cashbook_error_attributes(self, stream):
        try:
            raise UnknownModuleError("pottery", ("dtf",))
        except UnknownModuleError:
            get_logger("test").exception("ledger_computation_failed")

        (line,) = _lines(stream)
        assert line["exc_code"] == "UNKNOWN_MODULE"
        assert line["exc_module"] == "pottery"
        assert line["exc_known_modules"] == ["dtf"]

    def test_missing_collection_attribute(self, stream):
        try:
            raise MissingCollectionError("expenses")
        except MissingCollectionError:
            get_logger("test").error("snapshot_error", exc_info=True)

        (line,) = _lines(stream)
        assert line["exc_collection"] == "expenses"


class TestLogContext:
    """Report context propagated into every record."""

    def test_bound_fields_reach_records(self, stream):
        with LogContext.bind(report_id="rep-1", operation="statement", period="month"):
            get_logger("test").info("inside")
        get_logger("test").info("outside")

        inside, outside = _lines(stream)
        assert inside["report_id"] == "rep-1"
        assert inside["operation"] == "statement"
        assert inside["period"] == "month"
        assert "report_id" not in outside

    def test_context_wins_over_same_named_extra(self, stream):
        with LogContext.bind(period="today"):
            get_logger("test").info("msg", extra={"period": "ignored"})

        assert _lines(stream)[0]["period"] == "today"

    def test_set_ignores_none(self):
        LogContext.set(report_id="r", module=None)
        assert LogContext.get_all() == {"report_id": "r"}

    def test_clear(self):
        LogContext.set(report_id="r", module="dtf")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_nested_bind_restores(self):
        with LogContext.bind(report_id="outer", module="dtf"):
            with LogContext.bind(report_id="inner"):
                assert LogContext.get_all() == {"report_id": "inner", "module": "dtf"}
            assert LogContext.get_all() == {"report_id": "outer", "module": "dtf"}
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="actor_id"):
            LogContext.set(actor_id="someone")


class TestConfigureLogging:
    """Tests for setup and teardown."""

    def test_idempotent(self):
        configure_logging(stream=StringIO())
        configure_logging(stream=StringIO())

        assert len(logging.getLogger("cashbook").handlers) == 1

    def test_custom_handler_and_level(self):
        buffer = StringIO()
        configure_logging(handler=logging.StreamHandler(buffer), level=logging.DEBUG)

        get_logger("deep.nested").debug("visible")

        assert _lines(buffer)[0]["logger"] == "cashbook.deep.nested"

    def test_reset_restores_propagation(self):
        configure_logging(stream=StringIO())
        reset_logging()

        root = logging.getLogger("cashbook")
        assert root.handlers == []
        assert root.propagate is True

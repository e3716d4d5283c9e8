"""Tests for the engine invocation tracer (cashbook_engines/tracer.py)."""

import logging
from datetime import date, datetime
from decimal import Decimal

from cashbook_engines.periods import PeriodKind
from cashbook_engines.tracer import compute_input_fingerprint, traced_engine
from tests.factories import sale, snapshot


class TestEngineTracer:
    """Test the engine invocation tracer."""

    def test_traced_engine_decorator_works(self):
        """@traced_engine produces output and returns correctly."""

        @traced_engine("test_engine", "1.0", fingerprint_fields=("x", "y"))
        def add(x=0, y=0):
            return x + y

        assert add(x=3, y=4) == 7

    def test_trace_record_emitted(self, caplog):
        @traced_engine("test_engine", "2.1", fingerprint_fields=("as_of",))
        def noop(as_of=None):
            return None

        with caplog.at_level(logging.INFO, logger="cashbook.engines.tracer"):
            noop(as_of=datetime(2024, 1, 11))

        traces = [r for r in caplog.records if r.getMessage() == "CASHBOOK_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace.engine_name == "test_engine"
        assert trace.engine_version == "2.1"
        assert len(trace.input_fingerprint) == 16
        assert trace.duration_ms >= 0

    def test_engine_calls_are_traced(self, normalizer, calculator, caplog):
        with caplog.at_level(logging.INFO, logger="cashbook.engines.tracer"):
            ledger = normalizer.normalize(snapshot=snapshot(sales=[sale("2024-01-10", amount_paid=5)]))
            calculator.balance_as_of(ledger=ledger, as_of=datetime(2024, 1, 11))

        names = [r.engine_name for r in caplog.records if r.getMessage() == "CASHBOOK_ENGINE_TRACE"]
        assert names == ["normalizer", "balance"]


class TestInputFingerprint:
    """Tests for compute_input_fingerprint."""

    def test_deterministic(self):
        fp1 = compute_input_fingerprint(("a", "b"), {"a": 1, "b": "hello"})
        fp2 = compute_input_fingerprint(("a", "b"), {"b": "hello", "a": 1})

        assert fp1 == fp2
        assert len(fp1) == 16

    def test_changes_with_input(self):
        assert compute_input_fingerprint(("a",), {"a": 1}) != compute_input_fingerprint(("a",), {"a": 2})

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(("a",), {"a": None})

    def test_dates_enums_and_decimals(self):
        kwargs = {"on": date(2024, 2, 1), "kind": PeriodKind.MONTH, "amount": Decimal("1.50")}

        fp = compute_input_fingerprint(("on", "kind", "amount"), kwargs)

        assert fp == compute_input_fingerprint(
            ("on", "kind", "amount"),
            {"on": date(2024, 2, 1), "kind": "month", "amount": "1.50"},
        )

    def test_snapshot_fingerprinted_by_content(self):
        before = snapshot(sales=[sale("2024-01-10", amount_paid=500, sale_id="s1")])
        same = snapshot(sales=[sale("2024-01-10", amount_paid=500, sale_id="s1")])
        corrected = snapshot(sales=[sale("2024-01-10", amount_paid=5000, sale_id="s1")])

        def fp(snap):
            return compute_input_fingerprint(("snapshot", "module"), {"snapshot": snap, "module": None})

        assert fp(before) == fp(same)
        assert fp(before) != fp(corrected)

    def test_normalizer_trace_reflects_snapshot(self, normalizer, caplog):
        with caplog.at_level(logging.INFO, logger="cashbook.engines.tracer"):
            normalizer.normalize(snapshot=snapshot(sales=[sale("2024-01-10", amount_paid=5, sale_id="s1")]))
            normalizer.normalize(snapshot=snapshot(sales=[sale("2024-01-10", amount_paid=6, sale_id="s1")]))

        fingerprints = [
            r.input_fingerprint for r in caplog.records if r.getMessage() == "CASHBOOK_ENGINE_TRACE"
        ]
        assert len(fingerprints) == 2
        assert fingerprints[0] != fingerprints[1]

"""
CashLedgerService -- Service facade over the pure cash ledger engines.

Composes the normalizer, period resolver, balance calculator, summary
builder, statement generator and receivables calculator with clock
injection and the ledger configuration.

Architecture: cashbook_services -- imperative shell.
    The service receives a pre-built ``LedgerSnapshot``.  Fetching the
    sales, expenses and banking collections is the caller's
    responsibility.

Invariants enforced:
    - Each public call reads the clock at most once and passes that single
      ``now`` to every engine it invokes, so all figures in one report
      agree with each other.
    - No state survives between calls: every call re-normalizes the
      snapshot and rescans it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from cashbook_config import get_default_config
from cashbook_config.schema import LedgerConfig
from cashbook_engines.balance import BalanceCalculator
from cashbook_engines.ledger_types import NormalizedLedger, PeriodTotals, SafeSummary, Statement
from cashbook_engines.normalizer import TransactionNormalizer
from cashbook_engines.periods import Period, PeriodSelector, resolve_period
from cashbook_engines.receivables import ReceivablesCalculator, ReceivablesReport
from cashbook_engines.statement import StatementGenerator
from cashbook_engines.summary import PeriodSummaryBuilder
from cashbook_kernel.domain.clock import Clock, SystemClock
from cashbook_kernel.domain.records import LedgerSnapshot
from cashbook_kernel.domain.transactions import DataQualityIssue
from cashbook_kernel.domain.values import to_local
from cashbook_kernel.exceptions import CashbookError, DataQualityError
from cashbook_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.cash_ledger")


@dataclass(frozen=True)
class LedgerReport:
    """Everything the reporting view needs, computed for one ``now``."""

    generated_at: datetime
    module: str | None
    safe: SafeSummary
    totals: PeriodTotals
    statement: Statement
    issues: tuple[DataQualityIssue, ...]


class CashLedgerService:
    """Service producing safe balances, period totals and statements.

    Contract:
        - ``safe_summary()`` splits the current safe at local midnight.
        - ``period_totals()`` and ``statement()`` cover a selected period.
        - ``report()`` returns all three for a single clock reading.

    Non-goals:
        - Does NOT fetch or persist source records.
        - Does NOT cache results between calls.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: LedgerConfig | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._config = config or get_default_config()
        tz = self._config.tzinfo
        self._tz = tz
        self._calculator = BalanceCalculator(tz)
        self._normalizer = TransactionNormalizer(self._config.keyword_table, tz)
        self._summary = PeriodSummaryBuilder(self._calculator, tz)
        self._statements = StatementGenerator(
            self._calculator,
            reference_length=self._config.statement_reference_length,
        )
        self._receivables = ReceivablesCalculator(tz)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        """Current instant as naive local time in the ledger zone."""
        return to_local(self._clock.now(), self._tz)

    def balance_as_of(
        self,
        snapshot: LedgerSnapshot,
        as_of: datetime,
        module: str | None = None,
    ) -> Decimal:
        """Safe balance from everything dated strictly before ``as_of``."""
        with self._report_scope("balance_as_of", module):
            ledger = self._normalize(snapshot, module)
            return self._calculator.balance_as_of(ledger=ledger, as_of=to_local(as_of, self._tz))

    def safe_summary(
        self,
        snapshot: LedgerSnapshot,
        module: str | None = None,
    ) -> SafeSummary:
        with self._report_scope("safe_summary", module):
            ledger = self._normalize(snapshot, module)
            return self._summary.safe_summary(ledger=ledger, now=self.now())

    def period_totals(
        self,
        snapshot: LedgerSnapshot,
        selector: PeriodSelector | str,
        module: str | None = None,
    ) -> PeriodTotals:
        with self._report_scope("period_totals", module, selector):
            period = self._resolve(selector, self.now())
            ledger = self._normalize(snapshot, module)
            return self._summary.period_totals(ledger=ledger, period=period)

    def statement(
        self,
        snapshot: LedgerSnapshot,
        selector: PeriodSelector | str,
        module: str | None = None,
    ) -> Statement:
        with self._report_scope("statement", module, selector):
            period = self._resolve(selector, self.now())
            ledger = self._normalize(snapshot, module)
            return self._statements.generate(ledger=ledger, period=period)

    def receivables(
        self,
        snapshot: LedgerSnapshot,
        as_of: datetime | None = None,
    ) -> ReceivablesReport:
        """Outstanding balances per sale and per customer."""
        with self._report_scope("receivables", None):
            local_as_of = to_local(as_of, self._tz) if as_of is not None else None
            return self._receivables.build(snapshot=snapshot, as_of=local_as_of)

    def report(
        self,
        snapshot: LedgerSnapshot,
        selector: PeriodSelector | str,
        module: str | None = None,
    ) -> LedgerReport:
        """Safe summary, period totals and statement for one clock reading."""
        with self._report_scope("report", module, selector):
            now = self.now()
            period = self._resolve(selector, now)
            ledger = self._normalize(snapshot, module)
            report = LedgerReport(
                generated_at=now,
                module=ledger.module,
                safe=self._summary.safe_summary(ledger=ledger, now=now),
                totals=self._summary.period_totals(ledger=ledger, period=period),
                statement=self._statements.generate(ledger=ledger, period=period),
                issues=ledger.issues,
            )
            logger.info(
                "ledger_report_generated",
                extra={
                    "period_label": period.label,
                    "transaction_count": len(ledger),
                    "statement_rows": report.statement.row_count,
                    "issue_count": len(ledger.issues),
                    "current_safe": report.safe.current_safe,
                    "closing_balance": report.totals.closing_balance,
                },
            )
            return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize(self, snapshot: LedgerSnapshot, module: str | None) -> NormalizedLedger:
        return self._normalizer.normalize(snapshot=snapshot, module=module)

    def _resolve(self, selector: PeriodSelector | str, now: datetime) -> Period:
        return resolve_period(selector, now, self._tz)

    @contextmanager
    def _report_scope(
        self,
        operation: str,
        module: str | None,
        selector: PeriodSelector | str | None = None,
    ) -> Iterator[None]:
        """Bind log context for one call and log hard failures."""
        with LogContext.bind(
            report_id=str(uuid4()),
            operation=operation,
            module=module,
            period=str(selector) if selector is not None else None,
        ):
            try:
                yield
            except CashbookError as e:
                if not isinstance(e, DataQualityError):
                    logger.error(
                        "ledger_computation_failed",
                        extra={"operation": operation, "error_code": e.code},
                    )
                raise

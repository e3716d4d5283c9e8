"""
Module: cashbook_engines.summary
Responsibility:
    Build period totals (opening balance, per-kind totals, closing balance,
    expense breakdown by category) and the live "today split" view of the
    safe.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  ``now`` is an explicit
    parameter.

Invariants enforced:
    - closing_balance == opening_balance + total_income - total_expense
      - total_banked, exactly.
    - opening_balance == balance_as_of(period.start), independent of the
      period end.
    - current_safe == balance_as_of(now).  The today window is
      ``[local midnight, now)`` so the split and the direct balance use
      the same strictly-before cut.

Failure modes:
    - None for dirty data (already absorbed by the normalizer).  An empty
      period yields zero totals and closing == opening.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, tzinfo
from decimal import Decimal

from cashbook_engines.balance import BalanceCalculator
from cashbook_engines.ledger_types import (
    CategoryTotal,
    KindTotals,
    NormalizedLedger,
    PeriodTotals,
    SafeSummary,
)
from cashbook_engines.periods import Period
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.transactions import TransactionKind
from cashbook_kernel.domain.values import ZERO, local_midnight, to_local


class PeriodSummaryBuilder:
    """Derives period and today-split summaries from a normalized ledger."""

    def __init__(
        self,
        calculator: BalanceCalculator | None = None,
        tz: tzinfo | None = None,
    ):
        self._calculator = calculator or BalanceCalculator(tz)
        self._tz = tz

    @traced_engine("period_summary", "1.0", fingerprint_fields=("period",))
    def period_totals(
        self,
        ledger: NormalizedLedger,
        period: Period,
    ) -> PeriodTotals:
        """
        Opening balance, movements and closing balance for ``period``.

        Args:
            ledger: Normalized transactions (already module-filtered).
            period: Resolved period window.
        """
        opening = self._calculator.balance_as_of(ledger=ledger, as_of=period.start)
        totals = KindTotals.of(ledger, lambda t: period.contains(t.date))

        return PeriodTotals(
            period_label=period.label,
            period_start=period.start,
            period_end=period.end,
            opening_balance=opening,
            total_income=totals.income,
            total_expense=totals.expense,
            total_banked=totals.banked,
            closing_balance=opening + totals.net,
            expense_by_category=self.expense_by_category(ledger, period),
            issues=ledger.issues,
        )

    @staticmethod
    def expense_by_category(
        ledger: NormalizedLedger,
        period: Period,
    ) -> tuple[CategoryTotal, ...]:
        """Expense totals per category within ``period``, sorted by category."""
        by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in ledger.of_kind(TransactionKind.EXPENSE):
            if period.contains(txn.date):
                by_category[txn.main_detail] += txn.amount
        return tuple(
            CategoryTotal(category=name, amount=by_category[name])
            for name in sorted(by_category)
        )

    @traced_engine("safe_summary", "1.0", fingerprint_fields=("now",))
    def safe_summary(
        self,
        ledger: NormalizedLedger,
        now: datetime,
    ) -> SafeSummary:
        """
        Split the current safe balance at local midnight.

        An aware ``now`` is converted to the ledger zone first, so the
        split happens at midnight of the ledger's calendar day.
        """
        now = to_local(now, self._tz)
        midnight = local_midnight(now)
        before = self._calculator.balance_as_of(ledger=ledger, as_of=midnight)
        today = self._calculator.totals_between(ledger, midnight, now)

        return SafeSummary(
            as_of=now,
            balance_before_today=before,
            cash_today=today.income,
            expenses_today=today.expense,
            banked_today=today.banked,
            current_safe=before + today.income - today.expense - today.banked,
            issues=ledger.issues,
        )

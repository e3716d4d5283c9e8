"""
Cash ledger domain types.

Pure frozen dataclasses produced by the ledger engines and handed to the
reporting collaborator: the normalized stream, per-kind totals, the
safe summary, period totals and the running-balance statement.

Architecture: cashbook_engines -- pure domain, zero I/O.

Invariants supported:
    - PeriodTotals.closing_balance == opening + income - expense - banked.
    - SafeSummary.current_safe == balance_before_today + cash_today
      - expenses_today - banked_today.
    - Statement.closing_balance == running balance of the last row, or the
      opening balance when there are no rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from cashbook_kernel.domain.transactions import (
    DataQualityIssue,
    Transaction,
    TransactionKind,
)
from cashbook_kernel.domain.values import ZERO


# =============================================================================
# Normalized stream
# =============================================================================


@dataclass(frozen=True)
class NormalizedLedger:
    """Transactions derived from one snapshot, plus the issues found.

    ``module`` is the module filter applied (None = consolidated).
    """

    transactions: tuple[Transaction, ...]
    issues: tuple[DataQualityIssue, ...] = ()
    module: str | None = None

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self):
        return iter(self.transactions)

    def of_kind(self, kind: TransactionKind) -> tuple[Transaction, ...]:
        return tuple(t for t in self.transactions if t.kind is kind)

    def dated(self) -> tuple[Transaction, ...]:
        return tuple(t for t in self.transactions if t.is_dated)


# =============================================================================
# Totals
# =============================================================================


@dataclass(frozen=True)
class KindTotals:
    """Sums of each transaction kind over some window."""

    income: Decimal = ZERO
    expense: Decimal = ZERO
    banked: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expense - self.banked

    @classmethod
    def of(
        cls,
        transactions: Iterable[Transaction],
        predicate: Callable[[Transaction], bool] | None = None,
    ) -> KindTotals:
        income = expense = banked = ZERO
        for txn in transactions:
            if predicate is not None and not predicate(txn):
                continue
            if txn.kind is TransactionKind.INCOME:
                income += txn.amount
            elif txn.kind is TransactionKind.EXPENSE:
                expense += txn.amount
            else:
                banked += txn.amount
        return cls(income=income, expense=expense, banked=banked)


@dataclass(frozen=True)
class SafeSummary:
    """The live "money in the safe" view, split at local midnight."""

    as_of: datetime
    balance_before_today: Decimal
    cash_today: Decimal
    expenses_today: Decimal
    banked_today: Decimal
    current_safe: Decimal
    issues: tuple[DataQualityIssue, ...] = ()


@dataclass(frozen=True)
class CategoryTotal:
    """Expense total for one category within a period."""

    category: str
    amount: Decimal


@dataclass(frozen=True)
class PeriodTotals:
    """Opening, movements and closing for one period."""

    period_label: str
    period_start: datetime | None
    period_end: datetime | None
    opening_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    total_banked: Decimal
    closing_balance: Decimal
    expense_by_category: tuple[CategoryTotal, ...] = ()
    issues: tuple[DataQualityIssue, ...] = ()

    @property
    def net_cash_flow(self) -> Decimal:
        return self.total_income - self.total_expense - self.total_banked


# =============================================================================
# Statement
# =============================================================================


@dataclass(frozen=True)
class StatementRow:
    """One statement line.

    Exactly one of ``income_amount``, ``expense_amount`` and
    ``banked_amount`` is set, matching ``kind``.
    """

    date: datetime
    kind: TransactionKind
    main_detail: str
    sub_detail: str
    reference: str
    income_amount: Decimal | None
    expense_amount: Decimal | None
    banked_amount: Decimal | None
    running_balance: Decimal

    @property
    def amount(self) -> Decimal:
        for value in (self.income_amount, self.expense_amount, self.banked_amount):
            if value is not None:
                return value
        return ZERO


@dataclass(frozen=True)
class Statement:
    """Chronological, running-balance-annotated transaction list."""

    period_label: str
    period_start: datetime | None
    period_end: datetime | None
    opening_balance: Decimal
    rows: tuple[StatementRow, ...]
    issues: tuple[DataQualityIssue, ...] = ()

    @property
    def closing_balance(self) -> Decimal:
        if not self.rows:
            return self.opening_balance
        return self.rows[-1].running_balance

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

"""
Module: cashbook_engines.statement
Responsibility:
    Produce the chronological cash statement for a period: every
    transaction in the window, sorted, each annotated with the running
    safe balance after it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Formatting (CSV, print,
    PDF) belongs to the reporting collaborator.

Invariants enforced:
    - Deterministic order: by date, then Income before Expense before
      Banking, then source id and payment id, then source order.
    - The running balance is seeded with balance_as_of(period.start); the
      last row's running balance equals the period closing balance.
    - An empty period yields no rows and closing == opening.
"""

from __future__ import annotations

from cashbook_engines.balance import BalanceCalculator
from cashbook_engines.ledger_types import NormalizedLedger, Statement, StatementRow
from cashbook_engines.periods import Period
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.transactions import Transaction, TransactionKind

_REFERENCE_PREFIX = {
    TransactionKind.INCOME: "INV",
    TransactionKind.EXPENSE: "EXP",
    TransactionKind.BANKING: "BNK",
}


class StatementGenerator:
    """Builds running-balance statements from a normalized ledger."""

    def __init__(
        self,
        calculator: BalanceCalculator | None = None,
        reference_length: int = 8,
    ):
        self._calculator = calculator or BalanceCalculator()
        self._reference_length = reference_length

    def reference_for(self, txn: Transaction) -> str:
        """Short human reference, e.g. ``INV-3F2A9C1B``."""
        prefix = _REFERENCE_PREFIX[txn.kind]
        return f"{prefix}-{txn.source.source_id[: self._reference_length].upper()}"

    @traced_engine("statement", "1.0", fingerprint_fields=("period",))
    def generate(
        self,
        ledger: NormalizedLedger,
        period: Period,
    ) -> Statement:
        """
        Generate the statement for ``period``.

        Args:
            ledger: Normalized transactions (already module-filtered).
            period: Resolved period window.
        """
        opening = self._calculator.balance_as_of(ledger=ledger, as_of=period.start)

        in_period = [
            (index, txn)
            for index, txn in enumerate(ledger.transactions)
            if period.contains(txn.date)
        ]
        in_period.sort(
            key=lambda pair: (
                pair[1].date,
                pair[1].kind.sort_order,
                pair[1].source.sort_key,
                pair[0],
            )
        )

        rows: list[StatementRow] = []
        running = opening
        for _, txn in in_period:
            running += txn.signed_amount
            rows.append(
                StatementRow(
                    date=txn.date,
                    kind=txn.kind,
                    main_detail=txn.main_detail,
                    sub_detail=txn.sub_detail,
                    reference=self.reference_for(txn),
                    income_amount=txn.amount if txn.kind is TransactionKind.INCOME else None,
                    expense_amount=txn.amount if txn.kind is TransactionKind.EXPENSE else None,
                    banked_amount=txn.amount if txn.kind is TransactionKind.BANKING else None,
                    running_balance=running,
                )
            )

        return Statement(
            period_label=period.label,
            period_start=period.start,
            period_end=period.end,
            opening_balance=opening,
            rows=tuple(rows),
            issues=ledger.issues,
        )

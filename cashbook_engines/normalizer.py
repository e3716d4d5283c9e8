"""
Module: cashbook_engines.normalizer
Responsibility:
    Convert a ``LedgerSnapshot`` of sales, expenses and banking records into
    one uniform stream of Income, Expense and Banking transactions,
    resolving the itemized-vs-legacy payment ambiguity on sales and
    applying the optional module filter.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Legacy exclusivity: a sale contributes either one Income per itemized
      payment or one synthetic Income for ``amountPaid``, never both.
    - Unpaid sales (no payments, zero ``amountPaid``) emit nothing.
    - Module filtering keeps or drops a sale as a unit; payments are never
      split across line items.  Banking is never module-filtered.

Failure modes:
    - UnknownModuleError for a module id not in the keyword table.
    - Dirty dates and amounts never raise.  They are recorded as
      ``DataQualityIssue`` entries and logged at WARNING: an unparseable
      date yields an undated transaction, an invalid amount a zero one.

Usage:
    normalizer = TransactionNormalizer(keyword_table)
    ledger = normalizer.normalize(snapshot=snapshot, module="dtf")
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Any

from cashbook_config.schema import ModuleKeywordTable
from cashbook_engines.ledger_types import NormalizedLedger
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.records import (
    BankingRecord,
    Expense,
    Itemized,
    LedgerSnapshot,
    Legacy,
    Sale,
)
from cashbook_kernel.domain.transactions import (
    DataQualityIssue,
    IssueCode,
    SourceKind,
    SourceReference,
    Transaction,
    TransactionKind,
)
from cashbook_kernel.domain.values import ZERO, coerce_amount, parse_instant
from cashbook_kernel.exceptions import InvalidAmountError, UnparseableDateError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.normalizer")

UNCATEGORIZED = "Uncategorized"
WALK_IN_CUSTOMER = "Walk-in customer"
BANK_DEPOSIT = "Bank deposit"


class TransactionNormalizer:
    """
    Derives the transaction stream from source records.

    Contract:
        Stateless apart from its configuration; ``normalize`` is a pure
        function of (snapshot, module).
    """

    def __init__(
        self,
        keyword_table: ModuleKeywordTable,
        tz: tzinfo | None = None,
    ):
        self._keyword_table = keyword_table
        self._tz = tz

    @traced_engine("normalizer", "1.0", fingerprint_fields=("snapshot", "module"))
    def normalize(
        self,
        snapshot: LedgerSnapshot,
        module: str | None = None,
    ) -> NormalizedLedger:
        """
        Build the normalized ledger for ``snapshot``.

        Args:
            snapshot: Immutable source records.
            module: Module id to scope the stream to; None or ``"all"``
                for the consolidated view.

        Returns:
            NormalizedLedger with transactions in source order (sales,
            then expenses, then banking) and every issue found.
        """
        module_id = self._keyword_table.resolve(module)
        customer_names = snapshot.customer_names()
        transactions: list[Transaction] = []
        issues: list[DataQualityIssue] = []

        for sale in snapshot.sales:
            if not self._keyword_table.matches(module_id, *sale.item_names):
                continue
            transactions.extend(self._sale_transactions(sale, customer_names, issues))

        for expense in snapshot.expenses:
            if not self._keyword_table.matches(module_id, expense.category, expense.description):
                continue
            transactions.append(self._expense_transaction(expense, issues))

        for record in snapshot.banking_records:
            transactions.append(self._banking_transaction(record, issues))

        for issue in issues:
            logger.warning("data_quality_issue", extra=issue.as_log_extra())

        return NormalizedLedger(
            transactions=tuple(transactions),
            issues=tuple(issues),
            module=module_id,
        )

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def _sale_transactions(
        self,
        sale: Sale,
        customer_names: dict[str, str],
        issues: list[DataQualityIssue],
    ) -> list[Transaction]:
        main_detail = self._customer_label(sale, customer_names)
        items = ", ".join(name for name in sale.item_names if name)

        record = sale.payment_record()
        if isinstance(record, Itemized):
            txns = self._itemized_income(sale, record, main_detail, items, issues)
            self._check_legacy_consistency(sale, txns, issues)
            return txns
        else:
            return self._legacy_income(sale, record, main_detail, items, issues)

    def _itemized_income(
        self,
        sale: Sale,
        record: Itemized,
        main_detail: str,
        items: str,
        issues: list[DataQualityIssue],
    ) -> list[Transaction]:
        txns = []
        for payment in record.payments:
            source = SourceReference(SourceKind.SALE, sale.sale_id, payment.payment_id)
            sub_detail = f"{items} ({payment.note})" if payment.note else items
            txns.append(
                Transaction(
                    date=self._date(payment.date, source, issues),
                    kind=TransactionKind.INCOME,
                    amount=self._amount(payment.amount, source, issues),
                    source=source,
                    main_detail=main_detail,
                    sub_detail=sub_detail,
                )
            )
        return txns

    def _legacy_income(
        self,
        sale: Sale,
        record: Legacy,
        main_detail: str,
        items: str,
        issues: list[DataQualityIssue],
    ) -> list[Transaction]:
        """At most one Income at the sale date; nothing for an unpaid sale."""
        source = SourceReference(SourceKind.SALE, sale.sale_id)
        if record.amount_paid is None:
            return []
        amount = self._amount(record.amount_paid, source, issues)
        if amount <= ZERO:
            return []
        return [
            Transaction(
                date=self._date(sale.date, source, issues),
                kind=TransactionKind.INCOME,
                amount=amount,
                source=source,
                main_detail=main_detail,
                sub_detail=items,
            )
        ]

    def _check_legacy_consistency(
        self,
        sale: Sale,
        payment_txns: list[Transaction],
        issues: list[DataQualityIssue],
    ) -> None:
        """Flag a nonzero ``amountPaid`` that disagrees with the payments.

        The payments stay authoritative; nothing is adjusted.
        """
        raw = sale.amount_paid
        if raw is None:
            return
        payments_total = sum((t.amount for t in payment_txns), ZERO)
        try:
            legacy = coerce_amount(raw)
        except InvalidAmountError:
            detail = f"amountPaid {raw!r} unreadable; payments total {payments_total}"
        else:
            if legacy == ZERO or legacy == payments_total:
                return
            detail = f"amountPaid {legacy} != payments total {payments_total}; payments used"
        issues.append(
            DataQualityIssue(
                code=IssueCode.AMBIGUOUS_LEGACY_PAYMENT,
                source_kind=SourceKind.SALE,
                source_id=sale.sale_id,
                detail=detail,
            )
        )

    @staticmethod
    def _customer_label(sale: Sale, customer_names: dict[str, str]) -> str:
        if sale.customer_id is None:
            return WALK_IN_CUSTOMER
        return customer_names.get(sale.customer_id) or sale.customer_id

    # ------------------------------------------------------------------
    # Expenses and banking
    # ------------------------------------------------------------------

    def _expense_transaction(
        self,
        expense: Expense,
        issues: list[DataQualityIssue],
    ) -> Transaction:
        source = SourceReference(SourceKind.EXPENSE, expense.expense_id)
        return Transaction(
            date=self._date(expense.date, source, issues),
            kind=TransactionKind.EXPENSE,
            amount=self._amount(expense.amount, source, issues),
            source=source,
            main_detail=expense.category or UNCATEGORIZED,
            sub_detail=expense.description,
        )

    def _banking_transaction(
        self,
        record: BankingRecord,
        issues: list[DataQualityIssue],
    ) -> Transaction:
        source = SourceReference(SourceKind.BANKING, record.record_id)
        return Transaction(
            date=self._date(record.date, source, issues),
            kind=TransactionKind.BANKING,
            amount=self._amount(record.amount, source, issues),
            source=source,
            main_detail=BANK_DEPOSIT,
            sub_detail=record.recorded_by or "",
        )

    # ------------------------------------------------------------------
    # Coercion with issue capture
    # ------------------------------------------------------------------

    def _date(
        self,
        value: Any,
        source: SourceReference,
        issues: list[DataQualityIssue],
    ) -> datetime | None:
        try:
            return parse_instant(value, self._tz)
        except UnparseableDateError as e:
            issues.append(DataQualityIssue.from_error(e, source))
            return None

    @staticmethod
    def _amount(
        value: Any,
        source: SourceReference,
        issues: list[DataQualityIssue],
    ) -> Decimal:
        try:
            return coerce_amount(value)
        except InvalidAmountError as e:
            issues.append(DataQualityIssue.from_error(e, source))
            return ZERO

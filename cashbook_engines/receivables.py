"""
Module: cashbook_engines.receivables
Responsibility:
    Derive what each sale and each customer still owes: paid-to-date per
    sale (from the same single payment representation the ledger uses),
    outstanding balance, payment status, and per-customer debt.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Legacy exclusivity: paid-to-date is the itemized payment sum when
      payments exist, otherwise the legacy ``amountPaid``.  Never both.
    - Status derivation: Paid if paid >= total, Partially Paid if
      paid > 0, else Unpaid.  A recorded status that disagrees is flagged
      as STATUS_MISMATCH and left as recorded on the source.

Failure modes:
    - Dirty totals and amounts count as zero and are flagged.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Any

from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.records import Itemized, LedgerSnapshot, Sale
from cashbook_kernel.domain.transactions import (
    DataQualityIssue,
    IssueCode,
    SourceKind,
    SourceReference,
)
from cashbook_kernel.domain.values import ZERO, coerce_amount, parse_instant
from cashbook_kernel.exceptions import InvalidAmountError, UnparseableDateError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("engines.receivables")


class PaymentStatus(str, Enum):
    """Sale payment status as shown on invoices."""

    PAID = "Paid"
    PARTIALLY_PAID = "Partially Paid"
    UNPAID = "Unpaid"


def derive_payment_status(total: Decimal, paid: Decimal) -> PaymentStatus:
    if paid >= total:
        return PaymentStatus.PAID
    if paid > ZERO:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID


@dataclass(frozen=True)
class SaleBalance:
    """Receivable position of one sale."""

    sale_id: str
    customer_id: str | None
    total: Decimal
    paid: Decimal
    status: PaymentStatus

    @property
    def outstanding(self) -> Decimal:
        return self.total - self.paid


@dataclass(frozen=True)
class CustomerBalance:
    """Receivable position of one customer across their sales."""

    customer_id: str
    name: str
    total_spent: Decimal
    total_paid: Decimal

    @property
    def outstanding_debt(self) -> Decimal:
        return self.total_spent - self.total_paid


@dataclass(frozen=True)
class ReceivablesReport:
    """Per-sale and per-customer receivables."""

    as_of: datetime | None
    lines: tuple[SaleBalance, ...]
    customers: tuple[CustomerBalance, ...]
    issues: tuple[DataQualityIssue, ...] = ()

    @property
    def total_outstanding(self) -> Decimal:
        return sum(
            (line.outstanding for line in self.lines if line.outstanding > ZERO),
            ZERO,
        )

    def debtors(self) -> tuple[CustomerBalance, ...]:
        return tuple(c for c in self.customers if c.outstanding_debt > ZERO)


class ReceivablesCalculator:
    """Computes receivables from a snapshot."""

    def __init__(self, tz: tzinfo | None = None):
        self._tz = tz

    def paid_to_date(
        self,
        sale: Sale,
        as_of: datetime | None = None,
        issues: list[DataQualityIssue] | None = None,
    ) -> Decimal:
        """
        Cash received against ``sale`` (strictly before ``as_of`` if given).

        Legacy ``amountPaid`` carries no payment date; it counts from the
        sale date.
        """
        sink: list[DataQualityIssue] = issues if issues is not None else []
        record = sale.payment_record()
        if isinstance(record, Itemized):
            paid = ZERO
            for payment in record.payments:
                source = SourceReference(SourceKind.SALE, sale.sale_id, payment.payment_id)
                if as_of is not None and not self._before(payment.date, as_of, source, sink):
                    continue
                paid += self._amount(payment.amount, source, sink)
            return paid

        source = SourceReference(SourceKind.SALE, sale.sale_id)
        if record.amount_paid is None:
            return ZERO
        if as_of is not None and not self._before(sale.date, as_of, source, sink):
            return ZERO
        return self._amount(record.amount_paid, source, sink)

    @traced_engine("receivables", "1.0", fingerprint_fields=("snapshot", "as_of"))
    def build(
        self,
        snapshot: LedgerSnapshot,
        as_of: datetime | None = None,
    ) -> ReceivablesReport:
        """
        Build receivables for every sale in ``snapshot``.

        With ``as_of`` only sales and payments dated strictly before it
        count, and recorded statuses are not compared (they describe the
        present, not ``as_of``).
        """
        issues: list[DataQualityIssue] = []
        lines: list[SaleBalance] = []

        for sale in snapshot.sales:
            source = SourceReference(SourceKind.SALE, sale.sale_id)
            if as_of is not None and not self._before(sale.date, as_of, source, issues):
                continue
            total = self._amount(sale.total, source, issues)
            paid = self.paid_to_date(sale, as_of, issues)
            status = derive_payment_status(total, paid)
            if as_of is None:
                self._check_status(sale, status, issues)
            lines.append(
                SaleBalance(
                    sale_id=sale.sale_id,
                    customer_id=sale.customer_id,
                    total=total,
                    paid=paid,
                    status=status,
                )
            )

        for issue in issues:
            logger.warning("data_quality_issue", extra=issue.as_log_extra())

        return ReceivablesReport(
            as_of=as_of,
            lines=tuple(lines),
            customers=self._by_customer(snapshot, lines),
            issues=tuple(issues),
        )

    @staticmethod
    def _by_customer(
        snapshot: LedgerSnapshot,
        lines: list[SaleBalance],
    ) -> tuple[CustomerBalance, ...]:
        spent: dict[str, Decimal] = defaultdict(lambda: ZERO)
        paid: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for line in lines:
            if line.customer_id is None:
                continue
            spent[line.customer_id] += line.total
            paid[line.customer_id] += line.paid

        names = snapshot.customer_names()
        customer_ids = list(names)
        customer_ids += sorted(cid for cid in spent if cid not in names)
        return tuple(
            CustomerBalance(
                customer_id=cid,
                name=names.get(cid, cid),
                total_spent=spent[cid],
                total_paid=paid[cid],
            )
            for cid in customer_ids
        )

    @staticmethod
    def _check_status(
        sale: Sale,
        derived: PaymentStatus,
        issues: list[DataQualityIssue],
    ) -> None:
        if sale.status is None:
            return
        try:
            recorded = PaymentStatus(sale.status)
        except ValueError:
            return
        if recorded is not derived:
            issues.append(
                DataQualityIssue(
                    code=IssueCode.STATUS_MISMATCH,
                    source_kind=SourceKind.SALE,
                    source_id=sale.sale_id,
                    detail=f"recorded status {recorded.value!r}, payments say {derived.value!r}",
                )
            )

    def _before(
        self,
        value: Any,
        as_of: datetime,
        source: SourceReference,
        issues: list[DataQualityIssue],
    ) -> bool:
        try:
            return parse_instant(value, self._tz) < as_of
        except UnparseableDateError as e:
            issues.append(DataQualityIssue.from_error(e, source))
            return False

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

"""
Records -- Immutable snapshots of the collaborator-owned source records.

Responsibility:
    Frozen value objects for Sale, Expense, BankingRecord and Customer as
    they arrive from the sales, expense and banking collaborators, plus the
    ``LedgerSnapshot`` that bundles one consistent set of them.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O.  The ledger never
    mutates these; every computation receives a fresh snapshot.

Invariants enforced:
    - A sale exposes exactly one payment representation through
      ``Sale.payment_record()``: ``Itemized`` when ``payments`` is
      non-empty, ``Legacy`` otherwise.  The two are never merged.
    - Dates and amounts are kept as received.  Validation happens in the
      normalizer so dirty values degrade instead of aborting ingestion.

Failure modes:
    - InvalidRecordError when a record is not a mapping or has no id.
    - MissingCollectionError when a snapshot collection is None.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from cashbook_kernel.exceptions import InvalidRecordError, MissingCollectionError


def _require_mapping(data: Any, record_type: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidRecordError(record_type, f"expected a mapping, got {type(data).__name__}")
    return data


def _require_id(data: Mapping[str, Any], record_type: str) -> str:
    value = data.get("id")
    if value is None or str(value).strip() == "":
        raise InvalidRecordError(record_type, "missing id")
    return str(value)


@dataclass(frozen=True)
class SaleItem:
    """One invoiced line.  Only ``name`` matters to the ledger."""

    name: str
    quantity: Any = 0
    price: Any = 0

    @classmethod
    def from_mapping(cls, data: Any) -> SaleItem:
        data = _require_mapping(data, "SaleItem")
        return cls(
            name=str(data.get("name") or ""),
            quantity=data.get("quantity", 0),
            price=data.get("price", 0),
        )


@dataclass(frozen=True)
class Payment:
    """One itemized payment received against a sale."""

    payment_id: str
    date: Any
    amount: Any
    recorded_by: str | None = None
    note: str | None = None

    @classmethod
    def from_mapping(cls, data: Any) -> Payment:
        data = _require_mapping(data, "Payment")
        return cls(
            payment_id=_require_id(data, "Payment"),
            date=data.get("date"),
            amount=data.get("amount"),
            recorded_by=data.get("recordedBy"),
            note=data.get("note"),
        )


@dataclass(frozen=True)
class Itemized:
    """Payment history is authoritative for this sale."""

    payments: tuple[Payment, ...]


@dataclass(frozen=True)
class Legacy:
    """Only the single ``amountPaid`` field is available for this sale."""

    amount_paid: Any


PaymentRecord = Itemized | Legacy


@dataclass(frozen=True)
class Sale:
    """A sale (invoice) with its payment information."""

    sale_id: str
    date: Any
    items: tuple[SaleItem, ...] = ()
    subtotal: Any = 0
    discount: Any = 0
    total: Any = 0
    amount_paid: Any = 0
    status: str | None = None
    payments: tuple[Payment, ...] = ()
    customer_id: str | None = None

    def payment_record(self) -> PaymentRecord:
        """Select the single payment representation for this sale."""
        if self.payments:
            return Itemized(self.payments)
        return Legacy(self.amount_paid)

    @property
    def item_names(self) -> tuple[str, ...]:
        return tuple(item.name for item in self.items)

    @classmethod
    def from_mapping(cls, data: Any) -> Sale:
        data = _require_mapping(data, "Sale")
        customer_id = data.get("customerId")
        return cls(
            sale_id=_require_id(data, "Sale"),
            date=data.get("date"),
            items=tuple(SaleItem.from_mapping(i) for i in data.get("items") or ()),
            subtotal=data.get("subtotal", 0),
            discount=data.get("discount", 0),
            total=data.get("total", 0),
            amount_paid=data.get("amountPaid", 0),
            status=data.get("status"),
            payments=tuple(Payment.from_mapping(p) for p in data.get("payments") or ()),
            customer_id=str(customer_id) if customer_id is not None else None,
        )


@dataclass(frozen=True)
class Expense:
    """An operating expense paid out of the till."""

    expense_id: str
    date: Any
    amount: Any
    category: str = ""
    description: str = ""

    @classmethod
    def from_mapping(cls, data: Any) -> Expense:
        data = _require_mapping(data, "Expense")
        return cls(
            expense_id=_require_id(data, "Expense"),
            date=data.get("date"),
            amount=data.get("amount"),
            category=str(data.get("category") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class BankingRecord:
    """Cash removed from the till for deposit at the bank."""

    record_id: str
    date: Any
    amount: Any
    recorded_by: str | None = None

    @classmethod
    def from_mapping(cls, data: Any) -> BankingRecord:
        data = _require_mapping(data, "BankingRecord")
        return cls(
            record_id=_require_id(data, "BankingRecord"),
            date=data.get("date"),
            amount=data.get("amount"),
            recorded_by=data.get("recordedBy"),
        )


@dataclass(frozen=True)
class Customer:
    """Customer master data; used for statement and receivable labels."""

    customer_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    @classmethod
    def from_mapping(cls, data: Any) -> Customer:
        data = _require_mapping(data, "Customer")
        return cls(
            customer_id=_require_id(data, "Customer"),
            name=str(data.get("name") or ""),
            email=data.get("email"),
            phone=data.get("phone"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    One immutable, consistent set of source records.

    Contract:
        ``sales``, ``expenses`` and ``banking_records`` are required;
        ``customers`` is optional and only used for labels and
        receivables.
    """

    sales: tuple[Sale, ...]
    expenses: tuple[Expense, ...]
    banking_records: tuple[BankingRecord, ...]
    customers: tuple[Customer, ...] = ()

    def __post_init__(self) -> None:
        for name in ("sales", "expenses", "banking_records"):
            if getattr(self, name) is None:
                raise MissingCollectionError(name)
        if self.customers is None:
            object.__setattr__(self, "customers", ())

    @classmethod
    def of(
        cls,
        sales: Iterable[Sale] | None,
        expenses: Iterable[Expense] | None,
        banking_records: Iterable[BankingRecord] | None,
        customers: Iterable[Customer] | None = None,
    ) -> LedgerSnapshot:
        """Build a snapshot from typed records, freezing the collections."""
        for name, value in (
            ("sales", sales),
            ("expenses", expenses),
            ("banking_records", banking_records),
        ):
            if value is None:
                raise MissingCollectionError(name)
        return cls(
            sales=tuple(sales),
            expenses=tuple(expenses),
            banking_records=tuple(banking_records),
            customers=tuple(customers or ()),
        )

    @classmethod
    def from_mappings(
        cls,
        sales: Iterable[Any] | None,
        expenses: Iterable[Any] | None,
        banking_records: Iterable[Any] | None,
        customers: Iterable[Any] | None = None,
    ) -> LedgerSnapshot:
        """Build a snapshot from raw collaborator collections (camelCase dicts)."""
        for name, value in (
            ("sales", sales),
            ("expenses", expenses),
            ("banking_records", banking_records),
        ):
            if value is None:
                raise MissingCollectionError(name)
        return cls(
            sales=tuple(Sale.from_mapping(s) for s in sales),
            expenses=tuple(Expense.from_mapping(e) for e in expenses),
            banking_records=tuple(BankingRecord.from_mapping(b) for b in banking_records),
            customers=tuple(Customer.from_mapping(c) for c in customers or ()),
        )

    def customer_names(self) -> dict[str, str]:
        return {c.customer_id: c.name for c in self.customers}

    def digest(self) -> str:
        """SHA-256 of every collection's size and contents.

        Identical snapshots share a digest; correcting any record changes it.
        """
        h = hashlib.sha256()
        for name in ("sales", "expenses", "banking_records", "customers"):
            rows = getattr(self, name)
            h.update(f"{name}:{len(rows)}:{rows!r}\n".encode())
        return h.hexdigest()

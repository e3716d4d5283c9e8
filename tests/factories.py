"""
Record factories for cash ledger tests.

Plain functions (no fixtures) so tests and Hypothesis strategies can build
sales, expenses and banking records inline.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from cashbook_kernel.domain.records import (
    BankingRecord,
    Customer,
    Expense,
    LedgerSnapshot,
    Payment,
    Sale,
    SaleItem,
)


def _id() -> str:
    return uuid4().hex


def payment(date: Any, amount: Any, payment_id: str | None = None, note: str | None = None) -> Payment:
    return Payment(
        payment_id=payment_id or _id(),
        date=date,
        amount=amount,
        recorded_by="cashier",
        note=note,
    )


def sale(
    date: Any,
    *,
    payments: tuple[Payment, ...] = (),
    amount_paid: Any = 0,
    total: Any = None,
    items: tuple[str, ...] = ("Vinyl banner print",),
    status: str | None = None,
    customer_id: str | None = None,
    sale_id: str | None = None,
) -> Sale:
    if total is None:
        total = amount_paid if not payments else sum(p.amount for p in payments)
    return Sale(
        sale_id=sale_id or _id(),
        date=date,
        items=tuple(SaleItem(name=name, quantity=1, price=total) for name in items),
        subtotal=total,
        discount=0,
        total=total,
        amount_paid=amount_paid,
        status=status,
        payments=payments,
        customer_id=customer_id,
    )


def expense(
    date: Any,
    amount: Any,
    *,
    category: str = "Rent",
    description: str = "",
    expense_id: str | None = None,
) -> Expense:
    return Expense(
        expense_id=expense_id or _id(),
        date=date,
        amount=amount,
        category=category,
        description=description,
    )


def banking(date: Any, amount: Any, *, record_id: str | None = None) -> BankingRecord:
    return BankingRecord(
        record_id=record_id or _id(),
        date=date,
        amount=amount,
        recorded_by="banker",
    )


def customer(customer_id: str, name: str) -> Customer:
    return Customer(customer_id=customer_id, name=name)


def snapshot(
    sales: tuple[Sale, ...] | list[Sale] = (),
    expenses: tuple[Expense, ...] | list[Expense] = (),
    banking_records: tuple[BankingRecord, ...] | list[BankingRecord] = (),
    customers: tuple[Customer, ...] | list[Customer] = (),
) -> LedgerSnapshot:
    return LedgerSnapshot.of(sales, expenses, banking_records, customers)

"""
Pure domain layer.

This module contains immutable value objects with NO dependencies on:
- Database
- Time/clock (except the injectable Clock itself)
- I/O

All domain objects are immutable and deterministic.
"""

from cashbook_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from cashbook_kernel.domain.records import (
    BankingRecord,
    Customer,
    Expense,
    Itemized,
    LedgerSnapshot,
    Legacy,
    Payment,
    PaymentRecord,
    Sale,
    SaleItem,
)
from cashbook_kernel.domain.transactions import (
    DataQualityIssue,
    IssueCode,
    SourceKind,
    SourceReference,
    Transaction,
    TransactionKind,
)
from cashbook_kernel.domain.values import (
    ZERO,
    coerce_amount,
    local_midnight,
    parse_instant,
    to_local,
)

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Records
    "BankingRecord",
    "Customer",
    "Expense",
    "Itemized",
    "LedgerSnapshot",
    "Legacy",
    "Payment",
    "PaymentRecord",
    "Sale",
    "SaleItem",
    # Transactions
    "DataQualityIssue",
    "IssueCode",
    "SourceKind",
    "SourceReference",
    "Transaction",
    "TransactionKind",
    # Values
    "ZERO",
    "coerce_amount",
    "local_midnight",
    "parse_instant",
    "to_local",
]

"""
Module: cashbook_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure cash
    ledger engines.  This is the canonical import surface for
    ``cashbook_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import cashbook_kernel and cashbook_config.
    MUST NOT import cashbook_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  The reference instant
      is always passed in by the caller.
    - Decimal-only arithmetic for all amounts.
    - Determinism: identical inputs always produce identical outputs.

Dependency order (leaves first):
    normalizer -> periods -> balance -> summary -> statement

Usage:
    from cashbook_engines import (
        BalanceCalculator,
        PeriodSummaryBuilder,
        StatementGenerator,
        TransactionNormalizer,
        resolve_period,
    )
"""

from cashbook_engines.balance import BalanceCalculator
from cashbook_engines.ledger_types import (
    CategoryTotal,
    KindTotals,
    NormalizedLedger,
    PeriodTotals,
    SafeSummary,
    Statement,
    StatementRow,
)
from cashbook_engines.normalizer import TransactionNormalizer
from cashbook_engines.periods import Period, PeriodKind, PeriodSelector, resolve_period
from cashbook_engines.receivables import (
    CustomerBalance,
    PaymentStatus,
    ReceivablesCalculator,
    ReceivablesReport,
    SaleBalance,
    derive_payment_status,
)
from cashbook_engines.statement import StatementGenerator
from cashbook_engines.summary import PeriodSummaryBuilder
from cashbook_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Normalizer
    "TransactionNormalizer",
    "NormalizedLedger",
    # Periods
    "Period",
    "PeriodKind",
    "PeriodSelector",
    "resolve_period",
    # Balance
    "BalanceCalculator",
    "KindTotals",
    # Summary
    "PeriodSummaryBuilder",
    "PeriodTotals",
    "CategoryTotal",
    "SafeSummary",
    # Statement
    "StatementGenerator",
    "Statement",
    "StatementRow",
    # Receivables
    "ReceivablesCalculator",
    "ReceivablesReport",
    "SaleBalance",
    "CustomerBalance",
    "PaymentStatus",
    "derive_payment_status",
    # Tracing
    "traced_engine",
    "compute_input_fingerprint",
]

"""
cashbook_services -- Package init and public API.

Responsibility:
    Imperative shell that composes the pure cash ledger engines
    (cashbook_engines/) with the injectable clock and the ledger
    configuration.  This is the only layer that reads wall-clock time.

Architecture position:
    Services -- orchestration over engines + kernel.

        cashbook_services/ -> cashbook_engines/  (allowed)
        cashbook_services/ -> cashbook_kernel/   (allowed)
        cashbook_engines/  -> cashbook_services/ (FORBIDDEN)
        cashbook_kernel/   -> cashbook_services/ (FORBIDDEN)
"""

from cashbook_services.cash_ledger_service import CashLedgerService, LedgerReport

__all__ = [
    "CashLedgerService",
    "LedgerReport",
]

"""
Cashbook Kernel

Shared foundation for the cash ledger:
- Immutable source-record snapshots (sales, expenses, banking)
- The normalized transaction type
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Injectable clock
"""

__version__ = "0.1.0"

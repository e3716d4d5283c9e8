"""
Module: cashbook_engines.balance
Responsibility:
    Compute the safe balance as of any instant by scanning the normalized
    transaction stream.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - No stored balances: every call rescans the full stream, so a
      retroactive correction to any source record is reflected at once.
    - Strictly-before semantics: a transaction dated exactly at ``as_of``
      is NOT included.  ``balance_as_of(period.start)`` is therefore the
      opening balance of the period.
    - Additivity: balance_as_of(b) == balance_as_of(a) + net_flow(a, b)
      for any a <= b.
    - Undated transactions never contribute.

Usage:
    calculator = BalanceCalculator()
    opening = calculator.balance_as_of(ledger=ledger, as_of=period.start)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, tzinfo
from decimal import Decimal

from cashbook_engines.ledger_types import KindTotals
from cashbook_engines.tracer import traced_engine
from cashbook_kernel.domain.transactions import Transaction
from cashbook_kernel.domain.values import ZERO, to_local


class BalanceCalculator:
    """Safe-balance arithmetic over a transaction stream.

    Aware instants are converted to ``tz`` (host zone when None) before
    they are compared with the naive local transaction dates.
    """

    def __init__(self, tz: tzinfo | None = None):
        self._tz = tz

    @traced_engine("balance", "1.0", fingerprint_fields=("as_of",))
    def balance_as_of(
        self,
        ledger: Iterable[Transaction],
        as_of: datetime | None,
    ) -> Decimal:
        """
        Income minus expenses minus banking, dated strictly before ``as_of``.

        ``as_of=None`` denotes the beginning of time and yields zero.
        """
        if as_of is None:
            return ZERO
        cut = to_local(as_of, self._tz)
        return sum(
            (t.signed_amount for t in ledger if t.is_before(cut)),
            ZERO,
        )

    def totals_between(
        self,
        ledger: Iterable[Transaction],
        start: datetime | None,
        end: datetime | None,
    ) -> KindTotals:
        """Per-kind sums for transactions dated in ``[start, end)``.

        None bounds are open.  Undated transactions are excluded.
        """
        if start is not None:
            start = to_local(start, self._tz)
        if end is not None:
            end = to_local(end, self._tz)

        def in_window(t: Transaction) -> bool:
            if t.date is None:
                return False
            if start is not None and t.date < start:
                return False
            return end is None or t.date < end

        return KindTotals.of(ledger, in_window)

    def net_flow(
        self,
        ledger: Iterable[Transaction],
        start: datetime | None,
        end: datetime | None,
    ) -> Decimal:
        """Net cash movement over ``[start, end)``."""
        return self.totals_between(ledger, start, end).net

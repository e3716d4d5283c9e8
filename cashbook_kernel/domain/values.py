"""
Values -- Amount and instant coercion for raw source records.

Responsibility:
    Turns the loosely typed values found on collaborator records (ISO
    strings, JS-style numbers, ``datetime`` objects) into the two types the
    engines compute with: ``Decimal`` amounts and naive local ``datetime``
    instants.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str()`` so
      that 0.1 stays 0.1.
    - Local calendar semantics: every instant leaves this module naive and
      expressed in the ledger's local zone, so "same calendar day" is a
      plain ``date()`` comparison.

Failure modes:
    - UnparseableDateError for missing or unrecognised dates.
    - InvalidAmountError for non-numeric, non-finite or negative amounts.
    Both are caught by the normalizer and never reach callers.
"""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any

from cashbook_kernel.exceptions import InvalidAmountError, UnparseableDateError

ZERO = Decimal("0")


def to_local(instant: datetime, tz: tzinfo | None = None) -> datetime:
    """
    Express ``instant`` as a naive wall-clock time in the ledger zone.

    Naive instants are assumed to already be local.  Aware instants are
    converted to ``tz`` (host local zone when ``tz`` is None).
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant
    return instant.astimezone(tz).replace(tzinfo=None)


def parse_instant(value: Any, tz: tzinfo | None = None) -> datetime:
    """
    Parse a raw date value into a naive local ``datetime``.

    Accepts ``datetime``, ``date`` (local midnight) and ISO-8601 strings.
    Date-only strings mean local midnight; a trailing ``Z`` means UTC.

    Raises:
        UnparseableDateError: value is missing or not understood.
    """
    if isinstance(value, datetime):
        return to_local(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        raise UnparseableDateError(value)

    text = value.strip()
    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.min)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return to_local(datetime.fromisoformat(text), tz)
    except ValueError as e:
        raise UnparseableDateError(value) from e


def coerce_amount(value: Any) -> Decimal:
    """
    Convert a raw amount into a non-negative ``Decimal``.

    Raises:
        InvalidAmountError: value is missing, boolean, non-numeric,
            non-finite or negative.
    """
    if value is None:
        raise InvalidAmountError(value, "missing")
    if isinstance(value, bool):
        raise InvalidAmountError(value, "boolean is not an amount")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, float):
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip().replace(",", ""))
        else:
            raise InvalidAmountError(value, f"unsupported type {type(value).__name__}")
    except InvalidOperation as e:
        raise InvalidAmountError(value, "not a number") from e

    if not amount.is_finite():
        raise InvalidAmountError(value, "not finite")
    if amount < 0:
        raise InvalidAmountError(value, "negative")
    return amount


def local_midnight(instant: datetime) -> datetime:
    """Start of the calendar day containing ``instant``."""
    return datetime.combine(instant.date(), time.min)

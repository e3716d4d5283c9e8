"""
Module: cashbook_engines.periods
Responsibility:
    Turn a period selector (today, yesterday, month, year, all, a specific
    date, a date range) plus a reference instant into a concrete half-open
    window ``[start, end)`` of local wall-clock time.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  ``now`` is always passed
    in; the resolver never reads a clock.

Invariants enforced:
    - Calendar semantics: "today" is the local calendar day of ``now``,
      not a rolling 24-hour window.
    - Ranges include both boundary days: ``end`` is midnight after the last
      day, equivalent to an inclusive 23:59:59.999 bound at any precision.
    - ``all`` is unbounded on both sides and contains every dated instant.
    - Undated transactions belong to no period.

Failure modes:
    - InvalidPeriodError for an unknown kind, a missing date, or a range
      whose end precedes its start.  These are programmer errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum

from cashbook_kernel.domain.values import local_midnight, to_local
from cashbook_kernel.exceptions import InvalidPeriodError

_RANGE_SEPARATOR = ".."


class PeriodKind(str, Enum):
    """Supported period selectors."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"
    CUSTOM = "custom"  # one specific calendar date
    RANGE = "range"  # inclusive range of calendar dates


@dataclass(frozen=True)
class PeriodSelector:
    """What the user picked; resolved against ``now`` by ``resolve_period``."""

    kind: PeriodKind
    on: date | None = None
    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "kind", PeriodKind(self.kind))
        except ValueError as e:
            raise InvalidPeriodError(self.kind, "unknown period kind") from e

    @classmethod
    def specific_date(cls, on: date) -> PeriodSelector:
        return cls(PeriodKind.CUSTOM, on=on)

    @classmethod
    def date_range(cls, start: date, end: date) -> PeriodSelector:
        return cls(PeriodKind.RANGE, start=start, end=end)

    @classmethod
    def parse(cls, text: str) -> PeriodSelector:
        """
        Parse ``today``, ``month``..., ``YYYY-MM-DD`` or
        ``YYYY-MM-DD..YYYY-MM-DD``.
        """
        value = text.strip().lower()
        try:
            if _RANGE_SEPARATOR in value:
                first, _, last = value.partition(_RANGE_SEPARATOR)
                return cls.date_range(
                    date.fromisoformat(first.strip()),
                    date.fromisoformat(last.strip()),
                )
            if value[:1].isdigit():
                return cls.specific_date(date.fromisoformat(value))
        except ValueError as e:
            raise InvalidPeriodError(text, "invalid date") from e
        return cls(value)

    def __str__(self) -> str:
        if self.kind is PeriodKind.CUSTOM and self.on is not None:
            return self.on.isoformat()
        if self.kind is PeriodKind.RANGE and self.start and self.end:
            return f"{self.start.isoformat()}{_RANGE_SEPARATOR}{self.end.isoformat()}"
        return self.kind.value


@dataclass(frozen=True)
class Period:
    """A resolved window ``[start, end)``; None bounds are open."""

    kind: PeriodKind
    start: datetime | None
    end: datetime | None
    label: str

    def contains(self, instant: datetime | None) -> bool:
        if instant is None:
            return False
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant >= self.end:
            return False
        return True

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None


def _day_window(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def _fmt(day: date) -> str:
    return day.strftime("%d %b %Y")


def resolve_period(
    selector: PeriodSelector | str,
    now: datetime,
    tz: tzinfo | None = None,
) -> Period:
    """
    Resolve ``selector`` against the reference instant ``now``.

    Args:
        selector: A PeriodSelector or its string form.
        now: Reference instant; aware values are converted to ``tz``.
        tz: Ledger zone (host local zone when None).

    Raises:
        InvalidPeriodError: the selector cannot be resolved.
    """
    if isinstance(selector, str):
        selector = PeriodSelector.parse(selector)
    now = to_local(now, tz)
    today = local_midnight(now).date()
    kind = selector.kind

    if kind is PeriodKind.TODAY:
        start, end = _day_window(today)
        return Period(kind, start, end, "Today")

    if kind is PeriodKind.YESTERDAY:
        start, end = _day_window(today - timedelta(days=1))
        return Period(kind, start, end, "Yesterday")

    if kind is PeriodKind.MONTH:
        start = datetime(today.year, today.month, 1)
        if today.month == 12:
            end = datetime(today.year + 1, 1, 1)
        else:
            end = datetime(today.year, today.month + 1, 1)
        return Period(kind, start, end, "This Month")

    if kind is PeriodKind.YEAR:
        return Period(kind, datetime(today.year, 1, 1), datetime(today.year + 1, 1, 1), "This Year")

    if kind is PeriodKind.ALL:
        return Period(kind, None, None, "All Time")

    if kind is PeriodKind.CUSTOM:
        if selector.on is None:
            raise InvalidPeriodError(selector, "specific date required")
        start, end = _day_window(selector.on)
        return Period(kind, start, end, _fmt(selector.on))

    if kind is PeriodKind.RANGE:
        if selector.start is None or selector.end is None:
            raise InvalidPeriodError(selector, "start and end dates required")
        if selector.end < selector.start:
            raise InvalidPeriodError(selector, "end precedes start")
        start, _ = _day_window(selector.start)
        _, end = _day_window(selector.end)
        return Period(kind, start, end, f"{_fmt(selector.start)} - {_fmt(selector.end)}")

    raise InvalidPeriodError(selector, "unsupported period kind")

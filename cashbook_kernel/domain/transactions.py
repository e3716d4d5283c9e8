"""
Transactions -- The uniform cash-movement stream derived from source records.

Responsibility:
    Defines ``Transaction`` (one cash movement of kind Income, Expense or
    Banking), its back-reference to the originating record, and the
    ``DataQualityIssue`` flags raised while deriving the stream.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O.  Transactions are
    produced fresh by the normalizer on every computation and never
    persisted.

Invariants enforced:
    - ``amount`` is a non-negative ``Decimal``; direction comes from
      ``kind`` (Income adds to the safe, Expense and Banking remove).
    - ``date`` is a naive local instant, or None when the source date
      could not be parsed.  Undated transactions belong to no period.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from cashbook_kernel.exceptions import DataQualityError


class TransactionKind(str, Enum):
    """Kinds of cash movement through the safe."""

    INCOME = "income"
    EXPENSE = "expense"
    BANKING = "banking"

    @property
    def sort_order(self) -> int:
        """Tie-break rank for same-instant transactions."""
        return _KIND_ORDER[self]


_KIND_ORDER = {
    TransactionKind.INCOME: 0,
    TransactionKind.EXPENSE: 1,
    TransactionKind.BANKING: 2,
}


class SourceKind(str, Enum):
    """Collaborator collection a transaction was derived from."""

    SALE = "sale"
    EXPENSE = "expense"
    BANKING = "banking"


@dataclass(frozen=True)
class SourceReference:
    """
    Pointer back to the originating record.

    ``entry_id`` identifies the payment within an itemized sale; it is
    None for legacy sale payments, expenses and banking records.
    """

    source_kind: SourceKind
    source_id: str
    entry_id: str | None = None

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.source_id, self.entry_id or "")


@dataclass(frozen=True)
class Transaction:
    """One normalized cash movement."""

    date: datetime | None
    kind: TransactionKind
    amount: Decimal
    source: SourceReference
    main_detail: str = ""
    sub_detail: str = ""

    @property
    def is_dated(self) -> bool:
        return self.date is not None

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the safe balance."""
        return self.amount if self.kind is TransactionKind.INCOME else -self.amount

    def is_before(self, instant: datetime | None) -> bool:
        """True if dated strictly earlier than ``instant``.

        ``instant=None`` stands for the beginning of time.
        """
        if self.date is None or instant is None:
            return False
        return self.date < instant


class IssueCode(str, Enum):
    """Data-quality flag codes."""

    UNPARSEABLE_DATE = "UNPARSEABLE_DATE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    AMBIGUOUS_LEGACY_PAYMENT = "AMBIGUOUS_LEGACY_PAYMENT"
    STATUS_MISMATCH = "STATUS_MISMATCH"


@dataclass(frozen=True)
class DataQualityIssue:
    """A recoverable problem found on a source record."""

    code: IssueCode
    source_kind: SourceKind
    source_id: str
    detail: str
    entry_id: str | None = None

    @classmethod
    def from_error(
        cls,
        error: DataQualityError,
        source: SourceReference,
    ) -> DataQualityIssue:
        return cls(
            code=IssueCode(error.code),
            source_kind=source.source_kind,
            source_id=source.source_id,
            detail=str(error),
            entry_id=source.entry_id,
        )

    def as_log_extra(self) -> dict[str, str | None]:
        return {
            "issue_code": self.code.value,
            "source_kind": self.source_kind.value,
            "source_id": self.source_id,
            "entry_id": self.entry_id,
            "detail": self.detail,
        }

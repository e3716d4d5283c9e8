"""
Typed Exception Hierarchy for the Cashbook.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CashbookError:

    CashbookError (base)
    |
    +-- ConfigurationError
    |   +-- UnknownModuleError
    |   +-- KeywordTableError
    |
    +-- PeriodError
    |   +-- InvalidPeriodError
    |
    +-- SnapshotError
    |   +-- MissingCollectionError
    |   +-- InvalidRecordError
    |
    +-- DataQualityError
        +-- UnparseableDateError
        +-- InvalidAmountError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | UNKNOWN_MODULE              | Module id not in the keyword table
                | INVALID_KEYWORD_TABLE       | Keyword table file is malformed
----------------|-----------------------------|-----------------------------------------
Period          | INVALID_PERIOD              | Unknown kind, missing or reversed dates
----------------|-----------------------------|-----------------------------------------
Snapshot        | MISSING_COLLECTION          | A required collection is None
                | INVALID_RECORD              | Record is not a mapping / has no id
----------------|-----------------------------|-----------------------------------------
Data quality    | UNPARSEABLE_DATE            | Date missing or not understood
                | INVALID_AMOUNT              | Amount NaN, negative or non-numeric

===============================================================================
PROPAGATION
===============================================================================

Configuration, Period and Snapshot errors are programmer-level failures and
abort the computation.

DataQualityError subclasses never escape the engines.  The normalizer catches
them and records a ``DataQualityIssue`` instead, so a report always renders:

    try:
        instant = parse_instant(raw, tz)
    except UnparseableDateError as e:
        issues.append(DataQualityIssue.from_error(e, ...))
        instant = None
"""

from __future__ import annotations

from typing import Any


class CashbookError(Exception):
    """
    Base exception for all cashbook errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "CASHBOOK_ERROR"


# Configuration exceptions


class ConfigurationError(CashbookError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class UnknownModuleError(ConfigurationError):
    """Module filter names a module that has no keyword set."""

    code: str = "UNKNOWN_MODULE"

    def __init__(self, module: str, known_modules: tuple[str, ...] = ()):
        self.module = module
        self.known_modules = known_modules
        known = ", ".join(known_modules) or "none"
        super().__init__(f"Unknown module {module!r} (known: {known})")


class KeywordTableError(ConfigurationError):
    """Keyword table definition is malformed."""

    code: str = "INVALID_KEYWORD_TABLE"

    def __init__(self, reason: str, source: str | None = None):
        self.reason = reason
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid keyword table{where}: {reason}")


# Period exceptions


class PeriodError(CashbookError):
    """Base exception for period resolution errors."""

    code: str = "PERIOD_ERROR"


class InvalidPeriodError(PeriodError):
    """Period selector cannot be resolved."""

    code: str = "INVALID_PERIOD"

    def __init__(self, selector: Any, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"Invalid period {selector!r}: {reason}")


# Snapshot exceptions


class SnapshotError(CashbookError):
    """Base exception for malformed input snapshots."""

    code: str = "SNAPSHOT_ERROR"


class MissingCollectionError(SnapshotError):
    """A required source collection was not supplied."""

    code: str = "MISSING_COLLECTION"

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Required collection missing: {collection}")


class InvalidRecordError(SnapshotError):
    """A source record cannot be interpreted at all."""

    code: str = "INVALID_RECORD"

    def __init__(self, record_type: str, reason: str):
        self.record_type = record_type
        self.reason = reason
        super().__init__(f"Invalid {record_type} record: {reason}")


# Data quality exceptions (caught inside the engines)


class DataQualityError(CashbookError):
    """Base exception for recoverable dirty-data conditions."""

    code: str = "DATA_QUALITY_ERROR"


class UnparseableDateError(DataQualityError):
    """Date value is missing or not understood."""

    code: str = "UNPARSEABLE_DATE"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unparseable date: {value!r}")


class InvalidAmountError(DataQualityError):
    """Amount is non-numeric, NaN, infinite or negative."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: Any, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid amount {value!r}: {reason}")

"""
Configuration Schema (``cashbook_config.schema``).

Responsibility
--------------
Frozen dataclasses describing the ledger configuration: the versioned
module keyword table used for module-scoped reports, and ``LedgerConfig``,
the settings bundle passed to ``CashLedgerService``.

Architecture position
---------------------
**Config layer** -- pure data definitions.  Consumed by the engines
(classification) and the services (construction).

Invariants enforced
-------------------
* Keywords are stored lowercased and stripped; matching is a plain,
  case-insensitive substring test.  A keyword like ``card`` also matches
  inside longer words; the table does not tighten that.
* ``all`` is reserved and means "no module filter".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import tzinfo
from types import MappingProxyType
from typing import Any, Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cashbook_kernel.exceptions import ConfigurationError, KeywordTableError, UnknownModuleError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("config.schema")

ALL_MODULES = "all"


@dataclass(frozen=True)
class ModuleKeywordTable:
    """
    Versioned mapping of module id to keyword substrings.

    Contract:
        ``matches(module, *texts)`` is True when any keyword of ``module``
        occurs (case-insensitively) inside any of ``texts``.
    """

    version: str
    modules: Mapping[str, frozenset[str]]

    def __post_init__(self) -> None:
        if not self.version:
            raise KeywordTableError("version is required")
        normalized: dict[str, frozenset[str]] = {}
        for module, keywords in self.modules.items():
            module_id = str(module).strip().lower()
            if not module_id:
                raise KeywordTableError("empty module id")
            if module_id == ALL_MODULES:
                raise KeywordTableError(f"{ALL_MODULES!r} is reserved")
            if isinstance(keywords, str):
                raise KeywordTableError(f"keywords for {module_id!r} must be a list")
            cleaned = frozenset(str(k).strip().lower() for k in keywords if str(k).strip())
            if not cleaned:
                raise KeywordTableError(f"module {module_id!r} has no keywords")
            normalized[module_id] = cleaned
        object.__setattr__(self, "modules", MappingProxyType(normalized))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Create a table from ``{"version": ..., "modules": {id: [kw, ...]}}``."""
        if "version" not in data or "modules" not in data:
            raise KeywordTableError("expected 'version' and 'modules' keys")
        modules = data["modules"]
        if not isinstance(modules, Mapping):
            raise KeywordTableError("'modules' must be a mapping")
        return cls(version=str(data["version"]), modules=dict(modules))

    @property
    def module_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self.modules))

    def resolve(self, module: str | None) -> str | None:
        """
        Validate a module filter.

        Returns the normalized module id, or None when no filter applies.

        Raises:
            UnknownModuleError: ``module`` is not in the table.
        """
        if module is None:
            return None
        module_id = module.strip().lower()
        if module_id == ALL_MODULES:
            return None
        if module_id not in self.modules:
            raise UnknownModuleError(module, self.module_ids)
        return module_id

    def keywords(self, module: str) -> frozenset[str]:
        module_id = self.resolve(module)
        if module_id is None:
            return frozenset()
        return self.modules[module_id]

    def matches(self, module: str | None, *texts: str | None) -> bool:
        """Check if any text contains any keyword of ``module``.

        With no filter (None or ``all``) everything matches.
        """
        module_id = self.resolve(module)
        if module_id is None:
            return True
        keywords = self.modules[module_id]
        lowered = [t.lower() for t in texts if t]
        return any(k in text for text in lowered for k in keywords)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "modules": {m: sorted(self.modules[m]) for m in self.module_ids},
        }


def _default_keyword_table() -> ModuleKeywordTable:
    from cashbook_config.loader import load_default_keyword_table

    return load_default_keyword_table()


@dataclass(frozen=True)
class LedgerConfig:
    """
    Configuration schema for the cash ledger.

    ``timezone`` names the zone whose calendar days define periods;
    None means the host's local zone.
    """

    keyword_table: ModuleKeywordTable = field(default_factory=_default_keyword_table)

    # IANA zone name, e.g. "Africa/Kampala"
    timezone: str | None = None

    # Number of id characters shown in statement references
    statement_reference_length: int = 8

    def __post_init__(self) -> None:
        if self.statement_reference_length < 1:
            raise ConfigurationError("statement_reference_length must be positive")
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigurationError(f"Unknown timezone {self.timezone!r}") from e

    @property
    def tzinfo(self) -> tzinfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        if "keyword_table" in data and isinstance(data["keyword_table"], Mapping):
            data["keyword_table"] = ModuleKeywordTable.from_dict(data["keyword_table"])
        logger.info(
            "ledger_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

"""
cashbook_config -- ledger configuration entrypoint.

Responsibility:
    Provides ``get_default_config()`` and the keyword-table loader.  The
    module keyword table is the only configurable classification data;
    it ships as ``sets/modules.yaml`` and can be replaced with a caller's
    own YAML file.

Architecture position:
    Configuration -- sits above ``cashbook_kernel`` and below
    ``cashbook_engines`` / ``cashbook_services``.  The kernel never
    imports from this package.
"""

from __future__ import annotations

from pathlib import Path

from cashbook_config.loader import (
    DEFAULT_KEYWORD_TABLE_PATH,
    compute_checksum,
    load_default_keyword_table,
    load_keyword_table,
)
from cashbook_config.schema import ALL_MODULES, LedgerConfig, ModuleKeywordTable
from cashbook_kernel.logging_config import get_logger

_logger = get_logger("config")


def get_default_config(
    keyword_table_path: Path | str | None = None,
    timezone: str | None = None,
) -> LedgerConfig:
    """Build a ``LedgerConfig`` from the bundled (or given) keyword table.

    Emits a ``CASHBOOK_CONFIG_TRACE`` record naming the table version and
    checksum so every report can be tied to the classification in force.
    """
    if keyword_table_path is None:
        table = load_default_keyword_table()
    else:
        table = load_keyword_table(keyword_table_path)

    config = LedgerConfig(keyword_table=table, timezone=timezone)
    _logger.info(
        "CASHBOOK_CONFIG_TRACE",
        extra={
            "trace_type": "CASHBOOK_CONFIG_TRACE",
            "keyword_table_version": table.version,
            "keyword_table_checksum": compute_checksum(table.to_dict()),
            "timezone": timezone,
        },
    )
    return config


__all__ = [
    "ALL_MODULES",
    "DEFAULT_KEYWORD_TABLE_PATH",
    "LedgerConfig",
    "ModuleKeywordTable",
    "compute_checksum",
    "get_default_config",
    "load_default_keyword_table",
    "load_keyword_table",
]

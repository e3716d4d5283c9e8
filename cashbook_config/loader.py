"""
Configuration Loader (``cashbook_config.loader``).

Responsibility
--------------
Loads the module keyword table from YAML and parses it into a
``ModuleKeywordTable``.  Computes a deterministic checksum so a report
can state exactly which keyword table classified it.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on engines or
services.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``KeywordTableError`` (wrapping ``yaml.YAMLError``).
* Structurally invalid table  -> ``KeywordTableError``.
"""

from __future__ import annotations

import hashlib
import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from cashbook_config.schema import ModuleKeywordTable
from cashbook_kernel.exceptions import KeywordTableError
from cashbook_kernel.logging_config import get_logger

logger = get_logger("config.loader")

DEFAULT_KEYWORD_TABLE_PATH = Path(__file__).parent / "sets" / "modules.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        KeywordTableError: if the file is not valid YAML or not a mapping.
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise KeywordTableError(f"malformed YAML: {e}", source=str(path)) from e
    if not isinstance(data, dict):
        raise KeywordTableError("top level must be a mapping", source=str(path))
    return data


def load_keyword_table(path: Path | str) -> ModuleKeywordTable:
    """
    Load a module keyword table from a YAML file.

    Expected shape::

        version: "2024.1"
        modules:
          dtf: [dtf, direct to film]
    """
    path = Path(path)
    data = load_yaml_file(path)
    try:
        table = ModuleKeywordTable.from_dict(data)
    except KeywordTableError as e:
        raise KeywordTableError(e.reason, source=str(path)) from e

    logger.info(
        "keyword_table_loaded",
        extra={
            "source": str(path),
            "version": table.version,
            "module_count": len(table.modules),
            "checksum": compute_checksum(table.to_dict()),
        },
    )
    return table


@lru_cache(maxsize=1)
def load_default_keyword_table() -> ModuleKeywordTable:
    """The keyword table bundled with the package (loaded once)."""
    return load_keyword_table(DEFAULT_KEYWORD_TABLE_PATH)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()

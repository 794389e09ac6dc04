"""
Serialization module for IncomeFlow data files.

Purpose
-------
Provides the JSON layout used by `JsonFileStore` to keep income sources and
goals on disk, enabling persistence between CLI invocations, backups and
sharing of a ledger between machines.

Layout
------
{
  "schema_version": "1.0.0",
  "income_sources": [IncomeSourceRecord, ...],
  "goals": [GoalRecord, ...]
}

Design Principles
-----------------
- Human-readable: indented JSON, ISO dates, enum values as plain strings
- Tolerant reads: a missing file is an empty ledger; an older or newer
  schema version loads with a UserWarning
- Strict failures: unreadable or malformed files raise StoreError

Example
-------
>>> from pathlib import Path
>>> from incomeflow.serialization import save_ledger, load_ledger
>>> save_ledger({"income_sources": [], "goals": []}, Path("ledger.json"))
>>> load_ledger(Path("ledger.json"))["schema_version"]
'1.0.0'
"""

from __future__ import annotations
from typing import Any, Mapping
from pathlib import Path
import json
import warnings

from .exceptions import ConfigurationError, StoreError
from .types import LedgerDocumentDict

__all__ = [
    "SCHEMA_VERSION",
    "save_ledger",
    "load_ledger",
    "ledger_to_json",
    "ledger_from_json",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "1.0.0"


def ledger_to_json(records: Mapping[str, Any]) -> str:
    """Render income sources and goals as a versioned JSON document."""
    document: LedgerDocumentDict = {
        "schema_version": SCHEMA_VERSION,
        "income_sources": list(records.get("income_sources", [])),
        "goals": list(records.get("goals", [])),
    }
    return json.dumps(document, indent=2)


def ledger_from_json(text: str) -> LedgerDocumentDict:
    """
    Parse a JSON document produced by `ledger_to_json`.

    Raises
    ------
    StoreError
        Invalid JSON or a document without the expected lists.
    """
    try:
        config = json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreError(f"Data file is not valid JSON: {e}") from e

    if not isinstance(config, dict):
        raise StoreError("Data file must contain a JSON object")

    # Check schema version
    schema_version = config.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Data file schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )

    sources = config.get("income_sources", [])
    goals = config.get("goals", [])
    if not isinstance(sources, list) or not isinstance(goals, list):
        raise StoreError("'income_sources' and 'goals' must be lists")
    for record in [*sources, *goals]:
        if not isinstance(record, dict) or "id" not in record:
            raise StoreError(f"Malformed record in data file: {record!r}")

    return {
        "schema_version": schema_version,
        "income_sources": sources,
        "goals": goals,
    }


def save_ledger(records: Mapping[str, Any], path: Path) -> None:
    """
    Write income sources and goals to `path`.

    Parameters
    ----------
    records : mapping
        {"income_sources": [...], "goals": [...]} as returned by
        `InMemoryStore.records()`.
    path : Path
        Output file; parent directories are created.
    """
    path = Path(path)
    if path.is_dir():
        raise ConfigurationError(f"Data file {path} is a directory")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # write-then-rename so a crash never leaves a half-written file
        tmp = path.with_name(path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(ledger_to_json(records))
        tmp.replace(path)
    except OSError as e:
        raise StoreError(f"Could not write data file {path}: {e}") from e


def load_ledger(path: Path) -> LedgerDocumentDict:
    """
    Read a data file; a missing file yields an empty ledger.

    Raises
    ------
    ConfigurationError
        `path` is a directory.
    StoreError
        The file cannot be read or parsed.
    """
    path = Path(path)
    if path.is_dir():
        raise ConfigurationError(f"Data file {path} is a directory")
    if not path.exists():
        return {"schema_version": SCHEMA_VERSION, "income_sources": [], "goals": []}
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise StoreError(f"Could not read data file {path}: {e}") from e
    return ledger_from_json(text)

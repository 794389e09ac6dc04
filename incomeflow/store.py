"""
Record stores for IncomeFlow.

Purpose
-------
The calculation modules never talk to storage. This module is the seam to
whatever keeps the user's records: a hosted database, a JSON file, or plain
memory in tests. Stores deal in flat records (see `types.py`) and domain
objects; they do no calculation.

Implementations
---------------
- IncomeStore:   abstract interface
- InMemoryStore: dict-backed store, ephemeral
- JsonFileStore: InMemoryStore persisted to a JSON document after every write

All operations are scoped by `user_id`. Reading or modifying another user's
record behaves as if the record did not exist (`RecordNotFoundError`).
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import IncomeFlowError, RecordNotFoundError, StoreError, ValidationError
from .goals import Goal
from .income import IncomeSource, IncomeStatus
from .types import GoalRecord, IncomeSourceRecord

__all__ = [
    "IncomeStore",
    "InMemoryStore",
    "JsonFileStore",
]

logger = logging.getLogger(__name__)


class IncomeStore(ABC):
    """Abstract record store."""

    # -------------------------- Income sources ------------------------------
    @abstractmethod
    def list_income_sources(
        self, user_id: str, status: Optional[IncomeStatus] = None
    ) -> List[IncomeSource]:
        """All sources of a user, optionally filtered by status."""

    @abstractmethod
    def get_income_source(self, user_id: str, source_id: str) -> IncomeSource:
        """Raises RecordNotFoundError when absent."""

    @abstractmethod
    def insert_income_source(self, user_id: str, source: IncomeSource) -> IncomeSource:
        ...

    @abstractmethod
    def update_income_source(
        self, user_id: str, source_id: str, changes: Mapping[str, Any]
    ) -> IncomeSource:
        """Apply column changes and return the updated source."""

    @abstractmethod
    def delete_income_source(self, user_id: str, source_id: str) -> None:
        ...

    # -------------------------- Goals ---------------------------------------
    @abstractmethod
    def list_goals(self, user_id: str) -> List[Goal]:
        ...

    @abstractmethod
    def get_goal(self, user_id: str, goal_id: str) -> Goal:
        ...

    @abstractmethod
    def insert_goal(self, user_id: str, goal: Goal) -> Goal:
        ...

    @abstractmethod
    def update_goal(self, user_id: str, goal_id: str, changes: Mapping[str, Any]) -> Goal:
        ...

    @abstractmethod
    def delete_goal(self, user_id: str, goal_id: str) -> None:
        ...


class InMemoryStore(IncomeStore):
    """
    Dict-backed store keeping flat records.

    Records are validated on the way out (`IncomeSource.from_record`,
    `Goal.from_record`), so a change that would break a record is rejected
    before it is kept.

    Examples
    --------
    >>> store = InMemoryStore()
    >>> store.insert_income_source("alice", IncomeSource("s1", "Salary", 4000, "monthly"))
    >>> [s.name for s in store.list_income_sources("alice")]
    ['Salary']
    """

    def __init__(
        self,
        income_sources: Optional[List[IncomeSourceRecord]] = None,
        goals: Optional[List[GoalRecord]] = None,
    ) -> None:
        self._sources: Dict[str, IncomeSourceRecord] = {
            r["id"]: dict(r) for r in (income_sources or [])
        }
        self._goals: Dict[str, GoalRecord] = {r["id"]: dict(r) for r in (goals or [])}

    # -------------------------- Raw access ----------------------------------
    def records(self) -> Dict[str, list]:
        """Deep copy of every record, for persistence."""
        return {
            "income_sources": copy.deepcopy(list(self._sources.values())),
            "goals": copy.deepcopy(list(self._goals.values())),
        }

    def _owned(self, table: Dict[str, dict], user_id: str, record_id: str, kind: str) -> dict:
        record = table.get(record_id)
        if record is None or record.get("user_id") != user_id:
            raise RecordNotFoundError(f"{kind} {record_id!r} not found for user {user_id!r}")
        return record

    def _commit(self) -> None:
        """Hook called after every change; raising `IncomeFlowError` undoes it."""

    def _put(self, table: Dict[str, dict], record_id: str, record: Optional[dict]) -> None:
        """Set (or, with None, remove) one record and commit; undone if the commit fails."""
        previous = table.get(record_id)
        if record is None:
            del table[record_id]
        else:
            table[record_id] = record
        try:
            self._commit()
        except IncomeFlowError:
            if previous is None:
                table.pop(record_id, None)
            else:
                table[record_id] = previous
            raise

    # -------------------------- Income sources ------------------------------
    def list_income_sources(self, user_id, status=None):
        out = []
        for record in self._sources.values():
            if record.get("user_id") != user_id:
                continue
            source = _load(IncomeSource, record)
            if status is None or source.status is IncomeStatus(status):
                out.append(source)
        return out

    def get_income_source(self, user_id, source_id):
        return _load(IncomeSource, self._owned(self._sources, user_id, source_id, "Income source"))

    def insert_income_source(self, user_id, source):
        if source.id in self._sources:
            raise StoreError(f"Income source {source.id!r} already exists")
        self._put(self._sources, source.id, source.to_record(user_id))
        return source

    def update_income_source(self, user_id, source_id, changes):
        record = self._owned(self._sources, user_id, source_id, "Income source")
        updated = {**record, **_plain(changes), "id": source_id, "user_id": user_id}
        source = IncomeSource.from_record(updated)
        self._put(self._sources, source_id, source.to_record(user_id))
        return source

    def delete_income_source(self, user_id, source_id):
        self._owned(self._sources, user_id, source_id, "Income source")
        self._put(self._sources, source_id, None)

    # -------------------------- Goals ---------------------------------------
    def list_goals(self, user_id):
        return [
            _load(Goal, r) for r in self._goals.values() if r.get("user_id") == user_id
        ]

    def get_goal(self, user_id, goal_id):
        return _load(Goal, self._owned(self._goals, user_id, goal_id, "Goal"))

    def insert_goal(self, user_id, goal):
        if goal.id in self._goals:
            raise StoreError(f"Goal {goal.id!r} already exists")
        self._put(self._goals, goal.id, goal.to_record(user_id))
        return goal

    def update_goal(self, user_id, goal_id, changes):
        record = self._owned(self._goals, user_id, goal_id, "Goal")
        updated = {**record, **_plain(changes), "id": goal_id, "user_id": user_id}
        goal = Goal.from_record(updated)
        self._put(self._goals, goal_id, goal.to_record(user_id))
        return goal

    def delete_goal(self, user_id, goal_id):
        self._owned(self._goals, user_id, goal_id, "Goal")
        self._put(self._goals, goal_id, None)


class JsonFileStore(InMemoryStore):
    """
    InMemoryStore persisted to a JSON document.

    The file is read once on construction (a missing file starts an empty
    store) and rewritten after every write. A write that cannot be saved
    is undone in memory too.

    Parameters
    ----------
    path : Path
        Location of the data file.
    """

    def __init__(self, path: Path) -> None:
        from .serialization import load_ledger

        self.path = Path(path)
        document = load_ledger(self.path)
        super().__init__(document["income_sources"], document["goals"])

    def _commit(self) -> None:
        from .serialization import save_ledger

        save_ledger(self.records(), self.path)
        logger.debug("Saved %d sources and %d goals to %s",
                     len(self._sources), len(self._goals), self.path)


def _plain(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn enum and date values into their record representation."""
    out = {}
    for key, value in changes.items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value") and isinstance(value, str):
            value = value.value
        out[key] = value
    return out


def _load(cls, record: Mapping[str, Any]):
    """Build a domain object from a stored record; corrupt records are store errors."""
    try:
        return cls.from_record(record)
    except (ValidationError, KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Corrupt {cls.__name__} record {record.get('id')!r}: {e}") from e

"""
Type definitions for IncomeFlow.

Purpose
-------
Provides TypedDict definitions for the flat records exchanged with the
record store and written to data files. Domain code works with the frozen
dataclasses in ``income`` and ``goals``; these dicts describe the shape of
the same data on the storage side of the seam.

Usage
-----
>>> from incomeflow.types import IncomeSourceRecord
>>>
>>> record: IncomeSourceRecord = {
...     "id": "b7c1...",
...     "user_id": "alice",
...     "name": "Salary",
...     "amount": 4200.0,
...     "cycle": "monthly",
...     "status": "active",
... }

Type Definitions
----------------
IncomeSourceRecord
    Stored income source: {"id", "user_id", "name", "amount", "cycle", "status"}

GoalRecord
    Stored goal with flat allocation columns and the derived forecast date

LedgerDocumentDict
    Top-level layout of a JSON data file

ForecastSummaryDict
    Serializable outcome of one forecast run
"""

from typing import Dict, List, Optional
from typing_extensions import TypedDict, NotRequired

__all__ = [
    "IncomeSourceRecord",
    "GoalRecord",
    "LedgerDocumentDict",
    "ForecastSummaryDict",
]


class IncomeSourceRecord(TypedDict):
    """
    Income source as stored.

    Attributes
    ----------
    id : str
        Unique identifier (uuid4 hex).
    user_id : str
        Owner of the record.
    name : str
        Display name, e.g. "Salary".
    amount : float
        Positive amount received once per cycle.
    cycle : str
        One of "daily", "weekly", "monthly", "yearly".
    status : str
        "active" or "paused".
    """

    id: str
    user_id: str
    name: str
    amount: float
    cycle: str
    status: str


class GoalRecord(TypedDict):
    """
    Savings goal as stored.

    The allocation is kept in four flat columns. ``allocation_cycle`` is only
    set for FIXED_* types and ``source_income_id`` only for *_SOURCE types.
    Dates are ISO-8601 strings (YYYY-MM-DD).
    """

    id: str
    user_id: str
    name: str
    target_amount: float
    current_amount: float
    allocation_type: str
    allocation_value: float
    target_date: NotRequired[Optional[str]]
    allocation_cycle: NotRequired[Optional[str]]
    source_income_id: NotRequired[Optional[str]]
    forecasted_completion_date: NotRequired[Optional[str]]


class LedgerDocumentDict(TypedDict):
    """
    JSON data file layout.

    Attributes
    ----------
    schema_version : str
        Version of the layout that wrote the file.
    income_sources : list of IncomeSourceRecord
    goals : list of GoalRecord
    """

    schema_version: str
    income_sources: List[IncomeSourceRecord]
    goals: List[GoalRecord]


class ForecastSummaryDict(TypedDict):
    """
    Outcome of a forecast run.

    Attributes
    ----------
    success : bool
        False only when the run could not start (missing user, read failure).
    message : str
        Human-readable status line.
    updated : dict
        Goal id -> ISO forecast date (or None when unreachable).
    failed : list of str
        Ids of goals whose update could not be written.
    """

    success: bool
    message: str
    updated: Dict[str, Optional[str]]
    failed: List[str]

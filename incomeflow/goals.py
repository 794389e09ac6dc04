"""
Goal definition and funding module.

Purpose
-------
Domain-level abstractions for savings goals and the policies that fund them.
A goal is funded every month by exactly one allocation policy:

    PercentOfTotal   (PERCENT_TOTAL):  p% of total monthly income
    PercentOfSource  (PERCENT_SOURCE): p% of one source's monthly income
    FixedFromTotal   (FIXED_TOTAL):    a fixed amount per cycle
    FixedFromSource  (FIXED_SOURCE):   a fixed amount per cycle, gated on
                                       the referenced source existing

Monthly contribution c of a goal, with I the total monthly income of the
active sources and to_monthly the cycle normalizer:

    PERCENT_TOTAL:  c = I · p / 100
    PERCENT_SOURCE: c = to_monthly(source.amount, source.cycle) · p / 100
    FIXED_TOTAL:    c = to_monthly(amount, cycle)
    FIXED_SOURCE:   c = to_monthly(amount, cycle)

A *_SOURCE goal whose source is missing (deleted or paused) contributes 0.
This is a silent degradation, not an error.

Design Principles
-----------------
- Immutable records: goals and allocations are frozen dataclasses
- Tagged union: each allocation variant carries exactly the fields it needs
- Record conversion happens at the edge (`allocation_from_record`), where
  malformed type/field combinations are rejected with ValidationError

Example
-------
>>> from incomeflow.goals import Goal, PercentOfTotal, monthly_contribution
>>> g = Goal(id="g1", name="Car", target_amount=10_000,
...          allocation=PercentOfTotal(percent=10))
>>> monthly_contribution(g, [], total_monthly_income=5000)
500.0
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import ClassVar, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .exceptions import ValidationError
from .income import Cycle, IncomeSource, find_source, parse_cycle, to_monthly
from .income import total_monthly_income as _total_monthly_income
from .types import GoalRecord
from .utils import check_non_negative, check_positive, month_index, parse_date

__all__ = [
    "AllocationType",
    "PercentOfTotal",
    "PercentOfSource",
    "FixedFromTotal",
    "FixedFromSource",
    "Allocation",
    "allocation_from_record",
    "allocation_to_record",
    "Goal",
    "GoalSummary",
    "monthly_contribution",
    "accumulated_amount",
    "summarize_goals",
    "goal_schedule",
]


class AllocationType(str, Enum):
    PERCENT_TOTAL = "PERCENT_TOTAL"
    PERCENT_SOURCE = "PERCENT_SOURCE"
    FIXED_TOTAL = "FIXED_TOTAL"
    FIXED_SOURCE = "FIXED_SOURCE"


# ---------------------------------------------------------------------------
# Allocation policies
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PercentOfTotal:
    """Fund the goal with `percent`% of total monthly income."""

    percent: float
    allocation_type: ClassVar[AllocationType] = AllocationType.PERCENT_TOTAL

    def __post_init__(self) -> None:
        check_positive("allocation_value", self.percent)

    @property
    def value(self) -> float:
        return self.percent


@dataclass(frozen=True)
class PercentOfSource:
    """Fund the goal with `percent`% of one income source."""

    percent: float
    source_id: str
    allocation_type: ClassVar[AllocationType] = AllocationType.PERCENT_SOURCE

    def __post_init__(self) -> None:
        check_positive("allocation_value", self.percent)
        if not self.source_id:
            raise ValidationError("PERCENT_SOURCE allocation requires source_income_id")

    @property
    def value(self) -> float:
        return self.percent


@dataclass(frozen=True)
class FixedFromTotal:
    """Fund the goal with `amount` per `cycle`, drawn from total income."""

    amount: float
    cycle: Cycle
    allocation_type: ClassVar[AllocationType] = AllocationType.FIXED_TOTAL

    def __post_init__(self) -> None:
        check_positive("allocation_value", self.amount)
        object.__setattr__(self, "cycle", parse_cycle(self.cycle))

    @property
    def value(self) -> float:
        return self.amount


@dataclass(frozen=True)
class FixedFromSource:
    """
    Fund the goal with `amount` per `cycle`, drawn from one income source.

    The source's own cycle plays no part in the contribution; the source
    only has to exist.
    """

    amount: float
    cycle: Cycle
    source_id: str
    allocation_type: ClassVar[AllocationType] = AllocationType.FIXED_SOURCE

    def __post_init__(self) -> None:
        check_positive("allocation_value", self.amount)
        object.__setattr__(self, "cycle", parse_cycle(self.cycle))
        if not self.source_id:
            raise ValidationError("FIXED_SOURCE allocation requires source_income_id")

    @property
    def value(self) -> float:
        return self.amount


Allocation = Union[PercentOfTotal, PercentOfSource, FixedFromTotal, FixedFromSource]
_ALLOCATION_CLASSES = (PercentOfTotal, PercentOfSource, FixedFromTotal, FixedFromSource)


def allocation_from_record(
    allocation_type: str,
    allocation_value: float,
    allocation_cycle: Optional[str] = None,
    source_income_id: Optional[str] = None,
) -> Allocation:
    """
    Build an allocation variant from the flat record columns.

    Raises
    ------
    ValidationError
        Unknown type, non-positive value, or a cycle/source column that is
        missing for a type requiring it or present for a type that does not
        use it.
    """
    try:
        kind = AllocationType(allocation_type)
    except ValueError:
        valid = ", ".join(t.value for t in AllocationType)
        raise ValidationError(
            f"Unknown allocation_type {allocation_type!r}; expected one of: {valid}"
        ) from None

    is_fixed = kind in (AllocationType.FIXED_TOTAL, AllocationType.FIXED_SOURCE)
    is_source = kind in (AllocationType.PERCENT_SOURCE, AllocationType.FIXED_SOURCE)

    if is_fixed and not allocation_cycle:
        raise ValidationError(f"{kind.value} allocation requires allocation_cycle")
    if not is_fixed and allocation_cycle:
        raise ValidationError(f"{kind.value} allocation must not set allocation_cycle")
    if is_source and not source_income_id:
        raise ValidationError(f"{kind.value} allocation requires source_income_id")
    if not is_source and source_income_id:
        raise ValidationError(f"{kind.value} allocation must not set source_income_id")

    value = float(allocation_value)
    if kind is AllocationType.PERCENT_TOTAL:
        return PercentOfTotal(percent=value)
    if kind is AllocationType.PERCENT_SOURCE:
        return PercentOfSource(percent=value, source_id=str(source_income_id))
    if kind is AllocationType.FIXED_TOTAL:
        return FixedFromTotal(amount=value, cycle=allocation_cycle)
    return FixedFromSource(amount=value, cycle=allocation_cycle, source_id=str(source_income_id))


def allocation_to_record(allocation: Allocation) -> dict:
    """Flatten an allocation variant into the four record columns."""
    return {
        "allocation_type": allocation.allocation_type.value,
        "allocation_value": float(allocation.value),
        "allocation_cycle": allocation.cycle.value if hasattr(allocation, "cycle") else None,
        "source_income_id": getattr(allocation, "source_id", None),
    }


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Goal:
    """
    Savings goal funded by one allocation policy.

    Parameters
    ----------
    id : str
        Unique identifier.
    name : str
        Display name. Must be non-empty.
    target_amount : float
        Amount to reach. Must be > 0.
    allocation : Allocation
        One of PercentOfTotal, PercentOfSource, FixedFromTotal, FixedFromSource.
    current_amount : float, default 0.0
        Amount saved so far. Must be >= 0; may exceed the target.
    target_date : date, optional
        Date the user would like to reach the target by.
    forecasted_completion_date : date, optional
        Derived by the forecast job; None when unreachable or not computed.

    Examples
    --------
    >>> g = Goal(id="g", name="Trip", target_amount=2000, current_amount=500,
    ...          allocation=FixedFromTotal(amount=100, cycle="monthly"))
    >>> g.remaining
    1500.0
    >>> g.progress
    0.25
    """
    id: str
    name: str
    target_amount: float
    allocation: Allocation
    current_amount: float = 0.0
    target_date: Optional[date] = None
    forecasted_completion_date: Optional[date] = None

    def __post_init__(self):
        """Validate goal parameters."""
        if not self.name or not str(self.name).strip():
            raise ValidationError("Goal name must not be empty.")
        check_positive("target_amount", self.target_amount)
        check_non_negative("current_amount", self.current_amount)
        if not isinstance(self.allocation, _ALLOCATION_CLASSES):
            raise ValidationError(
                f"allocation must be an allocation policy, got {type(self.allocation).__name__}"
            )

    @property
    def remaining(self) -> float:
        """Amount still missing; zero or negative once the goal is met."""
        return float(self.target_amount - self.current_amount)

    @property
    def progress(self) -> float:
        """Fraction of the target saved so far (not capped at 1)."""
        return float(self.current_amount / self.target_amount)

    @property
    def is_complete(self) -> bool:
        return self.current_amount >= self.target_amount

    def with_forecast(self, forecast: Optional[date]) -> "Goal":
        return replace(self, forecasted_completion_date=forecast)

    # -------------------------- Serialization helpers ----------------------
    def to_record(self, user_id: str) -> GoalRecord:
        record: GoalRecord = {
            "id": self.id,
            "user_id": user_id,
            "name": self.name,
            "target_amount": float(self.target_amount),
            "current_amount": float(self.current_amount),
            "target_date": None if self.target_date is None else self.target_date.isoformat(),
            "forecasted_completion_date": (
                None if self.forecasted_completion_date is None
                else self.forecasted_completion_date.isoformat()
            ),
            **allocation_to_record(self.allocation),
        }
        return record

    @classmethod
    def from_record(cls, record: dict) -> "Goal":
        allocation = allocation_from_record(
            record.get("allocation_type", ""),
            record.get("allocation_value", 0.0),
            record.get("allocation_cycle") or None,
            record.get("source_income_id") or None,
        )
        return cls(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            target_amount=float(record.get("target_amount", 0.0)),
            current_amount=float(record.get("current_amount") or 0.0),
            allocation=allocation,
            target_date=parse_date(record.get("target_date")),
            forecasted_completion_date=parse_date(record.get("forecasted_completion_date")),
        )


# ---------------------------------------------------------------------------
# Contributions
# ---------------------------------------------------------------------------

def monthly_contribution(
    goal: Union[Goal, Allocation],
    income_sources: Iterable[IncomeSource],
    total_monthly_income: Optional[float] = None,
) -> float:
    """
    Monthly funding a goal receives under its allocation policy.

    Parameters
    ----------
    goal : Goal or Allocation
        The goal (or directly its allocation policy).
    income_sources : iterable of IncomeSource
        Sources used to resolve *_SOURCE references. Paused sources are
        treated as absent.
    total_monthly_income : float, optional
        Total monthly income; computed from `income_sources` when omitted.

    Returns
    -------
    float
        Contribution per month. Zero when the referenced source is missing
        or the policy is not one of the four known variants.

    Examples
    --------
    >>> monthly_contribution(PercentOfSource(percent=50, source_id="gone"), [])
    0.0
    """
    sources = list(income_sources)
    allocation = getattr(goal, "allocation", goal)
    if total_monthly_income is None:
        total_monthly_income = _total_monthly_income(sources)

    if isinstance(allocation, PercentOfTotal):
        return float(total_monthly_income * allocation.percent / 100)
    if isinstance(allocation, PercentOfSource):
        source = find_source(sources, allocation.source_id)
        if source is None:
            return 0.0
        return float(to_monthly(source.amount, source.cycle) * allocation.percent / 100)
    if isinstance(allocation, FixedFromTotal):
        return float(to_monthly(allocation.amount, allocation.cycle))
    if isinstance(allocation, FixedFromSource):
        if find_source(sources, allocation.source_id) is None:
            return 0.0
        return float(to_monthly(allocation.amount, allocation.cycle))
    return 0.0


def accumulated_amount(
    goal: Goal,
    income_sources: Iterable[IncomeSource],
    months: float,
) -> float:
    """Projected contributions to `goal` over `months` months."""
    if months <= 0:
        return 0.0
    return monthly_contribution(goal, income_sources) * months


def goal_schedule(
    goal: Goal,
    income_sources: Iterable[IncomeSource],
    months: int,
    start: Optional[date] = None,
) -> pd.DataFrame:
    """
    Month-by-month projected balance of a goal.

    Parameters
    ----------
    goal : Goal
    income_sources : iterable of IncomeSource
    months : int
        Horizon; non-positive horizons give an empty frame.
    start : date, optional
        First month of the schedule (defaults to the current month).

    Returns
    -------
    pd.DataFrame
        Indexed by first-of-month dates with columns
        "contribution", "balance", "progress" and "complete".
    """
    idx = month_index(start=start, months=max(months, 0))
    columns = ["contribution", "balance", "progress", "complete"]
    if len(idx) == 0:
        return pd.DataFrame(columns=columns, index=idx)

    c = monthly_contribution(goal, income_sources)
    contributions = np.full(len(idx), c, dtype=float)
    balance = goal.current_amount + np.cumsum(contributions)
    return pd.DataFrame(
        {
            "contribution": contributions,
            "balance": balance,
            "progress": balance / goal.target_amount,
            "complete": balance >= goal.target_amount,
        },
        index=idx,
    )


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GoalSummary:
    active: int
    completed: int
    total_target: float
    total_current: float
    overall_progress: float  # percent, 0 when there is no target at all


def summarize_goals(goals: Sequence[Goal]) -> GoalSummary:
    """Counts of open/completed goals and overall progress in percent."""
    completed = sum(1 for g in goals if g.is_complete)
    total_target = float(sum(g.target_amount for g in goals))
    total_current = float(sum(g.current_amount for g in goals))
    overall = (total_current / total_target * 100.0) if total_target > 0 else 0.0
    return GoalSummary(
        active=len(goals) - completed,
        completed=completed,
        total_target=total_target,
        total_current=total_current,
        overall_progress=overall,
    )

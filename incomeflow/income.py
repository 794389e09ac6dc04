"""
Income modeling module for IncomeFlow.

Purpose
-------
Entry point for modeling cash inflows in IncomeFlow. Captures where the money
comes from (salary, rent, dividends...) and at which recurrence cycle it is
received, and converts heterogeneous cycles into comparable rates that the
accrual dashboard (`accrual.py`), the allocation engine (`goals.py`,
`allocation.py`) and the forecast job (`forecast.py`) consume.

Key components
--------------
- Cycle / IncomeStatus:
    String enums for the recurrence cycle (daily, weekly, monthly, yearly)
    and the pause flag of a source.

- IncomeSource:
    Immutable record of one income stream. Only active sources take part in
    accrual and allocation calculations; pausing a source never deletes it.

- to_monthly:
    Cycle normalizer. Converts an amount received once per cycle into its
    monthly equivalent using the canonical factors of `constants.py`.

- per_second_rate:
    Continuous accrual rate of an amount received once per cycle, based on
    average calendar lengths (365.25 days per year).

Design principles
-----------------
- Pure functions over plain data; no I/O, no clocks.
- One canonical set of conversion constants for every call site.
- Unknown cycles never raise inside the calculations: `to_monthly` leaves
  the amount unchanged and `per_second_rate` yields zero. Unknown cycles are
  rejected earlier, when a record is turned into an `IncomeSource`.

Example
-------
>>> from incomeflow.income import IncomeSource, to_monthly, total_monthly_income
>>> salary = IncomeSource(id="s1", name="Salary", amount=4200.0, cycle="monthly")
>>> bonus = IncomeSource(id="s2", name="Bonus", amount=1200.0, cycle="yearly")
>>> to_monthly(1200.0, "yearly")
100.0
>>> total_monthly_income([salary, bonus])
4300.0
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Union

from .constants import (
    DAYS_PER_MONTH,
    DAYS_PER_WEEK,
    DAYS_PER_YEAR,
    MONTHS_PER_YEAR,
    SECONDS_PER_DAY,
    WEEKS_PER_MONTH,
)
from .exceptions import ValidationError
from .types import IncomeSourceRecord
from .utils import check_positive

__all__ = [
    "Cycle",
    "IncomeStatus",
    "IncomeSource",
    "parse_cycle",
    "to_monthly",
    "per_second_rate",
    "active_sources",
    "total_monthly_income",
    "find_source",
]


class Cycle(str, Enum):
    """Recurrence cycle of an income amount or a fixed allocation."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class IncomeStatus(str, Enum):
    """Whether an income source currently counts toward calculations."""

    ACTIVE = "active"
    PAUSED = "paused"


def _coerce_cycle(cycle: Union[Cycle, str, None]) -> Optional[Cycle]:
    try:
        return Cycle(cycle)
    except ValueError:
        return None


def parse_cycle(value: Union[Cycle, str]) -> Cycle:
    """Strict cycle parser for record boundaries; raises ValidationError."""
    parsed = _coerce_cycle(value)
    if parsed is None:
        valid = ", ".join(c.value for c in Cycle)
        raise ValidationError(f"Unknown cycle {value!r}; expected one of: {valid}")
    return parsed


# ---------------------------------------------------------------------------
# Cycle normalizer
# ---------------------------------------------------------------------------

def to_monthly(amount: float, cycle: Union[Cycle, str]) -> float:
    """
    Convert an amount received once per *cycle* to its monthly equivalent.

    Parameters
    ----------
    amount : float
        Amount received (or allocated) once per cycle.
    cycle : Cycle or str
        "daily", "weekly", "monthly" or "yearly".

    Returns
    -------
    float
        - daily:   amount * 30.44
        - weekly:  amount * 52 / 12
        - monthly: amount
        - yearly:  amount / 12
        - unknown cycle: amount, unchanged

    Notes
    -----
    The conversion is not injective and is not meant to be inverted.
    """
    parsed = _coerce_cycle(cycle)
    if parsed is Cycle.DAILY:
        return amount * DAYS_PER_MONTH
    if parsed is Cycle.WEEKLY:
        return amount * WEEKS_PER_MONTH
    if parsed is Cycle.YEARLY:
        return amount / MONTHS_PER_YEAR
    return amount


def per_second_rate(amount: float, cycle: Union[Cycle, str]) -> float:
    """
    Continuous accrual rate (per second) of an amount received once per cycle.

    The rate spreads each payment evenly over the average length of its
    period:

    - daily:   amount / 86400
    - weekly:  (amount / 7) / 86400
    - monthly: (amount / (365.25 / 12)) / 86400
    - yearly:  (amount / 365.25) / 86400

    Unknown cycles accrue nothing.
    """
    parsed = _coerce_cycle(cycle)
    if parsed is Cycle.DAILY:
        daily = amount
    elif parsed is Cycle.WEEKLY:
        daily = amount / DAYS_PER_WEEK
    elif parsed is Cycle.MONTHLY:
        daily = amount / (DAYS_PER_YEAR / MONTHS_PER_YEAR)
    elif parsed is Cycle.YEARLY:
        daily = amount / DAYS_PER_YEAR
    else:
        return 0.0
    return daily / SECONDS_PER_DAY


# ---------------------------------------------------------------------------
# Income Sources
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IncomeSource:
    """
    One recurring income stream owned by a user.

    Parameters
    ----------
    id : str
        Unique identifier of the source.
    name : str
        Display name. Must be non-empty.
    amount : float
        Amount received once per cycle. Must be > 0.
    cycle : Cycle or str
        Recurrence cycle; strings are parsed into `Cycle`.
    status : IncomeStatus or str, default "active"
        Paused sources are kept but ignored by every calculation.

    Examples
    --------
    >>> src = IncomeSource(id="a", name="Rent", amount=900, cycle="monthly")
    >>> src.monthly_amount
    900
    >>> src.paused().is_active
    False
    """

    id: str
    name: str
    amount: float
    cycle: Cycle
    status: IncomeStatus = IncomeStatus.ACTIVE

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise ValidationError("Income source name must not be empty.")
        check_positive("amount", self.amount)
        object.__setattr__(self, "cycle", parse_cycle(self.cycle))
        try:
            object.__setattr__(self, "status", IncomeStatus(self.status))
        except ValueError:
            raise ValidationError(
                f"Unknown status {self.status!r}; expected 'active' or 'paused'"
            ) from None

    @property
    def is_active(self) -> bool:
        return self.status is IncomeStatus.ACTIVE

    @property
    def monthly_amount(self) -> float:
        """Monthly-equivalent amount (see `to_monthly`)."""
        return to_monthly(self.amount, self.cycle)

    @property
    def rate_per_second(self) -> float:
        """Continuous accrual rate (see `per_second_rate`)."""
        return per_second_rate(self.amount, self.cycle)

    def paused(self) -> "IncomeSource":
        return replace(self, status=IncomeStatus.PAUSED)

    def resumed(self) -> "IncomeSource":
        return replace(self, status=IncomeStatus.ACTIVE)

    # -------------------------- Serialization helpers ----------------------
    def to_record(self, user_id: str) -> IncomeSourceRecord:
        return {
            "id": self.id,
            "user_id": user_id,
            "name": self.name,
            "amount": float(self.amount),
            "cycle": self.cycle.value,
            "status": self.status.value,
        }

    @classmethod
    def from_record(cls, record: dict) -> "IncomeSource":
        return cls(
            id=str(record["id"]),
            name=str(record.get("name", "")),
            amount=float(record.get("amount", 0.0)),
            cycle=record.get("cycle", ""),
            status=record.get("status", IncomeStatus.ACTIVE.value),
        )


def active_sources(sources: Iterable[IncomeSource]) -> List[IncomeSource]:
    """Return the sources whose status is active, preserving order."""
    return [s for s in sources if s.is_active]


def total_monthly_income(sources: Iterable[IncomeSource]) -> float:
    """Sum of the monthly-equivalent amounts of all active sources."""
    return float(sum(s.monthly_amount for s in active_sources(sources)))


def find_source(sources: Iterable[IncomeSource], source_id: Optional[str]) -> Optional[IncomeSource]:
    """Look up an active source by id; None when absent, paused or id is None."""
    if source_id is None:
        return None
    for s in sources:
        if s.id == source_id and s.is_active:
            return s
    return None

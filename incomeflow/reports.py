"""Monthly income reports.

Builds the month-by-month income series behind the reports view: every
month of the selected period is credited with the monthly equivalent of each
active income source.

Periods
-------
- "last12Months": the current month and the 11 before it
- "thisYear":     January through the current month
- "thisMonth":    the current month only
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .constants import REPORT_HISTORY_MONTHS, REPORT_PERIODS
from .exceptions import ValidationError
from .income import IncomeSource, active_sources
from .utils import month_index

__all__ = [
    "report_period_bounds",
    "monthly_income_report",
    "income_breakdown",
]


def report_period_bounds(period: str, today: date) -> Tuple[date, int]:
    """Return (first month, number of months) covered by a report period."""
    first_of_month = today.replace(day=1)
    if period == "thisMonth":
        return first_of_month, 1
    if period == "thisYear":
        return date(today.year, 1, 1), today.month
    if period == "last12Months":
        start = (pd.Timestamp(first_of_month) - pd.DateOffset(months=REPORT_HISTORY_MONTHS - 1)).date()
        return start, REPORT_HISTORY_MONTHS
    raise ValidationError(
        f"Unknown report period {period!r}; expected one of: {', '.join(REPORT_PERIODS)}"
    )


def monthly_income_report(
    sources: Iterable[IncomeSource],
    period: str = "last12Months",
    today: Optional[date] = None,
) -> pd.Series:
    """
    Total income per month over a report period.

    Parameters
    ----------
    sources : iterable of IncomeSource
        Paused sources are ignored.
    period : str, default "last12Months"
        One of "last12Months", "thisYear", "thisMonth".
    today : date, optional
        Reference date (defaults to today).

    Returns
    -------
    pd.Series
        Named "total_income", indexed by first-of-month dates in ascending
        order, values rounded to 2 decimals. All zeros when there is no
        active source.
    """
    today = date.today() if today is None else today
    start, months = report_period_bounds(period, today)
    idx = month_index(start=start, months=months)
    monthly = sum(s.monthly_amount for s in active_sources(sources))
    values = np.full(len(idx), float(monthly))
    return pd.Series(values, index=idx, name="total_income").round(2)


def income_breakdown(sources: Iterable[IncomeSource]) -> pd.DataFrame:
    """
    Per-source monthly equivalents and their share of total income.

    Returns a DataFrame indexed by source name with columns "cycle",
    "amount", "monthly" and "share" (percent), sorted by "monthly"
    descending. Empty when there is no active source.
    """
    active = active_sources(sources)
    columns = ["cycle", "amount", "monthly", "share"]
    if not active:
        return pd.DataFrame(columns=columns)
    df = pd.DataFrame(
        {
            "cycle": [s.cycle.value for s in active],
            "amount": [s.amount for s in active],
            "monthly": [s.monthly_amount for s in active],
        },
        index=pd.Index([s.name for s in active], name="source"),
    )
    df["share"] = df["monthly"] / df["monthly"].sum() * 100.0
    return df.sort_values("monthly", ascending=False)

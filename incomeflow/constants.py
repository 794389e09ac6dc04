"""
Global constants for IncomeFlow.

Purpose
-------
Centralizes the conversion factors and defaults used throughout the
IncomeFlow codebase. Every module that converts between recurrence cycles
reads its factors from here, so the dashboard, the allocation checks, the
forecast job and the reports all agree on what "one month" of a weekly
income means.

Usage
-----
>>> from incomeflow.constants import WEEKS_PER_MONTH, SECONDS_PER_DAY
>>> weekly_pay = 250.0
>>> monthly = weekly_pay * WEEKS_PER_MONTH

Categories
----------
- Cycle conversion: months, weeks and days per period
- Accrual: seconds per day, days per year, polling interval
- Periods: dashboard and report period names
"""

from typing import Tuple

__all__ = [
    # Cycle conversion
    "MONTHS_PER_YEAR",
    "WEEKS_PER_YEAR",
    "WEEKS_PER_MONTH",
    "DAYS_PER_MONTH",
    "DAYS_PER_WEEK",
    # Accrual
    "SECONDS_PER_DAY",
    "DAYS_PER_YEAR",
    "DEFAULT_TICK_INTERVAL",
    # Periods
    "DASHBOARD_PERIODS",
    "REPORT_PERIODS",
    "DEFAULT_DASHBOARD_PERIOD",
    "DEFAULT_REPORT_PERIOD",
    "REPORT_HISTORY_MONTHS",
    # Formatting
    "DEFAULT_CURRENCY_SYMBOL",
]


# =============================================================================
# Cycle Conversion
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year."""

WEEKS_PER_YEAR: int = 52
"""Number of whole weeks in a year."""

WEEKS_PER_MONTH: float = WEEKS_PER_YEAR / MONTHS_PER_YEAR
"""Average number of weeks in a month (52/12 ≈ 4.333)."""

DAYS_PER_MONTH: float = 30.44
"""Average number of days in a month (365.25/12 rounded to two decimals)."""

DAYS_PER_WEEK: int = 7
"""Number of days in a week."""


# =============================================================================
# Accrual
# =============================================================================

SECONDS_PER_DAY: int = 86_400
"""Number of seconds in a day."""

DAYS_PER_YEAR: float = 365.25
"""Average number of days in a year (leap years included)."""

DEFAULT_TICK_INTERVAL: float = 1.0
"""Seconds between two evaluations of the live accrual projection."""


# =============================================================================
# Periods
# =============================================================================

DASHBOARD_PERIODS: Tuple[str, ...] = ("today", "week", "month", "year", "custom")
"""Reference periods offered by the accumulated-income dashboard."""

REPORT_PERIODS: Tuple[str, ...] = ("last12Months", "thisYear", "thisMonth")
"""Periods offered by the monthly income report."""

DEFAULT_DASHBOARD_PERIOD: str = "month"
"""Dashboard period used when none is given."""

DEFAULT_REPORT_PERIOD: str = "last12Months"
"""Report period used when none is given."""

REPORT_HISTORY_MONTHS: int = 12
"""Number of months covered by the "last12Months" report."""


# =============================================================================
# Formatting
# =============================================================================

DEFAULT_CURRENCY_SYMBOL: str = "$"
"""Currency symbol used in text output."""

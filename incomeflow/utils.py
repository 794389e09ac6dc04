"""General utilities for IncomeFlow

Contents
--------
- Validation helpers
- Calendar helpers (add_months, month_index, parse_date)
- Formatting helpers (format_currency, currency_formatter)
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

import pandas as pd

from .constants import DEFAULT_CURRENCY_SYMBOL
from .exceptions import ValidationError

__all__ = [
    # Validation
    "check_positive",
    "check_non_negative",
    # Calendar
    "add_months",
    "month_index",
    "parse_date",
    # Formatting
    "format_currency",
    "currency_formatter",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_positive(name: str, value: float) -> None:
    """Raise if *value* is not strictly positive."""
    if not value > 0:
        raise ValidationError(f"{name} must be > 0 (got {value}).")


def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative (strict)."""
    if value < 0:
        raise ValidationError(f"{name} must be non-negative (got {value}).")


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def add_months(start: date, months: int) -> date:
    """Return *start* shifted by *months* calendar months.

    The day of month is clamped to the last day of the target month, so
    2025-01-31 + 1 month is 2025-02-28.
    """
    shifted = pd.Timestamp(start) + pd.DateOffset(months=int(months))
    return shifted.date()


def month_index(start: Optional[date], months: int) -> pd.DatetimeIndex:
    """Construct a first-of-month DatetimeIndex for *months* periods.

    If *start* is None, uses the current month as the first period.
    """
    if months <= 0:
        return pd.DatetimeIndex([], dtype="datetime64[ns]")
    if start is None:
        today = pd.Timestamp.today().normalize()
        first = pd.Timestamp(today.year, today.month, 1)
    else:
        first = pd.Timestamp(start.year, start.month, 1)
    return pd.date_range(start=first, periods=months, freq="MS")


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO date string (YYYY-MM-DD); pass dates and None through."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_currency(value: float, decimals: int = 2, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Format a monetary value for text output.

    Parameters
    ----------
    value : float
        Monetary value.
    decimals : int, default 2
        Number of decimal places to display.
    symbol : str, default "$"
        Currency symbol prefix.

    Returns
    -------
    str
        Formatted string with thousands separators.

    Examples
    --------
    >>> format_currency(1234.5)
    '$1,234.50'
    >>> format_currency(-20, decimals=0)
    '-$20'
    """
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{decimals}f}"


def currency_formatter(x, pos):
    """
    Format axis values for matplotlib FuncFormatter.

    Values of a thousand or more are shown in compact "k" notation:
    - 12_500 → "12.5k"
    - 3_000 → "3k"
    - 950 → "950"

    Examples
    --------
    >>> from matplotlib.ticker import FuncFormatter
    >>> ax.yaxis.set_major_formatter(FuncFormatter(currency_formatter))
    """
    if abs(x) < 1_000:
        return f"{x:.0f}"
    val = x / 1e3
    return f"{val:.0f}k" if val == int(val) else f"{val:.1f}k"

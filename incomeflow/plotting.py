"""
Plotting utilities for IncomeFlow.

Purpose
-------
Charts for the two views that have one:

- plot_monthly_income: line chart of the monthly income report
  (`reports.monthly_income_report`)
- plot_income_contribution: pie chart of each source's share of the
  accumulated income (`accrual.project`)

Both follow the same conventions: draw on `ax` when given (otherwise a new
figure), optionally save to `save_path`, and return (fig, ax) only when
`return_fig_ax=True`. Empty inputs render a "no data" message instead of
raising.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from .accrual import AccrualSnapshot, contribution_shares
from .utils import currency_formatter, format_currency

__all__ = ["plot_monthly_income", "plot_income_contribution"]

_COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#A28DFF", "#FF6666", "#66B2FF", "#FFD700"]


def _no_data(ax, figsize, message: str):
    import matplotlib.pyplot as plt

    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    ax.set_axis_off()
    ax.text(0.5, 0.5, message, ha="center", va="center", transform=ax.transAxes)
    return ax


def plot_monthly_income(
    series: pd.Series,
    ax=None,
    figsize: tuple = (12, 6),
    title: Optional[str] = "Monthly income",
    color: str = "#0088FE",
    grid: bool = True,
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Plot a monthly income series.

    Parameters
    ----------
    series : pd.Series
        Values indexed by month (as returned by `monthly_income_report`).
    ax : matplotlib.axes.Axes, optional
        Existing Axes to draw on.
    figsize : tuple, default (12, 6)
        Figure size when a new figure is created.
    title : str, optional
        Plot title.
    color : str
        Line color.
    grid : bool, default True
        Whether to draw gridlines.
    save_path : str, optional
        File to save the figure to.
    return_fig_ax : bool, default False
        If True, returns (fig, ax).

    Examples
    --------
    >>> report = monthly_income_report(sources, "thisYear")
    >>> plot_monthly_income(report, save_path="income.png")
    """
    import matplotlib.pyplot as plt
    from matplotlib.ticker import FuncFormatter

    if series is None or len(series) == 0:
        ax = _no_data(ax, figsize, "No income data available for the selected period.")
        if save_path:
            ax.figure.savefig(save_path, bbox_inches="tight")
        if return_fig_ax:
            return (ax.figure, ax)
        return

    if ax is None:
        _, ax = plt.subplots(figsize=figsize)

    labels = [
        ts.strftime("%Y-%m") if hasattr(ts, "strftime") else str(ts) for ts in series.index
    ]
    ax.plot(labels, series.values, marker="o", color=color, linewidth=2.0, label=series.name or "income")
    ax.yaxis.set_major_formatter(FuncFormatter(currency_formatter))
    ax.set_xlabel("Month")
    ax.set_ylabel("Income")
    ax.tick_params(axis="x", rotation=45)
    if title:
        ax.set_title(title)
    if grid:
        ax.grid(True, linestyle="--", alpha=0.4)
    ax.set_ylim(bottom=0)

    if save_path:
        ax.figure.savefig(save_path, bbox_inches="tight")
    if return_fig_ax:
        return (ax.figure, ax)


def plot_income_contribution(
    snapshot: AccrualSnapshot,
    ax=None,
    figsize: tuple = (8, 8),
    title: Optional[str] = "Income contribution",
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Pie chart of each source's share of the accumulated income.

    Parameters
    ----------
    snapshot : AccrualSnapshot
        Result of `accrual.project`.
    ax, figsize, title, save_path, return_fig_ax
        As in `plot_monthly_income`.
    """
    import matplotlib.pyplot as plt

    shares = contribution_shares(snapshot)
    if not shares:
        ax = _no_data(ax, figsize, "No income accumulated yet.")
        if save_path:
            ax.figure.savefig(save_path, bbox_inches="tight")
        if return_fig_ax:
            return (ax.figure, ax)
        return

    if ax is None:
        _, ax = plt.subplots(figsize=figsize)

    amounts = [entry.amount for entry in snapshot.per_source]
    labels = [
        f"{name} ({format_currency(amount)}, {pct:.1f}%)"
        for (name, pct), amount in zip(shares, amounts)
    ]
    colors = [_COLORS[i % len(_COLORS)] for i in range(len(amounts))]
    ax.pie(amounts, labels=labels, colors=colors, startangle=90)
    ax.axis("equal")
    if title:
        ax.set_title(f"{title}: {format_currency(snapshot.total)}")

    if save_path:
        ax.figure.savefig(save_path, bbox_inches="tight")
    if return_fig_ax:
        return (ax.figure, ax)

"""
Unit tests for plotting.py module.

Tests the monthly income chart and the contribution pie chart.
"""

from datetime import date, datetime, timedelta

import pandas as pd
import pytest

# Use non-interactive backend for testing
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from incomeflow.accrual import AccrualSnapshot, project
from incomeflow.plotting import plot_income_contribution, plot_monthly_income
from incomeflow.reports import monthly_income_report


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def report(sources):
    return monthly_income_report(sources, "last12Months", today=date(2025, 3, 15))


class TestPlotMonthlyIncome:
    def test_returns_fig_ax(self, report):
        fig, ax = plot_monthly_income(report, return_fig_ax=True)
        assert fig is ax.figure
        assert ax.get_title() == "Monthly income"
        assert len(ax.get_lines()) == 1

    def test_returns_none_by_default(self, report):
        assert plot_monthly_income(report) is None

    def test_draws_on_given_axes(self, report):
        fig, ax = plt.subplots()
        _, used = plot_monthly_income(report, ax=ax, title=None, return_fig_ax=True)
        assert used is ax

    def test_save_path(self, report, tmp_path):
        out = tmp_path / "income.png"
        plot_monthly_income(report, save_path=str(out))
        assert out.exists()

    def test_empty_series(self):
        fig, ax = plot_monthly_income(pd.Series(dtype=float), return_fig_ax=True)
        assert len(ax.get_lines()) == 0
        assert "No income data" in ax.texts[0].get_text()


class TestPlotIncomeContribution:
    def test_pie(self, sources):
        since = datetime(2025, 1, 1)
        snapshot = project(sources, since, since + timedelta(days=10))
        fig, ax = plot_income_contribution(snapshot, return_fig_ax=True)
        assert len(ax.patches) == 3
        assert ax.get_title().startswith("Income contribution: $")

    def test_nothing_accumulated(self, tmp_path):
        out = tmp_path / "pie.png"
        fig, ax = plot_income_contribution(
            AccrualSnapshot(total=0.0), save_path=str(out), return_fig_ax=True
        )
        assert out.exists()
        assert "No income accumulated" in ax.texts[0].get_text()

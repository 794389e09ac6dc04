"""
Pytest configuration and fixtures for IncomeFlow test suite.

This module provides reusable fixtures for testing all IncomeFlow components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

from datetime import date, datetime
from typing import List

import pytest

from incomeflow.income import IncomeSource
from incomeflow.goals import FixedFromTotal, Goal, PercentOfSource, PercentOfTotal
from incomeflow.ledger import Ledger
from incomeflow.store import InMemoryStore


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def today() -> date:
    """Reference date for forecasts and reports."""
    return date(2025, 1, 15)


@pytest.fixture
def now() -> datetime:
    """Reference timestamp for accrual (Thursday afternoon)."""
    return datetime(2025, 3, 13, 15, 30)


# ---------------------------------------------------------------------------
# Income Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def salary() -> IncomeSource:
    """Monthly salary: 4,200/month."""
    return IncomeSource(id="s-salary", name="Salary", amount=4200, cycle="monthly")


@pytest.fixture
def freelance() -> IncomeSource:
    """Weekly freelance work: 300/week, 1,300/month."""
    return IncomeSource(id="s-freelance", name="Freelance", amount=300, cycle="weekly")


@pytest.fixture
def bonus() -> IncomeSource:
    """Yearly bonus: 1,200/year, 100/month."""
    return IncomeSource(id="s-bonus", name="Bonus", amount=1200, cycle="yearly")


@pytest.fixture
def paused_source() -> IncomeSource:
    """Paused daily side job; ignored by every calculation."""
    return IncomeSource(
        id="s-paused", name="Side job", amount=50, cycle="daily", status="paused"
    )


@pytest.fixture
def sources(salary, freelance, bonus, paused_source) -> List[IncomeSource]:
    """All sources; active total is 5,600/month."""
    return [salary, freelance, bonus, paused_source]


# ---------------------------------------------------------------------------
# Goal Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def emergency_fund() -> Goal:
    """10% of total income toward 6,000."""
    return Goal(
        id="g-emergency",
        name="Emergency fund",
        target_amount=6000,
        allocation=PercentOfTotal(percent=10),
    )


@pytest.fixture
def car_goal() -> Goal:
    """500/month from total income toward 12,000, 2,000 saved."""
    return Goal(
        id="g-car",
        name="Car",
        target_amount=12_000,
        current_amount=2_000,
        allocation=FixedFromTotal(amount=500, cycle="monthly"),
    )


@pytest.fixture
def trip_goal() -> Goal:
    """Half of the freelance income toward 3,000."""
    return Goal(
        id="g-trip",
        name="Trip",
        target_amount=3_000,
        allocation=PercentOfSource(percent=50, source_id="s-freelance"),
    )


# ---------------------------------------------------------------------------
# Store Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store(sources, emergency_fund, car_goal) -> InMemoryStore:
    """In-memory store holding every source and two goals for 'alice'."""
    s = InMemoryStore()
    for source in sources:
        s.insert_income_source("alice", source)
    s.insert_goal("alice", emergency_fund)
    s.insert_goal("alice", car_goal)
    return s


@pytest.fixture
def ledger() -> Ledger:
    """Empty ledger for 'alice'."""
    return Ledger(InMemoryStore(), "alice")

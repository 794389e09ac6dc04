"""
Unit tests for goals.py module.

Tests allocation policies, Goal, monthly contributions and schedules.
"""

from datetime import date

import pandas as pd
import pytest

from incomeflow.exceptions import ValidationError
from incomeflow.goals import (
    FixedFromSource,
    FixedFromTotal,
    Goal,
    PercentOfSource,
    PercentOfTotal,
    accumulated_amount,
    allocation_from_record,
    allocation_to_record,
    goal_schedule,
    monthly_contribution,
    summarize_goals,
)
from incomeflow.income import Cycle


# ============================================================================
# ALLOCATION POLICIES
# ============================================================================

class TestAllocationPolicies:
    """Test allocation variant validation."""

    def test_percent_must_be_positive(self):
        with pytest.raises(ValidationError):
            PercentOfTotal(percent=0)

    def test_source_variant_requires_source(self):
        with pytest.raises(ValidationError, match="source_income_id"):
            PercentOfSource(percent=10, source_id="")

    def test_fixed_cycle_parsed(self):
        assert FixedFromTotal(amount=50, cycle="weekly").cycle is Cycle.WEEKLY

    def test_fixed_bad_cycle(self):
        with pytest.raises(ValidationError):
            FixedFromTotal(amount=50, cycle="hourly")

    def test_value_property(self):
        assert PercentOfTotal(percent=15).value == 15
        assert FixedFromSource(amount=20, cycle="daily", source_id="s").value == 20


class TestAllocationRecords:
    """Test the flat record columns of an allocation."""

    def test_fixed_source_from_record(self):
        alloc = allocation_from_record("FIXED_SOURCE", 100, "weekly", "s1")
        assert alloc == FixedFromSource(amount=100, cycle="weekly", source_id="s1")

    def test_to_record_leaves_unused_columns_empty(self):
        assert allocation_to_record(PercentOfTotal(percent=10)) == {
            "allocation_type": "PERCENT_TOTAL",
            "allocation_value": 10.0,
            "allocation_cycle": None,
            "source_income_id": None,
        }

    @pytest.mark.parametrize(
        "args,match",
        [
            (("FIXED_TOTAL", 100, None, None), "requires allocation_cycle"),
            (("PERCENT_TOTAL", 10, "monthly", None), "must not set allocation_cycle"),
            (("PERCENT_SOURCE", 10, None, None), "requires source_income_id"),
            (("FIXED_TOTAL", 10, "monthly", "s1"), "must not set source_income_id"),
            (("SPLIT_EVENLY", 10, None, None), "Unknown allocation_type"),
        ],
    )
    def test_invalid_combinations(self, args, match):
        with pytest.raises(ValidationError, match=match):
            allocation_from_record(*args)


# ============================================================================
# GOAL
# ============================================================================

class TestGoal:
    """Test Goal validation and derived values."""

    def test_remaining_and_progress(self, car_goal):
        assert car_goal.remaining == 10_000
        assert car_goal.progress == pytest.approx(2_000 / 12_000)
        assert not car_goal.is_complete

    def test_complete_when_target_reached(self):
        goal = Goal(id="g", name="Done", target_amount=100, current_amount=100,
                    allocation=PercentOfTotal(percent=5))
        assert goal.is_complete
        assert goal.remaining == 0

    def test_current_may_exceed_target(self):
        goal = Goal(id="g", name="Over", target_amount=100, current_amount=150,
                    allocation=PercentOfTotal(percent=5))
        assert goal.is_complete
        assert goal.remaining == -50
        assert goal.progress == pytest.approx(1.5)

    def test_negative_current_raises(self):
        with pytest.raises(ValidationError, match="current_amount"):
            Goal(id="g", name="Bad", target_amount=100, current_amount=-1,
                 allocation=PercentOfTotal(percent=5))

    def test_zero_target_raises(self):
        with pytest.raises(ValidationError, match="target_amount"):
            Goal(id="g", name="Bad", target_amount=0, allocation=PercentOfTotal(percent=5))

    def test_allocation_must_be_policy(self):
        with pytest.raises(ValidationError, match="allocation"):
            Goal(id="g", name="Bad", target_amount=10, allocation={"type": "PERCENT_TOTAL"})

    def test_with_forecast(self, emergency_fund):
        updated = emergency_fund.with_forecast(date(2026, 1, 1))
        assert updated.forecasted_completion_date == date(2026, 1, 1)
        assert emergency_fund.forecasted_completion_date is None

    def test_record_round_trip(self, trip_goal):
        goal = Goal(
            id=trip_goal.id,
            name=trip_goal.name,
            target_amount=trip_goal.target_amount,
            allocation=trip_goal.allocation,
            target_date=date(2025, 8, 1),
            forecasted_completion_date=date(2025, 7, 15),
        )
        record = goal.to_record("alice")
        assert record["target_date"] == "2025-08-01"
        assert record["allocation_type"] == "PERCENT_SOURCE"
        assert Goal.from_record(record) == goal


# ============================================================================
# CONTRIBUTIONS
# ============================================================================

class TestMonthlyContribution:
    """Test monthly_contribution() for each allocation policy."""

    def test_percent_of_total(self, emergency_fund, sources):
        assert monthly_contribution(emergency_fund, sources) == pytest.approx(560.0)

    def test_percent_of_total_with_explicit_income(self, emergency_fund, sources):
        assert monthly_contribution(emergency_fund, sources, 1000.0) == pytest.approx(100.0)

    def test_percent_of_source_uses_monthly_equivalent(self, trip_goal, sources):
        assert monthly_contribution(trip_goal, sources) == pytest.approx(650.0)

    def test_fixed_from_total(self, sources):
        alloc = FixedFromTotal(amount=100, cycle="weekly")
        assert monthly_contribution(alloc, sources) == pytest.approx(433.3333, rel=1e-6)

    def test_fixed_from_source_ignores_source_cycle(self, sources):
        alloc = FixedFromSource(amount=100, cycle="weekly", source_id="s-salary")
        assert monthly_contribution(alloc, sources) == pytest.approx(433.3333, rel=1e-6)

    def test_missing_source_contributes_nothing(self, sources):
        """A deleted source silently zeroes the goal's funding."""
        assert monthly_contribution(PercentOfSource(percent=50, source_id="gone"), sources) == 0.0
        alloc = FixedFromSource(amount=100, cycle="weekly", source_id="gone")
        assert monthly_contribution(alloc, sources) == 0.0

    def test_paused_source_contributes_nothing(self, sources):
        alloc = PercentOfSource(percent=50, source_id="s-paused")
        assert monthly_contribution(alloc, sources) == 0.0

    def test_unknown_policy_contributes_nothing(self, sources):
        assert monthly_contribution(object(), sources) == 0.0

    def test_no_income(self, emergency_fund):
        assert monthly_contribution(emergency_fund, []) == 0.0


class TestAccumulatedAmount:
    def test_linear_in_months(self, car_goal, sources):
        assert accumulated_amount(car_goal, sources, 3) == pytest.approx(1500.0)

    def test_non_positive_horizon(self, car_goal, sources):
        assert accumulated_amount(car_goal, sources, 0) == 0.0


class TestGoalSchedule:
    """Test goal_schedule() projection."""

    def test_balance_and_completion(self, sources):
        goal = Goal(id="g", name="Laptop", target_amount=700, current_amount=500,
                    allocation=FixedFromTotal(amount=100, cycle="monthly"))
        df = goal_schedule(goal, sources, months=3, start=date(2025, 1, 1))

        assert list(df.columns) == ["contribution", "balance", "progress", "complete"]
        assert df.index[0] == pd.Timestamp("2025-01-01")
        assert df["balance"].tolist() == pytest.approx([600.0, 700.0, 800.0])
        assert df["complete"].tolist() == [False, True, True]

    def test_empty_horizon(self, car_goal, sources):
        df = goal_schedule(car_goal, sources, months=0, start=date(2025, 1, 1))
        assert df.empty


class TestSummarizeGoals:
    def test_summary(self, emergency_fund, car_goal):
        done = Goal(id="g-done", name="Phone", target_amount=1_000, current_amount=1_000,
                    allocation=PercentOfTotal(percent=1))
        summary = summarize_goals([emergency_fund, car_goal, done])

        assert summary.active == 2
        assert summary.completed == 1
        assert summary.total_target == 19_000
        assert summary.total_current == 3_000
        assert summary.overall_progress == pytest.approx(3_000 / 19_000 * 100)

    def test_no_goals(self):
        summary = summarize_goals([])
        assert summary.active == 0
        assert summary.overall_progress == 0.0

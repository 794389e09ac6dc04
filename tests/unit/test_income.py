"""
Unit tests for income.py module.

Tests cycle normalization, per-second accrual rates and IncomeSource.
"""

import pytest

from incomeflow.exceptions import ValidationError
from incomeflow.income import (
    Cycle,
    IncomeSource,
    IncomeStatus,
    active_sources,
    find_source,
    parse_cycle,
    per_second_rate,
    to_monthly,
    total_monthly_income,
)


# ============================================================================
# CYCLE NORMALIZATION
# ============================================================================

class TestToMonthly:
    """Test to_monthly() conversion."""

    def test_daily(self):
        assert to_monthly(10, "daily") == pytest.approx(304.4)

    def test_weekly(self):
        assert to_monthly(100, "weekly") == pytest.approx(433.3333, rel=1e-6)

    def test_monthly_is_identity(self):
        assert to_monthly(950, Cycle.MONTHLY) == 950

    def test_yearly(self):
        assert to_monthly(1200, "yearly") == pytest.approx(100.0)

    def test_unknown_cycle_passes_amount_through(self):
        assert to_monthly(250, "fortnightly") == 250

    def test_proportional_to_amount(self):
        assert to_monthly(30, "weekly") == pytest.approx(3 * to_monthly(10, "weekly"))


class TestPerSecondRate:
    """Test per_second_rate() accrual rates."""

    @pytest.mark.parametrize(
        "amount,cycle",
        [
            (86_400, "daily"),
            (7 * 86_400, "weekly"),
            (365.25 / 12 * 86_400, "monthly"),
            (365.25 * 86_400, "yearly"),
        ],
    )
    def test_one_unit_per_second(self, amount, cycle):
        """Each amount is exactly one cycle of 1/second."""
        assert per_second_rate(amount, cycle) == pytest.approx(1.0)

    def test_unknown_cycle_accrues_nothing(self):
        assert per_second_rate(1000, "hourly") == 0.0


class TestParseCycle:
    def test_accepts_strings_and_members(self):
        assert parse_cycle("weekly") is Cycle.WEEKLY
        assert parse_cycle(Cycle.YEARLY) is Cycle.YEARLY

    def test_unknown_raises(self):
        with pytest.raises(ValidationError, match="Unknown cycle"):
            parse_cycle("biweekly")


# ============================================================================
# INCOME SOURCE
# ============================================================================

class TestIncomeSourceInstantiation:
    """Test IncomeSource validation."""

    def test_basic_instantiation(self, salary):
        assert salary.cycle is Cycle.MONTHLY
        assert salary.status is IncomeStatus.ACTIVE
        assert salary.is_active

    def test_string_status_coerced(self, paused_source):
        assert paused_source.status is IncomeStatus.PAUSED
        assert not paused_source.is_active

    def test_empty_name_raises(self):
        with pytest.raises(ValidationError, match="name"):
            IncomeSource(id="x", name="  ", amount=10, cycle="daily")

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_raises(self, amount):
        with pytest.raises(ValidationError, match="amount"):
            IncomeSource(id="x", name="Gig", amount=amount, cycle="daily")

    def test_bad_cycle_raises(self):
        with pytest.raises(ValidationError):
            IncomeSource(id="x", name="Gig", amount=10, cycle="hourly")

    def test_bad_status_raises(self):
        with pytest.raises(ValidationError, match="status"):
            IncomeSource(id="x", name="Gig", amount=10, cycle="daily", status="archived")

    def test_frozen_dataclass(self, salary):
        with pytest.raises(Exception):
            salary.amount = 1


class TestIncomeSourceBehaviour:
    def test_monthly_amount(self, freelance, bonus):
        assert freelance.monthly_amount == pytest.approx(1300.0)
        assert bonus.monthly_amount == pytest.approx(100.0)

    def test_pause_and_resume_return_copies(self, salary):
        paused = salary.paused()
        assert not paused.is_active
        assert salary.is_active
        assert paused.resumed() == salary

    def test_record_round_trip(self, freelance):
        record = freelance.to_record("alice")
        assert record["user_id"] == "alice"
        assert record["cycle"] == "weekly"
        assert record["status"] == "active"
        assert IncomeSource.from_record(record) == freelance


class TestSourceCollections:
    def test_active_sources_preserves_order(self, sources, salary, freelance, bonus):
        assert active_sources(sources) == [salary, freelance, bonus]

    def test_total_monthly_income_excludes_paused(self, sources):
        assert total_monthly_income(sources) == pytest.approx(5600.0)

    def test_total_monthly_income_empty(self):
        assert total_monthly_income([]) == 0.0

    def test_pausing_lowers_total_by_monthly_amount(self, sources, freelance):
        others = [s for s in sources if s.id != freelance.id]
        paused_total = total_monthly_income(others + [freelance.paused()])
        assert paused_total == pytest.approx(5600.0 - 1300.0)

    def test_find_source(self, sources, salary):
        assert find_source(sources, "s-salary") == salary

    def test_find_source_ignores_paused_and_missing(self, sources):
        assert find_source(sources, "s-paused") is None
        assert find_source(sources, "nope") is None
        assert find_source(sources, None) is None

"""
Unit tests for forecast.py module.

Tests forecast_completion_date() and the ForecastService job.
"""

from datetime import date

import pytest

from incomeflow.exceptions import StoreError
from incomeflow.forecast import ForecastService, forecast_completion_date
from incomeflow.goals import FixedFromSource, FixedFromTotal, Goal, PercentOfTotal
from incomeflow.store import InMemoryStore


def _goal(target=1_000, current=0):
    return Goal(id="g", name="Goal", target_amount=target, current_amount=current,
                allocation=PercentOfTotal(percent=10))


# ============================================================================
# COMPLETION DATE
# ============================================================================

class TestForecastCompletionDate:
    """Test forecast_completion_date() rules."""

    def test_whole_months(self, today):
        assert forecast_completion_date(_goal(1_000), 250.0, today) == date(2025, 5, 15)

    def test_rounds_up(self, today):
        assert forecast_completion_date(_goal(1_001), 250.0, today) == date(2025, 6, 15)

    def test_met_goal_is_today(self, today):
        assert forecast_completion_date(_goal(500, 500), 0.0, today) == today
        assert forecast_completion_date(_goal(500, 800), 100.0, today) == today

    @pytest.mark.parametrize("contribution", [0.0, -10.0])
    def test_unreachable(self, today, contribution):
        assert forecast_completion_date(_goal(), contribution, today) is None

    def test_day_clamped_to_month_end(self):
        assert forecast_completion_date(_goal(100), 100.0, date(2025, 1, 31)) == date(2025, 2, 28)

    def test_crosses_year(self, today):
        assert forecast_completion_date(_goal(1_200), 100.0, today) == date(2026, 1, 15)

    @pytest.mark.parametrize("contribution", [1 / 12, 1e-300])
    def test_beyond_calendar_is_unreachable(self, today, contribution):
        assert forecast_completion_date(_goal(1_000_000), contribution, today) is None


# ============================================================================
# SERVICE
# ============================================================================

class FailingReadStore(InMemoryStore):
    def list_income_sources(self, user_id, status=None):
        raise StoreError("database unavailable")


class FailingUpdateStore(InMemoryStore):
    """Rejects updates of one goal."""

    def __init__(self, broken_id, **kwargs):
        super().__init__(**kwargs)
        self.broken_id = broken_id

    def update_goal(self, user_id, goal_id, changes):
        if goal_id == self.broken_id:
            raise StoreError("write failed")
        return super().update_goal(user_id, goal_id, changes)


class TestForecastService:
    """Test ForecastService.run()."""

    def test_updates_every_goal(self, store, today):
        result = ForecastService(store, today=lambda: today).run("alice")

        assert result.success
        assert result.message == "Goal forecasts calculated and updated successfully"
        # 6,000 at 560/month -> 11 months; 10,000 at 500/month -> 20 months
        assert result.updated == {
            "g-emergency": date(2025, 12, 15),
            "g-car": date(2026, 9, 15),
        }
        stored = {g.id: g.forecasted_completion_date for g in store.list_goals("alice")}
        assert stored == result.updated

    def test_idempotent(self, store, today):
        service = ForecastService(store, today=lambda: today)
        first = service.run("alice")
        before = store.records()
        second = service.run("alice")
        assert second.updated == first.updated
        assert store.records() == before

    def test_missing_source_gives_none(self, today):
        store = InMemoryStore()
        goal = Goal(id="g", name="Orphan", target_amount=100,
                    allocation=FixedFromSource(amount=10, cycle="monthly", source_id="gone"))
        store.insert_goal("alice", goal)

        result = ForecastService(store, today=lambda: today).run("alice")
        assert result.updated == {"g": None}
        assert store.get_goal("alice", "g").forecasted_completion_date is None

    def test_clears_stale_forecast(self, today):
        store = InMemoryStore()
        goal = Goal(id="g", name="Stale", target_amount=100, allocation=PercentOfTotal(percent=5),
                    forecasted_completion_date=date(2024, 1, 1))
        store.insert_goal("alice", goal)

        ForecastService(store, today=lambda: today).run("alice")
        assert store.get_goal("alice", "g").forecasted_completion_date is None

    def test_only_touches_own_goals(self, store, today, emergency_fund):
        store.insert_goal("bob", Goal(id="g-bob", name="Bob", target_amount=10,
                                      allocation=PercentOfTotal(percent=5)))
        result = ForecastService(store, today=lambda: today).run("alice")
        assert "g-bob" not in result.updated
        assert store.get_goal("bob", "g-bob").forecasted_completion_date is None

    def test_requires_user_id(self, store):
        result = ForecastService(store).run("")
        assert not result.success
        assert result.message == "user_id is required"

    def test_read_failure(self):
        result = ForecastService(FailingReadStore()).run("alice")
        assert not result.success
        assert "database unavailable" in result.message

    def test_update_failure_continues(self, sources, emergency_fund, car_goal, today):
        store = FailingUpdateStore("g-emergency")
        for s in sources:
            store.insert_income_source("alice", s)
        store.insert_goal("alice", emergency_fund)
        store.insert_goal("alice", car_goal)

        result = ForecastService(store, today=lambda: today).run("alice")

        assert result.success
        assert result.failed == ["g-emergency"]
        assert result.updated == {"g-car": date(2026, 9, 15)}
        assert "1 of 2 updates failed" in result.message

    def test_slow_goal_does_not_stop_run(self, sources, car_goal, today):
        store = InMemoryStore()
        for s in sources:
            store.insert_income_source("alice", s)
        slow = Goal(id="g-slow", name="Slow", target_amount=1_000_000,
                    allocation=FixedFromTotal(amount=1, cycle="yearly"))
        store.insert_goal("alice", slow)
        store.insert_goal("alice", car_goal)

        result = ForecastService(store, today=lambda: today).run("alice")

        assert result.success
        assert result.failed == []
        assert result.updated == {"g-slow": None, "g-car": date(2026, 9, 15)}
        assert store.get_goal("alice", "g-car").forecasted_completion_date == date(2026, 9, 15)

    def test_to_dict(self, store, today):
        summary = ForecastService(store, today=lambda: today).run("alice").to_dict()
        assert summary["success"] is True
        assert summary["updated"]["g-car"] == "2026-09-15"
        assert summary["failed"] == []

"""
Goal completion forecasting.

Purpose
-------
Estimates when each goal will be reached at its current funding rate and
stores the estimate on the goal as `forecasted_completion_date`.

For a goal with remaining amount R = target − current and monthly
contribution c (see `goals.monthly_contribution`):

    R ≤ 0         → today (already met)
    c ≤ 0         → None  (unreachable under current funding)
    date too far  → None  (beyond the supported calendar range)
    otherwise     → today + ⌈R / c⌉ calendar months

The job reads the user's active income sources and all goals, then
recomputes and overwrites the forecast of every goal, one at a time. A
failed update is logged and the remaining goals are still processed; the
job is idempotent, so running it again simply rewrites the same values.

Example
-------
>>> from datetime import date
>>> forecast_completion_date(goal, monthly_contribution=250.0, today=date(2025, 1, 15))
datetime.date(2025, 5, 15)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional

from .exceptions import IncomeFlowError, StoreError
from .goals import Goal, monthly_contribution
from .income import IncomeStatus, total_monthly_income
from .store import IncomeStore
from .types import ForecastSummaryDict
from .utils import add_months

__all__ = [
    "forecast_completion_date",
    "ForecastResult",
    "ForecastService",
]

logger = logging.getLogger(__name__)


def forecast_completion_date(
    goal: Goal,
    monthly_contribution: float,
    today: date,
) -> Optional[date]:
    """
    Forecast the date a goal is reached.

    Parameters
    ----------
    goal : Goal
        Goal with target and current amounts.
    monthly_contribution : float
        Funding per month.
    today : date
        Reference date.

    Returns
    -------
    date or None
        `today` when the goal is already met (whatever the contribution),
        None when the contribution is not positive, otherwise `today`
        shifted by the number of whole months needed (rounded up). A date
        beyond the supported calendar range is also reported as None.
    """
    remaining = goal.remaining
    if remaining <= 0:
        return today
    if monthly_contribution <= 0:
        return None
    try:
        months = math.ceil(remaining / monthly_contribution)
        return add_months(today, months)
    except (OverflowError, ValueError) as e:
        # pandas' OutOfBoundsDatetime is a ValueError
        logger.debug("Forecast for goal %s out of calendar range: %s", goal.id, e)
        return None


@dataclass
class ForecastResult:
    """
    Outcome of one forecast run.

    Attributes
    ----------
    success : bool
        False only when the run could not start.
    message : str
    updated : dict
        Goal id -> forecast date written (None when unreachable).
    failed : list of str
        Goal ids whose update failed.
    """

    success: bool
    message: str
    updated: Dict[str, Optional[date]] = field(default_factory=dict)
    failed: List[str] = field(default_factory=list)

    def to_dict(self) -> ForecastSummaryDict:
        return {
            "success": self.success,
            "message": self.message,
            "updated": {
                k: (None if v is None else v.isoformat()) for k, v in self.updated.items()
            },
            "failed": list(self.failed),
        }


class ForecastService:
    """
    Recompute and store goal forecasts for one user.

    Parameters
    ----------
    store : IncomeStore
        Record store to read from and write to.
    today : callable, default date.today
        Returns the reference date of a run.

    Examples
    --------
    >>> service = ForecastService(JsonFileStore(Path("ledger.json")))
    >>> service.run("alice").success
    True
    """

    def __init__(self, store: IncomeStore, today: Callable[[], date] = date.today) -> None:
        self.store = store
        self.today = today

    def run(self, user_id: Optional[str]) -> ForecastResult:
        if not user_id:
            return ForecastResult(success=False, message="user_id is required")

        try:
            sources = self.store.list_income_sources(user_id, status=IncomeStatus.ACTIVE)
        except StoreError as e:
            logger.error("Error fetching income sources for %s: %s", user_id, e)
            return ForecastResult(success=False, message=str(e))

        total = total_monthly_income(sources)
        logger.debug("Total monthly income for %s: %.2f", user_id, total)

        try:
            goals = self.store.list_goals(user_id)
        except StoreError as e:
            logger.error("Error fetching goals for %s: %s", user_id, e)
            return ForecastResult(success=False, message=str(e))

        today = self.today()
        result = ForecastResult(
            success=True,
            message="Goal forecasts calculated and updated successfully",
        )
        for goal in goals:
            if goal.remaining <= 0:
                contribution = 0.0
            else:
                contribution = monthly_contribution(goal, sources, total)
            forecast = forecast_completion_date(goal, contribution, today)
            logger.debug(
                "Goal %s (%s): remaining=%.2f contribution=%.2f forecast=%s",
                goal.name, goal.id, goal.remaining, contribution, forecast,
            )
            try:
                self.store.update_goal(
                    user_id, goal.id, {"forecasted_completion_date": forecast}
                )
            except IncomeFlowError as e:
                logger.error(
                    "Error updating forecasted_completion_date for goal %s: %s", goal.id, e
                )
                result.failed.append(goal.id)
                continue
            result.updated[goal.id] = forecast

        if result.failed:
            result.message = (
                f"Goal forecasts calculated; {len(result.failed)} of {len(goals)} "
                f"updates failed"
            )
        logger.info("Forecast run for %s: %d updated, %d failed",
                    user_id, len(result.updated), len(result.failed))
        return result

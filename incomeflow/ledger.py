"""
User-facing operations for IncomeFlow.

Purpose
-------
`Ledger` is what the CLI (or any other front end) talks to. It binds a
record store to one user and implements the form workflows:

- add / edit / pause / resume / delete income sources
- create / update / delete goals, with allocation warnings computed before
  the save (the save always proceeds)
- the accumulated-income dashboard, the allocation status and a forecast
  refresh

Error handling
--------------
- Invalid input raises `ValidationError` before anything is written.
- Write failures from the store propagate as `StoreError`.
- Read paths used for display (`dashboard`, `allocation_status`) degrade
  to zero/empty results when the store fails, and report the failure in
  their `error` field instead of raising.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .accrual import AccrualSnapshot, period_start, project
from .allocation import AllocationStatus, allocation_status, allocation_warnings
from .config import GoalConfig, IncomeSourceConfig, validate_form
from .exceptions import StoreError
from .forecast import ForecastResult, ForecastService
from .goals import Goal, allocation_to_record
from .income import IncomeSource, IncomeStatus
from .store import IncomeStore

__all__ = [
    "SaveResult",
    "Dashboard",
    "Ledger",
]

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class SaveResult:
    """A saved goal plus the advisory allocation messages raised on submit."""

    goal: Goal
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Dashboard:
    """
    Accumulated-income view for one period.

    `error` holds the store failure message when the sources could not be
    read; the snapshot is then empty.
    """

    period: str
    snapshot: AccrualSnapshot
    sources: List[IncomeSource] = field(default_factory=list)
    error: Optional[str] = None


class Ledger:
    """
    Income sources and goals of one user.

    Parameters
    ----------
    store : IncomeStore
        Backing record store.
    user_id : str
        Owner of every record read or written.

    Examples
    --------
    >>> ledger = Ledger(InMemoryStore(), "alice")
    >>> salary = ledger.add_income_source(name="Salary", amount=5000, cycle="monthly")
    >>> result = ledger.save_goal(name="Car", target_amount=12_000,
    ...                           allocation_type="PERCENT_TOTAL", allocation_value=10)
    >>> ledger.allocation_status().allocated_monthly
    500.0
    """

    def __init__(self, store: IncomeStore, user_id: str) -> None:
        self.store = store
        self.user_id = user_id

    # -------------------------- Income sources ------------------------------
    def income_sources(self, status: Optional[IncomeStatus] = None) -> List[IncomeSource]:
        return self.store.list_income_sources(self.user_id, status=status)

    def add_income_source(
        self,
        *,
        name: str,
        amount: float,
        cycle: str = "monthly",
    ) -> IncomeSource:
        """Validate the form and insert a new, active income source."""
        form = validate_form(IncomeSourceConfig, name=name, amount=amount, cycle=cycle)
        source = self.store.insert_income_source(self.user_id, form.to_domain(_new_id()))
        logger.info("Added income source %s (%s)", source.name, source.id)
        return source

    def edit_income_source(
        self,
        source_id: str,
        *,
        name: Optional[str] = None,
        amount: Optional[float] = None,
        cycle: Optional[str] = None,
    ) -> IncomeSource:
        """Change name, amount or cycle; omitted fields keep their value."""
        current = self.store.get_income_source(self.user_id, source_id)
        form = validate_form(
            IncomeSourceConfig,
            name=current.name if name is None else name,
            amount=current.amount if amount is None else amount,
            cycle=current.cycle.value if cycle is None else cycle,
            status=current.status.value,
        )
        return self.store.update_income_source(
            self.user_id,
            source_id,
            {"name": form.name, "amount": form.amount, "cycle": form.cycle},
        )

    def pause_income_source(self, source_id: str) -> IncomeSource:
        return self._set_status(source_id, IncomeStatus.PAUSED)

    def resume_income_source(self, source_id: str) -> IncomeSource:
        return self._set_status(source_id, IncomeStatus.ACTIVE)

    def toggle_income_source(self, source_id: str) -> IncomeSource:
        current = self.store.get_income_source(self.user_id, source_id)
        new_status = IncomeStatus.PAUSED if current.is_active else IncomeStatus.ACTIVE
        return self._set_status(source_id, new_status)

    def _set_status(self, source_id: str, status: IncomeStatus) -> IncomeSource:
        source = self.store.update_income_source(self.user_id, source_id, {"status": status.value})
        logger.info("Income source %s status updated to %s", source_id, status.value)
        return source

    def delete_income_source(self, source_id: str) -> None:
        """Delete a source. Goals that referenced it then contribute nothing."""
        self.store.delete_income_source(self.user_id, source_id)
        logger.info("Deleted income source %s", source_id)

    # -------------------------- Goals ---------------------------------------
    def goals(self) -> List[Goal]:
        return self.store.list_goals(self.user_id)

    def save_goal(self, goal_id: Optional[str] = None, **form_data) -> SaveResult:
        """
        Create a goal, or update `goal_id` when given.

        `form_data` holds the `GoalConfig` fields. New goals start with
        `current_amount` 0; updates keep the stored current amount unless
        the form sets it. Allocation warnings are computed against the
        user's other goals and active sources and returned alongside the
        saved goal.
        """
        existing = None
        if goal_id is not None:
            existing = self.store.get_goal(self.user_id, goal_id)
            form_data.setdefault("current_amount", existing.current_amount)
        else:
            form_data["current_amount"] = 0.0

        form = validate_form(GoalConfig, **form_data)
        goal = form.to_domain(goal_id or _new_id())

        active = self.store.list_income_sources(self.user_id, status=IncomeStatus.ACTIVE)
        others = [g for g in self.store.list_goals(self.user_id) if g.id != goal.id]
        messages = allocation_warnings(goal.allocation, others, active)

        if existing is None:
            saved = self.store.insert_goal(self.user_id, goal)
        else:
            saved = self.store.update_goal(
                self.user_id,
                goal.id,
                {
                    "name": goal.name,
                    "target_amount": goal.target_amount,
                    "current_amount": goal.current_amount,
                    "target_date": goal.target_date,
                    **allocation_to_record(goal.allocation),
                },
            )
        logger.info("%s goal %s (%s)", "Updated" if existing else "Added", saved.name, saved.id)
        return SaveResult(goal=saved, warnings=messages)

    def delete_goal(self, goal_id: str) -> None:
        self.store.delete_goal(self.user_id, goal_id)
        logger.info("Deleted goal %s", goal_id)

    # -------------------------- Views ---------------------------------------
    def allocation_status(self) -> AllocationStatus:
        """Allocation picture; zero income and no goals when the store fails."""
        try:
            sources = self.store.list_income_sources(self.user_id, status=IncomeStatus.ACTIVE)
            goals = self.store.list_goals(self.user_id)
        except StoreError as e:
            logger.error("Could not load allocation data for %s: %s", self.user_id, e)
            return AllocationStatus(total_monthly_income=0.0, allocated_monthly=0.0, error=str(e))
        return allocation_status(goals, sources)

    def dashboard(
        self,
        period: str = "month",
        now: Optional[datetime] = None,
        *,
        since: Optional[datetime] = None,
    ) -> Dashboard:
        """Accumulated income of the active sources since the period start."""
        now = datetime.now() if now is None else now
        start = period_start(period, now, since=since)
        try:
            sources = self.store.list_income_sources(self.user_id, status=IncomeStatus.ACTIVE)
        except StoreError as e:
            logger.error("Error fetching income sources for %s: %s", self.user_id, e)
            return Dashboard(
                period=period,
                snapshot=AccrualSnapshot(total=0.0, since=start, now=now),
                error=str(e),
            )
        return Dashboard(period=period, snapshot=project(sources, start, now), sources=sources)

    def refresh_forecasts(self) -> ForecastResult:
        return ForecastService(self.store).run(self.user_id)

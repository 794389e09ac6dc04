"""
Accrual projection module for IncomeFlow.

Purpose
-------
Produces the continuously increasing "accumulated income" figure shown on
the dashboard without re-reading the record store on every tick. Given the
active income sources and a fixed reference timestamp `since`, the projected
total at time `now` is

    A(now) = Σ_i  r_i · max(0, now − since)

where r_i is the per-second rate of source i (see `income.per_second_rate`).

Key components
--------------
- project:
    Pure function (sources, since, now) -> AccrualSnapshot.
- AccrualTicker:
    Owns `since` and the source list and re-evaluates `project` on a fixed
    polling interval. Each tick recomputes from `since`, so a delayed or
    skipped tick (suspended process, slow terminal) is corrected by the next
    one instead of drifting.
- period_start:
    Reference timestamp for the dashboard periods (today, week, month, year).
- contribution_shares:
    Share of each source in the accumulated total.

Example
-------
>>> from datetime import datetime, timedelta
>>> from incomeflow.income import IncomeSource
>>> from incomeflow.accrual import project
>>> now = datetime(2025, 3, 1, 12, 0, 0)
>>> src = IncomeSource(id="d", name="Gig", amount=300, cycle="daily")
>>> snap = project([src], since=now - timedelta(seconds=10), now=now)
>>> round(snap.total, 6)
0.034722
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .constants import DASHBOARD_PERIODS, DEFAULT_TICK_INTERVAL
from .exceptions import ValidationError
from .income import IncomeSource, active_sources

__all__ = [
    "SourceAccrual",
    "AccrualSnapshot",
    "project",
    "contribution_shares",
    "period_start",
    "AccrualTicker",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceAccrual:
    """Accumulated amount of one income source since the reference time."""

    id: str
    name: str
    amount: float


@dataclass(frozen=True)
class AccrualSnapshot:
    """
    Result of one accrual projection.

    Attributes
    ----------
    total : float
        Sum of all per-source amounts.
    per_source : tuple of SourceAccrual
        One entry per active source, in input order.
    since, now : datetime
        Reference and evaluation timestamps.
    """

    total: float
    per_source: Tuple[SourceAccrual, ...] = ()
    since: Optional[datetime] = None
    now: Optional[datetime] = None

    @property
    def elapsed_seconds(self) -> float:
        if self.since is None or self.now is None:
            return 0.0
        return max(0.0, (self.now - self.since).total_seconds())


def project(
    sources: Iterable[IncomeSource],
    since: datetime,
    now: datetime,
) -> AccrualSnapshot:
    """
    Project income accumulated between `since` and `now`.

    Parameters
    ----------
    sources : iterable of IncomeSource
        Candidate sources; paused ones are skipped.
    since : datetime
        Reference timestamp (start of the reporting period).
    now : datetime
        Evaluation timestamp. Must be comparable with `since` (both naive
        or both timezone-aware).

    Returns
    -------
    AccrualSnapshot
        Elapsed time is clamped at zero, so `now < since` yields zeros.
        An empty source list yields total 0 and no per-source entries.
    """
    active = active_sources(sources)
    if not active:
        return AccrualSnapshot(total=0.0, per_source=(), since=since, now=now)

    elapsed = max(0.0, (now - since).total_seconds())
    rates = np.array([s.rate_per_second for s in active], dtype=float)
    amounts = rates * elapsed

    per_source = tuple(
        SourceAccrual(id=s.id, name=s.name, amount=float(a))
        for s, a in zip(active, amounts)
    )
    return AccrualSnapshot(
        total=float(amounts.sum()),
        per_source=per_source,
        since=since,
        now=now,
    )


def contribution_shares(snapshot: AccrualSnapshot) -> List[Tuple[str, float]]:
    """
    Percentage of the accumulated total contributed by each source.

    Returns a list of (name, percent) pairs in snapshot order; empty when
    there are no sources or nothing has accumulated yet.
    """
    if not snapshot.per_source or snapshot.total <= 0:
        return []
    return [
        (entry.name, entry.amount / snapshot.total * 100.0)
        for entry in snapshot.per_source
    ]


def period_start(
    period: str,
    now: datetime,
    *,
    since: Optional[datetime] = None,
) -> datetime:
    """
    Reference timestamp of a dashboard period.

    Parameters
    ----------
    period : {"today", "week", "month", "year", "custom"}
        - today: midnight of `now`'s day
        - week:  midnight of the Monday of `now`'s week
        - month: first day of `now`'s month
        - year:  January 1st of `now`'s year
        - custom: `since`, which is then required
    now : datetime
        Current time; its tzinfo is preserved.

    Raises
    ------
    ValidationError
        Unknown period, or "custom" without `since`.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "today":
        return midnight
    if period == "week":
        return midnight - timedelta(days=midnight.weekday())
    if period == "month":
        return midnight.replace(day=1)
    if period == "year":
        return midnight.replace(month=1, day=1)
    if period == "custom":
        if since is None:
            raise ValidationError("A custom period requires an explicit start time.")
        return since
    raise ValidationError(
        f"Unknown period {period!r}; expected one of: {', '.join(DASHBOARD_PERIODS)}"
    )


@dataclass
class AccrualTicker:
    """
    Live accrual display driver.

    Holds the captured reference time and source list; every tick calls
    `project(sources, since, clock())` from scratch.

    Parameters
    ----------
    sources : sequence of IncomeSource
        Sources fetched when the display was (re)started.
    since : datetime
        Reference timestamp; see `reset`.
    interval : float, default 1.0
        Seconds between ticks.
    clock : callable, default datetime.now
        Returns the current time.
    sleep : callable, default time.sleep
        Blocks for the given number of seconds.

    Examples
    --------
    >>> ticker = AccrualTicker(sources, since=period_start("today", datetime.now()))
    >>> ticker.run(lambda snap: print(f"{snap.total:,.2f}"), ticks=5)
    """

    sources: Sequence[IncomeSource]
    since: datetime
    interval: float = DEFAULT_TICK_INTERVAL
    clock: Callable[[], datetime] = field(default=datetime.now, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    _running: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValidationError(f"interval must be > 0, got {self.interval}")

    def snapshot(self, now: Optional[datetime] = None) -> AccrualSnapshot:
        return project(self.sources, self.since, self.clock() if now is None else now)

    def reset(self, since: datetime, sources: Optional[Sequence[IncomeSource]] = None) -> None:
        """Restart from zero at a new reference time (e.g. period change)."""
        self.since = since
        if sources is not None:
            self.sources = sources
        logger.debug("Accrual reference reset to %s", since.isoformat())

    def stop(self) -> None:
        self._running = False

    def run(
        self,
        callback: Callable[[AccrualSnapshot], None],
        ticks: Optional[int] = None,
    ) -> Optional[AccrualSnapshot]:
        """
        Call `callback` with a fresh snapshot every `interval` seconds.

        Runs until `stop()` is called or, when `ticks` is given, for that
        many ticks. Returns the last snapshot delivered.
        """
        self._running = True
        last = None
        count = 0
        while self._running and (ticks is None or count < ticks):
            last = self.snapshot()
            callback(last)
            count += 1
            if ticks is not None and count >= ticks:
                break
            self.sleep(self.interval)
        self._running = False
        return last

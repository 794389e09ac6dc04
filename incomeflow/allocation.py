"""
Cross-goal allocation checks.

Purpose
-------
Aggregates the monthly contributions of all of a user's goals and compares
them with the income that funds them. Two checks are provided:

- `allocation_status`: overall picture used by the goals view. Flags
  over-allocation when Σ_g c_g > I, with c_g the monthly contribution of
  goal g and I the total monthly income of the active sources.

- `allocation_warnings`: advisory messages computed when a goal form is
  submitted, before the goal is saved:

    (a) Σ percent of PERCENT_TOTAL goals > 100
    (b) Σ to_monthly(amount, cycle) of FIXED_TOTAL goals > I
    (c) the submitted *_SOURCE allocation draws more per month than its
        source earns per month

Neither check ever blocks a save. Callers show the messages (or the
`OverAllocationWarning` emitted by `warn_if_over_allocated`) and proceed.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .goals import (
    FixedFromSource,
    FixedFromTotal,
    Goal,
    PercentOfSource,
    PercentOfTotal,
    Allocation,
    monthly_contribution,
)
from .income import IncomeSource, active_sources, find_source, to_monthly, total_monthly_income
from .utils import format_currency

__all__ = [
    "OverAllocationWarning",
    "AllocationStatus",
    "allocation_status",
    "warn_if_over_allocated",
    "allocation_warnings",
]

logger = logging.getLogger(__name__)


class OverAllocationWarning(UserWarning):
    """Goals draw more per month than the income that funds them."""


@dataclass(frozen=True)
class AllocationStatus:
    """
    Aggregate funding picture of a user's goals.

    Attributes
    ----------
    total_monthly_income : float
        Monthly-equivalent income of all active sources.
    allocated_monthly : float
        Sum of the goals' monthly contributions.
    per_goal : dict
        Goal id -> monthly contribution.
    error : str, optional
        Store failure message when the records could not be read; the
        amounts are then zero.
    """

    total_monthly_income: float
    allocated_monthly: float
    per_goal: Dict[str, float] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_over_allocated(self) -> bool:
        return self.allocated_monthly > self.total_monthly_income

    @property
    def unallocated_monthly(self) -> float:
        """Income left once every goal is funded (negative when over-allocated)."""
        return self.total_monthly_income - self.allocated_monthly


def allocation_status(
    goals: Iterable[Goal],
    income_sources: Iterable[IncomeSource],
) -> AllocationStatus:
    """Sum every goal's monthly contribution and compare with income."""
    sources = active_sources(income_sources)
    total = total_monthly_income(sources)
    per_goal = {g.id: monthly_contribution(g, sources, total) for g in goals}
    return AllocationStatus(
        total_monthly_income=total,
        allocated_monthly=float(sum(per_goal.values())),
        per_goal=per_goal,
    )


def warn_if_over_allocated(status: AllocationStatus, stacklevel: int = 2) -> bool:
    """Emit an OverAllocationWarning when `status` is over-allocated."""
    if not status.is_over_allocated:
        return False
    warnings.warn(
        f"Goals allocate {format_currency(status.allocated_monthly)}/month but estimated "
        f"income is {format_currency(status.total_monthly_income)}/month.",
        OverAllocationWarning,
        stacklevel=stacklevel,
    )
    return True


def allocation_warnings(
    candidate: Allocation,
    other_goals: Iterable[Goal],
    income_sources: Iterable[IncomeSource],
    *,
    exclude_goal_id: Optional[str] = None,
) -> List[str]:
    """
    Advisory messages for a goal form submission.

    Parameters
    ----------
    candidate : Allocation
        Allocation policy being submitted.
    other_goals : iterable of Goal
        The user's existing goals. When editing, pass the edited goal's id as
        `exclude_goal_id` (or leave it out of the list).
    income_sources : iterable of IncomeSource
        The user's sources; only active ones are considered.

    Returns
    -------
    list of str
        Zero to three independent messages, in the order (a), (b), (c).

    Examples
    --------
    >>> msgs = allocation_warnings(PercentOfTotal(percent=50), [existing_60pct], sources)
    >>> msgs[0]
    'Total percentage allocation from total income exceeds 100% (110%).'
    """
    sources = active_sources(income_sources)
    others = [g for g in other_goals if exclude_goal_id is None or g.id != exclude_goal_id]
    income = total_monthly_income(sources)
    messages: List[str] = []

    # (a) percent of total income
    percent_total = sum(
        g.allocation.percent for g in others if isinstance(g.allocation, PercentOfTotal)
    )
    if isinstance(candidate, PercentOfTotal):
        percent_total += candidate.percent
    if percent_total > 100:
        messages.append(
            f"Total percentage allocation from total income exceeds 100% ({percent_total:g}%)."
        )

    # (b) fixed amounts drawn from total income
    fixed_total = sum(
        to_monthly(g.allocation.amount, g.allocation.cycle)
        for g in others
        if isinstance(g.allocation, FixedFromTotal)
    )
    if isinstance(candidate, FixedFromTotal):
        fixed_total += to_monthly(candidate.amount, candidate.cycle)
    if fixed_total > income:
        messages.append(
            f"Total fixed amount allocation from total income ({format_currency(fixed_total)}/month) "
            f"exceeds estimated total monthly income ({format_currency(income)}/month)."
        )

    # (c) one specific source
    if isinstance(candidate, (PercentOfSource, FixedFromSource)):
        source = find_source(sources, candidate.source_id)
        if source is not None:
            source_monthly = source.monthly_amount
            drawn = monthly_contribution(candidate, sources, income)
            if drawn > source_monthly:
                messages.append(
                    f"Allocation from '{source.name}' ({format_currency(drawn)}/month) exceeds "
                    f"the income of that source ({format_currency(source_monthly)}/month)."
                )

    for msg in messages:
        logger.info("Allocation warning: %s", msg)
    return messages

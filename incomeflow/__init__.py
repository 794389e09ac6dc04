"""
IncomeFlow: Income Tracking and Goal-Based Savings

Record recurring income sources, watch income accumulate in real time, and
fund savings goals with a share of that income.

Modules
-------
- income       : Income sources and cycle normalization (monthly, per second)
- accrual      : Accumulated income since a period start, live ticker
- goals        : Goals, allocation policies and monthly contributions
- allocation   : Over-allocation checks and form warnings
- forecast     : Goal completion forecasts
- store        : Record stores (in-memory, JSON file)
- ledger       : User-facing operations over a store
- reports      : Monthly income reports
- utils        : Shared utilities (validation, dates, formatting)

"""

from .income import Cycle, IncomeSource, IncomeStatus, to_monthly, total_monthly_income
from .goals import (
    FixedFromSource,
    FixedFromTotal,
    Goal,
    PercentOfSource,
    PercentOfTotal,
    monthly_contribution,
)
from .accrual import AccrualSnapshot, AccrualTicker, project
from .forecast import ForecastService, forecast_completion_date
from .ledger import Ledger
from .store import InMemoryStore, JsonFileStore
from . import utils

"""
Configuration and input validation module for IncomeFlow.

Purpose
-------
Pydantic models for type-safe validation of user input (income source and
goal forms) and for application settings loaded from the environment.
Form models validate raw input and convert it into the frozen domain
objects of `income.py` and `goals.py`; nothing is written when validation
fails.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Strict forms: unknown fields are rejected (extra="forbid")
- Environment-aware: AppSettings reads INCOMEFLOW_* variables and .env files

Example
-------
>>> from incomeflow.config import IncomeSourceConfig, GoalConfig
>>> form = IncomeSourceConfig(name="Salary", amount=4200, cycle="monthly")
>>> source = form.to_domain(source_id="s1")
>>>
>>> goal_form = GoalConfig(
...     name="Emergency fund",
...     target_amount=6000,
...     allocation_type="FIXED_SOURCE",
...     allocation_value=100,
...     allocation_cycle="weekly",
...     source_income_id="s1",
... )
>>> goal = goal_form.to_domain(goal_id="g1")
"""

from __future__ import annotations
from typing import Optional, Literal
import datetime
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_CURRENCY_SYMBOL, DEFAULT_TICK_INTERVAL
from .exceptions import ValidationError
from .goals import Goal, allocation_from_record
from .income import IncomeSource

__all__ = [
    "IncomeSourceConfig",
    "GoalConfig",
    "AppSettings",
    "validate_form",
]

CycleName = Literal["daily", "weekly", "monthly", "yearly"]
AllocationTypeName = Literal["PERCENT_TOTAL", "PERCENT_SOURCE", "FIXED_TOTAL", "FIXED_SOURCE"]


def validate_form(model: type, **data) -> BaseModel:
    """
    Validate form input with `model`, raising IncomeFlow's ValidationError.

    The message lists every failing field, e.g.
    "amount: Input should be greater than 0".
    """
    try:
        return model(**data)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'form'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(details) from None


# ---------------------------------------------------------------------------
# Income Source Form
# ---------------------------------------------------------------------------

class IncomeSourceConfig(BaseModel):
    """
    Income source form input.

    Attributes
    ----------
    name : str
        Display name (1-100 characters, surrounding whitespace stripped).
    amount : float
        Amount received once per cycle (> 0).
    cycle : str
        "daily", "weekly", "monthly" or "yearly".
    status : str
        "active" (default) or "paused".

    Examples
    --------
    >>> IncomeSourceConfig(name="Rent", amount=950, cycle="monthly")
    IncomeSourceConfig(name='Rent', amount=950.0, cycle='monthly', status='active')
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str = Field(
        min_length=1,
        max_length=100,
        description="Income source name"
    )
    amount: float = Field(
        gt=0,
        allow_inf_nan=False,
        description="Amount received once per cycle"
    )
    cycle: CycleName = Field(
        default="monthly",
        description="Recurrence cycle"
    )
    status: Literal["active", "paused"] = Field(
        default="active",
        description="Whether the source counts toward calculations"
    )

    def to_domain(self, source_id: str) -> IncomeSource:
        return IncomeSource(
            id=source_id,
            name=self.name,
            amount=self.amount,
            cycle=self.cycle,
            status=self.status,
        )


# ---------------------------------------------------------------------------
# Goal Form
# ---------------------------------------------------------------------------

class GoalConfig(BaseModel):
    """
    Goal form input.

    `allocation_cycle` is required for FIXED_* types and must be left empty
    otherwise; `source_income_id` is required for *_SOURCE types and must be
    left empty otherwise.

    Examples
    --------
    >>> GoalConfig(
    ...     name="Vacation",
    ...     target_amount=3000,
    ...     allocation_type="PERCENT_TOTAL",
    ...     allocation_value=10,
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str = Field(
        min_length=1,
        max_length=100,
        description="Goal name"
    )
    target_amount: float = Field(
        gt=0,
        allow_inf_nan=False,
        description="Amount to save"
    )
    current_amount: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Amount saved so far"
    )
    target_date: Optional[datetime.date] = Field(
        default=None,
        description="Desired completion date"
    )
    allocation_type: AllocationTypeName = Field(
        description="Allocation policy"
    )
    allocation_value: float = Field(
        gt=0,
        allow_inf_nan=False,
        description="Percentage (PERCENT_*) or amount per cycle (FIXED_*)"
    )
    allocation_cycle: Optional[CycleName] = Field(
        default=None,
        description="Cycle of a fixed allocation"
    )
    source_income_id: Optional[str] = Field(
        default=None,
        description="Income source funding a *_SOURCE allocation"
    )

    @field_validator("allocation_cycle", "source_income_id", "target_date", mode="before")
    @classmethod
    def empty_as_none(cls, v):
        """Treat empty form fields as not provided."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_allocation_fields(self) -> "GoalConfig":
        """Cycle iff FIXED_*, source iff *_SOURCE."""
        is_fixed = self.allocation_type.startswith("FIXED")
        is_source = self.allocation_type.endswith("SOURCE")
        if is_fixed and self.allocation_cycle is None:
            raise ValueError(f"{self.allocation_type} requires allocation_cycle")
        if not is_fixed and self.allocation_cycle is not None:
            raise ValueError(f"{self.allocation_type} does not take allocation_cycle")
        if is_source and self.source_income_id is None:
            raise ValueError(f"{self.allocation_type} requires source_income_id")
        if not is_source and self.source_income_id is not None:
            raise ValueError(f"{self.allocation_type} does not take source_income_id")
        return self

    def to_domain(self, goal_id: str) -> Goal:
        return Goal(
            id=goal_id,
            name=self.name,
            target_amount=self.target_amount,
            current_amount=self.current_amount,
            target_date=self.target_date,
            allocation=allocation_from_record(
                self.allocation_type,
                self.allocation_value,
                self.allocation_cycle,
                self.source_income_id,
            ),
        )


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    should be prefixed with INCOMEFLOW_ (e.g., INCOMEFLOW_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    data_file : Path
        JSON data file used by the CLI
    default_user : str
        User id used when the CLI is not given --user
    tick_interval : float
        Seconds between two refreshes of the live accrual display
    currency_symbol : str
        Symbol printed in front of amounts

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.tick_interval
    1.0

    # With .env file:
    # INCOMEFLOW_DATA_FILE=/tmp/ledger.json
    >>> settings = AppSettings(_env_file=".env")
    """

    model_config = SettingsConfigDict(
        env_prefix="INCOMEFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    data_file: Path = Field(
        default=Path.home() / ".local" / "share" / "incomeflow" / "ledger.json",
        description="JSON data file"
    )
    default_user: str = Field(
        default="default",
        min_length=1,
        description="User id used when none is given"
    )
    tick_interval: float = Field(
        default=DEFAULT_TICK_INTERVAL,
        gt=0,
        le=60,
        description="Seconds between live accrual refreshes"
    )
    currency_symbol: str = Field(
        default=DEFAULT_CURRENCY_SYMBOL,
        max_length=5,
        description="Currency symbol for text output"
    )

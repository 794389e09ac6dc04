"""
Custom exceptions for IncomeFlow.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all IncomeFlow modules. All exceptions inherit from IncomeFlowError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
IncomeFlowError (base)
├── ConfigurationError - Invalid settings or data file configuration
├── ValidationError - Invalid form/record input (nothing is written)
└── StoreError - Record store failures (I/O, corrupt data)
    └── RecordNotFoundError - Requested record does not exist

Calculation functions never raise for a goal that references a missing
income source: such a goal simply contributes zero. Over-allocation is not
an error either; it is reported through ``OverAllocationWarning``.

Usage
-----
>>> from incomeflow.exceptions import ValidationError
>>>
>>> raise ValidationError("amount must be > 0, got -5")
>>>
>>> try:
...     ledger.add_income_source(name="", amount=0, cycle="monthly")
... except IncomeFlowError as e:
...     print(f"IncomeFlow error: {e}")
"""


class IncomeFlowError(Exception):
    """
    Base exception for all IncomeFlow errors.

    All IncomeFlow-specific exceptions inherit from this class,
    enabling unified error handling when needed.
    """
    pass


class ConfigurationError(IncomeFlowError):
    """
    Invalid configuration or settings.

    Raised when application settings or a data file cannot be used, such as:
    - A data file written by an incompatible schema
    - A data file path that points to a directory

    Examples
    --------
    >>> raise ConfigurationError(
    ...     f"Data file {path} is a directory. "
    ...     f"Point INCOMEFLOW_DATA_FILE at a JSON file instead."
    ... )
    """
    pass


class ValidationError(IncomeFlowError):
    """
    Form or record validation failures.

    Raised before anything is written when user input is invalid:
    - Missing name, non-positive amount or target
    - Unknown cycle, status or allocation type
    - Allocation fields inconsistent with the allocation type

    Examples
    --------
    >>> raise ValidationError(
    ...     "Please provide a valid name and amount (amount must be > 0)."
    ... )
    """
    pass


class StoreError(IncomeFlowError):
    """
    Record store failures.

    Raised when the backing store cannot be read or written, such as:
    - Unreadable or corrupt data file
    - Failed write of an updated record

    Read paths of ``Ledger`` degrade to zero/empty results on this error.
    """
    pass


class RecordNotFoundError(StoreError):
    """
    Requested record does not exist for this user.

    Examples
    --------
    >>> raise RecordNotFoundError(f"Income source {source_id!r} not found")
    """
    pass

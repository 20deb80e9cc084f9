"""Pydantic domain models for the Ryo-Gae rates service."""

from .constants import (
    DEFAULT_BASE_CURRENCY,
    DEFAULT_QUOTE_CURRENCIES,
    PLACEHOLDER_RATES,
)  # re-export
from .rates import (
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    RateEntry,
    RateSnapshot,
    RefreshResult,
)

__all__ = [
    "DEFAULT_BASE_CURRENCY",
    "DEFAULT_QUOTE_CURRENCIES",
    "PLACEHOLDER_RATES",
    "ErrorKind",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "RateEntry",
    "RateSnapshot",
    "RefreshResult",
]

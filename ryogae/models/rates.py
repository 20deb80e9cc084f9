from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RateSnapshot(BaseModel):
    """One decoded set of rates against ``base_currency``.

    ``observed_at`` is the upstream publication time; ``fetched_at`` is when
    this process received it.
    """

    model_config = ConfigDict(frozen=True)

    base_currency: str
    rates: Dict[str, float]
    observed_at: datetime
    fetched_at: datetime

    @field_validator("base_currency")
    @classmethod
    def valid_code(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("currency code must be 3 letters")
        return v

    @field_validator("rates")
    @classmethod
    def positive_rates(cls, v: Dict[str, float]) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for code, rate in v.items():
            if not math.isfinite(rate) or rate <= 0:
                raise ValueError(f"rate for {code} must be positive")
            out[code.upper()] = rate
        return out

    @field_validator("observed_at", "fetched_at")
    @classmethod
    def utc_timestamps(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    def rate_for(self, currency: str) -> Optional[float]:
        currency = currency.upper()
        if currency == self.base_currency:
            return 1.0
        return self.rates.get(currency)


# Upstream payload shapes -------------------------------------------


class OpenRatesPayload(BaseModel):
    """``{base, rates, timestamp}`` as served by open-rates style APIs."""

    base: str
    rates: Dict[str, float]
    timestamp: float


class ExchangeRateApiPayload(BaseModel):
    """ExchangeRate-API v6 ``/latest`` body.

    Only ``result`` is always present; error bodies carry ``error-type``
    instead of the rate fields.
    """

    model_config = ConfigDict(populate_by_name=True)

    result: str
    base_code: Optional[str] = None
    conversion_rates: Optional[Dict[str, float]] = None
    time_last_update_utc: Optional[str] = None
    time_last_update_unix: Optional[int] = None
    error_type: Optional[str] = Field(None, alias="error-type")


# Fetch outcomes ------------------------------------------------------


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_ENDPOINT = "invalid_endpoint"
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    DECODE = "decode"


class FetchSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    snapshot: RateSnapshot


class FetchFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None


FetchOutcome = Union[FetchSuccess, FetchFailure]


class RefreshResult(BaseModel):
    """Answer of one scheduling call: what to show and when to ask again."""

    model_config = ConfigDict(frozen=True)

    outcome: FetchOutcome
    next_refresh_at: datetime
    from_cache: bool = False
    snapshot: Optional[RateSnapshot] = None
    last_observed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, FetchSuccess)


class RateEntry(BaseModel):
    """Data behind one widget timeline entry (no layout)."""

    date: datetime
    base_currency: str
    rates: Dict[str, Optional[float]]
    display: Dict[str, str]
    last_update: Optional[datetime] = None
    error_message: Optional[str] = None
    next_refresh_at: Optional[datetime] = None
    stale: bool = False

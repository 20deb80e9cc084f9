"""Shared pytest fixtures for the rates service test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import pytest

from ryogae.core.config import Settings
from ryogae.models.rates import FetchOutcome, FetchSuccess, RateSnapshot
from ryogae.services.rates.base import RateClient


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_snapshot(observed_at: datetime, **rates: float) -> RateSnapshot:
    return RateSnapshot(
        base_currency="USD",
        rates=rates or {"BRL": 5.65, "JPY": 144.2},
        observed_at=observed_at,
        fetched_at=observed_at,
    )


class ScriptedClient(RateClient):
    """Returns queued outcomes in order and records every call."""

    name = "scripted"

    def __init__(self, *outcomes: FetchOutcome):
        self.outcomes: List[FetchOutcome] = list(outcomes)
        self.calls = 0
        self.timeouts: List[Optional[float]] = []

    def fetch(self, timeout: Optional[float] = None) -> FetchOutcome:
        self.calls += 1
        self.timeouts.append(timeout)
        if not self.outcomes:
            raise AssertionError("unexpected upstream call")
        return self.outcomes.pop(0)


def success_at(observed_at: datetime, **rates: float) -> FetchSuccess:
    return FetchSuccess(snapshot=make_snapshot(observed_at, **rates))


@pytest.fixture
def settings() -> Settings:
    s = Settings(
        _env_file=None,
        exchange_rate_provider="static",
        exchange_rate_api_key="test-key",
    )
    s.init_post_load()
    return s


# Sample upstream bodies; same structure the live APIs return.
@pytest.fixture
def exchangerate_api_body() -> dict:
    return {
        "result": "success",
        "time_last_update_unix": 1748390401,
        "time_last_update_utc": "Wed, 28 May 2025 00:00:01 +0000",
        "base_code": "USD",
        "conversion_rates": {"USD": 1, "BRL": 5.6512, "JPY": 144.87, "EUR": 0.8821},
    }


@pytest.fixture
def open_rates_body() -> dict:
    return {
        "base": "USD",
        "timestamp": 1748429700,
        "rates": {"BRL": 5.66, "JPY": 144.9},
    }

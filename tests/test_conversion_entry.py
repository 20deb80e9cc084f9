from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import make_snapshot, utc
from ryogae.models.rates import ErrorKind, FetchFailure, FetchSuccess, RefreshResult
from ryogae.services.rates.conversion import convert, format_rate, round_half_up
from ryogae.services.rates.entry import build_entry, placeholder_entry

NOW = utc(2025, 5, 28, 10, 58)


def test_round_half_up() -> None:
    assert round_half_up(2.675) == 2.68
    assert round_half_up(0.125) == 0.13
    assert round_half_up(157.5) == 157.5


@pytest.mark.parametrize(
    "rate, shown", [(5.6512, "5.65"), (157.5, "157.50"), (0.915, "0.92"), (None, "N/A")]
)
def test_format_rate(rate, shown: str) -> None:
    assert format_rate(rate) == shown


def test_convert_from_base() -> None:
    snap = make_snapshot(NOW, BRL=5.0, JPY=150.0)

    result = convert(10, "usd", "BRL", snap)

    assert result.rate == 5.0
    assert result.converted == 50.0
    assert result.from_currency == "USD"


def test_convert_cross_rate() -> None:
    snap = make_snapshot(NOW, BRL=5.0, JPY=150.0)

    result = convert(100, "BRL", "JPY", snap)

    assert result.rate == pytest.approx(30.0)
    assert result.converted == 3000.0


def test_convert_unknown_currency() -> None:
    with pytest.raises(ValueError):
        convert(1, "USD", "XAU", make_snapshot(NOW))


def test_entry_from_success() -> None:
    snap = make_snapshot(utc(2025, 5, 28, 10, 55), BRL=5.6512, JPY=144.87)
    result = RefreshResult(
        outcome=FetchSuccess(snapshot=snap),
        next_refresh_at=utc(2025, 5, 28, 11, 2),
        snapshot=snap,
        last_observed_at=snap.observed_at,
    )

    entry = build_entry(result, ("BRL", "JPY"), NOW)

    assert entry.base_currency == "USD"
    assert entry.rates == {"BRL": 5.6512, "JPY": 144.87}
    assert entry.display == {"BRL": "5.65", "JPY": "144.87"}
    assert entry.last_update == utc(2025, 5, 28, 10, 55)
    assert entry.error_message is None
    assert not entry.stale


def test_entry_from_failure_keeps_last_rates() -> None:
    snap = make_snapshot(utc(2025, 5, 28, 9, 0), BRL=5.6)
    result = RefreshResult(
        outcome=FetchFailure(kind=ErrorKind.TRANSPORT, message="reset"),
        next_refresh_at=NOW + timedelta(minutes=15),
        snapshot=snap,
        last_observed_at=snap.observed_at,
        error_message="Failed to update rates. Check connection.",
    )

    entry = build_entry(result, ("BRL", "JPY"), NOW)

    assert entry.stale
    assert entry.base_currency == "USD"
    assert entry.rates == {"BRL": 5.6, "JPY": None}
    assert entry.display == {"BRL": "5.60", "JPY": "N/A"}
    assert entry.error_message == "Failed to update rates. Check connection."


def test_entry_from_failure_without_snapshot() -> None:
    result = RefreshResult(
        outcome=FetchFailure(kind=ErrorKind.MISSING_CREDENTIAL, message="no key"),
        next_refresh_at=NOW + timedelta(minutes=15),
        error_message="API key error.",
    )

    entry = build_entry(result, ("BRL", "JPY"), NOW)

    assert entry.base_currency == "N/A"
    assert entry.rates == {"BRL": None, "JPY": None}
    assert entry.last_update is None


def test_placeholder_entry() -> None:
    entry = placeholder_entry(NOW)

    assert entry.base_currency == "USD"
    assert entry.display == {"BRL": "0.92", "JPY": "157.50"}
    assert entry.last_update == NOW
    assert not entry.stale

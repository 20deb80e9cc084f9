"""Widget entry assembly.

Turns a scheduling result into the flat record a widget draws: base code,
one rate per configured quote, last update time and an optional error line.
On failure the last known rates stay visible and the entry is marked stale.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Optional

from ryogae.models.constants import PLACEHOLDER_BASE, PLACEHOLDER_RATES
from ryogae.models.rates import RateEntry, RateSnapshot, RefreshResult, ensure_utc

from .conversion import format_rate

UNKNOWN_BASE = "N/A"


def _quote_rates(
    snapshot: Optional[RateSnapshot], quotes: Iterable[str]
) -> Dict[str, Optional[float]]:
    return {
        q.upper(): (snapshot.rate_for(q) if snapshot is not None else None)
        for q in quotes
    }


def build_entry(result: RefreshResult, quotes: Iterable[str], now: datetime) -> RateEntry:
    snapshot = result.snapshot
    rates = _quote_rates(snapshot, quotes)
    return RateEntry(
        date=ensure_utc(now),
        base_currency=snapshot.base_currency if snapshot else UNKNOWN_BASE,
        rates=rates,
        display={code: format_rate(rate) for code, rate in rates.items()},
        last_update=result.last_observed_at,
        error_message=result.error_message,
        next_refresh_at=result.next_refresh_at,
        stale=not result.ok,
    )


def placeholder_entry(now: datetime, quotes: Iterable[str] = ("BRL", "JPY")) -> RateEntry:
    rates = {q.upper(): PLACEHOLDER_RATES.get(q.upper()) for q in quotes}
    return RateEntry(
        date=ensure_utc(now),
        base_currency=PLACEHOLDER_BASE,
        rates=rates,
        display={code: format_rate(rate) for code, rate in rates.items()},
        last_update=ensure_utc(now),
    )

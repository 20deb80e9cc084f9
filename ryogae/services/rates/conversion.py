"""Cross-rate conversion against a snapshot.

Snapshots quote every currency per one unit of their base, so converting
between two quotes goes through the base: amount / rate(from) * rate(to).
Display rounding is half-up to two places, matching how the widget shows
rates.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ryogae.models.rates import RateSnapshot


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_rate(rate: Optional[float]) -> str:
    if rate is None:
        return "N/A"
    return f"{round_half_up(rate):.2f}"


@dataclass(frozen=True)
class ConversionResult:
    amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted: float


def convert(
    amount: float, from_currency: str, to_currency: str, snapshot: RateSnapshot
) -> ConversionResult:
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()
    from_rate = snapshot.rate_for(from_currency)
    if from_rate is None:
        raise ValueError(f"no rate for {from_currency}")
    to_rate = snapshot.rate_for(to_currency)
    if to_rate is None:
        raise ValueError(f"no rate for {to_currency}")
    rate = to_rate / from_rate
    return ConversionResult(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        rate=rate,
        converted=round_half_up(amount * rate),
    )

"""Normalize the two upstream body shapes into one RateSnapshot.

Shapes, tried in this order:
    1. ExchangeRate-API v6, selected by a ``result`` key:
       ``{result, base_code, conversion_rates, time_last_update_utc}``
    2. Open-rates style, selected by a ``rates`` key:
       ``{base, rates, timestamp}``

Anything else is a decode failure.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

from pydantic import ValidationError

from ryogae.models.rates import ExchangeRateApiPayload, OpenRatesPayload, RateSnapshot


class PayloadDecodeError(Exception):
    pass


def parse_upstream_time(value: str) -> Optional[datetime]:
    """Parse RFC 1123 (``Tue, 27 May 2025 00:00:01 +0000``), then ISO 8601."""
    value = value.strip()
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _from_exchangerate_api(payload: dict, fetched_at: datetime) -> RateSnapshot:
    body = ExchangeRateApiPayload.model_validate(payload)
    if body.result != "success":
        reason = body.error_type or "unknown"
        raise PayloadDecodeError(
            f"API request not successful. Result: {body.result} ({reason})"
        )
    if not body.base_code or body.conversion_rates is None:
        raise PayloadDecodeError("missing base_code or conversion_rates")
    observed_at = None
    if body.time_last_update_utc:
        observed_at = parse_upstream_time(body.time_last_update_utc)
    if observed_at is None and body.time_last_update_unix is not None:
        observed_at = datetime.fromtimestamp(body.time_last_update_unix, tz=timezone.utc)
    if observed_at is None:
        raise PayloadDecodeError("missing or unparseable update time")
    return RateSnapshot(
        base_currency=body.base_code,
        rates=body.conversion_rates,
        observed_at=observed_at,
        fetched_at=fetched_at,
    )


def _from_open_rates(payload: dict, fetched_at: datetime) -> RateSnapshot:
    body = OpenRatesPayload.model_validate(payload)
    return RateSnapshot(
        base_currency=body.base,
        rates=body.rates,
        observed_at=datetime.fromtimestamp(body.timestamp, tz=timezone.utc),
        fetched_at=fetched_at,
    )


def normalize_payload(payload: Any, fetched_at: datetime) -> RateSnapshot:
    if not isinstance(payload, dict):
        raise PayloadDecodeError(f"expected a JSON object, got {type(payload).__name__}")
    try:
        if "result" in payload:
            return _from_exchangerate_api(payload, fetched_at)
        if "rates" in payload:
            return _from_open_rates(payload, fetched_at)
    except (ValidationError, ValueError, OverflowError, OSError) as e:
        raise PayloadDecodeError(f"payload failed validation: {e}") from e
    raise PayloadDecodeError("unrecognized payload shape")

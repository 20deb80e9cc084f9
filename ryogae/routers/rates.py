"""Rates router exposing the scheduling entry point.

Endpoints:
    - GET /rates/current      -> scheduling result (outcome + next_refresh_at)
    - GET /rates/entry        -> widget entry for the configured quotes
    - GET /rates/placeholder  -> preview entry, never calls upstream
    - GET /rates/convert      -> convert an amount with the latest snapshot

Upstream failures are part of the payload, not HTTP errors: a harness polling
/rates/current always gets something renderable plus the time to poll again.
Handlers are sync so the blocking fetch runs in the threadpool.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ryogae.core.config import Settings, get_settings
from ryogae.models.rates import RateEntry, RefreshResult
from ryogae.services.rates.conversion import convert
from ryogae.services.rates.entry import build_entry, placeholder_entry
from ryogae.services.rates.scheduler import RefreshScheduler, get_refresh_scheduler

router = APIRouter(prefix="/rates", tags=["rates"])


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted: float
    observed_at: datetime
    from_cache: bool
    stale: bool = False
    error_message: Optional[str] = None


@router.get("/current", response_model=RefreshResult, summary="Current rates and next refresh time")
def current_rates(
    timeout: Optional[float] = Query(
        None, gt=0, le=60, description="Upstream timeout in seconds for this call"
    ),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
):
    return scheduler.get_current_rates(timeout=timeout)


@router.get("/entry", response_model=RateEntry, summary="Widget entry for configured quotes")
def current_entry(
    timeout: Optional[float] = Query(
        None, gt=0, le=60, description="Upstream timeout in seconds for this call"
    ),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
    settings: Settings = Depends(get_settings),
):
    now = datetime.now(timezone.utc)
    result = scheduler.get_current_rates(now=now, timeout=timeout)
    return build_entry(result, settings.quote_currencies, now)


@router.get("/placeholder", response_model=RateEntry, summary="Preview entry with fixed rates")
async def preview_entry(settings: Settings = Depends(get_settings)):
    return placeholder_entry(datetime.now(timezone.utc), settings.quote_currencies)


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
def convert_amount(
    amount: float = Query(..., ge=0),
    to: str = Query(..., min_length=3, max_length=3, description="Target currency"),
    from_: Optional[str] = Query(
        None, alias="from", min_length=3, max_length=3, description="Source currency (defaults to base)"
    ),
    scheduler: RefreshScheduler = Depends(get_refresh_scheduler),
):
    result = scheduler.get_current_rates()
    snapshot = result.snapshot
    if snapshot is None:
        raise HTTPException(
            status_code=409,
            detail=result.error_message or "no rates available yet",
        )
    source = from_ or snapshot.base_currency
    try:
        conv = convert(amount, source, to, snapshot)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ConversionOut(
        amount=conv.amount,
        from_currency=conv.from_currency,
        to_currency=conv.to_currency,
        rate=conv.rate,
        converted=conv.converted,
        observed_at=snapshot.observed_at,
        from_cache=result.from_cache,
        stale=not result.ok,
        error_message=result.error_message,
    )

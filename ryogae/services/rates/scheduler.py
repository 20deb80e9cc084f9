"""Hour-bucketed refresh scheduler with in-memory snapshot cache.

Purpose:
    Decide, for a scheduling call at ``now``, whether the cached snapshot can
    be served as-is (Fresh) or the upstream must be asked again (Stale), and
    tell the caller when to call next.

Rules (all in UTC):
    - Stale when there is no snapshot, when the snapshot's observation hour
      differs from the hour of ``now``, or when the last fetch attempt is at
      least five minutes old. Otherwise Fresh.
    - Fresh and successful refreshes are due again at the next hour boundary
      plus two minutes; a failed refresh is due again fifteen minutes later.
    - A failed refresh never drops the previous snapshot.

Concurrency:
    The decision, the fetch and the state update run under one lock, so
    concurrent callers never issue duplicate upstream calls; the second caller
    sees the state the first one stored. Timers are the caller's business.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional, Tuple

from ryogae.core.config import Settings, get_settings
from ryogae.models.constants import (
    ATTEMPT_FRESHNESS,
    CONNECTION_MESSAGE,
    FAILURE_BACKOFF,
    MISSING_CREDENTIAL_MESSAGE,
    REFRESH_GRACE,
)
from ryogae.models.rates import (
    ErrorKind,
    FetchFailure,
    FetchSuccess,
    RateSnapshot,
    RefreshResult,
    ensure_utc,
)

from .base import RateClient
from .providers import make_rate_client, utc_now

logger = logging.getLogger("ryogae.rates.scheduler")


def hour_bucket(moment: datetime) -> Tuple[int, int, int, int]:
    """(year, month, day, hour) of ``moment`` in UTC."""
    moment = ensure_utc(moment)
    return (moment.year, moment.month, moment.day, moment.hour)


def next_hour_boundary(moment: datetime) -> datetime:
    moment = ensure_utc(moment)
    return moment.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def next_refresh_after(moment: datetime) -> datetime:
    return next_hour_boundary(moment) + REFRESH_GRACE


def user_message_for(failure: FetchFailure) -> str:
    if failure.kind is ErrorKind.MISSING_CREDENTIAL:
        return MISSING_CREDENTIAL_MESSAGE
    return CONNECTION_MESSAGE


@dataclass
class SchedulerState:
    last_snapshot: Optional[RateSnapshot] = None
    last_fetch_attempt_at: Optional[datetime] = None


class RefreshScheduler:
    def __init__(
        self,
        client: RateClient,
        state: Optional[SchedulerState] = None,
        *,
        timeout: Optional[float] = None,
    ):
        self._client = client
        self._state = state if state is not None else SchedulerState()
        self._timeout = timeout
        self._lock = threading.Lock()

    @property
    def client(self) -> RateClient:
        return self._client

    @property
    def state(self) -> SchedulerState:
        return self._state

    # Internal --------------------------------------------------
    def _fresh_snapshot(self, now: datetime) -> Optional[RateSnapshot]:
        """Cached snapshot if it may be served at ``now``, else None."""
        snapshot = self._state.last_snapshot
        if snapshot is None:
            return None
        if hour_bucket(snapshot.observed_at) != hour_bucket(now):
            return None
        attempted = self._state.last_fetch_attempt_at
        if attempted is None or now - attempted >= ATTEMPT_FRESHNESS:
            return None
        return snapshot

    def _refresh(self, now: datetime, timeout: Optional[float]) -> RefreshResult:
        outcome = self._client.fetch(timeout=timeout if timeout is not None else self._timeout)
        self._state.last_fetch_attempt_at = now
        if isinstance(outcome, FetchSuccess):
            self._state.last_snapshot = outcome.snapshot
            return RefreshResult(
                outcome=outcome,
                next_refresh_at=next_refresh_after(now),
                snapshot=outcome.snapshot,
                last_observed_at=outcome.snapshot.observed_at,
            )

        previous = self._state.last_snapshot
        message = user_message_for(outcome)
        logger.warning(
            "refresh failed; keeping last snapshot",
            extra={
                "kind": outcome.kind.value,
                "has_snapshot": previous is not None,
                "retry_in_s": int(FAILURE_BACKOFF.total_seconds()),
            },
        )
        return RefreshResult(
            outcome=outcome,
            next_refresh_at=now + FAILURE_BACKOFF,
            snapshot=previous,
            last_observed_at=previous.observed_at if previous else None,
            error_message=message,
        )

    # Public API -----------------------------------------------
    def get_current_rates(
        self, now: Optional[datetime] = None, timeout: Optional[float] = None
    ) -> RefreshResult:
        now = ensure_utc(now) if now is not None else utc_now()
        with self._lock:
            snapshot = self._fresh_snapshot(now)
            if snapshot is not None:
                logger.debug("serving cached snapshot", extra={"state": "fresh"})
                return RefreshResult(
                    outcome=FetchSuccess(snapshot=snapshot),
                    next_refresh_at=next_refresh_after(now),
                    from_cache=True,
                    snapshot=snapshot,
                    last_observed_at=snapshot.observed_at,
                )
            logger.debug("refreshing from upstream", extra={"state": "stale"})
            return self._refresh(now, timeout)


def build_refresh_scheduler(settings: Settings) -> RefreshScheduler:
    client = make_rate_client(settings.exchange_rate_provider, settings)
    return RefreshScheduler(client, SchedulerState())


# Singleton dependency helper used by FastAPI DI
@lru_cache
def get_refresh_scheduler() -> RefreshScheduler:
    return build_refresh_scheduler(get_settings())

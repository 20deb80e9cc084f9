"""Concrete rate clients and factory.

``ExchangeRateApiClient`` talks to the live upstream; ``StaticRateClient``
returns the fixed preview rates so the service can run without a key.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Dict, Optional, Type
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from ryogae.models.constants import (
    CREDENTIAL_PLACEHOLDER,
    PLACEHOLDER_BASE,
    PLACEHOLDER_RATES,
)
from ryogae.models.rates import (
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    RateSnapshot,
)
from ryogae.services.http_client import (
    JsonDecodeError,
    StatusError,
    TransportError,
    get_json,
)

from .base import RateClient
from .normalize import PayloadDecodeError, normalize_payload

if TYPE_CHECKING:  # pragma: no cover
    from ryogae.core.config import Settings

logger = logging.getLogger("ryogae.rates.client")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RequestBuildError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class ExchangeRateApiClient(RateClient):
    name = "exchangerate-api"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://v6.exchangerate-api.com/v6",
        base_currency: str = "USD",
        style: str = "path",
        credential_param: str = "app_id",
        timeout: float = 5.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._api_key = (api_key or "").strip()
        self._base_url = base_url.strip()
        self._base_currency = base_currency.strip().upper()
        self._style = style
        self._credential_param = credential_param
        self._timeout = timeout
        self._clock = clock

    @property
    def endpoint_host(self) -> str:
        return urlsplit(self._base_url).netloc or "?"

    def build_url(self) -> str:
        if not self._api_key or self._api_key == CREDENTIAL_PLACEHOLDER:
            raise RequestBuildError(
                ErrorKind.MISSING_CREDENTIAL,
                "API key not set. Provide EXCHANGE_RATE_API_KEY.",
            )
        parts = urlsplit(self._base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise RequestBuildError(
                ErrorKind.INVALID_ENDPOINT, f"Invalid API URL '{self._base_url}'."
            )
        base = self._base_currency
        if len(base) != 3 or not base.isalpha() or not base.isascii():
            raise RequestBuildError(
                ErrorKind.INVALID_ENDPOINT, f"Invalid base currency '{base}'."
            )
        if self._style == "path":
            path = f"{parts.path.rstrip('/')}/{quote(self._api_key, safe='')}/latest/{base}"
            return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))
        if self._style == "query":
            params = urlencode({self._credential_param: self._api_key, "base": base})
            query = f"{parts.query}&{params}" if parts.query else params
            return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))
        raise RequestBuildError(
            ErrorKind.INVALID_ENDPOINT, f"Unknown URL style '{self._style}'."
        )

    def fetch(self, timeout: Optional[float] = None) -> FetchOutcome:
        try:
            url = self.build_url()
        except RequestBuildError as e:
            logger.warning(
                "rate request not attempted", extra={"kind": e.kind.value, "detail": str(e)}
            )
            return FetchFailure(kind=e.kind, message=str(e))

        effective_timeout = timeout if timeout is not None else self._timeout
        started = time.monotonic()
        try:
            payload = get_json(url, timeout=effective_timeout)
            snapshot = normalize_payload(payload, fetched_at=self._clock())
        except TransportError as e:
            outcome: FetchOutcome = FetchFailure(kind=ErrorKind.TRANSPORT, message=str(e))
        except StatusError as e:
            outcome = FetchFailure(
                kind=ErrorKind.BAD_STATUS,
                message=f"Failed to fetch data. Status: {e.status_code}",
                status_code=e.status_code,
            )
        except (JsonDecodeError, PayloadDecodeError) as e:
            outcome = FetchFailure(kind=ErrorKind.DECODE, message=str(e))
        else:
            outcome = FetchSuccess(snapshot=snapshot)

        elapsed_ms = round((time.monotonic() - started) * 1000, 1)
        if isinstance(outcome, FetchSuccess):
            logger.info(
                "rates fetched",
                extra={
                    "host": self.endpoint_host,
                    "base": outcome.snapshot.base_currency,
                    "observed_at": outcome.snapshot.observed_at.isoformat(),
                    "elapsed_ms": elapsed_ms,
                },
            )
        else:
            logger.warning(
                "rate fetch failed",
                extra={
                    "host": self.endpoint_host,
                    "kind": outcome.kind.value,
                    "detail": outcome.message,
                    "elapsed_ms": elapsed_ms,
                },
            )
        return outcome


class StaticRateClient(RateClient):
    """Always succeeds with the preview rates, stamped with the current time."""

    name = "static"

    def __init__(
        self,
        rates: Optional[Dict[str, float]] = None,
        *,
        base_currency: str = PLACEHOLDER_BASE,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._rates = dict(rates if rates is not None else PLACEHOLDER_RATES)
        self._base_currency = base_currency
        self._clock = clock

    def fetch(self, timeout: Optional[float] = None) -> FetchOutcome:
        now = self._clock()
        return FetchSuccess(
            snapshot=RateSnapshot(
                base_currency=self._base_currency,
                rates=self._rates,
                observed_at=now,
                fetched_at=now,
            )
        )


_CLIENT_REGISTRY: Dict[str, Type[RateClient]] = {
    "exchangerate-api": ExchangeRateApiClient,
    "static": StaticRateClient,
}


def make_rate_client(kind: str, settings: "Settings") -> RateClient:
    cls = _CLIENT_REGISTRY.get(kind)
    if cls is None:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is ExchangeRateApiClient:
        return ExchangeRateApiClient(
            settings.exchange_rate_api_key,
            base_url=settings.exchange_api_base_url,
            base_currency=settings.base_currency,
            style=settings.exchange_api_style,
            credential_param=settings.exchange_api_credential_param,
            timeout=settings.http_timeout_seconds,
        )
    return StaticRateClient(base_currency=settings.base_currency)

"""Smoke script for the refresh scheduler.

Demonstrates, against whatever provider the environment configures:
 1. First call fetches from upstream (or fails with a mapped message).
 2. A second call a minute later, same UTC hour, is served from cache.
 3. A call past the next hour boundary forces a refetch.

NOTE: This is a lightweight diagnostic and not a formal test. With the
exchangerate-api provider it makes real HTTP calls; set EXCHANGE_RATE_API_KEY.
"""

from datetime import datetime, timedelta, timezone
from pprint import pprint

from ryogae.core.config import get_settings
from ryogae.core.logging import init_logging
from ryogae.services.rates.scheduler import build_refresh_scheduler


def _summary(result):
    return {
        "ok": result.ok,
        "from_cache": result.from_cache,
        "base": result.snapshot.base_currency if result.snapshot else None,
        "observed_at": result.last_observed_at.isoformat() if result.last_observed_at else None,
        "next_refresh_at": result.next_refresh_at.isoformat(),
        "error_message": result.error_message,
    }


def run():
    settings = get_settings()
    init_logging(debug=settings.debug)
    scheduler = build_refresh_scheduler(settings)
    now = datetime.now(timezone.utc)

    out = {
        "initial": _summary(scheduler.get_current_rates(now)),
        "one_minute_later": _summary(scheduler.get_current_rates(now + timedelta(minutes=1))),
        "next_hour": _summary(scheduler.get_current_rates(now + timedelta(hours=1))),
    }
    pprint(out)


if __name__ == "__main__":
    run()

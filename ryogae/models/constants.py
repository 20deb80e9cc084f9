"""Currency constants and scheduling timings.

Kept as plain module-level values; the scheduler and the settings layer both
import from here so the numbers live in one place.
"""

from datetime import timedelta
from typing import Dict, Set, Tuple

DEFAULT_BASE_CURRENCY = "USD"
DEFAULT_QUOTE_CURRENCIES: Tuple[str, ...] = ("BRL", "JPY")

# Shipped in the example config; a key equal to this was never filled in.
CREDENTIAL_PLACEHOLDER = "EXCHANGE_RATE_API"

RATE_PROVIDERS: Set[str] = {"exchangerate-api", "static"}
URL_STYLES: Set[str] = {"path", "query"}

# Preview values shown before the first real fetch.
PLACEHOLDER_BASE = "USD"
PLACEHOLDER_RATES: Dict[str, float] = {"BRL": 0.92, "JPY": 157.50}

# Upstream publishes a little after the hour.
REFRESH_GRACE = timedelta(minutes=2)
ATTEMPT_FRESHNESS = timedelta(minutes=5)
FAILURE_BACKOFF = timedelta(minutes=15)

MISSING_CREDENTIAL_MESSAGE = (
    "API key error. Check the EXCHANGE_RATE_API_KEY configuration."
)
CONNECTION_MESSAGE = "Failed to update rates. Check connection."

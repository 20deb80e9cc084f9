import re
from functools import lru_cache
from typing import Optional, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

from ryogae.models.constants import (
    CREDENTIAL_PLACEHOLDER,
    DEFAULT_BASE_CURRENCY,
    DEFAULT_QUOTE_CURRENCIES,
    RATE_PROVIDERS,
    URL_STYLES,
)

_CODE_RE = re.compile(r"^[A-Z]{3}$")


class Settings(BaseSettings):
    """Service settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g. DEBUG,
    EXCHANGE_RATE_PROVIDER, EXCHANGE_RATE_API_KEY, BASE_CURRENCY).
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Basic app metadata
    app_name: str = "Ryo-Gae Rates"
    debug: bool = False
    version: str = "0.1.0"

    # Upstream exchange rate API
    # Allowed: 'exchangerate-api' (live HTTP), 'static' (fixed preview rates)
    exchange_rate_provider: str = "exchangerate-api"
    exchange_api_base_url: str = "https://v6.exchangerate-api.com/v6"
    # 'path': <base>/<key>/latest/<BASE>; 'query': <base>?<param>=<key>&base=<BASE>
    exchange_api_style: str = "path"
    exchange_api_credential_param: str = "app_id"
    exchange_rate_api_key: Optional[str] = None
    http_timeout_seconds: float = 5.0

    # Currencies shown by the widget
    base_currency: str = DEFAULT_BASE_CURRENCY
    quote_currencies: Tuple[str, ...] = DEFAULT_QUOTE_CURRENCIES

    def init_post_load(self) -> None:
        """Normalize codes and validate enumerated fields."""
        self.base_currency = self.base_currency.strip().upper()
        self.quote_currencies = tuple(c.strip().upper() for c in self.quote_currencies)
        if self.exchange_rate_provider not in RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {sorted(RATE_PROVIDERS)}"
            )
        if self.exchange_api_style not in URL_STYLES:
            raise ValueError(
                f"Unsupported exchange_api_style '{self.exchange_api_style}'. Allowed: {sorted(URL_STYLES)}"
            )
        for code in (self.base_currency, *self.quote_currencies):
            if not _CODE_RE.match(code):
                raise ValueError(f"Invalid currency code '{code}'")
        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be positive")

    @property
    def credential_configured(self) -> bool:
        key = (self.exchange_rate_api_key or "").strip()
        return bool(key) and key != CREDENTIAL_PLACEHOLDER


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings

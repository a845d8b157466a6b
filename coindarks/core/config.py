"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here; no scattered magic strings.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_enabled: Toggle slowapi enforcement.
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_orders: Rate limit for order creation.
        database_url: SQLAlchemy URL of the relational store.
        coingecko_api_url: Simple-price endpoint of the live feed.
        coingecko_api_key: Optional demo API key for the feed.
        price_feed_timeout_seconds: Per-request timeout for the feed.
        price_feed_cache_ttl_seconds: How long a feed result is reused.
        price_feed_retries: Extra feed attempts after the first failure.
        price_feed_retry_backoff_seconds: Base cooldown between feed attempts.
        minimum_sell_amounts: Fiat floor for SELL orders per currency.
        bridge_fallback_rates: USD -> fiat constants used without a bridge pair.
        order_number_prefix: Fixed prefix of generated order numbers.
        order_number_max_attempts: Inserts tried before giving up on collisions.
        store_retry_attempts: Attempts for reads hit by transient store errors.
        store_retry_backoff_seconds: Base cooldown between store attempts.
        notification_webhook_url: Where order notifications are POSTed.
        notification_address: Recipient passed to the notification sender.
        notification_timeout_seconds: Timeout for notification delivery.
        notification_max_attempts: Drains an undelivered event survives.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "CoinDarks Exchange"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    rate_limit_orders: str = "10/minute"

    database_url: str = "sqlite:///./coindarks.db"

    coingecko_api_url: str = "https://api.coingecko.com/api/v3/simple/price"
    coingecko_api_key: Optional[str] = None
    price_feed_timeout_seconds: float = 5.0
    price_feed_cache_ttl_seconds: float = 60.0
    price_feed_retries: int = 1
    price_feed_retry_backoff_seconds: float = 1.0

    minimum_sell_amounts: dict[str, Decimal] = {
        "GHS": Decimal("100"),
        "NGN": Decimal("15000"),
    }
    bridge_fallback_rates: dict[str, Decimal] = {
        "GHS": Decimal("16.5"),
        "NGN": Decimal("1650"),
    }

    order_number_prefix: str = "CD"
    order_number_max_attempts: int = 3
    store_retry_attempts: int = 3
    store_retry_backoff_seconds: float = 1.0

    notification_webhook_url: Optional[str] = None
    notification_address: str = "support@coindarks.com"
    notification_timeout_seconds: float = 5.0
    notification_max_attempts: int = 3


settings = Settings()

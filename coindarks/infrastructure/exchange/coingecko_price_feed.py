"""
Adapter: CoinGecko simple-price feed.

Implements PriceFeedPort over ``GET /api/v3/simple/price``.

Behavior:
    - One batched request for all ids x currencies, 24h change included.
    - Results are cached per (ids, currencies) for a short TTL. Failed or
      empty fetches are cached too, so an outage costs one fetch cycle
      per TTL window.
    - Short timeout; transport errors and HTTP 429 are retried with a
      cooldown, then the adapter fails open and returns no prices.
    - Malformed payloads or values are treated as missing data.
"""

import logging
import threading
import time
from decimal import Decimal
from typing import Any, Callable, Optional

import httpx

from coindarks.domain.exchange.entities import ZERO, SpotPrice
from coindarks.domain.exchange.ports import PriceFeedPort
from coindarks.shared.retry import with_retries

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-cg-demo-api-key"
HTTP_TOO_MANY_REQUESTS = 429

CacheKey = tuple[tuple[str, ...], tuple[str, ...]]


class FeedThrottledError(Exception):
    """The feed answered HTTP 429."""


def _number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = Decimal(str(value))
    # json.loads accepts NaN and Infinity literals
    if not number.is_finite():
        return None
    return number


def parse_simple_price(
    payload: Any, feed_ids: tuple[str, ...], currencies: tuple[str, ...]
) -> dict[tuple[str, str], SpotPrice]:
    """Extract spot prices from a simple-price response body.

    Anything that is not a numeric price for a requested id/currency is
    skipped rather than raised.
    """
    prices: dict[tuple[str, str], SpotPrice] = {}
    if not isinstance(payload, dict):
        return prices

    for feed_id in feed_ids:
        entry = payload.get(feed_id)
        if not isinstance(entry, dict):
            continue
        for currency in currencies:
            price = _number(entry.get(currency))
            if price is None:
                continue
            change = _number(entry.get(f"{currency}_24h_change"))
            prices[(feed_id, currency)] = SpotPrice(
                feed_id=feed_id,
                currency=currency,
                price=price,
                change_24h=change if change is not None else ZERO,
            )
    return prices


class CoinGeckoPriceFeed(PriceFeedPort):
    """Cached, fail-open CoinGecko client.

    Args:
        api_url: Simple-price endpoint URL.
        api_key: Optional demo API key.
        timeout: Per-request timeout in seconds.
        cache_ttl: Seconds a result, including an empty one, is reused.
        retries: Extra attempts after a retryable failure.
        backoff: Base cooldown in seconds between attempts.
        client: Optional pre-built httpx client (tests inject a mock transport).
        clock: Monotonic clock, injectable for tests.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout: float = 5.0,
        cache_ttl: float = 60.0,
        retries: int = 1,
        backoff: float = 1.0,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._api_url = api_url
        self._headers = {API_KEY_HEADER: api_key} if api_key else {}
        self._cache_ttl = cache_ttl
        self._retries = retries
        self._backoff = backoff
        self._client = client or httpx.Client(timeout=timeout)
        self._clock = clock
        self._sleep = sleep
        self._cache: dict[CacheKey, tuple[float, dict[tuple[str, str], SpotPrice]]] = {}
        self._lock = threading.Lock()

    def get_spot_prices(
        self, feed_ids: set[str], currencies: set[str]
    ) -> dict[tuple[str, str], SpotPrice]:
        """Return live prices keyed by (feed_id, currency); empty on failure."""
        if not feed_ids or not currencies:
            return {}
        key: CacheKey = (
            tuple(sorted(feed_ids)),
            tuple(sorted(c.lower() for c in currencies)),
        )

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None and self._clock() - cached[0] < self._cache_ttl:
                return cached[1]

        try:
            payload = with_retries(
                lambda: self._fetch(key),
                attempts=1 + self._retries,
                backoff=self._backoff,
                retry_on=(httpx.TransportError, FeedThrottledError),
                sleep=self._sleep,
            )
        except (httpx.HTTPError, FeedThrottledError, ValueError) as exc:
            logger.error(
                "Price feed unavailable, using configured rates: %s",
                type(exc).__name__,
            )
            return self._store(key, {})

        prices = parse_simple_price(payload, *key)
        if not prices:
            logger.warning("Price feed returned no usable prices for %s", key[0])
        return self._store(key, prices)

    def _store(
        self, key: CacheKey, prices: dict[tuple[str, str], SpotPrice]
    ) -> dict[tuple[str, str], SpotPrice]:
        with self._lock:
            self._cache[key] = (self._clock(), prices)
        return prices

    def close(self) -> None:
        self._client.close()

    def _fetch(self, key: CacheKey) -> Any:
        ids, currencies = key
        response = self._client.get(
            self._api_url,
            params={
                "ids": ",".join(ids),
                "vs_currencies": ",".join(currencies),
                "include_24hr_change": "true",
            },
            headers=self._headers,
        )
        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            raise FeedThrottledError("rate limited")
        response.raise_for_status()
        return response.json()

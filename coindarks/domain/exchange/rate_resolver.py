"""
Rate resolution for configured trading pairs.

Loads every configured pair and, for pairs flagged automated, merges
live spot prices from the external feed. Live pricing fails open:
a pair without a usable live price falls back to its configured
manual rate, then its stored rate, then zero.

Margin is NOT applied here; see ``margin.apply_margin``.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Optional

from coindarks.domain.exchange.entities import (
    ZERO,
    ResolvedRate,
    SpotPrice,
    TradingPair,
)
from coindarks.domain.exchange.ports import PriceFeedPort, TradingPairRepository

logger = logging.getLogger(__name__)

DEFAULT_QUOTE = "usd"

# Asset symbol -> CoinGecko coin id
FEED_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "LTC": "litecoin",
    "SOL": "solana",
    "USDT": "tether",
    "XLM": "stellar",
    "USDC": "usd-coin",
}


def fallback_rate(pair: TradingPair) -> Decimal:
    """Return the configured rate used when no live price applies."""
    if pair.manual_rate:
        return pair.manual_rate
    if pair.rate:
        return pair.rate
    return ZERO


class RateResolver:
    """Resolves a display rate for every configured pair.

    Args:
        pair_repo: Source of configured pairs.
        price_feed: Live spot price provider.
        feed_ids: Asset symbol to feed id mapping. Assets missing here
            are never requested from the feed.
    """

    def __init__(
        self,
        pair_repo: TradingPairRepository,
        price_feed: PriceFeedPort,
        feed_ids: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._pair_repo = pair_repo
        self._price_feed = price_feed
        self._feed_ids = dict(FEED_IDS if feed_ids is None else feed_ids)

    def load_rates(self) -> list[ResolvedRate]:
        """Return every configured pair with its resolved display rate.

        One batched feed request is issued for all supported base assets
        across all quote currencies. An empty configuration yields an
        empty list without touching the feed.
        """
        pairs = self._pair_repo.list_all()
        if not pairs:
            return []

        feed_ids = {
            self._feed_ids[p.base] for p in pairs if p.base in self._feed_ids
        }
        currencies = {p.quote.lower() for p in pairs if p.quote}
        if not currencies:
            currencies = {DEFAULT_QUOTE}

        live: dict[tuple[str, str], SpotPrice] = {}
        if feed_ids:
            live = self._price_feed.get_spot_prices(feed_ids, currencies)

        logger.debug(
            "Resolving %d pairs with %d live prices", len(pairs), len(live)
        )
        return [self._resolve(p, live) for p in pairs]

    def _resolve(
        self, pair: TradingPair, live: dict[tuple[str, str], SpotPrice]
    ) -> ResolvedRate:
        feed_id = self._feed_ids.get(pair.base)
        quote = pair.quote.lower() or DEFAULT_QUOTE
        spot = live.get((feed_id, quote)) if feed_id else None

        if pair.is_automated and spot is not None and spot.price > 0:
            base_rate = spot.price
        else:
            base_rate = fallback_rate(pair)

        return ResolvedRate(
            pair=pair,
            display_rate=base_rate,
            percent_change_24h=spot.change_24h if spot is not None else ZERO,
        )

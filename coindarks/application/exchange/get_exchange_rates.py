"""
Use case: List configured trading pairs with resolved rates.

Input: None
Output: list[RateResult]
Side effects: At most one (cached) request to the live price feed.
Failure cases: None; feed failures fall back to configured rates.
"""

import logging

from coindarks.application.exchange.dtos import RateResult
from coindarks.domain.exchange.rate_resolver import RateResolver

logger = logging.getLogger(__name__)


class GetExchangeRatesUseCase:
    """Read-only query over the rate resolver."""

    def __init__(self, rate_resolver: RateResolver) -> None:
        self._rate_resolver = rate_resolver

    def execute(self) -> list[RateResult]:
        """Return every configured pair with its display rate (pre-margin)."""
        resolved = self._rate_resolver.load_rates()
        logger.info("Resolved %d exchange rates", len(resolved))
        return [
            RateResult(
                pair=r.name,
                rate=r.display_rate,
                manual_rate=r.pair.manual_rate,
                margin_percent=r.pair.margin_percent,
                buy_margin_percent=r.pair.buy_margin,
                sell_margin_percent=r.pair.sell_margin,
                is_automated=r.pair.is_automated,
                display_rate=r.display_rate,
                percent_change_24h=r.percent_change_24h,
            )
            for r in resolved
        ]

"""
Effective rate selection with USD bridging.

A direct ``ASSET-FIAT`` pair always wins. Without one, the asset's
USD-quoted rate is multiplied by a USD-like -> fiat bridge rate
(USDT, then USDC, then USD). With no bridge pair either, a static
per-currency fallback multiplier is used, else 1.
"""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Optional

from coindarks.domain.exchange.entities import (
    EffectiveRate,
    OrderType,
    ResolvedRate,
)
from coindarks.domain.exchange.errors import NoRateError

logger = logging.getLogger(__name__)

USD_QUOTES = ("USD", "USDT")
BRIDGE_ASSETS = ("USDT", "USDC", "USD")
NEUTRAL_MULTIPLIER = Decimal("1")


class RateBridger:
    """Chooses the effective (pre-margin) rate for an asset/fiat pair.

    Args:
        fallback_multipliers: Static USD -> fiat constants keyed by
            upper-case currency code, used when no bridge pair exists.
    """

    def __init__(
        self, fallback_multipliers: Optional[Mapping[str, Decimal]] = None
    ) -> None:
        self._fallbacks = {
            k.upper(): Decimal(v) for k, v in (fallback_multipliers or {}).items()
        }

    def resolve_effective_rate(
        self,
        asset: str,
        fiat_currency: str,
        order_type: OrderType,
        rates: Sequence[ResolvedRate],
    ) -> EffectiveRate:
        """Return the effective rate and the side margin that applies to it.

        Raises:
            NoRateError: If neither a direct nor a USD-quoted pair exists.
        """
        asset = asset.upper()
        fiat_currency = fiat_currency.upper()
        by_name = {r.name.upper(): r for r in rates}

        direct = by_name.get(f"{asset}-{fiat_currency}")
        if direct is not None and direct.display_rate > 0:
            return EffectiveRate(
                rate=direct.display_rate,
                margin_percent=direct.pair.margin_for(order_type),
                source_pair=direct.name,
            )

        usd_pair = self._find_usd_pair(asset, by_name)
        if usd_pair is None:
            raise NoRateError(asset)

        multiplier = self.bridge_multiplier(fiat_currency, by_name)
        logger.info(
            "Bridging %s-%s via %s x %s",
            asset,
            fiat_currency,
            usd_pair.name,
            multiplier,
        )
        return EffectiveRate(
            rate=usd_pair.display_rate * multiplier,
            margin_percent=usd_pair.pair.margin_for(order_type),
            source_pair=usd_pair.name,
            bridged=True,
        )

    def bridge_multiplier(
        self, fiat_currency: str, by_name: Mapping[str, ResolvedRate]
    ) -> Decimal:
        """Return the USD -> fiat multiplier for ``fiat_currency``."""
        fiat_currency = fiat_currency.upper()
        for bridge_asset in BRIDGE_ASSETS:
            bridge = by_name.get(f"{bridge_asset}-{fiat_currency}")
            if bridge is not None and bridge.display_rate > 0:
                return bridge.display_rate
        return self._fallbacks.get(fiat_currency, NEUTRAL_MULTIPLIER)

    @staticmethod
    def _find_usd_pair(
        asset: str, by_name: Mapping[str, ResolvedRate]
    ) -> Optional[ResolvedRate]:
        for quote in USD_QUOTES:
            candidate = by_name.get(f"{asset}-{quote}")
            if candidate is not None:
                return candidate
        return None

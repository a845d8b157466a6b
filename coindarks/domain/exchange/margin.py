"""Margin application on top of the effective rate."""

from decimal import Decimal

from coindarks.domain.exchange.entities import OrderType

HUNDRED = Decimal("100")


def apply_margin(
    effective_rate: Decimal, margin_percent: Decimal, order_type: OrderType
) -> Decimal:
    """Return the final transacting rate.

    BUY adds the margin, SELL subtracts it. The result is not clamped:
    a sell margin of 100% or more yields a non-positive rate, which the
    pricer rejects.
    """
    fraction = Decimal(margin_percent) / HUNDRED
    if order_type is OrderType.BUY:
        return effective_rate * (1 + fraction)
    return effective_rate * (1 - fraction)

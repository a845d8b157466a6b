"""
Order amount computation.

Converts the amount the customer typed into its counterpart using the
final rate. Crypto amounts are rounded to 8 decimal places and fiat
amounts to 2, half away from zero, on the decimal representation.
"""

from decimal import ROUND_HALF_UP, Decimal

from coindarks.domain.exchange.entities import InputType, OrderAmounts
from coindarks.domain.exchange.errors import RateUnavailableError

CRYPTO_QUANTUM = Decimal("0.00000001")
FIAT_QUANTUM = Decimal("0.01")


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert a number to Decimal through its shortest text form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_crypto(amount: Decimal) -> Decimal:
    return amount.quantize(CRYPTO_QUANTUM, rounding=ROUND_HALF_UP)


def round_fiat(amount: Decimal) -> Decimal:
    return amount.quantize(FIAT_QUANTUM, rounding=ROUND_HALF_UP)


def compute_amounts(
    amount_input: Decimal | float | int | str,
    input_type: InputType,
    final_rate: Decimal,
    pair: str = "",
) -> OrderAmounts:
    """Return rounded crypto and fiat amounts for an order.

    Args:
        amount_input: The amount the customer entered.
        input_type: Whether ``amount_input`` is crypto or fiat denominated.
        final_rate: Fiat per unit of crypto, margin included.
        pair: Pair label used in the error message.

    Raises:
        RateUnavailableError: If ``final_rate`` is zero or negative.
    """
    if final_rate <= 0:
        raise RateUnavailableError(pair, final_rate)

    amount = to_decimal(amount_input)
    if input_type is InputType.FIAT:
        fiat = amount
        crypto = fiat / final_rate
    else:
        crypto = amount
        fiat = crypto * final_rate

    return OrderAmounts(crypto=round_crypto(crypto), fiat=round_fiat(fiat))

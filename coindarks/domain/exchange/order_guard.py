"""
Policy checks that gate order creation.

Each check short-circuits with its own error:
    1. KYC approval (admins are exempt)
    2. Per-currency minimum for SELL orders
    3. An active admin wallet for the settlement currency
"""

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Optional

from coindarks.domain.exchange.entities import Caller, KycStatus, OrderType
from coindarks.domain.exchange.errors import (
    KycRequiredError,
    MinimumOrderError,
    NoDestinationError,
)
from coindarks.domain.exchange.ports import AdminWalletRepository

logger = logging.getLogger(__name__)

ADDRESS_SEPARATOR = "\n"


class OrderGuard:
    """Enforces trading eligibility and settlement availability.

    Args:
        wallet_repo: Source of active admin wallets.
        minimum_sell_amounts: Fiat floor per upper-case currency code.
            Currencies not listed have no minimum.
    """

    def __init__(
        self,
        wallet_repo: AdminWalletRepository,
        minimum_sell_amounts: Optional[Mapping[str, Decimal]] = None,
    ) -> None:
        self._wallet_repo = wallet_repo
        self._minimums = {
            k.upper(): Decimal(v) for k, v in (minimum_sell_amounts or {}).items()
        }

    def check_kyc(self, caller: Caller) -> None:
        """Raise KycRequiredError unless the caller may trade."""
        if caller.is_admin or caller.kyc_status is KycStatus.APPROVED:
            return
        logger.info(
            "Trade rejected for user=%s: kyc_status=%s",
            caller.user_id,
            caller.kyc_status.value,
        )
        raise KycRequiredError(caller.user_id)

    def check_minimum(
        self, order_type: OrderType, amount_fiat: Decimal, fiat_currency: str
    ) -> None:
        """Raise MinimumOrderError if a SELL is below its currency floor.

        The floor itself is accepted.
        """
        if order_type is not OrderType.SELL:
            return
        currency = fiat_currency.upper()
        floor = self._minimums.get(currency)
        if floor is not None and amount_fiat < floor:
            raise MinimumOrderError(amount_fiat, floor, currency)

    def resolve_destination(
        self, order_type: OrderType, asset: str, fiat_currency: str
    ) -> str:
        """Return the newline-joined addresses the customer should pay into.

        SELL settles in the asset (customer sends crypto), BUY settles in
        the fiat currency (customer sends fiat).

        Raises:
            NoDestinationError: If no active wallet exists for that currency.
        """
        currency = (asset if order_type is OrderType.SELL else fiat_currency).upper()
        wallets = self._wallet_repo.list_active(currency)
        if not wallets:
            logger.error("No active admin wallet for %s", currency)
            raise NoDestinationError(currency)
        return ADDRESS_SEPARATOR.join(w.address for w in wallets)

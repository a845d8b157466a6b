"""
Use case: Price and create a BUY/SELL order.

Input: CreateOrderCommand
Output: CreateOrderResult
Side effects: One order row inserted; one OrderCreatedEvent published.
Failure cases: KycRequiredError, NoRateError, RateUnavailableError,
    MinimumOrderError, NoDestinationError, OrderCreationError.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from coindarks.application.exchange.dtos import CreateOrderCommand, CreateOrderResult
from coindarks.domain.exchange.entities import Order, OrderCreatedEvent
from coindarks.domain.exchange.errors import (
    OrderCreationError,
    OrderNumberConflictError,
)
from coindarks.domain.exchange.margin import apply_margin
from coindarks.domain.exchange.order_guard import OrderGuard
from coindarks.domain.exchange.order_numbers import generate_order_number
from coindarks.domain.exchange.ports import OrderEventPublisher, OrderRepository
from coindarks.domain.exchange.pricing import compute_amounts
from coindarks.domain.exchange.rate_bridger import RateBridger
from coindarks.domain.exchange.rate_resolver import RateResolver
from coindarks.shared.retry import with_retries

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreateOrderUseCase:
    """Orchestrates the order pricing and creation pipeline.

    KYC is checked before any rate is loaded, so rejected callers cause
    no feed traffic. Every policy check runs before the single insert,
    so no error path leaves a partial order behind.
    """

    def __init__(
        self,
        rate_resolver: RateResolver,
        rate_bridger: RateBridger,
        order_guard: OrderGuard,
        order_repo: OrderRepository,
        event_publisher: OrderEventPublisher,
        order_number_prefix: str = "CD",
        max_attempts: int = 3,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._rate_resolver = rate_resolver
        self._rate_bridger = rate_bridger
        self._guard = order_guard
        self._order_repo = order_repo
        self._event_publisher = event_publisher
        self._prefix = order_number_prefix
        self._max_attempts = max_attempts
        self._clock = clock

    def execute(self, command: CreateOrderCommand) -> CreateOrderResult:
        """Run the order creation use case.

        Args:
            command: The validated order request.

        Returns:
            The created order's identifiers, settlement address and amounts.
        """
        caller = command.caller
        self._guard.check_kyc(caller)

        asset = command.asset.upper()
        fiat_currency = command.fiat_currency.upper()

        rates = self._rate_resolver.load_rates()
        effective = self._rate_bridger.resolve_effective_rate(
            asset, fiat_currency, command.type, rates
        )
        final_rate = apply_margin(
            effective.rate, effective.margin_percent, command.type
        )
        amounts = compute_amounts(
            command.amount_input,
            command.input_type,
            final_rate,
            pair=f"{asset}-{fiat_currency}",
        )

        self._guard.check_minimum(command.type, amounts.fiat, fiat_currency)
        deposit_address = self._guard.resolve_destination(
            command.type, asset, fiat_currency
        )

        def attempt() -> Order:
            now = self._clock()
            return self._order_repo.insert(
                Order(
                    order_number=generate_order_number(self._prefix, now),
                    user_id=caller.user_id,
                    type=command.type,
                    asset=asset,
                    amount_crypto=amounts.crypto,
                    amount_fiat=amounts.fiat,
                    fiat_currency=fiat_currency,
                    receiving_address=command.receiving_address,
                    created_at=now,
                    updated_at=now,
                )
            )

        try:
            order = with_retries(
                attempt,
                attempts=self._max_attempts,
                retry_on=(OrderNumberConflictError,),
            )
        except OrderNumberConflictError as exc:
            raise OrderCreationError("order number collisions exhausted") from exc

        logger.info(
            "Order %s created: user=%s %s %s %s/%s %s via %s",
            order.order_number,
            order.user_id,
            order.type.value,
            order.asset,
            order.amount_crypto,
            order.amount_fiat,
            order.fiat_currency,
            effective.source_pair,
        )
        self._publish_created(order)

        return CreateOrderResult(
            order_id=order.id,
            order_number=order.order_number,
            deposit_address=deposit_address,
            amount_crypto=order.amount_crypto,
            amount_fiat=order.amount_fiat,
            final_rate=final_rate,
        )

    def _publish_created(self, order: Order) -> None:
        event = OrderCreatedEvent(
            order_id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            type=order.type,
            asset=order.asset,
            amount_crypto=order.amount_crypto,
            amount_fiat=order.amount_fiat,
            fiat_currency=order.fiat_currency,
            occurred_at=order.created_at or self._clock(),
        )
        # The order is committed; a publishing failure must not undo that.
        try:
            self._event_publisher.publish(event)
        except Exception:
            logger.exception(
                "Could not publish creation event for order %s", order.order_number
            )

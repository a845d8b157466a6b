"""
FastAPI router for the exchange bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from coindarks.application.exchange.create_order import CreateOrderUseCase
from coindarks.application.exchange.dtos import CreateOrderCommand
from coindarks.application.exchange.get_exchange_rates import GetExchangeRatesUseCase
from coindarks.application.exchange.manage_inventory import GetInventoryUseCase
from coindarks.core.config import settings
from coindarks.domain.exchange.entities import Caller, InputType, OrderType
from coindarks.infrastructure.exchange.order_outbox import OrderNotificationRelay
from coindarks.interfaces.exchange.dependencies import (
    get_caller,
    get_create_order_use_case,
    get_exchange_rates_use_case,
    get_inventory_use_case,
    get_notification_relay,
)
from coindarks.interfaces.exchange.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    ErrorResponse,
    InventoryItemSchema,
    OrderAmountsItem,
    RateItem,
)
from coindarks.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/exchange", tags=["exchange"])


@router.get(
    "/rates",
    response_model=list[RateItem],
    summary="List exchange rates",
    description="Configured pairs with live or fallback display rates and 24h change.",
)
def get_exchange_rates(
    use_case: GetExchangeRatesUseCase = Depends(get_exchange_rates_use_case),
) -> list[RateItem]:
    """Return every configured pair with its display rate."""
    results = use_case.execute()
    return [
        RateItem(
            pair=r.pair,
            rate=float(r.rate),
            manual_rate=float(r.manual_rate) if r.manual_rate is not None else None,
            margin_percent=float(r.margin_percent),
            buy_margin_percent=float(r.buy_margin_percent),
            sell_margin_percent=float(r.sell_margin_percent),
            is_automated=r.is_automated,
            display_rate=float(r.display_rate),
            percent_change_24h=float(r.percent_change_24h),
        )
        for r in results
    ]


@router.post(
    "/orders",
    response_model=CreateOrderResponse,
    status_code=201,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Create an order",
    description=(
        "Price a BUY or SELL order at the current margined rate, persist it "
        "as PENDING and return the platform deposit address."
    ),
)
@limiter.limit(settings.rate_limit_orders)
def create_order(
    request: Request,
    payload: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    caller: Caller = Depends(get_caller),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
    relay: OrderNotificationRelay = Depends(get_notification_relay),
) -> CreateOrderResponse:
    """Create an order for the calling user."""
    command = CreateOrderCommand(
        caller=caller,
        type=OrderType(payload.type),
        asset=payload.asset,
        amount_input=payload.amount_input,
        input_type=InputType(payload.input_type),
        fiat_currency=payload.fiat_currency,
        receiving_address=payload.receiving_address,
    )
    result = use_case.execute(command)
    background_tasks.add_task(relay.deliver_pending)
    return CreateOrderResponse(
        order_number=result.order_number,
        order_id=result.order_id,
        deposit_address=result.deposit_address,
        amounts=OrderAmountsItem(
            crypto=float(result.amount_crypto),
            fiat=float(result.amount_fiat),
        ),
    )


@router.get(
    "/inventory",
    response_model=list[InventoryItemSchema],
    summary="List asset availability",
)
def get_inventory(
    use_case: GetInventoryUseCase = Depends(get_inventory_use_case),
) -> list[InventoryItemSchema]:
    return [
        InventoryItemSchema(
            asset=r.asset,
            buy_enabled=r.buy_enabled,
            sell_enabled=r.sell_enabled,
            updated_at=r.updated_at,
        )
        for r in use_case.execute()
    ]

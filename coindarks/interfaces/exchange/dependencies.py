"""
Dependency injection for the exchange bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the exchange context.

Process-wide adapters (engine, price feed with its cache, outbox,
relay) are built once; use cases are built per request.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.engine import Engine

from coindarks.application.exchange.create_order import CreateOrderUseCase
from coindarks.application.exchange.get_exchange_rates import GetExchangeRatesUseCase
from coindarks.application.exchange.manage_admin_wallets import (
    CreateAdminWalletUseCase,
    DeleteAdminWalletUseCase,
    ListAdminWalletsUseCase,
    UpdateAdminWalletUseCase,
)
from coindarks.application.exchange.manage_inventory import (
    GetInventoryUseCase,
    UpdateInventoryUseCase,
)
from coindarks.application.exchange.manage_rate_pairs import (
    CreateRatePairUseCase,
    DeleteRatePairUseCase,
    UpdateRatePairUseCase,
)
from coindarks.core.config import settings
from coindarks.domain.exchange.entities import Caller, KycStatus, Role
from coindarks.domain.exchange.errors import AuthenticationRequiredError
from coindarks.domain.exchange.order_guard import OrderGuard
from coindarks.domain.exchange.ports import PriceFeedPort
from coindarks.domain.exchange.rate_bridger import RateBridger
from coindarks.domain.exchange.rate_resolver import RateResolver
from coindarks.infrastructure.exchange.admin_wallet_repository import (
    AdminWalletRepositoryAdapter,
)
from coindarks.infrastructure.exchange.coingecko_price_feed import CoinGeckoPriceFeed
from coindarks.infrastructure.exchange.database import create_db_engine
from coindarks.infrastructure.exchange.inventory_repository import (
    InventoryRepositoryAdapter,
)
from coindarks.infrastructure.exchange.notification_senders import (
    LoggingNotificationSender,
    WebhookNotificationSender,
)
from coindarks.infrastructure.exchange.order_outbox import (
    InMemoryOrderOutbox,
    OrderNotificationRelay,
)
from coindarks.infrastructure.exchange.order_repository import OrderRepositoryAdapter
from coindarks.infrastructure.exchange.trading_pair_repository import (
    TradingPairRepositoryAdapter,
)


# ── Identity ─────────────────────────────────────────────────────


def get_caller(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: str = Header(default=Role.USER.value),
    x_kyc_status: str = Header(default=KycStatus.UNVERIFIED.value),
) -> Caller:
    """Build the Caller from headers set by the identity provider.

    Unknown role or KYC values degrade to the least privileged value.
    """
    if not x_user_id:
        raise AuthenticationRequiredError()
    try:
        role = Role(x_user_role.strip().upper())
    except ValueError:
        role = Role.USER
    try:
        kyc_status = KycStatus(x_kyc_status.strip().upper())
    except ValueError:
        kyc_status = KycStatus.UNVERIFIED
    return Caller(user_id=x_user_id, role=role, kyc_status=kyc_status)


# ── Process-wide adapters ────────────────────────────────────────


@lru_cache
def get_db_engine() -> Engine:
    """Build the SQLAlchemy engine from application settings."""
    return create_db_engine(settings.database_url)


@lru_cache
def get_price_feed() -> PriceFeedPort:
    """Build the cached CoinGecko client."""
    return CoinGeckoPriceFeed(
        api_url=settings.coingecko_api_url,
        api_key=settings.coingecko_api_key,
        timeout=settings.price_feed_timeout_seconds,
        cache_ttl=settings.price_feed_cache_ttl_seconds,
        retries=settings.price_feed_retries,
        backoff=settings.price_feed_retry_backoff_seconds,
    )


@lru_cache
def get_order_outbox() -> InMemoryOrderOutbox:
    return InMemoryOrderOutbox()


@lru_cache
def get_notification_relay() -> OrderNotificationRelay:
    """Build the relay that delivers order notifications."""
    if settings.notification_webhook_url:
        sender = WebhookNotificationSender(
            url=settings.notification_webhook_url,
            timeout=settings.notification_timeout_seconds,
        )
    else:
        sender = LoggingNotificationSender()
    return OrderNotificationRelay(
        outbox=get_order_outbox(),
        sender=sender,
        address=settings.notification_address,
        max_attempts=settings.notification_max_attempts,
    )


# ── Use cases ────────────────────────────────────────────────────


def get_rate_resolver(
    engine: Engine = Depends(get_db_engine),
    price_feed: PriceFeedPort = Depends(get_price_feed),
) -> RateResolver:
    return RateResolver(
        pair_repo=TradingPairRepositoryAdapter(engine),
        price_feed=price_feed,
    )


def get_exchange_rates_use_case(
    rate_resolver: RateResolver = Depends(get_rate_resolver),
) -> GetExchangeRatesUseCase:
    """Build GetExchangeRatesUseCase with its infrastructure dependencies."""
    return GetExchangeRatesUseCase(rate_resolver=rate_resolver)


def get_create_order_use_case(
    engine: Engine = Depends(get_db_engine),
    rate_resolver: RateResolver = Depends(get_rate_resolver),
    outbox: InMemoryOrderOutbox = Depends(get_order_outbox),
) -> CreateOrderUseCase:
    """Build CreateOrderUseCase with its infrastructure dependencies."""
    return CreateOrderUseCase(
        rate_resolver=rate_resolver,
        rate_bridger=RateBridger(settings.bridge_fallback_rates),
        order_guard=OrderGuard(
            wallet_repo=AdminWalletRepositoryAdapter(engine),
            minimum_sell_amounts=settings.minimum_sell_amounts,
        ),
        order_repo=OrderRepositoryAdapter(engine),
        event_publisher=outbox,
        order_number_prefix=settings.order_number_prefix,
        max_attempts=settings.order_number_max_attempts,
    )


def get_create_rate_pair_use_case(
    engine: Engine = Depends(get_db_engine),
) -> CreateRatePairUseCase:
    return CreateRatePairUseCase(pair_repo=TradingPairRepositoryAdapter(engine))


def get_update_rate_pair_use_case(
    engine: Engine = Depends(get_db_engine),
) -> UpdateRatePairUseCase:
    return UpdateRatePairUseCase(pair_repo=TradingPairRepositoryAdapter(engine))


def get_delete_rate_pair_use_case(
    engine: Engine = Depends(get_db_engine),
) -> DeleteRatePairUseCase:
    return DeleteRatePairUseCase(pair_repo=TradingPairRepositoryAdapter(engine))


def get_list_admin_wallets_use_case(
    engine: Engine = Depends(get_db_engine),
) -> ListAdminWalletsUseCase:
    return ListAdminWalletsUseCase(
        wallet_repo=AdminWalletRepositoryAdapter(engine),
        attempts=settings.store_retry_attempts,
        backoff_seconds=settings.store_retry_backoff_seconds,
    )


def get_create_admin_wallet_use_case(
    engine: Engine = Depends(get_db_engine),
) -> CreateAdminWalletUseCase:
    return CreateAdminWalletUseCase(wallet_repo=AdminWalletRepositoryAdapter(engine))


def get_update_admin_wallet_use_case(
    engine: Engine = Depends(get_db_engine),
) -> UpdateAdminWalletUseCase:
    return UpdateAdminWalletUseCase(wallet_repo=AdminWalletRepositoryAdapter(engine))


def get_delete_admin_wallet_use_case(
    engine: Engine = Depends(get_db_engine),
) -> DeleteAdminWalletUseCase:
    return DeleteAdminWalletUseCase(wallet_repo=AdminWalletRepositoryAdapter(engine))


def get_inventory_use_case(
    engine: Engine = Depends(get_db_engine),
) -> GetInventoryUseCase:
    return GetInventoryUseCase(inventory_repo=InventoryRepositoryAdapter(engine))


def get_update_inventory_use_case(
    engine: Engine = Depends(get_db_engine),
) -> UpdateInventoryUseCase:
    return UpdateInventoryUseCase(inventory_repo=InventoryRepositoryAdapter(engine))

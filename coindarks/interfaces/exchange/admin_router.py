"""
FastAPI router for exchange administration.

Rate pairs, platform wallets and inventory flags. Every route needs an
ADMIN caller; the check itself lives in the use cases.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from coindarks.application.exchange.dtos import (
    AdminWalletResult,
    CreateAdminWalletCommand,
    CreateRatePairCommand,
    DeleteAdminWalletCommand,
    DeleteRatePairCommand,
    UpdateAdminWalletCommand,
    UpdateInventoryCommand,
    UpdateRatePairCommand,
)
from coindarks.application.exchange.manage_admin_wallets import (
    CreateAdminWalletUseCase,
    DeleteAdminWalletUseCase,
    ListAdminWalletsUseCase,
    UpdateAdminWalletUseCase,
)
from coindarks.application.exchange.manage_inventory import UpdateInventoryUseCase
from coindarks.application.exchange.manage_rate_pairs import (
    CreateRatePairUseCase,
    DeleteRatePairUseCase,
    UpdateRatePairUseCase,
)
from coindarks.domain.exchange.entities import Caller, OrderType, TradingPair
from coindarks.interfaces.exchange.dependencies import (
    get_caller,
    get_create_admin_wallet_use_case,
    get_create_rate_pair_use_case,
    get_delete_admin_wallet_use_case,
    get_delete_rate_pair_use_case,
    get_list_admin_wallets_use_case,
    get_update_admin_wallet_use_case,
    get_update_inventory_use_case,
    get_update_rate_pair_use_case,
)
from coindarks.interfaces.exchange.schemas import (
    AdminWalletItem,
    CreateAdminWalletRequest,
    CreateRatePairRequest,
    ErrorResponse,
    InventoryItemSchema,
    RatePairItem,
    SuccessResponse,
    UpdateAdminWalletRequest,
    UpdateInventoryRequest,
    UpdateRatePairRequest,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


def _pair_item(pair: TradingPair) -> RatePairItem:
    return RatePairItem(
        pair=pair.pair,
        rate=float(pair.rate),
        manual_rate=float(pair.manual_rate) if pair.manual_rate is not None else None,
        margin_percent=float(pair.margin_percent),
        buy_margin_percent=float(pair.margin_for(OrderType.BUY)),
        sell_margin_percent=float(pair.margin_for(OrderType.SELL)),
        is_automated=pair.is_automated,
    )


def _wallet_item(wallet: AdminWalletResult) -> AdminWalletItem:
    return AdminWalletItem(
        id=wallet.id,
        chain=wallet.chain,
        currency=wallet.currency,
        address=wallet.address,
        label=wallet.label,
        is_active=wallet.is_active,
        created_at=wallet.created_at,
    )


# ── Rate pairs ───────────────────────────────────────────────────


@router.post(
    "/rates",
    response_model=RatePairItem,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Add a trading pair",
)
def create_rate_pair(
    payload: CreateRatePairRequest,
    caller: Caller = Depends(get_caller),
    use_case: CreateRatePairUseCase = Depends(get_create_rate_pair_use_case),
) -> RatePairItem:
    """Add an automated pair with default margins."""
    pair = use_case.execute(CreateRatePairCommand(caller=caller, pair=payload.pair))
    return _pair_item(pair)


@router.patch(
    "/rates/{pair}",
    response_model=RatePairItem,
    responses={404: {"model": ErrorResponse}},
    summary="Reconfigure a trading pair",
)
def update_rate_pair(
    pair: str,
    payload: UpdateRatePairRequest,
    caller: Caller = Depends(get_caller),
    use_case: UpdateRatePairUseCase = Depends(get_update_rate_pair_use_case),
) -> RatePairItem:
    command = UpdateRatePairCommand(
        caller=caller,
        pair=pair,
        manual_rate=payload.manual_rate,
        buy_margin_percent=payload.buy_margin_percent,
        sell_margin_percent=payload.sell_margin_percent,
        is_automated=payload.is_automated,
    )
    return _pair_item(use_case.execute(command))


@router.delete(
    "/rates/{pair}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a trading pair",
)
def delete_rate_pair(
    pair: str,
    caller: Caller = Depends(get_caller),
    use_case: DeleteRatePairUseCase = Depends(get_delete_rate_pair_use_case),
) -> SuccessResponse:
    use_case.execute(DeleteRatePairCommand(caller=caller, pair=pair))
    return SuccessResponse(success="Pair deleted")


# ── Wallets ──────────────────────────────────────────────────────


@router.get(
    "/wallets",
    response_model=list[AdminWalletItem],
    responses={503: {"model": ErrorResponse}},
    summary="List platform wallets",
)
def list_admin_wallets(
    caller: Caller = Depends(get_caller),
    use_case: ListAdminWalletsUseCase = Depends(get_list_admin_wallets_use_case),
) -> list[AdminWalletItem]:
    """List every platform wallet, newest first."""
    return [_wallet_item(w) for w in use_case.execute(caller)]


@router.post(
    "/wallets",
    response_model=AdminWalletItem,
    status_code=201,
    summary="Add a platform wallet",
)
def create_admin_wallet(
    payload: CreateAdminWalletRequest,
    caller: Caller = Depends(get_caller),
    use_case: CreateAdminWalletUseCase = Depends(get_create_admin_wallet_use_case),
) -> AdminWalletItem:
    command = CreateAdminWalletCommand(
        caller=caller,
        chain=payload.chain,
        currency=payload.currency,
        address=payload.address,
        label=payload.label,
    )
    return _wallet_item(use_case.execute(command))


@router.patch(
    "/wallets/{wallet_id}",
    response_model=AdminWalletItem,
    responses={404: {"model": ErrorResponse}},
    summary="Edit a platform wallet",
)
def update_admin_wallet(
    wallet_id: UUID,
    payload: UpdateAdminWalletRequest,
    caller: Caller = Depends(get_caller),
    use_case: UpdateAdminWalletUseCase = Depends(get_update_admin_wallet_use_case),
) -> AdminWalletItem:
    command = UpdateAdminWalletCommand(
        caller=caller,
        wallet_id=wallet_id,
        chain=payload.chain,
        currency=payload.currency,
        address=payload.address,
        label=payload.label,
        is_active=payload.is_active,
    )
    return _wallet_item(use_case.execute(command))


@router.delete(
    "/wallets/{wallet_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a platform wallet",
)
def delete_admin_wallet(
    wallet_id: UUID,
    caller: Caller = Depends(get_caller),
    use_case: DeleteAdminWalletUseCase = Depends(get_delete_admin_wallet_use_case),
) -> SuccessResponse:
    use_case.execute(DeleteAdminWalletCommand(caller=caller, wallet_id=wallet_id))
    return SuccessResponse(success="Wallet deleted")


# ── Inventory ────────────────────────────────────────────────────


@router.patch(
    "/inventory/{asset}",
    response_model=InventoryItemSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Toggle buy/sell availability of an asset",
)
def update_inventory(
    asset: str,
    payload: UpdateInventoryRequest,
    caller: Caller = Depends(get_caller),
    use_case: UpdateInventoryUseCase = Depends(get_update_inventory_use_case),
) -> InventoryItemSchema:
    command = UpdateInventoryCommand(
        caller=caller,
        asset=asset,
        buy_enabled=payload.buy_enabled,
        sell_enabled=payload.sell_enabled,
    )
    result = use_case.execute(command)
    return InventoryItemSchema(
        asset=result.asset,
        buy_enabled=result.buy_enabled,
        sell_enabled=result.sell_enabled,
        updated_at=result.updated_at,
    )

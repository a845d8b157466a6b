"""
Data Transfer Objects for the exchange application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from coindarks.domain.exchange.entities import Caller, InputType, OrderType


@dataclass(frozen=True)
class CreateOrderCommand:
    """Input DTO for creating an order.

    Attributes:
        caller: Identity of the requesting user.
        type: BUY or SELL.
        asset: Crypto asset symbol, e.g. "BTC".
        amount_input: The amount the user entered.
        input_type: Whether amount_input is crypto or fiat denominated.
        fiat_currency: Fiat currency code, e.g. "GHS".
        receiving_address: Where the user wants to be paid.
    """

    caller: Caller
    type: OrderType
    asset: str
    amount_input: Decimal
    input_type: InputType
    fiat_currency: str
    receiving_address: str


@dataclass(frozen=True)
class CreateOrderResult:
    """Output DTO for a created order.

    Attributes:
        order_id: Generated order UUID.
        order_number: Human-readable order number.
        deposit_address: Newline-joined settlement addresses.
        amount_crypto: Crypto amount, 8 decimal places.
        amount_fiat: Fiat amount, 2 decimal places.
        final_rate: Rate the amounts were computed with.
    """

    order_id: UUID
    order_number: str
    deposit_address: str
    amount_crypto: Decimal
    amount_fiat: Decimal
    final_rate: Decimal


@dataclass(frozen=True)
class RateResult:
    """Output DTO for one resolved trading pair."""

    pair: str
    rate: Decimal
    manual_rate: Optional[Decimal]
    margin_percent: Decimal
    buy_margin_percent: Decimal
    sell_margin_percent: Decimal
    is_automated: bool
    display_rate: Decimal
    percent_change_24h: Decimal


@dataclass(frozen=True)
class CreateRatePairCommand:
    """Input DTO for adding a trading pair (admin only)."""

    caller: Caller
    pair: str


@dataclass(frozen=True)
class UpdateRatePairCommand:
    """Input DTO for changing a pair's configuration (admin only).

    Fields left as None are not changed.
    """

    caller: Caller
    pair: str
    manual_rate: Optional[Decimal] = None
    buy_margin_percent: Optional[Decimal] = None
    sell_margin_percent: Optional[Decimal] = None
    is_automated: Optional[bool] = None


@dataclass(frozen=True)
class DeleteRatePairCommand:
    """Input DTO for removing a pair (admin only)."""

    caller: Caller
    pair: str


@dataclass(frozen=True)
class AdminWalletResult:
    """Output DTO for an admin wallet."""

    id: UUID
    chain: str
    currency: str
    address: str
    label: Optional[str]
    is_active: bool
    created_at: Optional[datetime]


@dataclass(frozen=True)
class CreateAdminWalletCommand:
    """Input DTO for adding an admin wallet."""

    caller: Caller
    chain: str
    currency: str
    address: str
    label: Optional[str] = None


@dataclass(frozen=True)
class UpdateAdminWalletCommand:
    """Input DTO for editing an admin wallet. None means unchanged."""

    caller: Caller
    wallet_id: UUID
    chain: Optional[str] = None
    currency: Optional[str] = None
    address: Optional[str] = None
    label: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class DeleteAdminWalletCommand:
    """Input DTO for removing an admin wallet."""

    caller: Caller
    wallet_id: UUID


@dataclass(frozen=True)
class InventoryResult:
    """Output DTO for an inventory row."""

    asset: str
    buy_enabled: bool
    sell_enabled: bool
    updated_at: Optional[datetime]


@dataclass(frozen=True)
class UpdateInventoryCommand:
    """Input DTO for toggling buy/sell availability of an asset."""

    caller: Caller
    asset: str
    buy_enabled: Optional[bool] = None
    sell_enabled: Optional[bool] = None

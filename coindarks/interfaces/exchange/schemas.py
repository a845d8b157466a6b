"""
Pydantic schemas for exchange API request/response validation.

These schemas enforce input validation and define the API contract.
Order creation accepts camelCase or snake_case keys and answers in
camelCase; everything else is snake_case.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ASSET_PATTERN = r"^[A-Z0-9]{2,10}$"
FIAT_PATTERN = r"^[A-Z]{3}$"
PAIR_PATTERN = r"^[A-Z0-9]{2,10}-[A-Z0-9]{2,10}$"
ADDRESS_MAX_LEN = 512


class CamelModel(BaseModel):
    """Base for models exchanged with the storefront in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateOrderRequest(CamelModel):
    """Request schema for order creation.

    Attributes:
        type: BUY or SELL.
        asset: Crypto asset symbol (2-10 uppercase chars).
        amount_input: Positive amount in the unit given by input_type.
        input_type: CRYPTO or FIAT.
        fiat_currency: ISO currency code, e.g. GHS.
        receiving_address: Wallet address or payout account of the user.
    """

    type: Literal["BUY", "SELL"]
    asset: str = Field(..., pattern=ASSET_PATTERN, description="Crypto asset symbol")
    amount_input: Decimal = Field(..., gt=0, description="Amount entered by the user")
    input_type: Literal["CRYPTO", "FIAT"]
    fiat_currency: str = Field(..., pattern=FIAT_PATTERN, description="Fiat currency code")
    receiving_address: str = Field(..., min_length=1, max_length=ADDRESS_MAX_LEN)


class OrderAmountsItem(BaseModel):
    """Rounded amounts of a created order."""

    crypto: float
    fiat: float


class CreateOrderResponse(CamelModel):
    """Response schema for a created order."""

    success: bool = True
    order_number: str
    order_id: UUID
    deposit_address: str
    amounts: OrderAmountsItem


class RateItem(BaseModel):
    """A single resolved trading pair."""

    pair: str
    rate: float
    manual_rate: Optional[float]
    margin_percent: float
    buy_margin_percent: float
    sell_margin_percent: float
    is_automated: bool
    display_rate: float
    percent_change_24h: float


class CreateRatePairRequest(BaseModel):
    """Request schema for adding a pair."""

    pair: str = Field(..., pattern=PAIR_PATTERN, description="BASE-QUOTE, e.g. BTC-GHS")


class UpdateRatePairRequest(BaseModel):
    """Request schema for reconfiguring a pair. Omitted fields are unchanged."""

    manual_rate: Optional[Decimal] = Field(default=None, ge=0)
    buy_margin_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    sell_margin_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    is_automated: Optional[bool] = None


class RatePairItem(BaseModel):
    """A stored pair configuration."""

    pair: str
    rate: float
    manual_rate: Optional[float]
    margin_percent: float
    buy_margin_percent: float
    sell_margin_percent: float
    is_automated: bool


class CreateAdminWalletRequest(BaseModel):
    """Request schema for adding an admin wallet."""

    chain: str = Field(..., min_length=1, max_length=64, description="e.g. Bitcoin, BANK, MOMO")
    currency: str = Field(..., pattern=ASSET_PATTERN, description="Settlement currency")
    address: str = Field(..., min_length=1, max_length=ADDRESS_MAX_LEN)
    label: Optional[str] = Field(default=None, max_length=128)


class UpdateAdminWalletRequest(BaseModel):
    """Request schema for editing an admin wallet. Omitted fields are unchanged."""

    chain: Optional[str] = Field(default=None, min_length=1, max_length=64)
    currency: Optional[str] = Field(default=None, pattern=ASSET_PATTERN)
    address: Optional[str] = Field(default=None, min_length=1, max_length=ADDRESS_MAX_LEN)
    label: Optional[str] = Field(default=None, max_length=128)
    is_active: Optional[bool] = None


class AdminWalletItem(BaseModel):
    """An admin wallet."""

    id: UUID
    chain: str
    currency: str
    address: str
    label: Optional[str]
    is_active: bool
    created_at: Optional[datetime]


class InventoryItemSchema(BaseModel):
    """Trading availability of one asset."""

    asset: str
    buy_enabled: bool
    sell_enabled: bool
    updated_at: Optional[datetime]


class UpdateInventoryRequest(BaseModel):
    """Request schema for toggling buy/sell availability."""

    buy_enabled: Optional[bool] = None
    sell_enabled: Optional[bool] = None


class SuccessResponse(BaseModel):
    """Acknowledgement for writes without a body."""

    success: str


class ErrorResponse(BaseModel):
    """Standard error response schema.

    Never exposes stack traces or internal details.
    """

    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str
    version: str

"""
Domain entities for the exchange bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

ZERO = Decimal("0")


class OrderType(Enum):
    """Direction of an order from the customer's point of view."""

    BUY = "BUY"
    SELL = "SELL"


class InputType(Enum):
    """Denomination of the amount the customer typed in."""

    CRYPTO = "CRYPTO"
    FIAT = "FIAT"


class OrderStatus(Enum):
    """Lifecycle status of an order."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class Role(Enum):
    """Platform role of a caller."""

    USER = "USER"
    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"
    FINANCE = "FINANCE"


class KycStatus(Enum):
    """Identity verification state of a caller."""

    UNVERIFIED = "UNVERIFIED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class Caller:
    """The authenticated identity behind a request.

    Supplied by the identity/session provider and passed explicitly
    into every guard; never read from ambient state.
    """

    user_id: str
    role: Role = Role.USER
    kyc_status: KycStatus = KycStatus.UNVERIFIED

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def split_pair(pair: str) -> tuple[str, str]:
    """Split ``"BASE-QUOTE"`` into its two upper-cased legs.

    A pair without a quote leg yields an empty quote.
    """
    base, _, quote = pair.partition("-")
    return base.upper(), quote.upper()


@dataclass(frozen=True)
class TradingPair:
    """A configured exchange rate row.

    ``margin_percent`` is the legacy single margin. When the explicit
    per-side margins are set they take precedence for that side.
    """

    pair: str
    rate: Decimal = ZERO
    manual_rate: Optional[Decimal] = None
    margin_percent: Decimal = ZERO
    buy_margin_percent: Optional[Decimal] = None
    sell_margin_percent: Optional[Decimal] = None
    is_automated: bool = False
    updated_at: Optional[datetime] = None

    @property
    def base(self) -> str:
        return split_pair(self.pair)[0]

    @property
    def quote(self) -> str:
        return split_pair(self.pair)[1]

    @property
    def buy_margin(self) -> Decimal:
        if self.buy_margin_percent is not None:
            return self.buy_margin_percent
        return self.margin_percent

    @property
    def sell_margin(self) -> Decimal:
        if self.sell_margin_percent is not None:
            return self.sell_margin_percent
        return self.margin_percent

    def margin_for(self, order_type: OrderType) -> Decimal:
        """Return the margin percentage applicable to ``order_type``."""
        if order_type is OrderType.BUY:
            return self.buy_margin
        return self.sell_margin


@dataclass(frozen=True)
class ResolvedRate:
    """A trading pair after live-price resolution.

    ``display_rate`` is the base market rate before margin.
    """

    pair: TradingPair
    display_rate: Decimal
    percent_change_24h: Decimal = ZERO

    @property
    def name(self) -> str:
        return self.pair.pair


@dataclass(frozen=True)
class SpotPrice:
    """A live spot price returned by the external feed."""

    feed_id: str
    currency: str
    price: Decimal
    change_24h: Decimal = ZERO


@dataclass(frozen=True)
class EffectiveRate:
    """Rate before margin, plus the margin that applies to it."""

    rate: Decimal
    margin_percent: Decimal
    source_pair: str
    bridged: bool = False


@dataclass(frozen=True)
class OrderAmounts:
    """Rounded counterpart amounts for an order."""

    crypto: Decimal
    fiat: Decimal


@dataclass(frozen=True)
class InventoryItem:
    """Trading availability for one asset."""

    asset: str
    buy_enabled: bool = True
    sell_enabled: bool = True
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdminWallet:
    """A platform-controlled deposit or payout destination."""

    chain: str
    currency: str
    address: str
    label: Optional[str] = None
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Order:
    """A customer order, immutable in its amounts once created."""

    order_number: str
    user_id: str
    type: OrderType
    asset: str
    amount_crypto: Decimal
    amount_fiat: Decimal
    fiat_currency: str
    receiving_address: str
    status: OrderStatus = OrderStatus.PENDING
    id: UUID = field(default_factory=uuid4)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderCreatedEvent:
    """Emitted after an order has been committed."""

    order_id: UUID
    order_number: str
    user_id: str
    type: OrderType
    asset: str
    amount_crypto: Decimal
    amount_fiat: Decimal
    fiat_currency: str
    occurred_at: datetime

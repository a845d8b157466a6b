"""
Port interfaces (ABCs) for the exchange bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from coindarks.domain.exchange.entities import (
    AdminWallet,
    InventoryItem,
    Order,
    OrderCreatedEvent,
    SpotPrice,
    TradingPair,
)


class TradingPairRepository(ABC):
    """Port for the configured exchange rate rows."""

    @abstractmethod
    def list_all(self) -> list[TradingPair]:
        """Return every configured pair."""
        raise NotImplementedError

    @abstractmethod
    def get(self, pair: str) -> Optional[TradingPair]:
        """Return a pair by name, or None if not configured."""
        raise NotImplementedError

    @abstractmethod
    def add(self, pair: TradingPair) -> TradingPair:
        """Insert a new pair.

        Raises:
            PairAlreadyExistsError: If the pair name is taken.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, pair: str, changes: dict[str, Any]) -> TradingPair:
        """Apply field changes to a pair and return the stored row.

        Raises:
            PairNotFoundError: If the pair is not configured.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, pair: str) -> None:
        """Remove a pair.

        Raises:
            PairNotFoundError: If the pair is not configured.
        """
        raise NotImplementedError


class PriceFeedPort(ABC):
    """Port for the external spot price API."""

    @abstractmethod
    def get_spot_prices(
        self, feed_ids: set[str], currencies: set[str]
    ) -> dict[tuple[str, str], SpotPrice]:
        """Return live prices keyed by ``(feed_id, currency)``.

        Implementations must fail open: on any transport or parsing
        problem they return whatever they could read, possibly nothing.
        """
        raise NotImplementedError


class AdminWalletRepository(ABC):
    """Port for platform deposit/payout destinations."""

    @abstractmethod
    def list_all(self) -> list[AdminWallet]:
        """Return all wallets, newest first."""
        raise NotImplementedError

    @abstractmethod
    def list_active(self, currency: str) -> list[AdminWallet]:
        """Return active wallets for a settlement currency, oldest first."""
        raise NotImplementedError

    @abstractmethod
    def add(self, wallet: AdminWallet) -> AdminWallet:
        """Insert a wallet and return the stored row."""
        raise NotImplementedError

    @abstractmethod
    def update(self, wallet_id: UUID, changes: dict[str, Any]) -> AdminWallet:
        """Apply field changes to a wallet.

        Raises:
            WalletNotFoundError: If no wallet has this id.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, wallet_id: UUID) -> None:
        """Remove a wallet.

        Raises:
            WalletNotFoundError: If no wallet has this id.
        """
        raise NotImplementedError


class InventoryRepository(ABC):
    """Port for per-asset trading availability."""

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        """Return inventory rows ordered by asset."""
        raise NotImplementedError

    @abstractmethod
    def set_flags(
        self,
        asset: str,
        buy_enabled: Optional[bool] = None,
        sell_enabled: Optional[bool] = None,
    ) -> InventoryItem:
        """Update buy/sell flags for an asset.

        Raises:
            InventoryItemNotFoundError: If the asset has no row.
        """
        raise NotImplementedError


class OrderRepository(ABC):
    """Port for order persistence."""

    @abstractmethod
    def insert(self, order: Order) -> Order:
        """Persist a new order in a single atomic write.

        Raises:
            OrderNumberConflictError: If the order number already exists.
            OrderCreationError: On any other persistence failure.
        """
        raise NotImplementedError

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Return an order by its human-readable number."""
        raise NotImplementedError


class OrderEventPublisher(ABC):
    """Port for emitting events after an order has been committed."""

    @abstractmethod
    def publish(self, event: OrderCreatedEvent) -> None:
        """Record an event for later delivery. Must not block on delivery."""
        raise NotImplementedError


class NotificationSender(ABC):
    """Port for delivering a templated message."""

    @abstractmethod
    def send(self, address: str, template: str, params: dict[str, Any]) -> None:
        """Deliver a message. Raises on failure."""
        raise NotImplementedError

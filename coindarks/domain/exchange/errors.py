"""
Domain-specific errors for the exchange bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""

from decimal import Decimal


class ExchangeDomainError(Exception):
    """Base error for all exchange domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class AuthenticationRequiredError(ExchangeDomainError):
    """Raised when a request carries no caller identity."""

    def __init__(self) -> None:
        super().__init__("Authentication required")


class PermissionDeniedError(ExchangeDomainError):
    """Raised when a non-admin caller invokes an admin operation."""

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class KycRequiredError(ExchangeDomainError):
    """Raised when a non-admin caller without approved KYC tries to trade."""

    def __init__(self, user_id: str) -> None:
        super().__init__("KYC verification required to trade")
        self.user_id = user_id


class NoRateError(ExchangeDomainError):
    """Raised when neither a direct nor a USD-quoted pair exists for an asset."""

    def __init__(self, asset: str) -> None:
        super().__init__(f"No exchange rate found for {asset}.")
        self.asset = asset


class RateUnavailableError(ExchangeDomainError):
    """Raised when the final rate is zero or negative."""

    def __init__(self, pair: str, rate: Decimal) -> None:
        super().__init__(
            f"Exchange rate unavailable for {pair}. Please try again later."
        )
        self.pair = pair
        self.rate = rate


class MinimumOrderError(ExchangeDomainError):
    """Raised when a sell order is worth less than the currency floor."""

    def __init__(self, amount: Decimal, floor: Decimal, currency: str) -> None:
        super().__init__(
            f"Minimum sell amount is {floor:,} {currency} "
            f"(order value: {amount:,.2f} {currency})."
        )
        self.amount = amount
        self.floor = floor
        self.currency = currency


class NoDestinationError(ExchangeDomainError):
    """Raised when no active admin wallet exists for the settlement currency."""

    def __init__(self, currency: str) -> None:
        super().__init__(
            f"System account not available for {currency}. Please contact support."
        )
        self.currency = currency


class OrderNumberConflictError(ExchangeDomainError):
    """Raised by the order store when a generated order number already exists."""

    def __init__(self, order_number: str) -> None:
        super().__init__(f"Order number already taken: {order_number}")
        self.order_number = order_number


class OrderCreationError(ExchangeDomainError):
    """Raised when an order cannot be persisted."""

    def __init__(self, reason: str) -> None:
        super().__init__("Failed to process order")
        self.reason = reason


class StoreUnavailableError(ExchangeDomainError):
    """Raised when the persistent store cannot be reached."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Store unavailable: {reason}")
        self.reason = reason


class InvalidPairError(ExchangeDomainError):
    """Raised when a pair name is not of the form BASE-QUOTE."""

    def __init__(self, pair: str) -> None:
        super().__init__(f"Invalid pair: {pair}")
        self.pair = pair


class PairAlreadyExistsError(ExchangeDomainError):
    """Raised when creating a pair that is already configured."""

    def __init__(self, pair: str) -> None:
        super().__init__("Pair already exists")
        self.pair = pair


class PairNotFoundError(ExchangeDomainError):
    """Raised when a pair is not configured."""

    def __init__(self, pair: str) -> None:
        super().__init__(f"Pair not found: {pair}")
        self.pair = pair


class WalletNotFoundError(ExchangeDomainError):
    """Raised when an admin wallet cannot be found."""

    def __init__(self, wallet_id: str) -> None:
        super().__init__(f"Wallet not found: {wallet_id}")
        self.wallet_id = wallet_id


class InventoryItemNotFoundError(ExchangeDomainError):
    """Raised when an asset has no inventory row."""

    def __init__(self, asset: str) -> None:
        super().__init__(f"Inventory not found for {asset}")
        self.asset = asset

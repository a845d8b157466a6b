"""
Tests for the exchange application layer (use cases).

Tests use cases with in-memory fakes for every port. No real
infrastructure needed.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import pytest

from coindarks.application.exchange.create_order import CreateOrderUseCase
from coindarks.application.exchange.dtos import (
    CreateAdminWalletCommand,
    CreateOrderCommand,
    CreateRatePairCommand,
    DeleteRatePairCommand,
    UpdateAdminWalletCommand,
    UpdateInventoryCommand,
    UpdateRatePairCommand,
)
from coindarks.application.exchange.get_exchange_rates import GetExchangeRatesUseCase
from coindarks.application.exchange.manage_admin_wallets import (
    CreateAdminWalletUseCase,
    ListAdminWalletsUseCase,
    UpdateAdminWalletUseCase,
)
from coindarks.application.exchange.manage_inventory import UpdateInventoryUseCase
from coindarks.application.exchange.manage_rate_pairs import (
    CreateRatePairUseCase,
    DeleteRatePairUseCase,
    UpdateRatePairUseCase,
)
from coindarks.domain.exchange.entities import (
    AdminWallet,
    Caller,
    InputType,
    InventoryItem,
    KycStatus,
    Order,
    OrderType,
    Role,
    SpotPrice,
    TradingPair,
)
from coindarks.domain.exchange.errors import (
    InvalidPairError,
    KycRequiredError,
    MinimumOrderError,
    NoDestinationError,
    NoRateError,
    OrderCreationError,
    OrderNumberConflictError,
    PermissionDeniedError,
    RateUnavailableError,
    StoreUnavailableError,
)
from coindarks.domain.exchange.order_guard import OrderGuard
from coindarks.domain.exchange.rate_bridger import RateBridger
from coindarks.domain.exchange.rate_resolver import RateResolver

USER = Caller("user-1", Role.USER, KycStatus.APPROVED)
UNVERIFIED = Caller("user-2", Role.USER, KycStatus.PENDING)
ADMIN = Caller("admin-1", Role.ADMIN, KycStatus.UNVERIFIED)


# ── Fakes ────────────────────────────────────────────────────────


class FakePairRepository:
    def __init__(self, pairs: Optional[list[TradingPair]] = None) -> None:
        self.pairs = {p.pair: p for p in pairs or []}

    def list_all(self) -> list[TradingPair]:
        return [self.pairs[k] for k in sorted(self.pairs)]

    def get(self, pair: str) -> Optional[TradingPair]:
        return self.pairs.get(pair)

    def add(self, pair: TradingPair) -> TradingPair:
        self.pairs[pair.pair] = pair
        return pair

    def update(self, pair: str, changes: dict[str, Any]) -> TradingPair:
        self.pairs[pair] = replace(self.pairs[pair], **changes)
        return self.pairs[pair]

    def delete(self, pair: str) -> None:
        del self.pairs[pair]


class CountingPriceFeed:
    def __init__(self, prices: Optional[dict] = None) -> None:
        self.calls = 0
        self.prices = prices or {}

    def get_spot_prices(self, feed_ids, currencies):
        self.calls += 1
        return dict(self.prices)


class FakeWalletRepository:
    def __init__(self, wallets: Optional[list[AdminWallet]] = None) -> None:
        self.wallets = list(wallets or [])
        self.failures_left = 0

    def list_all(self) -> list[AdminWallet]:
        if self.failures_left:
            self.failures_left -= 1
            raise StoreUnavailableError("OperationalError")
        return list(reversed(self.wallets))

    def list_active(self, currency: str) -> list[AdminWallet]:
        return [w for w in self.wallets if w.currency == currency and w.is_active]

    def add(self, wallet: AdminWallet) -> AdminWallet:
        self.wallets.append(wallet)
        return wallet

    def update(self, wallet_id: UUID, changes: dict[str, Any]) -> AdminWallet:
        for i, wallet in enumerate(self.wallets):
            if wallet.id == wallet_id:
                self.wallets[i] = replace(wallet, **changes)
                return self.wallets[i]
        raise AssertionError("unknown wallet")

    def delete(self, wallet_id: UUID) -> None:
        self.wallets = [w for w in self.wallets if w.id != wallet_id]


class FakeOrderRepository:
    def __init__(self, conflicts: int = 0) -> None:
        self.orders: list[Order] = []
        self.attempted_numbers: list[str] = []
        self.conflicts = conflicts

    def insert(self, order: Order) -> Order:
        self.attempted_numbers.append(order.order_number)
        if self.conflicts:
            self.conflicts -= 1
            raise OrderNumberConflictError(order.order_number)
        self.orders.append(order)
        return order

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return next((o for o in self.orders if o.order_number == order_number), None)


class RecordingPublisher:
    def __init__(self, fail: bool = False) -> None:
        self.events: list = []
        self.fail = fail

    def publish(self, event) -> None:
        if self.fail:
            raise RuntimeError("broker down")
        self.events.append(event)


class FakeInventoryRepository:
    def __init__(self, items: list[InventoryItem]) -> None:
        self.items = {i.asset: i for i in items}

    def list_all(self) -> list[InventoryItem]:
        return [self.items[k] for k in sorted(self.items)]

    def set_flags(self, asset, buy_enabled=None, sell_enabled=None) -> InventoryItem:
        item = self.items[asset]
        if buy_enabled is not None:
            item = replace(item, buy_enabled=buy_enabled)
        if sell_enabled is not None:
            item = replace(item, sell_enabled=sell_enabled)
        self.items[asset] = item
        return item


# ── Helpers ──────────────────────────────────────────────────────


def default_pairs() -> list[TradingPair]:
    return [
        TradingPair(
            pair="BTC-USD",
            rate=Decimal("60000"),
            buy_margin_percent=Decimal("2"),
            sell_margin_percent=Decimal("2"),
        ),
        TradingPair(pair="USDT-GHS", rate=Decimal("15")),
        TradingPair(
            pair="USDT-NGN",
            rate=Decimal("1400"),
            manual_rate=Decimal("1500"),
            sell_margin_percent=Decimal("1"),
        ),
    ]


def default_wallets() -> list[AdminWallet]:
    return [
        AdminWallet(chain="MOMO", currency="GHS", address="0550000000"),
        AdminWallet(chain="Tron", currency="USDT", address="TXyz"),
    ]


def build_use_case(
    pairs: Optional[list[TradingPair]] = None,
    wallets: Optional[list[AdminWallet]] = None,
    order_repo: Optional[FakeOrderRepository] = None,
    publisher: Optional[RecordingPublisher] = None,
    feed: Optional[CountingPriceFeed] = None,
) -> CreateOrderUseCase:
    return CreateOrderUseCase(
        rate_resolver=RateResolver(
            FakePairRepository(default_pairs() if pairs is None else pairs),
            feed or CountingPriceFeed(),
        ),
        rate_bridger=RateBridger({"GHS": Decimal("16.5"), "NGN": Decimal("1650")}),
        order_guard=OrderGuard(
            FakeWalletRepository(default_wallets() if wallets is None else wallets),
            {"GHS": Decimal("100"), "NGN": Decimal("15000")},
        ),
        order_repo=order_repo or FakeOrderRepository(),
        event_publisher=publisher or RecordingPublisher(),
    )


def order_command(**overrides) -> CreateOrderCommand:
    values = dict(
        caller=USER,
        type=OrderType.BUY,
        asset="BTC",
        amount_input=Decimal("0.01"),
        input_type=InputType.CRYPTO,
        fiat_currency="GHS",
        receiving_address="bc1qcustomer",
    )
    values.update(overrides)
    return CreateOrderCommand(**values)


# ── Tests ────────────────────────────────────────────────────────


class TestCreateOrderUseCase:
    """Tests for the CreateOrderUseCase."""

    def test_buy_bridged_through_usdt(self) -> None:
        """BUY 0.01 BTC priced via BTC-USD x USDT-GHS with a 2% margin."""
        order_repo = FakeOrderRepository()
        result = build_use_case(order_repo=order_repo).execute(order_command())

        assert result.final_rate == Decimal("918000")
        assert result.amount_fiat == Decimal("9180.00")
        assert result.amount_crypto == Decimal("0.01000000")
        assert result.deposit_address == "0550000000"
        [stored] = order_repo.orders
        assert stored.order_number == result.order_number
        assert stored.id == result.order_id
        assert stored.status.value == "PENDING"

    def test_sell_fiat_input_on_direct_pair(self) -> None:
        """SELL for 20000 NGN on USDT-NGN manual 1500 with a 1% margin."""
        wallets = default_wallets()
        result = build_use_case(wallets=wallets).execute(
            order_command(
                type=OrderType.SELL,
                asset="USDT",
                amount_input=Decimal("20000"),
                input_type=InputType.FIAT,
                fiat_currency="NGN",
            )
        )

        assert result.final_rate == Decimal("1485")
        assert result.amount_fiat == Decimal("20000.00")
        assert result.amount_crypto == Decimal("13.46801347")
        assert result.deposit_address == "TXyz"

    def test_kyc_checked_before_rates(self) -> None:
        feed = CountingPriceFeed()
        use_case = build_use_case(feed=feed)

        with pytest.raises(KycRequiredError):
            use_case.execute(order_command(caller=UNVERIFIED))
        assert feed.calls == 0

    def test_admin_trades_without_kyc(self) -> None:
        result = build_use_case().execute(order_command(caller=ADMIN))
        assert result.amount_fiat == Decimal("9180.00")

    def test_unknown_asset_raises_no_rate(self) -> None:
        with pytest.raises(NoRateError):
            build_use_case().execute(order_command(asset="XLM"))

    def test_zero_rate_raises_and_persists_nothing(self) -> None:
        order_repo = FakeOrderRepository()
        pairs = [TradingPair(pair="BTC-USD", rate=Decimal("0"))]

        with pytest.raises(RateUnavailableError):
            build_use_case(pairs=pairs, order_repo=order_repo).execute(order_command())
        assert order_repo.attempted_numbers == []

    def test_sell_below_minimum_persists_nothing(self) -> None:
        order_repo = FakeOrderRepository()
        wallets = default_wallets() + [
            AdminWallet(chain="Bitcoin", currency="BTC", address="bc1platform")
        ]

        with pytest.raises(MinimumOrderError):
            build_use_case(wallets=wallets, order_repo=order_repo).execute(
                order_command(type=OrderType.SELL, amount_input=Decimal("0.00001"))
            )
        assert order_repo.orders == []

    def test_missing_destination_persists_nothing(self) -> None:
        order_repo = FakeOrderRepository()

        with pytest.raises(NoDestinationError):
            build_use_case(wallets=[], order_repo=order_repo).execute(order_command())
        assert order_repo.orders == []

    def test_order_number_collision_regenerates(self) -> None:
        order_repo = FakeOrderRepository(conflicts=2)

        result = build_use_case(order_repo=order_repo).execute(order_command())

        assert len(order_repo.attempted_numbers) == 3
        assert order_repo.orders[0].order_number == result.order_number

    def test_order_number_collisions_exhausted(self) -> None:
        order_repo = FakeOrderRepository(conflicts=5)

        with pytest.raises(OrderCreationError) as exc_info:
            build_use_case(order_repo=order_repo).execute(order_command())
        assert exc_info.value.message == "Failed to process order"
        assert order_repo.orders == []

    def test_event_published_after_insert(self) -> None:
        publisher = RecordingPublisher()

        result = build_use_case(publisher=publisher).execute(order_command())

        [event] = publisher.events
        assert event.order_number == result.order_number
        assert event.amount_fiat == Decimal("9180.00")

    def test_publisher_failure_does_not_fail_order(self) -> None:
        order_repo = FakeOrderRepository()

        result = build_use_case(
            order_repo=order_repo, publisher=RecordingPublisher(fail=True)
        ).execute(order_command())

        assert order_repo.orders[0].order_number == result.order_number


class TestGetExchangeRatesUseCase:
    """Tests for the GetExchangeRatesUseCase."""

    def test_rates_carry_side_margins(self) -> None:
        resolver = RateResolver(FakePairRepository(default_pairs()), CountingPriceFeed())

        results = {r.pair: r for r in GetExchangeRatesUseCase(resolver).execute()}

        assert results["USDT-NGN"].display_rate == Decimal("1500")
        assert results["USDT-NGN"].rate == Decimal("1500")
        assert results["USDT-NGN"].sell_margin_percent == Decimal("1")
        assert results["USDT-NGN"].buy_margin_percent == Decimal("0")
        assert results["BTC-USD"].percent_change_24h == Decimal("0")

    def test_rate_reports_live_price_for_automated_pair(self) -> None:
        pairs = [TradingPair(pair="BTC-GHS", rate=Decimal("0"), is_automated=True)]
        feed = CountingPriceFeed(
            {("bitcoin", "ghs"): SpotPrice("bitcoin", "ghs", Decimal("950000"), Decimal("2.5"))}
        )
        resolver = RateResolver(FakePairRepository(pairs), feed)

        [result] = GetExchangeRatesUseCase(resolver).execute()

        assert result.rate == Decimal("950000")
        assert result.display_rate == Decimal("950000")
        assert result.percent_change_24h == Decimal("2.5")


class TestManageRatePairs:
    """Tests for rate pair administration."""

    def test_create_defaults(self) -> None:
        repo = FakePairRepository()

        pair = CreateRatePairUseCase(repo).execute(
            CreateRatePairCommand(caller=ADMIN, pair=" sol-ghs ")
        )

        assert pair.pair == "SOL-GHS"
        assert pair.is_automated is True
        assert pair.buy_margin == Decimal("2")
        assert pair.sell_margin == Decimal("2")

    def test_create_requires_admin(self) -> None:
        with pytest.raises(PermissionDeniedError):
            CreateRatePairUseCase(FakePairRepository()).execute(
                CreateRatePairCommand(caller=USER, pair="SOL-GHS")
            )

    def test_create_rejects_malformed_pair(self) -> None:
        with pytest.raises(InvalidPairError):
            CreateRatePairUseCase(FakePairRepository()).execute(
                CreateRatePairCommand(caller=ADMIN, pair="SOLGHS")
            )

    def test_update_only_given_fields(self) -> None:
        repo = FakePairRepository(default_pairs())

        pair = UpdateRatePairUseCase(repo).execute(
            UpdateRatePairCommand(
                caller=ADMIN, pair="USDT-NGN", buy_margin_percent=Decimal("1.5")
            )
        )

        assert pair.buy_margin == Decimal("1.5")
        assert pair.manual_rate == Decimal("1500")
        assert pair.sell_margin == Decimal("1")

    def test_delete(self) -> None:
        repo = FakePairRepository(default_pairs())

        DeleteRatePairUseCase(repo).execute(
            DeleteRatePairCommand(caller=ADMIN, pair="usdt-ghs")
        )

        assert "USDT-GHS" not in repo.pairs


class TestManageAdminWallets:
    """Tests for admin wallet administration."""

    def test_list_retries_transient_store_errors(self) -> None:
        repo = FakeWalletRepository(default_wallets())
        repo.failures_left = 2

        results = ListAdminWalletsUseCase(repo, attempts=3, backoff_seconds=0).execute(ADMIN)

        assert [r.currency for r in results] == ["USDT", "GHS"]

    def test_list_gives_up_after_attempts(self) -> None:
        repo = FakeWalletRepository(default_wallets())
        repo.failures_left = 3

        with pytest.raises(StoreUnavailableError):
            ListAdminWalletsUseCase(repo, attempts=3, backoff_seconds=0).execute(ADMIN)

    def test_list_requires_admin(self) -> None:
        with pytest.raises(PermissionDeniedError):
            ListAdminWalletsUseCase(FakeWalletRepository()).execute(USER)

    def test_create_normalizes_currency(self) -> None:
        repo = FakeWalletRepository()

        result = CreateAdminWalletUseCase(repo).execute(
            CreateAdminWalletCommand(
                caller=ADMIN, chain="Bitcoin", currency="btc", address=" bc1x "
            )
        )

        assert result.currency == "BTC"
        assert result.address == "bc1x"
        assert result.is_active is True

    def test_update_deactivates(self) -> None:
        wallet = AdminWallet(chain="MOMO", currency="GHS", address="055", id=uuid4())
        repo = FakeWalletRepository([wallet])

        result = UpdateAdminWalletUseCase(repo).execute(
            UpdateAdminWalletCommand(caller=ADMIN, wallet_id=wallet.id, is_active=False)
        )

        assert result.is_active is False
        assert repo.list_active("GHS") == []


class TestManageInventory:
    """Tests for inventory toggles."""

    def test_toggle_sell(self) -> None:
        repo = FakeInventoryRepository([InventoryItem(asset="BTC")])

        result = UpdateInventoryUseCase(repo).execute(
            UpdateInventoryCommand(caller=ADMIN, asset="btc", sell_enabled=False)
        )

        assert result.buy_enabled is True
        assert result.sell_enabled is False

    def test_toggle_requires_admin(self) -> None:
        repo = FakeInventoryRepository([InventoryItem(asset="BTC")])

        with pytest.raises(PermissionDeniedError):
            UpdateInventoryUseCase(repo).execute(
                UpdateInventoryCommand(caller=USER, asset="BTC", buy_enabled=False)
            )

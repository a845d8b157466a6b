"""
Tests for the exchange domain layer.

Tests rate resolution, bridging, margin, pricing and order guards in
isolation with in-memory fakes. No database or network.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from coindarks.domain.exchange.entities import (
    AdminWallet,
    Caller,
    InputType,
    KycStatus,
    OrderType,
    ResolvedRate,
    Role,
    SpotPrice,
    TradingPair,
)
from coindarks.domain.exchange.errors import (
    KycRequiredError,
    MinimumOrderError,
    NoDestinationError,
    NoRateError,
    RateUnavailableError,
)
from coindarks.domain.exchange.margin import apply_margin
from coindarks.domain.exchange.order_guard import OrderGuard
from coindarks.domain.exchange.order_numbers import (
    ORDER_NUMBER_ALPHABET,
    generate_order_number,
)
from coindarks.domain.exchange.pricing import compute_amounts
from coindarks.domain.exchange.rate_bridger import RateBridger
from coindarks.domain.exchange.rate_resolver import RateResolver, fallback_rate


class FakePairRepository:
    def __init__(self, pairs: list[TradingPair]) -> None:
        self.pairs = pairs

    def list_all(self) -> list[TradingPair]:
        return list(self.pairs)


class FakePriceFeed:
    def __init__(self, prices: dict[tuple[str, str], SpotPrice] | None = None) -> None:
        self.prices = prices or {}
        self.calls: list[tuple[set[str], set[str]]] = []

    def get_spot_prices(self, feed_ids, currencies):
        self.calls.append((set(feed_ids), set(currencies)))
        return dict(self.prices)


class FakeWalletRepository:
    def __init__(self, wallets: list[AdminWallet] | None = None) -> None:
        self.wallets = wallets or []

    def list_active(self, currency: str) -> list[AdminWallet]:
        return [w for w in self.wallets if w.currency == currency and w.is_active]


def resolved(pair: str, display_rate: str, **kwargs) -> ResolvedRate:
    return ResolvedRate(
        pair=TradingPair(pair=pair, rate=Decimal(display_rate), **kwargs),
        display_rate=Decimal(display_rate),
    )


def spot(feed_id: str, currency: str, price: str, change: str = "0") -> SpotPrice:
    return SpotPrice(
        feed_id=feed_id,
        currency=currency,
        price=Decimal(price),
        change_24h=Decimal(change),
    )


class TestTradingPair:
    """Tests for TradingPair margin selection."""

    def test_side_margins_take_precedence(self) -> None:
        pair = TradingPair(
            pair="BTC-GHS",
            margin_percent=Decimal("5"),
            buy_margin_percent=Decimal("2"),
            sell_margin_percent=Decimal("1"),
        )
        assert pair.margin_for(OrderType.BUY) == Decimal("2")
        assert pair.margin_for(OrderType.SELL) == Decimal("1")

    def test_legacy_margin_used_when_side_unset(self) -> None:
        pair = TradingPair(pair="BTC-GHS", margin_percent=Decimal("3"))
        assert pair.margin_for(OrderType.BUY) == Decimal("3")
        assert pair.margin_for(OrderType.SELL) == Decimal("3")

    def test_base_and_quote(self) -> None:
        pair = TradingPair(pair="usdt-ngn")
        assert pair.base == "USDT"
        assert pair.quote == "NGN"


class TestRateResolver:
    """Tests for live/fallback rate resolution."""

    def test_no_pairs_skips_feed(self) -> None:
        feed = FakePriceFeed()
        resolver = RateResolver(FakePairRepository([]), feed)

        assert resolver.load_rates() == []
        assert feed.calls == []

    def test_automated_pair_uses_live_price(self) -> None:
        pairs = [TradingPair(pair="BTC-USD", rate=Decimal("50000"), is_automated=True)]
        feed = FakePriceFeed({("bitcoin", "usd"): spot("bitcoin", "usd", "61000", "2.5")})

        [rate] = RateResolver(FakePairRepository(pairs), feed).load_rates()

        assert rate.display_rate == Decimal("61000")
        assert rate.percent_change_24h == Decimal("2.5")

    def test_manual_pair_ignores_live_price(self) -> None:
        pairs = [
            TradingPair(
                pair="BTC-USD",
                rate=Decimal("50000"),
                manual_rate=Decimal("55000"),
                is_automated=False,
            )
        ]
        feed = FakePriceFeed({("bitcoin", "usd"): spot("bitcoin", "usd", "61000")})

        [rate] = RateResolver(FakePairRepository(pairs), feed).load_rates()

        assert rate.display_rate == Decimal("55000")

    def test_feed_failure_falls_back_to_stored_rate(self) -> None:
        pairs = [TradingPair(pair="ETH-USD", rate=Decimal("3000"), is_automated=True)]
        feed = FakePriceFeed({})

        [rate] = RateResolver(FakePairRepository(pairs), feed).load_rates()

        assert rate.display_rate == Decimal("3000")
        assert rate.percent_change_24h == Decimal("0")

    def test_zero_live_price_falls_back(self) -> None:
        pairs = [TradingPair(pair="ETH-USD", rate=Decimal("3000"), is_automated=True)]
        feed = FakePriceFeed({("ethereum", "usd"): spot("ethereum", "usd", "0")})

        [rate] = RateResolver(FakePairRepository(pairs), feed).load_rates()

        assert rate.display_rate == Decimal("3000")

    def test_single_batched_feed_request(self) -> None:
        pairs = [
            TradingPair(pair="BTC-USD", is_automated=True),
            TradingPair(pair="ETH-GHS", is_automated=True),
            TradingPair(pair="DOGE-USD", rate=Decimal("0.1")),
        ]
        feed = FakePriceFeed()

        RateResolver(FakePairRepository(pairs), feed).load_rates()

        assert feed.calls == [({"bitcoin", "ethereum"}, {"usd", "ghs"})]

    def test_unsupported_assets_only_skips_feed(self) -> None:
        pairs = [TradingPair(pair="DOGE-USD", rate=Decimal("0.1"), is_automated=True)]
        feed = FakePriceFeed()

        [rate] = RateResolver(FakePairRepository(pairs), feed).load_rates()

        assert feed.calls == []
        assert rate.display_rate == Decimal("0.1")

    def test_fallback_rate_order(self) -> None:
        assert fallback_rate(TradingPair(pair="A-B", rate=Decimal("2"), manual_rate=Decimal("3"))) == Decimal("3")
        assert fallback_rate(TradingPair(pair="A-B", rate=Decimal("2"), manual_rate=Decimal("0"))) == Decimal("2")
        assert fallback_rate(TradingPair(pair="A-B")) == Decimal("0")


class TestRateBridger:
    """Tests for direct and USD-bridged effective rates."""

    def test_direct_pair_wins(self) -> None:
        rates = [
            resolved("BTC-GHS", "950000", buy_margin_percent=Decimal("3")),
            resolved("BTC-USD", "60000"),
            resolved("USDT-GHS", "15"),
        ]

        effective = RateBridger().resolve_effective_rate("BTC", "GHS", OrderType.BUY, rates)

        assert effective.rate == Decimal("950000")
        assert effective.margin_percent == Decimal("3")
        assert effective.bridged is False

    def test_bridges_through_usdt(self) -> None:
        rates = [
            resolved("BTC-USD", "60000", buy_margin_percent=Decimal("2")),
            resolved("USDT-GHS", "15"),
            resolved("USD-GHS", "14"),
        ]

        effective = RateBridger().resolve_effective_rate("BTC", "GHS", OrderType.BUY, rates)

        assert effective.rate == Decimal("900000")
        assert effective.margin_percent == Decimal("2")
        assert effective.source_pair == "BTC-USD"
        assert effective.bridged is True

    def test_bridge_prefers_usdc_over_usd(self) -> None:
        rates = [
            resolved("ETH-USDT", "3000"),
            resolved("USDC-NGN", "1600"),
            resolved("USD-NGN", "1500"),
        ]

        effective = RateBridger().resolve_effective_rate("ETH", "NGN", OrderType.SELL, rates)

        assert effective.rate == Decimal("4800000")

    def test_zero_direct_pair_falls_through_to_bridge(self) -> None:
        rates = [
            resolved("BTC-GHS", "0"),
            resolved("BTC-USD", "60000"),
            resolved("USDT-GHS", "15"),
        ]

        effective = RateBridger().resolve_effective_rate("BTC", "GHS", OrderType.BUY, rates)

        assert effective.rate == Decimal("900000")

    def test_fallback_constant_when_no_bridge_pair(self) -> None:
        rates = [resolved("BTC-USD", "60000")]
        bridger = RateBridger({"GHS": Decimal("16.5")})

        effective = bridger.resolve_effective_rate("BTC", "GHS", OrderType.BUY, rates)

        assert effective.rate == Decimal("990000.0")

    def test_neutral_multiplier_for_unknown_currency(self) -> None:
        rates = [resolved("BTC-USD", "60000")]

        effective = RateBridger().resolve_effective_rate("BTC", "KES", OrderType.BUY, rates)

        assert effective.rate == Decimal("60000")

    def test_no_usd_pair_raises(self) -> None:
        with pytest.raises(NoRateError) as exc_info:
            RateBridger().resolve_effective_rate(
                "XLM", "GHS", OrderType.BUY, [resolved("USDT-GHS", "15")]
            )
        assert exc_info.value.message == "No exchange rate found for XLM."


class TestApplyMargin:
    """Tests for margin application."""

    def test_buy_adds_margin(self) -> None:
        assert apply_margin(Decimal("900000"), Decimal("2"), OrderType.BUY) == Decimal("918000.00")

    def test_sell_subtracts_margin(self) -> None:
        assert apply_margin(Decimal("1500"), Decimal("1"), OrderType.SELL) == Decimal("1485.00")

    def test_sell_margin_of_hundred_is_not_clamped(self) -> None:
        assert apply_margin(Decimal("1500"), Decimal("100"), OrderType.SELL) == 0


class TestComputeAmounts:
    """Tests for order amount computation and rounding."""

    def test_crypto_input(self) -> None:
        amounts = compute_amounts(Decimal("0.01"), InputType.CRYPTO, Decimal("918000"))
        assert amounts.crypto == Decimal("0.01000000")
        assert amounts.fiat == Decimal("9180.00")

    def test_fiat_input(self) -> None:
        amounts = compute_amounts(Decimal("20000"), InputType.FIAT, Decimal("1485"))
        assert amounts.fiat == Decimal("20000.00")
        assert amounts.crypto == Decimal("13.46801347")

    def test_half_up_on_decimal_representation(self) -> None:
        amounts = compute_amounts("1.005", InputType.FIAT, Decimal("1"))
        assert amounts.fiat == Decimal("1.01")

    def test_float_input_uses_shortest_text(self) -> None:
        amounts = compute_amounts(0.1, InputType.CRYPTO, Decimal("3"))
        assert amounts.fiat == Decimal("0.30")

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-5")])
    def test_non_positive_rate_rejected(self, rate: Decimal) -> None:
        with pytest.raises(RateUnavailableError):
            compute_amounts(Decimal("1"), InputType.CRYPTO, rate, pair="BTC-GHS")


class TestOrderGuard:
    """Tests for KYC, minimum and destination checks."""

    def test_kyc_approved_passes(self) -> None:
        guard = OrderGuard(FakeWalletRepository())
        guard.check_kyc(Caller("u1", Role.USER, KycStatus.APPROVED))

    @pytest.mark.parametrize(
        "status", [KycStatus.UNVERIFIED, KycStatus.PENDING, KycStatus.REJECTED]
    )
    def test_kyc_not_approved_rejected(self, status: KycStatus) -> None:
        guard = OrderGuard(FakeWalletRepository())
        with pytest.raises(KycRequiredError):
            guard.check_kyc(Caller("u1", Role.USER, status))

    def test_admin_exempt_from_kyc(self) -> None:
        guard = OrderGuard(FakeWalletRepository())
        guard.check_kyc(Caller("admin", Role.ADMIN, KycStatus.UNVERIFIED))

    def test_sell_below_minimum_rejected(self) -> None:
        guard = OrderGuard(FakeWalletRepository(), {"GHS": Decimal("100")})
        with pytest.raises(MinimumOrderError) as exc_info:
            guard.check_minimum(OrderType.SELL, Decimal("99.99"), "ghs")
        assert exc_info.value.message == (
            "Minimum sell amount is 100 GHS (order value: 99.99 GHS)."
        )

    def test_sell_at_floor_accepted(self) -> None:
        guard = OrderGuard(FakeWalletRepository(), {"GHS": Decimal("100")})
        guard.check_minimum(OrderType.SELL, Decimal("100.00"), "GHS")

    def test_buy_has_no_minimum(self) -> None:
        guard = OrderGuard(FakeWalletRepository(), {"GHS": Decimal("100")})
        guard.check_minimum(OrderType.BUY, Decimal("1.00"), "GHS")

    def test_unlisted_currency_has_no_minimum(self) -> None:
        guard = OrderGuard(FakeWalletRepository(), {"GHS": Decimal("100")})
        guard.check_minimum(OrderType.SELL, Decimal("1.00"), "KES")

    def test_sell_destination_is_asset_wallet(self) -> None:
        wallets = [
            AdminWallet(chain="Bitcoin", currency="BTC", address="bc1-first"),
            AdminWallet(chain="Bitcoin", currency="BTC", address="bc1-second"),
            AdminWallet(chain="MOMO", currency="GHS", address="0550000000"),
        ]
        guard = OrderGuard(FakeWalletRepository(wallets))

        assert guard.resolve_destination(OrderType.SELL, "btc", "GHS") == "bc1-first\nbc1-second"

    def test_buy_destination_is_fiat_wallet(self) -> None:
        wallets = [
            AdminWallet(chain="Bitcoin", currency="BTC", address="bc1-first"),
            AdminWallet(chain="MOMO", currency="GHS", address="0550000000"),
        ]
        guard = OrderGuard(FakeWalletRepository(wallets))

        assert guard.resolve_destination(OrderType.BUY, "BTC", "GHS") == "0550000000"

    def test_inactive_wallets_ignored(self) -> None:
        wallets = [AdminWallet(chain="MOMO", currency="GHS", address="x", is_active=False)]
        guard = OrderGuard(FakeWalletRepository(wallets))

        with pytest.raises(NoDestinationError) as exc_info:
            guard.resolve_destination(OrderType.BUY, "BTC", "GHS")
        assert exc_info.value.message == (
            "System account not available for GHS. Please contact support."
        )


class TestOrderNumbers:
    """Tests for order number generation."""

    def test_format(self) -> None:
        number = generate_order_number("CD", datetime(2024, 1, 5, tzinfo=timezone.utc))
        assert re.fullmatch(r"CD-240105-[A-Z1-9]{6}", number)
        assert all(c in ORDER_NUMBER_ALPHABET for c in number.split("-")[2])

    def test_alphabet_has_no_lookalikes(self) -> None:
        assert "0" not in ORDER_NUMBER_ALPHABET
        assert "O" not in ORDER_NUMBER_ALPHABET
        assert "I" not in ORDER_NUMBER_ALPHABET


class TestPricingProperties:
    """Properties that hold across the margin and pricing components."""

    @pytest.mark.parametrize(
        "crypto, rate",
        [
            ("0.01", "918000"),
            ("13.46801347", "1485"),
            ("0.00012345", "60123.45"),
            ("250", "16.34"),
        ],
    )
    def test_repeated_conversions_do_not_drift(self, crypto: str, rate: str) -> None:
        final_rate = Decimal(rate)
        first = compute_amounts(Decimal(crypto), InputType.CRYPTO, final_rate)

        amounts = first
        for _ in range(5):
            back = compute_amounts(amounts.fiat, InputType.FIAT, final_rate)
            amounts = compute_amounts(back.crypto, InputType.CRYPTO, final_rate)

        assert abs(amounts.fiat - first.fiat) <= Decimal("0.01")

    def test_margin_is_monotonic(self) -> None:
        margins = [Decimal(m) for m in ("0", "0.5", "1", "2", "5", "12.5")]
        effective = Decimal("900000")

        buys = [apply_margin(effective, m, OrderType.BUY) for m in margins]
        sells = [apply_margin(effective, m, OrderType.SELL) for m in margins]

        assert buys == sorted(set(buys))
        assert sells == sorted(set(sells), reverse=True)

    @pytest.mark.parametrize(
        "currency, expected",
        [("GHS", Decimal("16.5")), ("NGN", Decimal("1650")), ("KES", Decimal("1"))],
    )
    def test_bridge_fallback_constants(self, currency: str, expected: Decimal) -> None:
        bridger = RateBridger({"GHS": Decimal("16.5"), "NGN": Decimal("1650")})

        assert bridger.bridge_multiplier(currency, {}) == expected

# tests/services/test_change_points.py
"""
Tests for change-point collection.

Test Coverage:
- ChangePointCollector: bucketing, ordering, held assets, consumption
- collect_change_points: balances, prices, FX, account filtering
"""

from datetime import date, datetime, timezone

import pytest

from worthline.models import AccountConfig, CryptoAsset, CurrencyAsset, EquityAsset, PriceKind
from worthline.services.asset_identity import AssetId
from worthline.services.exceptions import AccountNotFoundError, ValidationError
from worthline.services.history import (
    BalanceTrigger,
    ChangePointCollector,
    CollectOptions,
    FxRateTrigger,
    PriceTrigger,
    collect_change_points,
)

USD = CurrencyAsset("USD")
EUR = CurrencyAsset("EUR")
AAPL = EquityAsset("AAPL")


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# =============================================================================
# COLLECTOR
# =============================================================================

class TestChangePointCollector:
    """Tests for ChangePointCollector."""

    def test_one_point_per_timestamp(self):
        collector = ChangePointCollector()
        t1, t2 = _utc(2024, 1, 2), _utc(2024, 1, 1)
        collector.add_balance_change(t1, "a1", USD)
        collector.add_balance_change(t2, "a1", USD)
        collector.add_balance_change(t1, "a2", EUR)

        points = collector.into_change_points()

        assert [p.timestamp for p in points] == [t2, t1]
        assert points[1].triggers == (BalanceTrigger("a1", USD), BalanceTrigger("a2", EUR))

    def test_price_triggers_ordered_by_asset_id(self):
        collector = ChangePointCollector()
        t = _utc(2024, 1, 1, 23, 59, 59)
        collector.add_balance_change(t, "a1", USD)
        collector.add_price_change(t, AssetId("equity/MSFT"))
        collector.add_price_change(t, AssetId("crypto/BTC"))

        (point,) = collector.into_change_points()

        assert point.triggers == (
            BalanceTrigger("a1", USD),
            PriceTrigger(AssetId("crypto/BTC")),
            PriceTrigger(AssetId("equity/MSFT")),
        )

    def test_repeated_triggers_are_all_kept(self):
        """Equal triggers at one instant are appended, never merged."""
        collector = ChangePointCollector()
        t = _utc(2024, 1, 1, 23, 59, 59)
        collector.add_price_change(t, AssetId("equity/AAPL"))
        collector.add_fx_change(t, "EUR", "USD")
        collector.add_price_change(t, AssetId("equity/AAPL"))
        collector.add_fx_change(t, "EUR", "USD")

        (point,) = collector.into_change_points()

        assert point.triggers == (
            PriceTrigger(AssetId("equity/AAPL")),
            FxRateTrigger("EUR", "USD"),
            PriceTrigger(AssetId("equity/AAPL")),
            FxRateTrigger("EUR", "USD"),
        )

    def test_held_assets(self):
        collector = ChangePointCollector()
        collector.add_balance_change(_utc(2024, 1, 1), "a1", CurrencyAsset(" usd"))
        collector.add_balance_change(_utc(2024, 1, 2), "a2", AAPL)
        collector.add_price_change(_utc(2024, 1, 3), AssetId("crypto/BTC"))

        assert collector.held_assets() == {AssetId("currency/USD"), AssetId("equity/AAPL")}

    def test_consumed_once(self):
        collector = ChangePointCollector()
        collector.into_change_points()

        with pytest.raises(RuntimeError):
            collector.into_change_points()
        with pytest.raises(RuntimeError):
            collector.add_balance_change(_utc(2024, 1, 1), "a1", USD)


# =============================================================================
# COLLECTION RUN
# =============================================================================

class TestCollectChangePoints:
    """Tests for collect_change_points()."""

    @pytest.fixture
    def seeded(self, bank, broker, add_account, add_snapshot):
        add_account("cash", "Checking", bank.id)
        add_account("stocks", "Brokerage", broker.id)
        add_snapshot("cash", _utc(2024, 1, 10, 9), (USD, "100"))
        add_snapshot("cash", _utc(2024, 1, 12, 9), (USD, "120"), (EUR, "50"))
        add_snapshot("stocks", _utc(2024, 1, 11, 15), (AAPL, "3"))

    def test_balance_points(self, storage, market_data, seeded):
        points = collect_change_points(storage, market_data, CollectOptions(include_prices=False))

        assert [p.timestamp for p in points] == [
            _utc(2024, 1, 10, 9),
            _utc(2024, 1, 11, 15),
            _utc(2024, 1, 12, 9),
        ]
        assert points[2].triggers == (BalanceTrigger("cash", USD), BalanceTrigger("cash", EUR))

    def test_price_points_at_end_of_day(self, storage, market_data, seeded, add_price):
        add_price(AAPL, date(2024, 1, 11), "185", timestamp=_utc(2024, 1, 11, 21))
        add_price(AAPL, date(2024, 1, 11), "186", kind=PriceKind.QUOTE, timestamp=_utc(2024, 1, 11, 18))
        add_price(EquityAsset("MSFT"), date(2024, 1, 11), "400")

        points = collect_change_points(storage, market_data, CollectOptions(include_prices=True))

        price_points = [p for p in points if any(isinstance(t, PriceTrigger) for t in p.triggers)]
        assert len(price_points) == 1
        assert price_points[0].timestamp == _utc(2024, 1, 11, 23, 59, 59)
        assert price_points[0].triggers == (
            PriceTrigger(AssetId("equity/AAPL")),
            PriceTrigger(AssetId("equity/AAPL")),
        )

        timestamps = [p.timestamp for p in points]
        assert timestamps == sorted(timestamps)
        assert len(set(timestamps)) == len(timestamps)

    def test_fx_points(self, storage, market_data, seeded, add_fx_rate, add_price):
        add_fx_rate("EUR", "USD", date(2024, 1, 12), "1.09")
        add_fx_rate("EUR", "GBP", date(2024, 1, 12), "0.86")
        add_price(AAPL, date(2024, 1, 13), "190", quote_currency="CAD")
        add_fx_rate("CAD", "USD", date(2024, 1, 13), "0.74")

        points = collect_change_points(
            storage,
            market_data,
            CollectOptions(include_prices=False, include_fx=True, target_currency="usd"),
        )

        fx_triggers = [
            (p.timestamp, t) for p in points for t in p.triggers if isinstance(t, FxRateTrigger)
        ]
        assert fx_triggers == [
            (_utc(2024, 1, 12, 23, 59, 59), FxRateTrigger("EUR", "USD")),
            (_utc(2024, 1, 13, 23, 59, 59), FxRateTrigger("CAD", "USD")),
        ]

    def test_fx_requires_target(self, storage, market_data):
        with pytest.raises(ValidationError):
            collect_change_points(storage, market_data, CollectOptions(include_fx=True))

    def test_account_filter(self, storage, market_data, seeded):
        points = collect_change_points(
            storage, market_data, CollectOptions(account_ids=("stocks",), include_prices=False),
        )

        assert [p.timestamp for p in points] == [_utc(2024, 1, 11, 15)]

    def test_unknown_account(self, storage, market_data, seeded):
        with pytest.raises(AccountNotFoundError) as exc_info:
            collect_change_points(
                storage, market_data, CollectOptions(account_ids=("stocks", "nope", "gone")),
            )
        assert exc_info.value.account_ids == ["gone", "nope"]

    def test_excluded_accounts_never_contribute(self, storage, market_data, bank, add_account, add_snapshot):
        add_account("hidden", "Hidden", bank.id, AccountConfig(exclude_from_portfolio=True))
        add_snapshot("hidden", _utc(2024, 1, 1), (USD, "1"))

        assert collect_change_points(storage, market_data) == []
        assert collect_change_points(
            storage, market_data, CollectOptions(account_ids=("hidden",)),
        ) == []

    def test_prices_of_assets_never_held_are_ignored(self, storage, market_data, add_price):
        add_price(CryptoAsset("BTC"), date(2024, 1, 1), "42000")
        assert collect_change_points(storage, market_data) == []

    def test_close_and_quote_on_one_date(self, storage, market_data, bank, add_account, add_snapshot, add_price):
        """Each stored observation anchors its own trigger at the end of its day."""
        add_account("stocks", "Brokerage", bank.id)
        add_snapshot("stocks", _utc(2024, 1, 3, 10), (AAPL, "2"))
        add_price(AAPL, date(2024, 1, 3), "184.25", kind=PriceKind.QUOTE)
        add_price(AAPL, date(2024, 1, 3), "185.10", kind=PriceKind.CLOSE)

        points = collect_change_points(storage, market_data)

        assert [p.timestamp for p in points] == [_utc(2024, 1, 3, 10), _utc(2024, 1, 3, 23, 59, 59)]
        assert points[1].triggers == (
            PriceTrigger(AssetId("equity/AAPL")),
            PriceTrigger(AssetId("equity/AAPL")),
        )

    def test_held_currencies_are_price_tracked(self, storage, market_data, bank, add_account, add_snapshot, add_price):
        add_account("cash", "Checking", bank.id)
        add_snapshot("cash", _utc(2024, 1, 3, 10), (CurrencyAsset("usd"), "100"))
        add_price(USD, date(2024, 1, 4), "1", quote_currency="USD")

        points = collect_change_points(storage, market_data)

        assert points[-1].timestamp == _utc(2024, 1, 4, 23, 59, 59)
        assert points[-1].triggers == (PriceTrigger(AssetId("currency/USD")),)

        without_prices = collect_change_points(storage, market_data, CollectOptions(include_prices=False))
        assert len(without_prices) == 1

    def test_naive_snapshot_timestamps_are_utc(self, storage, market_data, bank, add_account, add_snapshot, add_price):
        """Naive balance timestamps sort alongside the aware end-of-day price anchors."""
        add_account("stocks", "Brokerage", bank.id)
        add_snapshot("stocks", datetime(2024, 1, 3, 10), (AAPL, "2"))
        add_price(AAPL, date(2024, 1, 2), "183")

        points = collect_change_points(storage, market_data)

        assert [p.timestamp for p in points] == [_utc(2024, 1, 2, 23, 59, 59), _utc(2024, 1, 3, 10)]

# tests/services/test_valuation_calculators.py
"""
Unit tests for valuation calculators.

These tests exercise each calculator on hand-built inputs, without the
PortfolioService orchestration.

Test Coverage:
- BalanceSelector: cutoff, tie-breaking, backfill policies
- HoldingsAggregator: cross-account merge by identity
- AssetSummaryCalculator: rows, totals, unresolved assets
- AccountSummaryCalculator: per-account values, unknown connections
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from worthline.models import (
    Account,
    AssetBalance,
    BalanceBackfillPolicy,
    BalanceSnapshot,
    Connection,
    CurrencyAsset,
    EquityAsset,
)
from worthline.services.asset_identity import AssetId
from worthline.services.market_data import ValueResolution
from worthline.services.valuation import (
    AccountSummaryCalculator,
    AssetSummaryCalculator,
    BalanceSelector,
    HoldingsAggregator,
)
from worthline.services.valuation.calculators import format_value
from worthline.services.valuation.types import EffectiveBalance

USD = CurrencyAsset("USD")
EUR = CurrencyAsset("EUR")
AS_OF = date(2024, 3, 1)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _snapshot(timestamp: datetime, *balances) -> BalanceSnapshot:
    return BalanceSnapshot(
        timestamp=timestamp,
        balances=tuple(AssetBalance(asset, amount) for asset, amount in balances),
    )


def _effective(account_id: str, timestamp: datetime, *balances) -> EffectiveBalance:
    return EffectiveBalance(
        account_id=account_id,
        timestamp=timestamp,
        balances=tuple(AssetBalance(asset, amount) for asset, amount in balances),
    )


# =============================================================================
# BALANCE SELECTOR
# =============================================================================

class TestBalanceSelector:
    """Tests for BalanceSelector.select()."""

    @pytest.fixture
    def selector(self) -> BalanceSelector:
        return BalanceSelector()

    def test_latest_on_or_before_cutoff(self, selector):
        snapshots = [
            _snapshot(_utc(2024, 2, 1), (USD, "10")),
            _snapshot(_utc(2024, 3, 1, 23, 59, 59), (USD, "30")),
            _snapshot(_utc(2024, 2, 15), (USD, "20")),
            _snapshot(_utc(2024, 3, 2), (USD, "40")),
        ]

        effective = selector.select("a1", snapshots, BalanceBackfillPolicy.NONE, AS_OF, "USD")

        assert effective.balances[0].amount == "30"
        assert effective.backfill is None
        assert effective.balance_date == AS_OF

    def test_equal_timestamps_first_appended_wins(self, selector):
        same = _utc(2024, 2, 1, 12)
        snapshots = [_snapshot(same, (USD, "1")), _snapshot(same, (USD, "2"))]

        effective = selector.select("a1", snapshots, BalanceBackfillPolicy.NONE, AS_OF, "USD")

        assert effective.balances[0].amount == "1"

    def test_none_policy_skips_account(self, selector):
        snapshots = [_snapshot(_utc(2024, 3, 5), (USD, "10"))]
        assert selector.select("a1", snapshots, BalanceBackfillPolicy.NONE, AS_OF, "USD") is None

    def test_zero_policy(self, selector):
        effective = selector.select("a1", [], BalanceBackfillPolicy.ZERO, AS_OF, "EUR")

        assert effective.backfill == BalanceBackfillPolicy.ZERO
        assert effective.timestamp == _utc(2024, 3, 1, 23, 59, 59)
        assert effective.balances == (AssetBalance(CurrencyAsset("EUR"), "0"),)

    def test_carry_earliest_policy(self, selector):
        snapshots = [
            _snapshot(_utc(2024, 4, 1), (USD, "400")),
            _snapshot(_utc(2024, 3, 10), (USD, "310")),
        ]

        effective = selector.select("a1", snapshots, BalanceBackfillPolicy.CARRY_EARLIEST, AS_OF, "USD")

        assert effective.balances[0].amount == "310"
        assert effective.backfill == BalanceBackfillPolicy.CARRY_EARLIEST
        assert effective.balance_date == date(2024, 3, 10)

    def test_carry_earliest_without_snapshots(self, selector):
        assert selector.select("a1", [], BalanceBackfillPolicy.CARRY_EARLIEST, AS_OF, "USD") is None

    def test_naive_timestamps_compared_as_utc(self, selector):
        snapshots = [
            _snapshot(datetime(2024, 2, 20, 8), (USD, "20")),
            _snapshot(_utc(2024, 2, 25), (USD, "25")),
            _snapshot(datetime(2024, 3, 1, 23, 59, 59), (USD, "30")),
            _snapshot(datetime(2024, 3, 2), (USD, "40")),
        ]

        effective = selector.select("a1", snapshots, BalanceBackfillPolicy.NONE, AS_OF, "USD")

        assert effective.balances[0].amount == "30"
        assert effective.timestamp == _utc(2024, 3, 1, 23, 59, 59)
        assert snapshots[0].timestamp.tzinfo is timezone.utc


# =============================================================================
# HOLDINGS AGGREGATOR
# =============================================================================

class TestHoldingsAggregator:
    """Tests for HoldingsAggregator.aggregate()."""

    def test_merges_spelling_variants(self):
        balances = [
            _effective("a1", _utc(2024, 2, 1), (CurrencyAsset(" usd"), "100.25")),
            _effective("a2", _utc(2024, 2, 20), (CurrencyAsset("USD"), "0.75")),
        ]

        aggregates = HoldingsAggregator().aggregate(balances)

        usd = aggregates[AssetId("currency/USD")]
        assert usd.total_amount == Decimal("101.00")
        assert usd.asset == CurrencyAsset("USD")
        assert usd.latest_balance_date == date(2024, 2, 20)
        assert [h.account_id for h in usd.holdings] == ["a1", "a2"]

    def test_separate_assets(self):
        balances = [
            _effective("a1", _utc(2024, 2, 1), (USD, "1"), (EquityAsset("AAPL"), "3")),
        ]
        aggregates = HoldingsAggregator().aggregate(balances)
        assert set(aggregates) == {AssetId("currency/USD"), AssetId("equity/AAPL")}


# =============================================================================
# ASSET SUMMARY CALCULATOR
# =============================================================================

class TestAssetSummaryCalculator:
    """Tests for AssetSummaryCalculator.calculate()."""

    def test_unresolved_assets_listed_but_not_totalled(self):
        balances = [_effective("a1", _utc(2024, 2, 1), (USD, "100"), (EUR, "50"))]
        aggregates = HoldingsAggregator().aggregate(balances)
        resolutions = {
            AssetId("currency/USD"): ValueResolution(unit_value=Decimal("1")),
            AssetId("currency/EUR"): ValueResolution(unit_value=None),
        }

        rows, total = AssetSummaryCalculator().calculate(
            aggregates, resolutions, {"a1": "Checking"}, include_detail=False,
        )

        assert total == Decimal("100")
        assert [r.asset for r in rows] == [EUR, USD]
        assert rows[0].value_in_base is None
        assert rows[0].total_amount == "50"
        assert rows[1].value_in_base == "100"
        assert rows[1].holdings is None

    def test_detail_holdings(self):
        balances = [
            _effective("a1", _utc(2024, 2, 1), (USD, "10.10")),
            _effective("a2", _utc(2024, 2, 2), (USD, "5")),
        ]
        aggregates = HoldingsAggregator().aggregate(balances)
        resolutions = {AssetId("currency/USD"): ValueResolution(unit_value=Decimal("1"))}

        rows, _ = AssetSummaryCalculator().calculate(
            aggregates, resolutions, {"a1": "Checking", "a2": "Savings"}, include_detail=True,
        )

        holdings = rows[0].holdings
        assert [(h.account_name, h.amount) for h in holdings] == [("Checking", "10.1"), ("Savings", "5")]
        assert holdings[1].balance_date == date(2024, 2, 2)

    def test_currency_decimals(self):
        balances = [_effective("a1", _utc(2024, 2, 1), (USD, "10.005"))]
        aggregates = HoldingsAggregator().aggregate(balances)
        resolutions = {AssetId("currency/USD"): ValueResolution(unit_value=Decimal("1"))}

        rows, total = AssetSummaryCalculator().calculate(
            aggregates, resolutions, {}, include_detail=False, currency_decimals=2,
        )

        assert rows[0].value_in_base == "10.01"
        assert rows[0].total_amount == "10.005"
        assert total == Decimal("10.005")

    def test_format_value(self):
        assert format_value(Decimal("12.50"), None) == "12.5"
        assert format_value(Decimal("12.345"), 2) == "12.35"
        assert format_value(Decimal("12.3"), 2) == "12.3"


# =============================================================================
# ACCOUNT SUMMARY CALCULATOR
# =============================================================================

class TestAccountSummaryCalculator:
    """Tests for AccountSummaryCalculator.calculate()."""

    @pytest.fixture
    def accounts(self) -> dict[str, Account]:
        return {
            "a1": Account(id="a1", name="Savings", connection_id="c1"),
            "a2": Account(id="a2", name="Checking", connection_id="c1"),
            "a3": Account(id="a3", name="Orphan", connection_id="missing"),
        }

    @pytest.fixture
    def connections(self) -> dict[str, Connection]:
        return {"c1": Connection(id="c1", name="Big Bank")}

    def test_values_sorted_by_name(self, accounts, connections):
        balances = [
            _effective("a1", _utc(2024, 2, 1), (USD, "100")),
            _effective("a2", _utc(2024, 2, 1), (USD, "25.50")),
        ]
        resolutions = {AssetId("currency/USD"): ValueResolution(unit_value=Decimal("1"))}

        rows = AccountSummaryCalculator().calculate(balances, resolutions, accounts, connections)

        assert [(r.account_name, r.value_in_base) for r in rows] == [
            ("Checking", "25.5"),
            ("Savings", "100"),
        ]
        assert rows[0].connection_name == "Big Bank"

    def test_unresolved_holding_omits_value(self, accounts, connections):
        balances = [_effective("a1", _utc(2024, 2, 1), (USD, "100"), (EUR, "10"))]
        resolutions = {
            AssetId("currency/USD"): ValueResolution(unit_value=Decimal("1")),
            AssetId("currency/EUR"): ValueResolution(unit_value=None),
        }

        rows = AccountSummaryCalculator().calculate(balances, resolutions, accounts, connections)

        assert rows[0].value_in_base is None

    def test_unknown_connection_omitted(self, accounts, connections):
        balances = [_effective("a3", _utc(2024, 2, 1), (USD, "1"))]
        resolutions = {AssetId("currency/USD"): ValueResolution(unit_value=Decimal("1"))}

        assert AccountSummaryCalculator().calculate(balances, resolutions, accounts, connections) == []

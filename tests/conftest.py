# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- In-memory storage and market data store (empty, per test)
- Service fixtures wired to those stores
- Sample connections / accounts
- Factories for snapshots, prices and FX rates
"""

import os

# Settings are read at import time; pin them before any worthline import
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REPORTING_CURRENCY", "USD")
os.environ.setdefault("APP_NAME", "Test App")

from datetime import date, datetime, timezone
from typing import Callable

import pytest

from worthline.models import (
    Account,
    AssetBalance,
    BalanceSnapshot,
    Connection,
    FxRatePoint,
    PriceKind,
    PricePoint,
)
from worthline.services.asset_identity import AssetId
from worthline.services.history import HistoryService
from worthline.services.market_data import InMemoryMarketDataStore, MarketDataResolver
from worthline.services.storage import InMemoryStorage
from worthline.services.valuation import PortfolioService


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Timezone-aware UTC datetime."""
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def storage() -> InMemoryStorage:
    """Empty account/balance storage."""
    return InMemoryStorage()


@pytest.fixture
def market_data() -> InMemoryMarketDataStore:
    """Empty price / FX store."""
    return InMemoryMarketDataStore()


@pytest.fixture
def resolver(market_data: InMemoryMarketDataStore) -> MarketDataResolver:
    return MarketDataResolver(market_data)


@pytest.fixture
def portfolio_service(storage: InMemoryStorage, resolver: MarketDataResolver) -> PortfolioService:
    return PortfolioService(storage=storage, resolver=resolver)


@pytest.fixture
def history_service(
        storage: InMemoryStorage,
        market_data: InMemoryMarketDataStore,
        portfolio_service: PortfolioService,
) -> HistoryService:
    return HistoryService(
        storage=storage,
        market_data=market_data,
        portfolio_service=portfolio_service,
    )


# =============================================================================
# SAMPLE DATA
# =============================================================================

@pytest.fixture
def bank(storage: InMemoryStorage) -> Connection:
    """A registered bank connection."""
    connection = Connection(id="conn-bank", name="Big Bank")
    storage.add_connection(connection)
    return connection


@pytest.fixture
def broker(storage: InMemoryStorage) -> Connection:
    """A registered brokerage connection."""
    connection = Connection(id="conn-broker", name="Broker Inc")
    storage.add_connection(connection)
    return connection


@pytest.fixture
def add_account(storage: InMemoryStorage) -> Callable[..., Account]:
    """Factory: register an account and return it."""

    def _add(account_id: str, name: str, connection_id: str, config=None) -> Account:
        account = Account(id=account_id, name=name, connection_id=connection_id)
        storage.add_account(account, config)
        return account

    return _add


@pytest.fixture
def add_snapshot(storage: InMemoryStorage) -> Callable[..., BalanceSnapshot]:
    """Factory: append a balance snapshot of (asset, amount) pairs."""

    def _add(account_id: str, timestamp: datetime, *balances) -> BalanceSnapshot:
        snapshot = BalanceSnapshot(
            timestamp=timestamp,
            balances=tuple(AssetBalance(asset=asset, amount=amount) for asset, amount in balances),
        )
        storage.add_balance_snapshot(account_id, snapshot)
        return snapshot

    return _add


@pytest.fixture
def add_price(market_data: InMemoryMarketDataStore) -> Callable[..., PricePoint]:
    """Factory: store a price observation."""

    def _add(
            asset,
            as_of_date: date,
            price: str,
            quote_currency: str = "USD",
            kind: PriceKind = PriceKind.CLOSE,
            timestamp: datetime | None = None,
    ) -> PricePoint:
        point = PricePoint(
            asset_id=AssetId.from_asset(asset),
            as_of_date=as_of_date,
            timestamp=timestamp or utc(as_of_date.year, as_of_date.month, as_of_date.day, 21),
            price=price,
            quote_currency=quote_currency,
            kind=kind,
            source="test",
        )
        market_data.put_price(point)
        return point

    return _add


@pytest.fixture
def add_fx_rate(market_data: InMemoryMarketDataStore) -> Callable[..., FxRatePoint]:
    """Factory: store an FX close (1 base = rate quote)."""

    def _add(base: str, quote: str, as_of_date: date, rate: str) -> FxRatePoint:
        point = FxRatePoint(
            base=base,
            quote=quote,
            as_of_date=as_of_date,
            timestamp=utc(as_of_date.year, as_of_date.month, as_of_date.day, 16),
            rate=rate,
            source="test",
        )
        market_data.put_fx_rate(point)
        return point

    return _add

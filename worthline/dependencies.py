# worthline/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. Services are lazily initialized on first use to avoid
import-time side effects.

The default collaborators are the in-memory storage and market data
store. Deployments backed by a real database override get_storage and
get_market_data_store (app.dependency_overrides), and tests do the same
with fixture-populated stores.

Usage in routers:
    from worthline.dependencies import get_portfolio_service

    @router.get("/snapshot")
    def get_snapshot(service: PortfolioService = Depends(get_portfolio_service)):
        ...
"""

import logging
from functools import lru_cache

from fastapi import Depends

from worthline.services.history import HistoryService
from worthline.services.market_data import InMemoryMarketDataStore, MarketDataResolver
from worthline.services.protocols import MarketDataStoreProtocol, StorageProtocol
from worthline.services.storage import InMemoryStorage
from worthline.services.valuation import PortfolioService

logger = logging.getLogger(__name__)


# =============================================================================
# COLLABORATORS
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_storage, get_market_data_store (no deps)
# 2. get_resolver (depends on market data store)
# 3. get_portfolio_service (depends on storage, resolver)
# 4. get_history_service (depends on storage, market data store, portfolio service)


@lru_cache(maxsize=1)
def get_storage() -> StorageProtocol:
    """Get the singleton account/balance storage."""
    logger.debug("Initializing singleton InMemoryStorage")
    return InMemoryStorage()


@lru_cache(maxsize=1)
def get_market_data_store() -> MarketDataStoreProtocol:
    """Get the singleton price / FX store."""
    logger.debug("Initializing singleton InMemoryMarketDataStore")
    return InMemoryMarketDataStore()


# =============================================================================
# SERVICES
# =============================================================================
# Services receive collaborators through Depends; an override of a
# collaborator applies to every service built on it.


def get_resolver(
        store: MarketDataStoreProtocol = Depends(get_market_data_store),
) -> MarketDataResolver:
    """Market data resolver over the configured store."""
    return MarketDataResolver(store)


def get_portfolio_service(
        storage: StorageProtocol = Depends(get_storage),
        resolver: MarketDataResolver = Depends(get_resolver),
) -> PortfolioService:
    """Portfolio snapshot service."""
    return PortfolioService(storage=storage, resolver=resolver)


def get_history_service(
        storage: StorageProtocol = Depends(get_storage),
        store: MarketDataStoreProtocol = Depends(get_market_data_store),
        portfolio_service: PortfolioService = Depends(get_portfolio_service),
) -> HistoryService:
    """History and change-point service."""
    return HistoryService(
        storage=storage,
        market_data=store,
        portfolio_service=portfolio_service,
    )

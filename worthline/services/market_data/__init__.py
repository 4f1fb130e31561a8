# worthline/services/market_data/__init__.py
"""
Market data package.

    market_data/
    ├── __init__.py     # This file - package exports
    ├── memory.py       # InMemoryMarketDataStore (MarketDataStoreProtocol)
    └── resolver.py     # MarketDataResolver (price / FX / value fallbacks)

Usage:
    from worthline.services.market_data import InMemoryMarketDataStore, MarketDataResolver

    resolver = MarketDataResolver(InMemoryMarketDataStore())
    resolver.value_in_target_currency(asset, Decimal("10"), "USD", date(2024, 1, 31))
"""

from worthline.services.market_data.memory import InMemoryMarketDataStore
from worthline.services.market_data.resolver import (
    IDENTITY_SOURCE,
    PRICE_FALLBACK_CHAIN,
    MarketDataResolver,
    ValueResolution,
    currencies_match,
)

__all__ = [
    "IDENTITY_SOURCE",
    "PRICE_FALLBACK_CHAIN",
    "InMemoryMarketDataStore",
    "MarketDataResolver",
    "ValueResolution",
    "currencies_match",
]

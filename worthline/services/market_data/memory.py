# worthline/services/market_data/memory.py
"""
In-memory market data store.

Implements MarketDataStoreProtocol on dictionaries keyed the way the
resolver looks observations up:

    prices:   (asset_id, as_of_date, kind)  -> PricePoint
    fx rates: (BASE, QUOTE, as_of_date, kind) -> FxRatePoint

Writing an observation for an existing key replaces it (a re-fetched
close supersedes the earlier one). Currency codes are upper-cased on
write and on lookup, so "eur"/"EUR" address the same pair.
"""

from dataclasses import replace
from datetime import date

from worthline.models import FxRateKind, FxRatePoint, PriceKind, PricePoint
from worthline.services.asset_identity import AssetId


class InMemoryMarketDataStore:
    """Dictionary-backed implementation of MarketDataStoreProtocol."""

    def __init__(self) -> None:
        self._prices: dict[tuple[AssetId, date, PriceKind], PricePoint] = {}
        self._fx_rates: dict[tuple[str, str, date, FxRateKind], FxRatePoint] = {}

    # =========================================================================
    # WRITES
    # =========================================================================

    def put_price(self, price: PricePoint) -> None:
        key = (price.asset_id, price.as_of_date, PriceKind(price.kind))
        self._prices[key] = price

    def put_prices(self, prices: list[PricePoint]) -> None:
        for price in prices:
            self.put_price(price)

    def put_fx_rate(self, rate: FxRatePoint) -> None:
        normalized = replace(rate, base=rate.base.strip().upper(), quote=rate.quote.strip().upper())
        key = (normalized.base, normalized.quote, normalized.as_of_date, FxRateKind(normalized.kind))
        self._fx_rates[key] = normalized

    def put_fx_rates(self, rates: list[FxRatePoint]) -> None:
        for rate in rates:
            self.put_fx_rate(rate)

    # =========================================================================
    # READS (MarketDataStoreProtocol)
    # =========================================================================

    def get_price(self, asset_id: AssetId, as_of_date: date, kind: PriceKind) -> PricePoint | None:
        return self._prices.get((asset_id, as_of_date, PriceKind(kind)))

    def get_all_prices(self, asset_id: AssetId) -> list[PricePoint]:
        return [p for (pid, _, _), p in self._prices.items() if pid == asset_id]

    def get_fx_rate(
        self,
        base: str,
        quote: str,
        as_of_date: date,
        kind: FxRateKind,
    ) -> FxRatePoint | None:
        key = (base.strip().upper(), quote.strip().upper(), as_of_date, FxRateKind(kind))
        return self._fx_rates.get(key)

    def get_all_fx_rates(self, base: str, quote: str) -> list[FxRatePoint]:
        pair = (base.strip().upper(), quote.strip().upper())
        return [r for (b, q, _, _), r in self._fx_rates.items() if (b, q) == pair]


__all__ = ["InMemoryMarketDataStore"]

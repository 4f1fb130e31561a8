# worthline/services/market_data/resolver.py
"""
Market data resolution with fallback rules.

Two primitive lookups, both backed by an injected MarketDataStoreProtocol:

    price(asset, date)
        1. close observation for that exact date
        2. quote observation for the same date
        3. None
        (adj_close is stored but never consulted for valuation)

    fx_rate(base, quote, date)
        1. base == quote (case-insensitive): identity rate 1, store untouched
        2. close observation for the exact pair and date
        3. None
        No triangulation through a third currency is attempted: if only
        EUR->USD and USD->GBP exist, EUR->GBP is unresolved.

FX convention (standard notation): 1 base = rate × quote, so
    value_quote = value_base × rate

Unresolved data is a normal outcome, not an error: lookups return None
and callers treat the asset as "no contribution". Errors raised by the
store itself propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from worthline.models import (
    Asset,
    CurrencyAsset,
    FxRateKind,
    FxRatePoint,
    PriceKind,
    PricePoint,
)
from worthline.services.asset_identity import AssetId, normalize_currency_code
from worthline.utils.date_utils import end_of_day
from worthline.utils.decimal_utils import ONE, to_decimal

if TYPE_CHECKING:
    from worthline.services.protocols import MarketDataStoreProtocol

logger = logging.getLogger(__name__)

IDENTITY_SOURCE = "identity"

# Price kinds tried, in order, for a valuation date
PRICE_FALLBACK_CHAIN = (PriceKind.CLOSE, PriceKind.QUOTE)


@dataclass(frozen=True)
class ValueResolution:
    """
    Per-unit valuation of an asset in a target currency.

    Attributes:
        unit_value: Value of one unit in the target currency (None if unresolved)
        price: Price observation used (equity/crypto only)
        fx: FX observation used (only when a conversion was needed)

    A resolution may carry a price but no unit_value: the price was found
    but its quote currency could not be converted to the target.
    """

    unit_value: Decimal | None
    price: PricePoint | None = None
    fx: FxRatePoint | None = None

    @property
    def is_resolved(self) -> bool:
        return self.unit_value is not None

    def value_of(self, amount: Decimal) -> Decimal | None:
        """Value of `amount` units, or None if unresolved."""
        if self.unit_value is None:
            return None
        return amount * self.unit_value


def currencies_match(a: str, b: str) -> bool:
    """Case-insensitive currency comparison (numeric "840" equals "USD")."""
    return normalize_currency_code(a) == normalize_currency_code(b)


class MarketDataResolver:
    """
    Resolves prices, FX rates and target-currency values for assets.

    Stateless apart from the store reference; safe to share between
    requests as long as the store is.
    """

    def __init__(self, store: MarketDataStoreProtocol) -> None:
        self._store = store

    # =========================================================================
    # PRIMITIVE LOOKUPS
    # =========================================================================

    def price(self, asset: Asset, as_of_date: date) -> PricePoint | None:
        """
        Price of one unit of an asset for a calendar date.

        Returns:
            The close for that date, else the same-day quote, else None
        """
        asset_id = AssetId.from_asset(asset)
        for kind in PRICE_FALLBACK_CHAIN:
            point = self._store.get_price(asset_id, as_of_date, kind)
            if point is not None:
                return point

        logger.debug(f"No price for {asset_id} on {as_of_date}")
        return None

    def fx_rate(self, base: str, quote: str, as_of_date: date) -> FxRatePoint | None:
        """
        Exchange rate (1 base = rate × quote) for a calendar date.

        Returns:
            Identity rate when the codes match, else the stored close for
            the exact pair and date, else None
        """
        if currencies_match(base, quote):
            code = normalize_currency_code(base)
            return FxRatePoint(
                base=code,
                quote=code,
                as_of_date=as_of_date,
                timestamp=end_of_day(as_of_date),
                rate="1",
                kind=FxRateKind.CLOSE,
                source=IDENTITY_SOURCE,
            )

        point = self._store.get_fx_rate(
            normalize_currency_code(base),
            normalize_currency_code(quote),
            as_of_date,
            FxRateKind.CLOSE,
        )
        if point is None:
            logger.debug(f"No FX rate {base}/{quote} on {as_of_date}")
        return point

    # =========================================================================
    # VALUATION
    # =========================================================================

    def resolve(self, asset: Asset, target_currency: str, as_of_date: date) -> ValueResolution:
        """
        Value one unit of an asset in the target currency.

        Currency assets:
            same as target -> 1, no observations
            otherwise      -> FX rate (asset -> target)
        Equity/crypto assets:
            price; then, unless the quote currency is the target,
            FX rate (quote currency -> target)
        """
        if isinstance(asset, CurrencyAsset):
            if currencies_match(asset.iso_code, target_currency):
                return ValueResolution(unit_value=ONE)

            fx = self.fx_rate(asset.iso_code, target_currency, as_of_date)
            if fx is None:
                return ValueResolution(unit_value=None)
            return ValueResolution(unit_value=to_decimal(fx.rate, field="rate"), fx=fx)

        price = self.price(asset, as_of_date)
        if price is None:
            return ValueResolution(unit_value=None)

        unit_price = to_decimal(price.price, field="price")
        if currencies_match(price.quote_currency, target_currency):
            return ValueResolution(unit_value=unit_price, price=price)

        fx = self.fx_rate(price.quote_currency, target_currency, as_of_date)
        if fx is None:
            return ValueResolution(unit_value=None, price=price)
        return ValueResolution(
            unit_value=unit_price * to_decimal(fx.rate, field="rate"),
            price=price,
            fx=fx,
        )

    def value_in_target_currency(
        self,
        asset: Asset,
        amount: Decimal,
        target_currency: str,
        as_of_date: date,
    ) -> Decimal | None:
        """
        Value `amount` units of an asset in the target currency.

        Returns:
            The exact value, or None when a price or FX rate is missing.
            None means "no contribution", never zero.
        """
        return self.resolve(asset, target_currency, as_of_date).value_of(amount)


__all__ = [
    "IDENTITY_SOURCE",
    "PRICE_FALLBACK_CHAIN",
    "ValueResolution",
    "currencies_match",
    "MarketDataResolver",
]

# worthline/schemas/assets.py
"""
Pydantic schemas for assets and change triggers.

Both are tagged unions serialized with the "type" key first:
    {"type": "currency", "iso_code": "USD"}
    {"type": "equity", "ticker": "AAPL", "exchange": "NASDAQ"}
    {"type": "crypto", "symbol": "ETH", "network": "ethereum"}

    {"type": "balance", "account_id": "a1", "asset": {...}}
    {"type": "price", "asset_id": "equity/AAPL"}
    {"type": "fx_rate", "base": "EUR", "quote": "USD"}
"""

from typing import Annotated, Literal, Union

from pydantic import Field

from worthline.schemas.base import OmitNoneModel


# =============================================================================
# ASSETS
# =============================================================================

class CurrencyAssetSchema(OmitNoneModel):
    """Cash in a currency."""

    type: Literal["currency"] = "currency"
    iso_code: str = Field(..., description="ISO 4217 currency code")


class EquityAssetSchema(OmitNoneModel):
    """Listed security."""

    type: Literal["equity"] = "equity"
    ticker: str = Field(..., description="Ticker symbol")
    exchange: str | None = Field(default=None, description="Exchange code (omitted if unknown)")


class CryptoAssetSchema(OmitNoneModel):
    """Crypto token."""

    type: Literal["crypto"] = "crypto"
    symbol: str = Field(..., description="Token symbol")
    network: str | None = Field(default=None, description="Network (omitted if unknown)")


AssetSchema = Annotated[
    Union[CurrencyAssetSchema, EquityAssetSchema, CryptoAssetSchema],
    Field(discriminator="type"),
]


# =============================================================================
# CHANGE TRIGGERS
# =============================================================================

class BalanceTriggerSchema(OmitNoneModel):
    """An account recorded a balance for an asset."""

    type: Literal["balance"] = "balance"
    account_id: str
    asset: AssetSchema


class PriceTriggerSchema(OmitNoneModel):
    """A price observation exists for a held asset."""

    type: Literal["price"] = "price"
    asset_id: str = Field(..., description="Canonical asset identity, e.g. 'equity/AAPL'")


class FxRateTriggerSchema(OmitNoneModel):
    """An FX observation exists for a converted pair."""

    type: Literal["fx_rate"] = "fx_rate"
    base: str
    quote: str


ChangeTriggerSchema = Annotated[
    Union[BalanceTriggerSchema, PriceTriggerSchema, FxRateTriggerSchema],
    Field(discriminator="type"),
]

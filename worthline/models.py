# worthline/models.py
"""
Domain model for tracked accounts and market data.

These are plain frozen dataclasses: facts recorded by external
collaborators (storage backends, synchronizers, price fetchers) and only
ever read by the valuation and change-history engine.

Model Hierarchy:
    Connection          - A link to an institution (bank, broker, exchange)
    └── Account         - One account under a connection
        ├── AccountConfig   - Portfolio behaviour overrides
        └── BalanceSnapshot - Balances observed at one instant
            └── AssetBalance    - Amount held of one asset

    Asset = CurrencyAsset | EquityAsset | CryptoAsset

    PricePoint          - Price observation for an asset on a date
    FxRatePoint         - Exchange rate observation for a pair on a date

Conventions:
    - Amounts, prices and rates are decimal strings (never floats)
    - Timestamps are timezone-aware UTC datetimes
    - Calendar dates (as_of_date) are datetime.date
    - Asset fields are stored as provided; identity normalization lives in
      worthline.services.asset_identity
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Union

if TYPE_CHECKING:
    from worthline.services.asset_identity import AssetId


# =============================================================================
# ENUMS
# =============================================================================

class BalanceBackfillPolicy(str, Enum):
    """
    How an account is valued on dates before its first balance snapshot.

    NONE:           the account contributes nothing
    ZERO:           the account contributes a zero balance in the reporting currency
    CARRY_EARLIEST: the account's earliest snapshot is used, even though it
                    was recorded after the valuation date
    """
    NONE = "none"
    ZERO = "zero"
    CARRY_EARLIEST = "carry_earliest"


class PriceKind(str, Enum):
    """Kind of price observation."""
    CLOSE = "close"
    ADJ_CLOSE = "adj_close"
    QUOTE = "quote"


class FxRateKind(str, Enum):
    """Kind of FX observation. Only daily closes are recorded."""
    CLOSE = "close"


# =============================================================================
# ASSETS
# =============================================================================

@dataclass(frozen=True)
class CurrencyAsset:
    """Cash held in a currency (ISO 4217 code, e.g. "USD")."""

    type: ClassVar[str] = "currency"

    iso_code: str


@dataclass(frozen=True)
class EquityAsset:
    """A listed security, optionally qualified by exchange."""

    type: ClassVar[str] = "equity"

    ticker: str
    exchange: str | None = None


@dataclass(frozen=True)
class CryptoAsset:
    """A crypto token, optionally qualified by network (e.g. "ethereum")."""

    type: ClassVar[str] = "crypto"

    symbol: str
    network: str | None = None


Asset = Union[CurrencyAsset, EquityAsset, CryptoAsset]


# =============================================================================
# CONNECTIONS & ACCOUNTS
# =============================================================================

@dataclass(frozen=True)
class Connection:
    """
    A link to a financial institution.

    Attributes:
        id: Stable identifier
        name: Display name (reported as connection_name in account summaries)
        synchronizer: Name of the connector that refreshes this connection
    """

    id: str
    name: str
    synchronizer: str = "manual"


@dataclass(frozen=True)
class AccountConfig:
    """
    Per-account portfolio overrides.

    Attributes:
        balance_backfill: Valuation policy before the first snapshot
        exclude_from_portfolio: Remove the account from valuations and
            change points (it still appears in listings)
        balance_staleness: How old a balance may get before a refresh is
            due; consumed by synchronizers, not by the engine
    """

    balance_backfill: BalanceBackfillPolicy = BalanceBackfillPolicy.NONE
    exclude_from_portfolio: bool = False
    balance_staleness: timedelta | None = None


@dataclass(frozen=True)
class Account:
    """A single account held under a connection."""

    id: str
    name: str
    connection_id: str
    tags: tuple[str, ...] = ()
    active: bool = True


# =============================================================================
# BALANCES
# =============================================================================

@dataclass(frozen=True)
class AssetBalance:
    """Amount (decimal string) of one asset at one instant."""

    asset: Asset
    amount: str


@dataclass(frozen=True)
class BalanceSnapshot:
    """
    All balances of an account observed at one instant.

    Snapshots are append-only: a new observation is a new snapshot.
    A naive timestamp is taken as UTC.
    """

    timestamp: datetime
    balances: tuple[AssetBalance, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))


# =============================================================================
# MARKET DATA
# =============================================================================

@dataclass(frozen=True)
class PricePoint:
    """
    Price of one unit of an asset, quoted in quote_currency.

    Attributes:
        asset_id: Canonical identity of the priced asset
        as_of_date: Calendar date the price applies to
        timestamp: Instant the observation was captured
        price: Decimal string
        quote_currency: Currency the price is expressed in
        kind: close, adj_close or quote
        source: Provider name
    """

    asset_id: AssetId
    as_of_date: date
    timestamp: datetime
    price: str
    quote_currency: str
    kind: PriceKind = PriceKind.CLOSE
    source: str = "unknown"


@dataclass(frozen=True)
class FxRatePoint:
    """
    Exchange rate: 1 unit of base = rate units of quote.

    Codes are upper-cased when written to a store.
    """

    base: str
    quote: str
    as_of_date: date
    timestamp: datetime
    rate: str
    kind: FxRateKind = FxRateKind.CLOSE
    source: str = "unknown"


__all__ = [
    "BalanceBackfillPolicy",
    "PriceKind",
    "FxRateKind",
    "CurrencyAsset",
    "EquityAsset",
    "CryptoAsset",
    "Asset",
    "Connection",
    "AccountConfig",
    "Account",
    "AssetBalance",
    "BalanceSnapshot",
    "PricePoint",
    "FxRatePoint",
]

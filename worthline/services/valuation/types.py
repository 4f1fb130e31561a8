# worthline/services/valuation/types.py
"""
Internal data types for the Portfolio Service.

These dataclasses are used by the valuation calculators and returned by
PortfolioService. They are NOT Pydantic schemas - those live in
worthline/schemas/portfolio.py for API serialization.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Decimal for ALL arithmetic; output amounts are normalized strings
- Optional output fields use None; the schema layer drops them

Type Hierarchy:
    Grouping            - Which breakdowns a snapshot carries
    PortfolioQuery      - Snapshot request
    EffectiveBalance    - The snapshot an account contributes for a date
    HoldingEntry        - One account's amount of an aggregated asset
    AssetAggregate      - Cross-account total for one asset
    AccountHolding      - Output: per-account detail of an asset
    AssetSummary        - Output: one row of by_asset
    AccountSummary      - Output: one row of by_account
    PortfolioSnapshot   - Output: the complete point-in-time valuation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from worthline.models import Asset, AssetBalance, BalanceBackfillPolicy
from worthline.services.asset_identity import AssetId
from worthline.utils.date_utils import utc_date

logger = logging.getLogger(__name__)


# =============================================================================
# QUERY
# =============================================================================

class Grouping(str, Enum):
    """Breakdowns included in a snapshot."""
    ASSET = "asset"
    ACCOUNT = "account"
    BOTH = "both"

    @property
    def includes_assets(self) -> bool:
        return self in (Grouping.ASSET, Grouping.BOTH)

    @property
    def includes_accounts(self) -> bool:
        return self in (Grouping.ACCOUNT, Grouping.BOTH)


def parse_grouping(value: Grouping | str | None) -> Grouping:
    """
    Decode a grouping, falling back to BOTH for anything unrecognized.

    Example:
        >>> parse_grouping("Account")
        <Grouping.ACCOUNT: 'account'>
        >>> parse_grouping("by-sector")
        <Grouping.BOTH: 'both'>
    """
    if isinstance(value, Grouping):
        return value
    if value is None:
        return Grouping.BOTH
    try:
        return Grouping(value.strip().lower())
    except ValueError:
        logger.debug(f"Unknown grouping '{value}', using 'both'")
        return Grouping.BOTH


@dataclass(frozen=True)
class PortfolioQuery:
    """
    Request for a point-in-time portfolio valuation.

    Attributes:
        as_of_date: Valuation date; balances up to 23:59:59 UTC count
        currency: Reporting (target) currency, echoed verbatim in output
        grouping: Breakdowns to include (unknown strings mean BOTH)
        include_detail: Add per-account holdings to each by_asset row
        currency_decimals: Round total_value / value_in_base half-up to
            this many places (None = exact)
    """

    as_of_date: date
    currency: str
    grouping: Grouping | str | None = Grouping.BOTH
    include_detail: bool = False
    currency_decimals: int | None = None


# =============================================================================
# INTERMEDIATE RESULTS
# =============================================================================

@dataclass(frozen=True)
class EffectiveBalance:
    """
    The balances an account contributes to one valuation.

    Attributes:
        account_id: Contributing account
        timestamp: Instant of the chosen snapshot (end of the as-of day for
            zero backfill)
        balances: The chosen snapshot's balances
        backfill: Policy that produced this balance, or None when a real
            snapshot on or before the as-of date was used
    """

    account_id: str
    timestamp: datetime
    balances: tuple[AssetBalance, ...]
    backfill: BalanceBackfillPolicy | None = None

    @property
    def balance_date(self) -> date:
        return utc_date(self.timestamp)


@dataclass
class HoldingEntry:
    """One account's contribution to an aggregated asset."""

    account_id: str
    amount: Decimal
    balance_date: date


@dataclass
class AssetAggregate:
    """
    Cross-account total for one normalized asset.

    Attributes:
        asset_id: Aggregation key
        asset: Normalized asset (reported in output)
        total_amount: Exact sum of all holdings
        latest_balance_date: Most recent balance date among the holdings
        holdings: Contributions in account iteration order
    """

    asset_id: AssetId
    asset: Asset
    total_amount: Decimal
    latest_balance_date: date
    holdings: list[HoldingEntry] = field(default_factory=list)


# =============================================================================
# OUTPUT
# =============================================================================

@dataclass(frozen=True)
class AccountHolding:
    """Per-account detail line of an AssetSummary."""

    account_id: str
    account_name: str
    amount: str
    balance_date: date


@dataclass(frozen=True)
class AssetSummary:
    """
    One by_asset row.

    Price fields are set whenever a price was found (even if its quote
    currency could not be converted); FX fields whenever a conversion
    rate was used. value_in_base is None when the asset did not resolve.
    """

    asset: Asset
    total_amount: str
    amount_date: date
    price: str | None = None
    price_date: date | None = None
    price_timestamp: datetime | None = None
    fx_rate: str | None = None
    fx_date: date | None = None
    value_in_base: str | None = None
    holdings: list[AccountHolding] | None = None


@dataclass(frozen=True)
class AccountSummary:
    """
    One by_account row.

    value_in_base is None when any of the account's holdings did not
    resolve; a partial sum is never reported.
    """

    account_id: str
    account_name: str
    connection_name: str
    value_in_base: str | None = None


@dataclass(frozen=True)
class PortfolioSnapshot:
    """
    Complete point-in-time valuation.

    by_asset / by_account are None when the grouping excluded them and
    a (possibly empty) list otherwise.
    """

    as_of_date: date
    currency: str
    total_value: str
    by_asset: list[AssetSummary] | None = None
    by_account: list[AccountSummary] | None = None

# worthline/services/history/types.py
"""
Internal data types for change-point collection and history reports.

Type Hierarchy:
    ChangeTrigger = BalanceTrigger | PriceTrigger | FxRateTrigger
    ChangePoint         - One instant plus the triggers that fired at it
    Granularity         - Calendar downsampling buckets (or FULL)
    CustomGranularity   - Fixed-width, epoch-aligned downsampling buckets
    CoalesceStrategy    - Which point of a bucket survives
    HistoryQuery        - Value-over-time request
    ChangePointsQuery   - Raw change-point request
    HistoryPoint        - One valued change point
    HistorySummary      - First/last comparison of a history
    PortfolioHistory    - Output of HistoryService.history()
    ChangePointsReport  - Output of HistoryService.change_points()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Union

from worthline.models import Asset
from worthline.services.asset_identity import AssetId

DEFAULT_GRANULARITY = "none"


# =============================================================================
# TRIGGERS & CHANGE POINTS
# =============================================================================

@dataclass(frozen=True)
class BalanceTrigger:
    """An account recorded a balance for an asset."""

    type: ClassVar[str] = "balance"

    account_id: str
    asset: Asset


@dataclass(frozen=True)
class PriceTrigger:
    """A price observation exists for a held asset."""

    type: ClassVar[str] = "price"

    asset_id: AssetId


@dataclass(frozen=True)
class FxRateTrigger:
    """An FX observation exists for a pair the portfolio converts through."""

    type: ClassVar[str] = "fx_rate"

    base: str
    quote: str


ChangeTrigger = Union[BalanceTrigger, PriceTrigger, FxRateTrigger]


@dataclass(frozen=True)
class ChangePoint:
    """
    An instant at which portfolio value may have changed.

    Exactly one ChangePoint exists per distinct timestamp in a collection
    run; every trigger sharing the timestamp is merged into it.
    """

    timestamp: datetime
    triggers: tuple[ChangeTrigger, ...] = ()


# =============================================================================
# GRANULARITY
# =============================================================================

class Granularity(str, Enum):
    """Calendar downsampling of a change-point timeline (UTC)."""
    FULL = "full"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class CustomGranularity:
    """
    Fixed-width buckets of `milliseconds`, aligned to the Unix epoch.

    A width <= 0 disables downsampling.
    """

    milliseconds: int


class CoalesceStrategy(str, Enum):
    """Which point of a granularity bucket is kept."""
    FIRST = "first"
    LAST = "last"


# =============================================================================
# QUERIES
# =============================================================================

@dataclass(frozen=True)
class HistoryQuery:
    """
    Request for portfolio value over time.

    Attributes:
        currency: Reporting currency
        start_date / end_date: Inclusive UTC date bounds (None = unbounded);
            strings are parsed as YYYY-MM-DD
        granularity: none, full, hourly, daily, weekly, monthly, yearly
            or a duration such as "6h"
        include_prices: Add price observations as change points
        include_fx: Add FX observations into `currency` as change points
        account_ids: Restrict change-point collection to these accounts
        currency_decimals: Rounding applied to each point's total_value
    """

    currency: str
    start_date: date | str | None = None
    end_date: date | str | None = None
    granularity: str = DEFAULT_GRANULARITY
    include_prices: bool = True
    include_fx: bool = False
    account_ids: tuple[str, ...] | None = None
    currency_decimals: int | None = None


@dataclass(frozen=True)
class ChangePointsQuery:
    """
    Request for the raw change-point timeline.

    `currency` is only consulted when include_fx is set (it is the target
    of the FX pairs worth tracking).
    """

    start_date: date | str | None = None
    end_date: date | str | None = None
    granularity: str = DEFAULT_GRANULARITY
    include_prices: bool = True
    include_fx: bool = False
    currency: str | None = None
    account_ids: tuple[str, ...] | None = None


# =============================================================================
# OUTPUT
# =============================================================================

@dataclass(frozen=True)
class HistoryPoint:
    """One valued change point. change_triggers is None when empty."""

    timestamp: datetime
    date: date
    total_value: str
    change_triggers: list[str] | None = None


@dataclass(frozen=True)
class HistorySummary:
    """
    First-to-last comparison of a history (only with >= 2 points).

    percentage_change has exactly two decimals, or "N/A" when the
    initial value is zero.
    """

    initial_value: str
    final_value: str
    absolute_change: str
    percentage_change: str


@dataclass(frozen=True)
class PortfolioHistory:
    """
    Value-over-time report.

    start_date / end_date are None when the caller gave no bound; the
    schema layer serializes them as explicit nulls.
    """

    currency: str
    start_date: date | None
    end_date: date | None
    granularity: str
    points: list[HistoryPoint] = field(default_factory=list)
    summary: HistorySummary | None = None


@dataclass(frozen=True)
class ChangePointsReport:
    """Raw change-point timeline with full trigger objects."""

    start_date: date | None
    end_date: date | None
    granularity: str
    include_prices: bool
    points: list[ChangePoint] = field(default_factory=list)

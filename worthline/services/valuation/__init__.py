# worthline/services/valuation/__init__.py
"""
Valuation Service Package.

Point-in-time portfolio valuation: what the tracked accounts are worth
on a date, in one reporting currency.

Usage:
    from worthline.services.valuation import PortfolioService, PortfolioQuery

    service = PortfolioService(storage, resolver)
    snapshot = service.snapshot(
        PortfolioQuery(as_of_date=date(2024, 3, 1), currency="EUR", grouping="asset")
    )

Architecture:
    valuation/
    ├── __init__.py        # This file - package exports
    ├── types.py           # Query, intermediate and output dataclasses
    ├── calculators.py     # Balance selection, aggregation, summaries
    └── service.py         # PortfolioService (orchestrator)

Data Flow:
    Snapshots → BalanceSelector → EffectiveBalance (per account)
    EffectiveBalances → HoldingsAggregator → AssetAggregate (per asset)
    AssetAggregate + MarketDataResolver → AssetSummary, total_value
    EffectiveBalances + resolutions → AccountSummary
"""

from worthline.services.valuation.calculators import (
    AccountSummaryCalculator,
    AssetSummaryCalculator,
    BalanceSelector,
    HoldingsAggregator,
)
from worthline.services.valuation.service import PortfolioService
from worthline.services.valuation.types import (
    AccountHolding,
    AccountSummary,
    AssetSummary,
    Grouping,
    PortfolioQuery,
    PortfolioSnapshot,
    parse_grouping,
)

__all__ = [
    # Main service
    "PortfolioService",
    # Calculators
    "BalanceSelector",
    "HoldingsAggregator",
    "AssetSummaryCalculator",
    "AccountSummaryCalculator",
    # Types
    "Grouping",
    "PortfolioQuery",
    "PortfolioSnapshot",
    "AssetSummary",
    "AccountSummary",
    "AccountHolding",
    "parse_grouping",
]

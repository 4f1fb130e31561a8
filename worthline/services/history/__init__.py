# worthline/services/history/__init__.py
"""
History Service Package.

Answers "at which instants did the portfolio's worth change, and why?"
and "what was it worth at each of those instants?".

Usage:
    from worthline.services.history import HistoryService, HistoryQuery

    service = HistoryService(storage, store, portfolio_service)
    report = service.history(HistoryQuery(currency="USD", granularity="daily"))

Architecture:
    history/
    ├── __init__.py        # This file - package exports
    ├── types.py           # Triggers, change points, queries, reports
    ├── change_points.py   # ChangePointCollector, collect_change_points
    ├── filters.py         # Granularity and date-range filtering
    └── service.py         # HistoryService (orchestrator)
"""

from worthline.services.history.change_points import (
    ChangePointCollector,
    CollectOptions,
    collect_change_points,
)
from worthline.services.history.filters import (
    filter_by_date_range,
    filter_by_granularity,
    parse_granularity,
)
from worthline.services.history.service import HistoryService, format_trigger, summarize
from worthline.services.history.types import (
    BalanceTrigger,
    ChangePoint,
    ChangePointsQuery,
    ChangePointsReport,
    CoalesceStrategy,
    CustomGranularity,
    FxRateTrigger,
    Granularity,
    HistoryPoint,
    HistoryQuery,
    HistorySummary,
    PortfolioHistory,
    PriceTrigger,
)

__all__ = [
    # Main service
    "HistoryService",
    "format_trigger",
    "summarize",
    # Collection
    "ChangePointCollector",
    "CollectOptions",
    "collect_change_points",
    # Filtering
    "parse_granularity",
    "filter_by_granularity",
    "filter_by_date_range",
    # Types
    "BalanceTrigger",
    "PriceTrigger",
    "FxRateTrigger",
    "ChangePoint",
    "Granularity",
    "CustomGranularity",
    "CoalesceStrategy",
    "HistoryQuery",
    "ChangePointsQuery",
    "HistoryPoint",
    "HistorySummary",
    "PortfolioHistory",
    "ChangePointsReport",
]

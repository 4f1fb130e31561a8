# worthline/services/history/service.py
"""
History Service - value-over-time and change-point reports.

Public API:
- history(): portfolio value at every surviving change point, plus a
  first-to-last summary
- change_points(): the same timeline without valuation, with full
  trigger objects

Pipeline (both operations):
    collect_change_points → filter_by_date_range → filter_by_granularity(LAST)

history() then values each surviving point with PortfolioService as of
the point's UTC calendar date. Points falling on the same date share one
valuation.

Trigger strings in history points:
    balance:<account_id>:<compact JSON of the asset>
    price:<asset_id>
    fx:<base>/<quote>
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import TYPE_CHECKING

from worthline.services.asset_identity import asset_to_dict
from worthline.services.exceptions import ValidationError
from worthline.services.history.change_points import CollectOptions, collect_change_points
from worthline.services.history.filters import (
    filter_by_date_range,
    filter_by_granularity,
    parse_granularity,
)
from worthline.services.history.types import (
    BalanceTrigger,
    ChangePoint,
    ChangePointsQuery,
    ChangeTrigger,
    CoalesceStrategy,
    HistoryPoint,
    HistoryQuery,
    HistorySummary,
    PortfolioHistory,
    ChangePointsReport,
    PriceTrigger,
)
from worthline.services.valuation.types import Grouping, PortfolioQuery
from worthline.utils.date_utils import parse_optional_date, utc_date
from worthline.utils.decimal_utils import normalize_decimal, percentage_change, to_decimal

if TYPE_CHECKING:
    from worthline.services.protocols import MarketDataStoreProtocol, StorageProtocol
    from worthline.services.valuation.service import PortfolioService

logger = logging.getLogger(__name__)


# =============================================================================
# TRIGGER FORMATTING
# =============================================================================

def format_trigger(trigger: ChangeTrigger) -> str:
    """
    Compact one-line description of a trigger.

    Example:
        >>> format_trigger(BalanceTrigger("acct-1", CurrencyAsset("USD")))
        'balance:acct-1:{"type":"currency","iso_code":"USD"}'
    """
    if isinstance(trigger, BalanceTrigger):
        asset_json = json.dumps(
            asset_to_dict(trigger.asset),
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return f"balance:{trigger.account_id}:{asset_json}"
    if isinstance(trigger, PriceTrigger):
        return f"price:{trigger.asset_id}"
    return f"fx:{trigger.base}/{trigger.quote}"


def summarize(points: list[HistoryPoint]) -> HistorySummary | None:
    """First-to-last summary, or None with fewer than two points."""
    if len(points) < 2:
        return None

    initial = to_decimal(points[0].total_value)
    final = to_decimal(points[-1].total_value)
    return HistorySummary(
        initial_value=normalize_decimal(initial),
        final_value=normalize_decimal(final),
        absolute_change=normalize_decimal(final - initial),
        percentage_change=percentage_change(initial, final),
    )


def _coerce_date(value: date | str | None, field: str) -> date | None:
    if isinstance(value, date):
        return value
    return parse_optional_date(value, field=field)


# =============================================================================
# SERVICE
# =============================================================================

class HistoryService:
    """
    Builds history and change-point reports.

    Attributes:
        _storage: Account and balance collaborator
        _market_data: Price / FX store (read for change points)
        _portfolio: PortfolioService used to value each point
    """

    def __init__(
            self,
            storage: StorageProtocol,
            market_data: MarketDataStoreProtocol,
            portfolio_service: PortfolioService,
    ) -> None:
        self._storage = storage
        self._market_data = market_data
        self._portfolio = portfolio_service

        logger.debug("HistoryService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def history(self, query: HistoryQuery) -> PortfolioHistory:
        """
        Portfolio value at each change point.

        Raises:
            InvalidDateError: Malformed start/end date
            InvalidGranularityError: Unknown granularity
            ValidationError: start date after end date
            AccountNotFoundError: Unknown account in account_ids
        """
        start, end = self._date_bounds(query.start_date, query.end_date)
        points = self._timeline(
            start=start,
            end=end,
            granularity=query.granularity,
            options=CollectOptions(
                account_ids=query.account_ids,
                include_prices=query.include_prices,
                include_fx=query.include_fx,
                target_currency=query.currency,
            ),
        )

        totals: dict[date, str] = {}
        history_points: list[HistoryPoint] = []
        for point in points:
            point_date = utc_date(point.timestamp)
            if point_date not in totals:
                snapshot = self._portfolio.snapshot(PortfolioQuery(
                    as_of_date=point_date,
                    currency=query.currency,
                    grouping=Grouping.ASSET,
                    include_detail=False,
                    currency_decimals=query.currency_decimals,
                ))
                totals[point_date] = snapshot.total_value

            triggers = [format_trigger(t) for t in point.triggers]
            history_points.append(HistoryPoint(
                timestamp=point.timestamp,
                date=point_date,
                total_value=totals[point_date],
                change_triggers=triggers or None,
            ))

        logger.info(
            f"History in {query.currency}: {len(history_points)} points "
            f"({start or 'open'} to {end or 'open'}, granularity={query.granularity})"
        )

        return PortfolioHistory(
            currency=query.currency,
            start_date=start,
            end_date=end,
            granularity=query.granularity,
            points=history_points,
            summary=summarize(history_points),
        )

    def change_points(self, query: ChangePointsQuery) -> ChangePointsReport:
        """
        The filtered change-point timeline, without valuation.

        Raises the same input errors as history().
        """
        start, end = self._date_bounds(query.start_date, query.end_date)
        points = self._timeline(
            start=start,
            end=end,
            granularity=query.granularity,
            options=CollectOptions(
                account_ids=query.account_ids,
                include_prices=query.include_prices,
                include_fx=query.include_fx,
                target_currency=query.currency,
            ),
        )

        return ChangePointsReport(
            start_date=start,
            end_date=end,
            granularity=query.granularity,
            include_prices=query.include_prices,
            points=points,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _date_bounds(
            self,
            start_value: date | str | None,
            end_value: date | str | None,
    ) -> tuple[date | None, date | None]:
        start = _coerce_date(start_value, "start")
        end = _coerce_date(end_value, "end")
        if start is not None and end is not None and start > end:
            raise ValidationError(
                f"Start date {start} is after end date {end}",
                field="start",
            )
        return start, end

    def _timeline(
            self,
            start: date | None,
            end: date | None,
            granularity: str,
            options: CollectOptions,
    ) -> list[ChangePoint]:
        spec = parse_granularity(granularity)
        points = collect_change_points(self._storage, self._market_data, options)
        points = filter_by_date_range(points, start, end)
        return filter_by_granularity(points, spec, CoalesceStrategy.LAST)

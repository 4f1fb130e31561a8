# worthline/routers/portfolio.py
"""
Portfolio valuation and history endpoints.

- GET /portfolio/snapshot      - Point-in-time valuation
- GET /portfolio/history       - Value at each change point over time
- GET /portfolio/change-points - The raw change-point timeline

Query strings are passed to the services as given: dates and
granularities are parsed by the service layer, whose ValidationError
subclasses map to 400 responses in main.py.
"""

from fastapi import APIRouter, Depends, Query

from worthline.config import settings
from worthline.dependencies import get_history_service, get_portfolio_service
from worthline.models import Asset, CryptoAsset, CurrencyAsset, EquityAsset
from worthline.schemas.assets import (
    BalanceTriggerSchema,
    CryptoAssetSchema,
    CurrencyAssetSchema,
    EquityAssetSchema,
    FxRateTriggerSchema,
    PriceTriggerSchema,
)
from worthline.schemas.history import (
    ChangePointSchema,
    ChangePointsResponse,
    HistoryPointSchema,
    HistorySummarySchema,
    PortfolioHistoryResponse,
)
from worthline.schemas.portfolio import (
    AccountHoldingSchema,
    AccountSummarySchema,
    AssetSummarySchema,
    PortfolioSnapshotResponse,
)
from worthline.services.history import (
    BalanceTrigger,
    ChangePoint,
    ChangePointsQuery,
    HistoryPoint,
    HistoryQuery,
    HistoryService,
    HistorySummary,
    PriceTrigger,
)
from worthline.services.valuation import (
    AccountSummary,
    AssetSummary,
    PortfolioQuery,
    PortfolioService,
)
from worthline.utils.date_utils import parse_optional_date, today_utc
from worthline.utils.formatting import format_rfc3339, format_utc_z

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_asset(asset: Asset) -> CurrencyAssetSchema | EquityAssetSchema | CryptoAssetSchema:
    """Map a domain asset to its tagged schema."""
    if isinstance(asset, CurrencyAsset):
        return CurrencyAssetSchema(iso_code=asset.iso_code)
    if isinstance(asset, EquityAsset):
        return EquityAssetSchema(ticker=asset.ticker, exchange=asset.exchange)
    if isinstance(asset, CryptoAsset):
        return CryptoAssetSchema(symbol=asset.symbol, network=asset.network)
    raise TypeError(f"Unsupported asset type: {type(asset).__name__}")


def _map_asset_summary(row: AssetSummary) -> AssetSummarySchema:
    """Map internal AssetSummary to Pydantic schema."""
    holdings = None
    if row.holdings is not None:
        holdings = [
            AccountHoldingSchema(
                account_id=h.account_id,
                account_name=h.account_name,
                amount=h.amount,
                balance_date=h.balance_date,
            )
            for h in row.holdings
        ]

    return AssetSummarySchema(
        asset=_map_asset(row.asset),
        total_amount=row.total_amount,
        amount_date=row.amount_date,
        price=row.price,
        price_date=row.price_date,
        price_timestamp=format_utc_z(row.price_timestamp) if row.price_timestamp else None,
        fx_rate=row.fx_rate,
        fx_date=row.fx_date,
        value_in_base=row.value_in_base,
        holdings=holdings,
    )


def _map_account_summary(row: AccountSummary) -> AccountSummarySchema:
    """Map internal AccountSummary to Pydantic schema."""
    return AccountSummarySchema(
        account_id=row.account_id,
        account_name=row.account_name,
        connection_name=row.connection_name,
        value_in_base=row.value_in_base,
    )


def _map_history_point(point: HistoryPoint) -> HistoryPointSchema:
    """Map internal HistoryPoint to Pydantic schema."""
    return HistoryPointSchema(
        timestamp=format_rfc3339(point.timestamp),
        date=point.date,
        total_value=point.total_value,
        change_triggers=point.change_triggers,
    )


def _map_summary(summary: HistorySummary | None) -> HistorySummarySchema | None:
    if summary is None:
        return None
    return HistorySummarySchema(
        initial_value=summary.initial_value,
        final_value=summary.final_value,
        absolute_change=summary.absolute_change,
        percentage_change=summary.percentage_change,
    )


def _map_trigger(trigger) -> BalanceTriggerSchema | PriceTriggerSchema | FxRateTriggerSchema:
    """Map an internal change trigger to its tagged schema."""
    if isinstance(trigger, BalanceTrigger):
        return BalanceTriggerSchema(account_id=trigger.account_id, asset=_map_asset(trigger.asset))
    if isinstance(trigger, PriceTrigger):
        return PriceTriggerSchema(asset_id=str(trigger.asset_id))
    return FxRateTriggerSchema(base=trigger.base, quote=trigger.quote)


def _map_change_point(point: ChangePoint) -> ChangePointSchema:
    """Map internal ChangePoint to Pydantic schema."""
    return ChangePointSchema(
        timestamp=format_utc_z(point.timestamp),
        triggers=[_map_trigger(t) for t in point.triggers],
    )


def _account_filter(account_ids: list[str] | None) -> tuple[str, ...] | None:
    return tuple(account_ids) if account_ids else None


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/snapshot",
    response_model=PortfolioSnapshotResponse,
    summary="Get portfolio snapshot",
    response_description="Portfolio value on a date with per-asset and per-account breakdowns",
)
def get_portfolio_snapshot(
        currency: str | None = Query(
            default=None,
            description="Reporting currency (default: REPORTING_CURRENCY)",
        ),
        as_of: str | None = Query(
            default=None,
            alias="date",
            description="Valuation date, YYYY-MM-DD (default: today, UTC)",
        ),
        group_by: str = Query(
            default="both",
            description="asset, account or both (anything else means both)",
        ),
        detail: bool = Query(
            default=False,
            description="Include per-account holdings in each asset row",
        ),
        currency_decimals: int | None = Query(
            default=None,
            ge=0,
            le=12,
            description="Round values to this many decimals (default: CURRENCY_DECIMALS)",
        ),
        service: PortfolioService = Depends(get_portfolio_service),
) -> PortfolioSnapshotResponse:
    """
    Value the portfolio as of a date.

    Assets without a price or FX rate are listed with their amounts but
    without `value_in_base`, and do not count towards `total_value`.

    Raises **400** for a malformed date.
    """
    as_of_date = parse_optional_date(as_of or None, field="date") or today_utc()

    snapshot = service.snapshot(PortfolioQuery(
        as_of_date=as_of_date,
        currency=currency or settings.reporting_currency,
        grouping=group_by,
        include_detail=detail,
        currency_decimals=currency_decimals if currency_decimals is not None else settings.currency_decimals,
    ))

    return PortfolioSnapshotResponse(
        as_of_date=snapshot.as_of_date,
        currency=snapshot.currency,
        total_value=snapshot.total_value,
        by_asset=(
            [_map_asset_summary(r) for r in snapshot.by_asset]
            if snapshot.by_asset is not None else None
        ),
        by_account=(
            [_map_account_summary(r) for r in snapshot.by_account]
            if snapshot.by_account is not None else None
        ),
    )


@router.get(
    "/history",
    response_model=PortfolioHistoryResponse,
    summary="Get portfolio history",
    response_description="Portfolio value at each change point",
)
def get_portfolio_history(
        currency: str | None = Query(
            default=None,
            description="Reporting currency (default: REPORTING_CURRENCY)",
        ),
        start: str | None = Query(default=None, description="First date, YYYY-MM-DD (inclusive)"),
        end: str | None = Query(default=None, description="Last date, YYYY-MM-DD (inclusive)"),
        granularity: str | None = Query(
            default=None,
            description="none, hourly, daily, weekly, monthly, yearly or a duration like 6h",
        ),
        include_prices: bool = Query(default=True, description="Price observations are change points"),
        include_fx: bool = Query(default=False, description="FX observations are change points"),
        account_id: list[str] | None = Query(
            default=None,
            description="Restrict change points to these accounts (repeatable)",
        ),
        service: HistoryService = Depends(get_history_service),
) -> PortfolioHistoryResponse:
    """
    Portfolio value over time.

    Each point is valued as of its UTC date. `summary` compares the first
    and last points and is omitted with fewer than two.

    Raises **400** for malformed dates, an unknown granularity or
    start after end, and **404** for an unknown account.
    """
    history = service.history(HistoryQuery(
        currency=currency or settings.reporting_currency,
        start_date=start,
        end_date=end,
        granularity=granularity or settings.default_granularity,
        include_prices=include_prices,
        include_fx=include_fx,
        account_ids=_account_filter(account_id),
        currency_decimals=settings.currency_decimals,
    ))

    return PortfolioHistoryResponse(
        currency=history.currency,
        start_date=history.start_date,
        end_date=history.end_date,
        granularity=history.granularity,
        points=[_map_history_point(p) for p in history.points],
        summary=_map_summary(history.summary),
    )


@router.get(
    "/change-points",
    response_model=ChangePointsResponse,
    summary="Get change points",
    response_description="Instants at which portfolio value may have changed",
)
def get_change_points(
        start: str | None = Query(default=None, description="First date, YYYY-MM-DD (inclusive)"),
        end: str | None = Query(default=None, description="Last date, YYYY-MM-DD (inclusive)"),
        granularity: str | None = Query(
            default=None,
            description="none, hourly, daily, weekly, monthly, yearly or a duration like 6h",
        ),
        include_prices: bool = Query(default=True, description="Include price observations"),
        include_fx: bool = Query(default=False, description="Include FX observations"),
        currency: str | None = Query(
            default=None,
            description="Target currency of FX pairs (default: REPORTING_CURRENCY)",
        ),
        account_id: list[str] | None = Query(
            default=None,
            description="Restrict to these accounts (repeatable)",
        ),
        service: HistoryService = Depends(get_history_service),
) -> ChangePointsResponse:
    """
    The change-point timeline with full trigger objects.

    Raises **400** for malformed dates or an unknown granularity, and
    **404** for an unknown account.
    """
    report = service.change_points(ChangePointsQuery(
        start_date=start,
        end_date=end,
        granularity=granularity or settings.default_granularity,
        include_prices=include_prices,
        include_fx=include_fx,
        currency=currency or settings.reporting_currency,
        account_ids=_account_filter(account_id),
    ))

    return ChangePointsResponse(
        start_date=report.start_date,
        end_date=report.end_date,
        granularity=report.granularity,
        include_prices=report.include_prices,
        points=[_map_change_point(p) for p in report.points],
    )

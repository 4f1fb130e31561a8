# worthline/services/history/change_points.py
"""
Change-point collection.

A change point is an instant at which the portfolio's value may have
changed: a balance was recorded, a price was observed, an FX rate was
observed. Collecting them turns a raw event stream into a sorted
timeline, one point per distinct instant, that the history report
values point by point.

Collection run (collect_change_points):
    1. Every balance of every snapshot of every participating account
       adds a balance trigger at the snapshot's timestamp.
    2. With include_prices, every price observation of a held asset
       (currencies included) adds a price trigger at 23:59:59 UTC of
       the price's as_of_date (never its capture timestamp), so a
       same-day price always sorts after that day's intraday balance
       changes.
    3. With include_fx, every FX observation converting a held currency
       (or a price quote currency) into the target currency adds an
       fx_rate trigger at 23:59:59 UTC of the rate's as_of_date.

Determinism:
    - points are strictly ascending by timestamp
    - triggers sharing a timestamp keep arrival order, except price
      triggers, which are ordered by AssetId among themselves
    - every observation adds its own trigger: a close and a quote for
      the same asset and date give two price triggers at one instant
    - held assets and currencies are visited in sorted order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from worthline.models import Asset, CurrencyAsset
from worthline.services.asset_identity import AssetId, normalize_asset, normalize_currency_code
from worthline.services.exceptions import AccountNotFoundError, ValidationError
from worthline.services.history.types import (
    BalanceTrigger,
    ChangePoint,
    ChangeTrigger,
    FxRateTrigger,
    PriceTrigger,
)
from worthline.utils.date_utils import end_of_day

if TYPE_CHECKING:
    from worthline.services.protocols import MarketDataStoreProtocol, StorageProtocol

logger = logging.getLogger(__name__)


# =============================================================================
# COLLECTOR
# =============================================================================

class ChangePointCollector:
    """
    Request-scoped accumulator of change triggers.

    Create one per collection run; into_change_points() consumes it.
    """

    def __init__(self) -> None:
        self._buckets: dict[datetime, list[ChangeTrigger]] = {}
        self._held_assets: dict[AssetId, Asset] = {}
        self._consumed = False

    def add_balance_change(self, timestamp: datetime, account_id: str, asset: Asset) -> None:
        self._check_open()
        asset_id = AssetId.from_asset(asset)
        self._held_assets.setdefault(asset_id, normalize_asset(asset))
        self._bucket(timestamp).append(BalanceTrigger(account_id=account_id, asset=asset))

    def add_price_change(self, timestamp: datetime, asset_id: AssetId) -> None:
        self._check_open()
        self._bucket(timestamp).append(PriceTrigger(asset_id=asset_id))

    def add_fx_change(self, timestamp: datetime, base: str, quote: str) -> None:
        self._check_open()
        self._bucket(timestamp).append(FxRateTrigger(base=base, quote=quote))

    def held_assets(self) -> set[AssetId]:
        """Identities of every asset referenced by a balance trigger so far."""
        return set(self._held_assets)

    def held_asset_map(self) -> dict[AssetId, Asset]:
        """Held assets keyed by identity, in normalized form."""
        return dict(self._held_assets)

    def into_change_points(self) -> list[ChangePoint]:
        """
        Sorted change points, one per distinct timestamp.

        Raises:
            RuntimeError: If the collector was already consumed
        """
        self._check_open()
        self._consumed = True

        points = []
        for timestamp in sorted(self._buckets):
            triggers = self._buckets[timestamp]
            prices = iter(sorted(
                (t for t in triggers if isinstance(t, PriceTrigger)),
                key=lambda t: t.asset_id,
            ))
            ordered = tuple(
                next(prices) if isinstance(t, PriceTrigger) else t
                for t in triggers
            )
            points.append(ChangePoint(timestamp=timestamp, triggers=ordered))

        self._buckets = {}
        return points

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _check_open(self) -> None:
        if self._consumed:
            raise RuntimeError("ChangePointCollector has already been consumed")

    def _bucket(self, timestamp: datetime) -> list[ChangeTrigger]:
        return self._buckets.setdefault(timestamp, [])


# =============================================================================
# COLLECTION RUN
# =============================================================================

@dataclass(frozen=True)
class CollectOptions:
    """
    Options for collect_change_points.

    Attributes:
        account_ids: Restrict to these accounts (None or empty = all).
            Unknown ids fail the whole run.
        include_prices: Add price observations of held assets
        include_fx: Add FX observations into target_currency
        target_currency: Required when include_fx is set
    """

    account_ids: tuple[str, ...] | None = None
    include_prices: bool = True
    include_fx: bool = False
    target_currency: str | None = None


def collect_change_points(
        storage: StorageProtocol,
        market_data: MarketDataStoreProtocol,
        options: CollectOptions | None = None,
) -> list[ChangePoint]:
    """
    Collect the change-point timeline of the portfolio.

    Accounts excluded from the portfolio never contribute, even when
    requested explicitly.

    Raises:
        AccountNotFoundError: If an explicitly requested account does not exist
        ValidationError: If include_fx is set without a target currency
    """
    options = options or CollectOptions()
    if options.include_fx and not options.target_currency:
        raise ValidationError(
            "A target currency is required to collect FX change points",
            field="currency",
        )

    accounts = storage.list_accounts()
    if options.account_ids:
        requested = set(options.account_ids)
        missing = requested - {a.id for a in accounts}
        if missing:
            logger.warning(f"Change points requested for unknown accounts: {sorted(missing)}")
            raise AccountNotFoundError(list(missing))
        accounts = [a for a in accounts if a.id in requested]

    collector = ChangePointCollector()

    for account in accounts:
        config = storage.get_account_config(account.id)
        if config is not None and config.exclude_from_portfolio:
            continue
        for snapshot in storage.get_balance_snapshots(account.id):
            for balance in snapshot.balances:
                collector.add_balance_change(snapshot.timestamp, account.id, balance.asset)

    held = collector.held_asset_map()
    currencies: set[str] = set()

    for asset_id in sorted(held):
        asset = held[asset_id]
        if isinstance(asset, CurrencyAsset):
            currencies.add(asset.iso_code)
        if not (options.include_prices or options.include_fx):
            continue
        for price in market_data.get_all_prices(asset_id):
            currencies.add(normalize_currency_code(price.quote_currency))
            if options.include_prices:
                collector.add_price_change(end_of_day(price.as_of_date), asset_id)

    if options.include_fx:
        target = normalize_currency_code(options.target_currency)
        for code in sorted(currencies - {target}):
            for rate in market_data.get_all_fx_rates(code, target):
                collector.add_fx_change(end_of_day(rate.as_of_date), code, target)

    points = collector.into_change_points()
    logger.info(
        f"Collected {len(points)} change points from {len(accounts)} accounts "
        f"({len(held)} held assets, prices={options.include_prices}, fx={options.include_fx})"
    )
    return points


__all__ = [
    "ChangePointCollector",
    "CollectOptions",
    "collect_change_points",
]

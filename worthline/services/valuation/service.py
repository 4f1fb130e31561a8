# worthline/services/valuation/service.py
"""
Portfolio Service - orchestrator for point-in-time valuation.

Single entry point:
- snapshot(): portfolio worth on a date, in a currency, with per-asset
  and/or per-account breakdowns

Design Principles:
- Dependency Injection: storage and market data resolver via constructor
- No HTTP Knowledge: raises domain exceptions, not HTTPException
- Composable: one specialized calculator per step
- Read-only: never writes through its collaborators

Flow:
    Storage accounts/configs/snapshots
        → BalanceSelector         (effective balance per account)
        → HoldingsAggregator      (merge by AssetId)
        → MarketDataResolver      (one per-unit resolution per asset)
        → AssetSummaryCalculator  (by_asset rows + total_value)
        → AccountSummaryCalculator(by_account rows)

Usage:
    from worthline.services.valuation import PortfolioService, PortfolioQuery

    service = PortfolioService(storage, MarketDataResolver(store))
    snapshot = service.snapshot(PortfolioQuery(as_of_date=date(2024, 3, 1), currency="USD"))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from worthline.models import Account, BalanceBackfillPolicy, Connection
from worthline.services.valuation.calculators import (
    AccountSummaryCalculator,
    AssetSummaryCalculator,
    BalanceSelector,
    HoldingsAggregator,
    format_value,
)
from worthline.services.valuation.types import (
    EffectiveBalance,
    PortfolioQuery,
    PortfolioSnapshot,
    parse_grouping,
)

if TYPE_CHECKING:
    from worthline.services.market_data.resolver import MarketDataResolver, ValueResolution
    from worthline.services.asset_identity import AssetId
    from worthline.services.protocols import StorageProtocol

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Computes point-in-time portfolio snapshots.

    Attributes:
        _storage: Account and balance collaborator
        _resolver: Price / FX resolution
        _selector: Effective balance per account
        _aggregator: Cross-account merge by asset
        _asset_calc: by_asset rows and total
        _account_calc: by_account rows
    """

    def __init__(self, storage: StorageProtocol, resolver: MarketDataResolver) -> None:
        self._storage = storage
        self._resolver = resolver

        self._selector = BalanceSelector()
        self._aggregator = HoldingsAggregator()
        self._asset_calc = AssetSummaryCalculator()
        self._account_calc = AccountSummaryCalculator()

        logger.debug("PortfolioService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def snapshot(self, query: PortfolioQuery) -> PortfolioSnapshot:
        """
        Value the portfolio as of a date.

        Args:
            query: Date, reporting currency, grouping and detail options

        Returns:
            PortfolioSnapshot. by_asset is sorted by AssetId, by_account by
            account name; a breakdown excluded by the grouping is None.

        Errors from the storage or market data collaborators propagate
        unchanged. Missing prices / FX rates never raise.
        """
        grouping = parse_grouping(query.grouping)

        accounts = self._storage.list_accounts()
        connections = self._storage.list_connections()
        account_map: dict[str, Account] = {a.id: a for a in accounts}
        connection_map: dict[str, Connection] = {c.id: c for c in connections}

        balances = self._effective_balances(accounts, query)
        aggregates = self._aggregator.aggregate(balances)

        resolutions: dict[AssetId, ValueResolution] = {
            asset_id: self._resolver.resolve(aggregate.asset, query.currency, query.as_of_date)
            for asset_id, aggregate in aggregates.items()
        }

        asset_rows, total = self._asset_calc.calculate(
            aggregates=aggregates,
            resolutions=resolutions,
            account_names={a.id: a.name for a in accounts},
            include_detail=query.include_detail,
            currency_decimals=query.currency_decimals,
        )

        account_rows = None
        if grouping.includes_accounts:
            account_rows = self._account_calc.calculate(
                balances=balances,
                resolutions=resolutions,
                accounts=account_map,
                connections=connection_map,
                currency_decimals=query.currency_decimals,
            )

        unresolved = sum(1 for r in resolutions.values() if not r.is_resolved)
        backfilled = sum(1 for b in balances if b.backfill is not None)
        logger.info(
            f"Snapshot {query.as_of_date} in {query.currency}: "
            f"{len(balances)} accounts ({backfilled} backfilled), "
            f"{len(aggregates)} assets, {unresolved} unresolved"
        )

        return PortfolioSnapshot(
            as_of_date=query.as_of_date,
            currency=query.currency,
            total_value=format_value(total, query.currency_decimals),
            by_asset=asset_rows if grouping.includes_assets else None,
            by_account=account_rows,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _effective_balances(
            self,
            accounts: list[Account],
            query: PortfolioQuery,
    ) -> list[EffectiveBalance]:
        """Effective balance of every account that takes part in the portfolio."""
        balances: list[EffectiveBalance] = []

        for account in accounts:
            config = self._storage.get_account_config(account.id)
            if config is not None and config.exclude_from_portfolio:
                continue

            policy = config.balance_backfill if config is not None else BalanceBackfillPolicy.NONE
            effective = self._selector.select(
                account_id=account.id,
                snapshots=self._storage.get_balance_snapshots(account.id),
                policy=BalanceBackfillPolicy(policy),
                as_of_date=query.as_of_date,
                currency=query.currency,
            )
            if effective is not None:
                balances.append(effective)

        return balances

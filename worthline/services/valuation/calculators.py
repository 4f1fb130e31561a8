# worthline/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator does one step of a snapshot:
- BalanceSelector: Picks the snapshot an account contributes for a date
- HoldingsAggregator: Merges balances across accounts by asset identity
- AssetSummaryCalculator: Values aggregated assets, builds by_asset rows
- AccountSummaryCalculator: Sums each account's holdings, builds by_account rows

Design Principles:
- Stateless (no instance state beyond injected collaborators)
- Receives all inputs explicitly
- Uses Decimal for ALL arithmetic, strings only at the output boundary
- Unresolved market data is an absent field, never zero and never an error

Usage:
    selector = BalanceSelector()
    effective = selector.select(
        account_id="a1",
        snapshots=storage.get_balance_snapshots("a1"),
        policy=BalanceBackfillPolicy.NONE,
        as_of_date=date(2024, 3, 1),
        currency="USD",
    )
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from worthline.models import (
    Account,
    AssetBalance,
    BalanceBackfillPolicy,
    BalanceSnapshot,
    Connection,
    CurrencyAsset,
)
from worthline.services.asset_identity import AssetId, normalize_asset
from worthline.services.market_data.resolver import ValueResolution
from worthline.services.valuation.types import (
    AccountHolding,
    AccountSummary,
    AssetAggregate,
    AssetSummary,
    EffectiveBalance,
    HoldingEntry,
)
from worthline.utils.date_utils import end_of_day
from worthline.utils.decimal_utils import ZERO, normalize_decimal, round_decimal, to_decimal

logger = logging.getLogger(__name__)


def format_value(value: Decimal, currency_decimals: int | None) -> str:
    """Normalized string of a reported value, optionally rounded half-up."""
    if currency_decimals is None:
        return normalize_decimal(value)
    return normalize_decimal(round_decimal(value, currency_decimals))


# =============================================================================
# BALANCE SELECTOR
# =============================================================================

class BalanceSelector:
    """
    Chooses the balance snapshot an account contributes to a valuation.

    Rules:
        1. The latest snapshot with timestamp <= 23:59:59 UTC of the
           as-of date (on equal timestamps the first appended wins).
        2. Otherwise the account's backfill policy:
           none           -> nothing
           zero           -> one zero balance in the reporting currency
           carry_earliest -> the earliest snapshot ever recorded, even
                             though it lies after the as-of date
    """

    def select(
            self,
            account_id: str,
            snapshots: list[BalanceSnapshot],
            policy: BalanceBackfillPolicy,
            as_of_date: date,
            currency: str,
    ) -> EffectiveBalance | None:
        cutoff = end_of_day(as_of_date)

        latest: BalanceSnapshot | None = None
        for snapshot in snapshots:
            if snapshot.timestamp <= cutoff and (
                    latest is None or snapshot.timestamp > latest.timestamp
            ):
                latest = snapshot

        if latest is not None:
            return EffectiveBalance(
                account_id=account_id,
                timestamp=latest.timestamp,
                balances=latest.balances,
            )

        if policy == BalanceBackfillPolicy.ZERO:
            logger.debug(f"Account {account_id}: no balance by {as_of_date}, backfilling zero")
            return EffectiveBalance(
                account_id=account_id,
                timestamp=cutoff,
                balances=(AssetBalance(asset=CurrencyAsset(currency), amount="0"),),
                backfill=BalanceBackfillPolicy.ZERO,
            )

        if policy == BalanceBackfillPolicy.CARRY_EARLIEST and snapshots:
            earliest = snapshots[0]
            for snapshot in snapshots[1:]:
                if snapshot.timestamp < earliest.timestamp:
                    earliest = snapshot
            logger.debug(
                f"Account {account_id}: no balance by {as_of_date}, "
                f"carrying earliest snapshot from {earliest.timestamp.isoformat()}"
            )
            return EffectiveBalance(
                account_id=account_id,
                timestamp=earliest.timestamp,
                balances=earliest.balances,
                backfill=BalanceBackfillPolicy.CARRY_EARLIEST,
            )

        logger.debug(f"Account {account_id}: no balance by {as_of_date}, skipped")
        return None


# =============================================================================
# HOLDINGS AGGREGATOR
# =============================================================================

class HoldingsAggregator:
    """
    Merges effective balances across accounts, keyed by asset identity.

    " usd" held in one account and "USD" in another become one aggregate
    whose total is the exact sum of both amounts.
    """

    def aggregate(self, balances: list[EffectiveBalance]) -> dict[AssetId, AssetAggregate]:
        aggregates: dict[AssetId, AssetAggregate] = {}

        for effective in balances:
            balance_date = effective.balance_date
            for asset_balance in effective.balances:
                asset = normalize_asset(asset_balance.asset)
                asset_id = AssetId.from_asset(asset)
                amount = to_decimal(asset_balance.amount, field="amount")
                entry = HoldingEntry(
                    account_id=effective.account_id,
                    amount=amount,
                    balance_date=balance_date,
                )

                existing = aggregates.get(asset_id)
                if existing is None:
                    aggregates[asset_id] = AssetAggregate(
                        asset_id=asset_id,
                        asset=asset,
                        total_amount=amount,
                        latest_balance_date=balance_date,
                        holdings=[entry],
                    )
                    continue

                existing.total_amount += amount
                if balance_date > existing.latest_balance_date:
                    existing.latest_balance_date = balance_date
                existing.holdings.append(entry)

        return aggregates


# =============================================================================
# ASSET SUMMARY CALCULATOR
# =============================================================================

class AssetSummaryCalculator:
    """
    Builds by_asset rows and the portfolio total.

    The total is the exact sum of the assets that resolved; unresolved
    assets are still listed (with total_amount) but contribute nothing.
    """

    def calculate(
            self,
            aggregates: dict[AssetId, AssetAggregate],
            resolutions: dict[AssetId, ValueResolution],
            account_names: dict[str, str],
            include_detail: bool,
            currency_decimals: int | None = None,
    ) -> tuple[list[AssetSummary], Decimal]:
        """
        Returns:
            (rows sorted by AssetId, total value in the target currency)
        """
        summaries: list[AssetSummary] = []
        total = ZERO

        for asset_id in sorted(aggregates):
            aggregate = aggregates[asset_id]
            resolution = resolutions[asset_id]
            value = resolution.value_of(aggregate.total_amount)
            if value is not None:
                total += value

            holdings = None
            if include_detail:
                holdings = [
                    AccountHolding(
                        account_id=h.account_id,
                        account_name=account_names.get(h.account_id, ""),
                        amount=normalize_decimal(h.amount),
                        balance_date=h.balance_date,
                    )
                    for h in aggregate.holdings
                ]

            price = resolution.price
            fx = resolution.fx
            summaries.append(AssetSummary(
                asset=aggregate.asset,
                total_amount=normalize_decimal(aggregate.total_amount),
                amount_date=aggregate.latest_balance_date,
                price=normalize_decimal(to_decimal(price.price)) if price else None,
                price_date=price.as_of_date if price else None,
                price_timestamp=price.timestamp if price else None,
                fx_rate=normalize_decimal(to_decimal(fx.rate)) if fx else None,
                fx_date=fx.as_of_date if fx else None,
                value_in_base=format_value(value, currency_decimals) if value is not None else None,
                holdings=holdings,
            ))

        return summaries, total


# =============================================================================
# ACCOUNT SUMMARY CALCULATOR
# =============================================================================

class AccountSummaryCalculator:
    """
    Builds by_account rows.

    An account's value_in_base is the sum of its own holdings valued
    with the same per-asset resolutions as the asset rows. If any of its
    holdings is unresolved the field is omitted.

    Accounts whose connection is unknown are left out of the breakdown
    (their holdings still count towards by_asset and the total).
    """

    def calculate(
            self,
            balances: list[EffectiveBalance],
            resolutions: dict[AssetId, ValueResolution],
            accounts: dict[str, Account],
            connections: dict[str, Connection],
            currency_decimals: int | None = None,
    ) -> list[AccountSummary]:
        summaries: list[AccountSummary] = []

        for effective in balances:
            account = accounts.get(effective.account_id)
            if account is None:
                continue
            connection = connections.get(account.connection_id)
            if connection is None:
                logger.debug(
                    f"Account {account.id}: connection {account.connection_id} not found, "
                    "omitted from by_account"
                )
                continue

            total = ZERO
            has_missing = False
            for asset_balance in effective.balances:
                asset_id = AssetId.from_asset(asset_balance.asset)
                value = resolutions[asset_id].value_of(
                    to_decimal(asset_balance.amount, field="amount")
                )
                if value is None:
                    has_missing = True
                else:
                    total += value

            summaries.append(AccountSummary(
                account_id=account.id,
                account_name=account.name,
                connection_name=connection.name,
                value_in_base=None if has_missing else format_value(total, currency_decimals),
            ))

        summaries.sort(key=lambda s: (s.account_name, s.account_id))
        return summaries

# worthline/services/protocols.py
"""
Protocol interfaces for service dependency injection.

The engine never owns its data: accounts, balances, prices and FX rates
are read through these collaborator interfaces. Using typing.Protocol
enables structural subtyping:
- Any backend (files, database, mobile key-value store) satisfies the
  protocol without inheriting from it
- Test doubles work without explicit inheritance

Collaborators are read-only from the engine's point of view. Errors they
raise (I/O failures, corrupt records) propagate to the caller unchanged;
retries, if any, belong inside the collaborator.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from worthline.models import (
        Account,
        AccountConfig,
        BalanceSnapshot,
        Connection,
        FxRateKind,
        FxRatePoint,
        PriceKind,
        PricePoint,
    )
    from worthline.services.asset_identity import AssetId


class StorageProtocol(Protocol):
    """Interface required by PortfolioService and change-point collection."""

    def list_accounts(self) -> list[Account]:
        ...

    def get_account_config(self, account_id: str) -> AccountConfig | None:
        """Return the account's overrides, or None to use the defaults."""
        ...

    def list_connections(self) -> list[Connection]:
        ...

    def get_balance_snapshots(self, account_id: str) -> list[BalanceSnapshot]:
        """Return the account's snapshots in the order they were appended."""
        ...


class MarketDataStoreProtocol(Protocol):
    """Interface required by MarketDataResolver and change-point collection."""

    def get_price(
        self,
        asset_id: AssetId,
        as_of_date: date,
        kind: PriceKind,
    ) -> PricePoint | None:
        ...

    def get_all_prices(self, asset_id: AssetId) -> list[PricePoint]:
        ...

    def get_fx_rate(
        self,
        base: str,
        quote: str,
        as_of_date: date,
        kind: FxRateKind,
    ) -> FxRatePoint | None:
        ...

    def get_all_fx_rates(self, base: str, quote: str) -> list[FxRatePoint]:
        ...

# worthline/services/storage.py
"""
In-memory storage collaborator.

Implements StorageProtocol on plain dictionaries. It backs the HTTP API
when no persistent backend is wired in, and is the fixture used by the
test suite. Persistence is out of scope for this package.

Snapshots are append-only: add_balance_snapshot never replaces an
earlier observation, and get_balance_snapshots returns them in append
order (not necessarily chronological order).

Usage:
    storage = InMemoryStorage()
    storage.add_connection(Connection(id="c1", name="Bank"))
    storage.add_account(Account(id="a1", name="Checking", connection_id="c1"))
    storage.add_balance_snapshot("a1", BalanceSnapshot(timestamp=..., balances=(...)))
"""

import logging

from worthline.models import Account, AccountConfig, BalanceSnapshot, Connection

logger = logging.getLogger(__name__)


class InMemoryStorage:
    """Dictionary-backed implementation of StorageProtocol."""

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._accounts: dict[str, Account] = {}
        self._configs: dict[str, AccountConfig] = {}
        self._snapshots: dict[str, list[BalanceSnapshot]] = {}

    # =========================================================================
    # WRITES (used by synchronizers, importers and tests)
    # =========================================================================

    def add_connection(self, connection: Connection) -> None:
        self._connections[connection.id] = connection

    def add_account(self, account: Account, config: AccountConfig | None = None) -> None:
        self._accounts[account.id] = account
        if config is not None:
            self._configs[account.id] = config

    def set_account_config(self, account_id: str, config: AccountConfig) -> None:
        self._configs[account_id] = config

    def add_balance_snapshot(self, account_id: str, snapshot: BalanceSnapshot) -> None:
        self._snapshots.setdefault(account_id, []).append(snapshot)
        logger.debug(
            f"Recorded snapshot for account {account_id} at {snapshot.timestamp.isoformat()} "
            f"({len(snapshot.balances)} balances)"
        )

    # =========================================================================
    # READS (StorageProtocol)
    # =========================================================================

    def list_accounts(self) -> list[Account]:
        return list(self._accounts.values())

    def get_account_config(self, account_id: str) -> AccountConfig | None:
        return self._configs.get(account_id)

    def list_connections(self) -> list[Connection]:
        return list(self._connections.values())

    def get_balance_snapshots(self, account_id: str) -> list[BalanceSnapshot]:
        return list(self._snapshots.get(account_id, []))


__all__ = ["InMemoryStorage"]

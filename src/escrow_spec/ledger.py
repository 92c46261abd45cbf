"""Ledger collaborator contract and an in-memory reference ledger."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import ContextManager, Hashable, Iterator, Optional, Protocol

from .config import MAX_AMOUNT

logger = logging.getLogger(__name__)


class Ledger(Protocol):
    def transfer(self, amount: int, source: Hashable, destination: Hashable) -> bool:
        """Move value atomically; a failed transfer must not touch balances."""
        ...

    def atomic(self) -> ContextManager[None]:
        """Scope whose transfers are all reverted if it exits with an exception."""
        ...


class InMemoryLedger:
    """Balance map with snapshot-based atomic scopes.

    Accounts are created implicitly on first credit. Transfers of zero are
    accepted and are no-ops.
    """

    def __init__(self, balances: Optional[dict[Hashable, int]] = None) -> None:
        self._balances: dict[Hashable, int] = dict(balances or {})

    def balance_of(self, account: Hashable) -> int:
        return self._balances.get(account, 0)

    def balances(self) -> dict[Hashable, int]:
        return dict(self._balances)

    def credit(self, account: Hashable, amount: int) -> None:
        if amount < 0 or amount > MAX_AMOUNT:
            raise ValueError(f"credit amount out of range: {amount}")
        self._balances[account] = self.balance_of(account) + amount

    def transfer(self, amount: int, source: Hashable, destination: Hashable) -> bool:
        if amount < 0:
            return False
        available = self.balance_of(source)
        if available < amount:
            logger.debug("transfer of %d rejected: balance %d", amount, available)
            return False
        self._balances[source] = available - amount
        self._balances[destination] = self.balance_of(destination) + amount
        return True

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = dict(self._balances)
        try:
            yield
        except BaseException:
            self._balances = snapshot
            raise

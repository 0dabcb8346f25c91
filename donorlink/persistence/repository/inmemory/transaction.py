"""In-memory transaction boundary for testing."""

import copy
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from donorlink.domain.repository import TransactionManager


class InMemoryTransactionManager(TransactionManager):
    """Counts commits and rollbacks over a set of in-memory repositories.

    ``atomic()`` snapshots the repositories' state on entry and restores it
    when the block raises.
    """

    def __init__(self, repositories: Sequence[Any] = ()) -> None:
        self.repositories = list(repositories)
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        snapshot = [copy.deepcopy(vars(repo)) for repo in self.repositories]
        try:
            yield
        except Exception:
            for repo, state in zip(self.repositories, snapshot):
                vars(repo).clear()
                vars(repo).update(state)
            self.rollbacks += 1
            raise

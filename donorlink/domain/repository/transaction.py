"""Transaction boundary interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class TransactionManager(ABC):
    """Explicit transaction control inside a request.

    Requests normally commit once when their session closes. Work that must
    be durable before a lock is released (webhook processing) commits early,
    multi-step writes run inside ``atomic()``, and the HTTP error path rolls
    back whatever a rejected request wrote.
    """

    @abstractmethod
    async def commit(self) -> None:
        """Make every write issued so far durable."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every write not yet committed."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Group writes so that an exception inside the block undoes all of them.

        The exception still propagates to the caller.
        """
        pass

"""Server session repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from donorlink.domain.model.session import ServerSession
from donorlink.domain.value import SessionId


class SessionRepository(ABC):
    """Server-side store for admin and donor sessions."""

    @abstractmethod
    async def find_by_id(self, session_id: SessionId) -> ServerSession | None:
        pass

    @abstractmethod
    async def save(self, session: ServerSession) -> ServerSession:
        pass

    @abstractmethod
    async def delete(self, session_id: SessionId) -> None:
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions that expired before ``now``.

        Returns:
            Number of sessions removed
        """
        pass

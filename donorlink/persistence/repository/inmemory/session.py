"""In-memory session store for testing."""

from datetime import datetime
from typing import Optional

from donorlink.domain.model.session import ServerSession
from donorlink.domain.repository.session import SessionRepository
from donorlink.domain.value import SessionId


class InMemorySessionRepository(SessionRepository):
    def __init__(self) -> None:
        self._sessions: dict[SessionId, ServerSession] = {}

    async def find_by_id(self, session_id: SessionId) -> Optional[ServerSession]:
        return self._sessions.get(session_id)

    async def save(self, session: ServerSession) -> ServerSession:
        self._sessions[session.id] = session
        return session

    async def delete(self, session_id: SessionId) -> None:
        self._sessions.pop(session_id, None)

    async def delete_expired(self, now: datetime) -> int:
        expired = [s.id for s in self._sessions.values() if s.expires_at <= now]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

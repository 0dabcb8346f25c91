"""Server-side session domain services.

Admin and donor sessions share one store. A session's ``data`` says which
surface it opens, and each service only accepts its own kind.
"""

import hmac
import secrets
from datetime import timedelta
from typing import Any

import logfire

from donorlink.domain.error import UnauthorizedError
from donorlink.domain.model.common import utc_now
from donorlink.domain.model.session import ServerSession
from donorlink.domain.repository import SessionRepository
from donorlink.domain.value import DonorId, SessionId

from .base import Service


class SessionService(Service):
    """Open, load and close stored sessions."""

    def __init__(self, session_repository: SessionRepository, ttl_hours: int) -> None:
        self.session_repository = session_repository
        self.ttl = timedelta(hours=ttl_hours)

    async def _open(self, data: dict[str, Any]) -> ServerSession:
        now = utc_now()
        await self.session_repository.delete_expired(now)
        session = ServerSession(
            id=SessionId(secrets.token_urlsafe(32)),
            data={**data, "createdAt": now.isoformat()},
            expires_at=now + self.ttl,
        )
        return await self.session_repository.save(session)

    async def _load(self, session_id: str | None) -> ServerSession | None:
        if not session_id:
            return None
        session = await self.session_repository.find_by_id(SessionId(session_id))
        if session and session.is_expired():
            await self.session_repository.delete(session.id)
            logfire.info("Expired session removed")
            return None
        return session

    async def _close(self, session_id: str | None) -> None:
        if session_id:
            await self.session_repository.delete(SessionId(session_id))


class AdminSessionService(SessionService):
    """Password login and server-side sessions for the admin surface."""

    def __init__(
        self,
        session_repository: SessionRepository,
        admin_password: str,
        ttl_hours: int = 12,
    ) -> None:
        super().__init__(session_repository, ttl_hours)
        self.admin_password = admin_password

    async def login(self, password: str) -> ServerSession:
        """Check the admin password and open a session.

        Raises:
            UnauthorizedError: If the password is wrong
        """
        with logfire.span("admin_session_service.login"):
            if not password or not hmac.compare_digest(
                password.encode("utf-8"), self.admin_password.encode("utf-8")
            ):
                logfire.warn("Admin login rejected")
                raise UnauthorizedError("Invalid admin password")

            saved = await self._open({"isAdmin": True})
            logfire.info("Admin session created")
            return saved

    async def find_session(self, session_id: str | None) -> ServerSession | None:
        """Load a live admin session. Expired sessions are deleted."""
        with logfire.span("admin_session_service.find_session"):
            session = await self._load(session_id)
            if session is None or not session.is_admin:
                return None
            return session

    async def require_session(self, session_id: str | None) -> ServerSession:
        """Load a live admin session.

        Raises:
            UnauthorizedError: If the session is missing or expired
        """
        session = await self.find_session(session_id)
        if session is None:
            raise UnauthorizedError("Admin authentication required")
        return session

    async def logout(self, session_id: str | None) -> None:
        with logfire.span("admin_session_service.logout"):
            session = await self.find_session(session_id)
            if session is not None:
                await self._close(session.id)
                logfire.info("Admin session closed")


class DonorSessionService(SessionService):
    """Sessions for donors signed in to their own dashboard."""

    async def open(self, donor_id: DonorId) -> ServerSession:
        with logfire.span("donor_session_service.open", donor_id=str(donor_id)):
            saved = await self._open({"donorId": str(donor_id)})
            logfire.info("Donor session created", donor_id=str(donor_id))
            return saved

    async def find_donor_id(self, session_id: str | None) -> DonorId | None:
        """Donor behind a live donor session, if any."""
        with logfire.span("donor_session_service.find_donor_id"):
            session = await self._load(session_id)
            if session is None:
                return None
            return session.donor_id

    async def close(self, session_id: str | None) -> None:
        with logfire.span("donor_session_service.close"):
            if await self.find_donor_id(session_id) is not None:
                await self._close(session_id)
                logfire.info("Donor session closed")

"""Admin session use cases."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.domain.service import AdminSessionService


class AdminLoginRequest(BaseModel):
    password: str = ""


class AdminSessionResponse(ApiModel):
    """Session state returned to the admin UI.

    ``session_id`` is only used by the route to set the cookie and is never
    serialized.
    """

    authenticated: bool
    expires_at: datetime | None = None
    session_id: str | None = None

    def public(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude={"session_id"})


class AdminSessionRequest(BaseModel):
    session_id: str | None = None


class AdminLoginUseCase(BaseUseCase):
    def __init__(self, admin_session_service: AdminSessionService) -> None:
        self.admin_session_service = admin_session_service

    async def execute(self, request: AdminLoginRequest) -> AdminSessionResponse:
        """Open an admin session.

        Raises:
            UnauthorizedError: If the password is wrong
        """
        with logfire.span("admin_login.execute"):
            session = await self.admin_session_service.login(request.password)
            return AdminSessionResponse(
                authenticated=True,
                expires_at=session.expires_at,
                session_id=str(session.id),
            )


class AdminLogoutUseCase(BaseUseCase):
    def __init__(self, admin_session_service: AdminSessionService) -> None:
        self.admin_session_service = admin_session_service

    async def execute(self, request: AdminSessionRequest) -> AdminSessionResponse:
        with logfire.span("admin_logout.execute"):
            await self.admin_session_service.logout(request.session_id)
            return AdminSessionResponse(authenticated=False)


class GetAdminSessionUseCase(BaseUseCase):
    """Report whether the cookie carries a live session. Never raises."""

    def __init__(self, admin_session_service: AdminSessionService) -> None:
        self.admin_session_service = admin_session_service

    async def execute(self, request: AdminSessionRequest) -> AdminSessionResponse:
        with logfire.span("get_admin_session.execute"):
            if not request.session_id:
                return AdminSessionResponse(authenticated=False)
            session = await self.admin_session_service.find_session(request.session_id)
            if session is None:
                return AdminSessionResponse(authenticated=False)
            return AdminSessionResponse(
                authenticated=True, expires_at=session.expires_at
            )

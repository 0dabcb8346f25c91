"""Unit tests for the admin session use cases."""

import pytest

from donorlink.application.usecase.admin import (
    AdminLoginRequest,
    AdminLoginUseCase,
    AdminLogoutUseCase,
    AdminSessionRequest,
    GetAdminSessionUseCase,
)
from donorlink.domain.error import UnauthorizedError
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestAdminSession:
    """Login, session lookup and logout."""

    @pytest.mark.asyncio
    async def test_login_opens_session(self, unit_env):
        """Should open a session that the session lookup reports as live."""
        # Arrange
        login = await unit_env.get(AdminLoginUseCase)
        get_session = await unit_env.get(GetAdminSessionUseCase)

        # Act
        result = await login.execute(AdminLoginRequest(password="test-admin-password"))
        state = await get_session.execute(
            AdminSessionRequest(session_id=result.session_id)
        )

        # Assert
        assert result.authenticated
        assert result.session_id
        assert "sessionId" not in result.public()
        assert state.authenticated
        assert state.expires_at == result.expires_at

    @pytest.mark.asyncio
    async def test_wrong_password(self, unit_env):
        """Should reject a wrong password."""
        login = await unit_env.get(AdminLoginUseCase)

        with pytest.raises(UnauthorizedError):
            await login.execute(AdminLoginRequest(password="guess"))

    @pytest.mark.asyncio
    async def test_logout_closes_session(self, unit_env):
        """Should report the session as gone after logout."""
        # Arrange
        login = await unit_env.get(AdminLoginUseCase)
        logout = await unit_env.get(AdminLogoutUseCase)
        get_session = await unit_env.get(GetAdminSessionUseCase)
        result = await login.execute(AdminLoginRequest(password="test-admin-password"))
        request = AdminSessionRequest(session_id=result.session_id)

        # Act
        closed = await logout.execute(request)
        state = await get_session.execute(request)

        # Assert
        assert not closed.authenticated
        assert not state.authenticated

    @pytest.mark.asyncio
    async def test_unknown_session(self, unit_env):
        get_session = await unit_env.get(GetAdminSessionUseCase)

        assert not (await get_session.execute(AdminSessionRequest())).authenticated
        assert not (
            await get_session.execute(AdminSessionRequest(session_id="nope"))
        ).authenticated

"""Unit tests for the admin settings use cases."""

import pytest

from donorlink.adapter.http import ScriptedTransport
from donorlink.application.usecase.admin import (
    GetSettingsUseCase,
    UpdateSettingsRequest,
    UpdateSettingsUseCase,
    VerifySettingsRequest,
    VerifySettingsUseCase,
)
from donorlink.domain.error import ServiceDisabledError, ValidationError
from donorlink.domain.repository import EventRepository
from donorlink.domain.service import SettingsService
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestUpdateSettings:
    @pytest.mark.asyncio
    async def test_persists_group_and_logs(self, unit_env):
        """Should store the group and log which keys changed."""
        # Arrange
        use_case = await unit_env.get(UpdateSettingsUseCase)

        # Act
        response = await use_case.execute(
            UpdateSettingsRequest(
                group="portal",
                values={"baseUrl": "https://portal.example.com", "apiKey": "k"},
            )
        )

        # Assert
        assert response.settings["baseUrl"] == "https://portal.example.com"
        settings_service = await unit_env.get(SettingsService)
        assert (await settings_service.portal()).api_key == "k"
        events = await unit_env.get(EventRepository)
        [logged] = events.of_type("settings.updated")
        assert logged.payload == {"group": "portal", "keys": ["apiKey", "baseUrl"]}

    @pytest.mark.asyncio
    async def test_unknown_group(self, unit_env):
        use_case = await unit_env.get(UpdateSettingsUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(UpdateSettingsRequest(group="bogus", values={}))

    @pytest.mark.asyncio
    async def test_get_settings_lists_groups(self, unit_env):
        """Should return every group with camelCase keys."""
        use_case = await unit_env.get(GetSettingsUseCase)

        response = await use_case.execute()

        assert {"paypal", "portal", "mediaServer", "smtp"} <= set(response.settings)
        assert "baseUrl" in response.settings["portal"]


class TestVerifySettings:
    """Connection tests run against stored settings plus unsaved edits."""

    @pytest.mark.asyncio
    async def test_smtp_with_overrides(self, unit_env):
        """Should use unsaved values without persisting them."""
        # Arrange
        use_case = await unit_env.get(VerifySettingsUseCase)

        # Act
        response = await use_case.execute(
            VerifySettingsRequest(
                group="smtp",
                overrides={"host": "smtp.example.com", "from": "a@example.com"},
            )
        )

        # Assert
        assert response.group == "smtp"
        assert "verified" in response.message
        settings_service = await unit_env.get(SettingsService)
        assert not (await settings_service.smtp()).host

    @pytest.mark.asyncio
    async def test_smtp_not_configured(self, unit_env):
        use_case = await unit_env.get(VerifySettingsUseCase)

        with pytest.raises(ServiceDisabledError):
            await use_case.execute(VerifySettingsRequest(group="smtp"))

    @pytest.mark.asyncio
    async def test_paypal_requests_token(self, unit_env):
        """Should verify PayPal credentials with an OAuth token request."""
        transport = await unit_env.get(ScriptedTransport)
        transport.add(200, {"access_token": "tok"}, method="POST", match="/v1/oauth2/token")
        use_case = await unit_env.get(VerifySettingsUseCase)

        response = await use_case.execute(
            VerifySettingsRequest(
                group="paypal", overrides={"clientId": "cid", "clientSecret": "secret"}
            )
        )

        assert response.group == "paypal"
        assert transport.calls_to("/v1/oauth2/token", method="POST")

    @pytest.mark.asyncio
    async def test_group_without_test(self, unit_env):
        """Should reject groups with no connection test."""
        use_case = await unit_env.get(VerifySettingsUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(VerifySettingsRequest(group="app"))

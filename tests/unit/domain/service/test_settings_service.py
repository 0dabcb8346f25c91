"""Unit tests for SettingsService and group normalization."""

import pytest

from donorlink.adapter.mediaserver import MediaServerCache, ServerDescriptor
from donorlink.domain.error import ValidationError
from donorlink.domain.model.settings import SmtpSettings
from donorlink.domain.repository import SettingsRepository
from donorlink.domain.service import SettingsService, coerce_value, normalize_group
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestCoerceValue:
    """Tests for coerce_value."""

    def test_numbers(self):
        """Should parse numeric strings and fall back on blanks or garbage."""
        assert coerce_value("0", 587) == 0
        assert coerce_value("", 587) == 587
        assert coerce_value("abc", 587) == 587
        assert coerce_value("abc", 587, 25) == 25
        assert coerce_value("2.5", 7.0) == 2.5
        assert coerce_value("inf", 7.0) == 7.0

    def test_booleans(self):
        """Should accept the usual spellings case-insensitively."""
        assert coerce_value("Yes", False) is True
        assert coerce_value("off", True) is False
        assert coerce_value(0, True) is False
        assert coerce_value("", True) is True

    def test_strings_and_lists(self):
        """Should trim strings and join lists with commas."""
        assert coerce_value("  https://x  ", "") == "https://x"
        assert coerce_value(["1", " 2 ", ""], "") == "1,2"
        assert coerce_value(None, "", "kept") == "kept"


class TestNormalizeGroup:
    """Tests for normalize_group."""

    def test_fills_defaults_and_ignores_unknown_keys(self):
        """A partial update should yield a complete group."""
        group = normalize_group("smtp", {"host": " mail.example.com ", "bogus": 1})

        assert isinstance(group, SmtpSettings)
        assert group.host == "mail.example.com"
        assert group.port == 587
        assert "bogus" not in group.to_values()

    def test_update_keeps_current_value_on_garbage(self):
        """Unusable updates should keep the stored value, not the default."""
        group = normalize_group("smtp", {"port": "abc"}, {"port": 2525})

        assert group.port == 2525

    def test_media_server_permissions_forced_off(self):
        """Share permission flags should never be enabled."""
        group = normalize_group(
            "mediaServer",
            {"allowSync": True, "allowCameraUpload": "true", "allowChannels": 1},
        )

        assert group.allow_sync is False
        assert group.allow_camera_upload is False
        assert group.allow_channels is False

    def test_unknown_group(self):
        """Should reject unknown group names."""
        with pytest.raises(ValidationError):
            normalize_group("nope", {})


class TestSettingsService:
    """Tests for SettingsService persistence and listeners."""

    @pytest.mark.asyncio
    async def test_get_settings_returns_every_group(self, unit_env):
        """Every group should be present even when nothing is stored."""
        # Arrange
        settings_service = await unit_env.get(SettingsService)

        # Act
        groups = await settings_service.get_settings()

        # Assert
        assert list(groups) == [
            "app",
            "announcements",
            "paypal",
            "portal",
            "mediaServer",
            "smtp",
        ]
        assert groups["paypal"].api_base == "https://api-m.sandbox.paypal.com"

    @pytest.mark.asyncio
    async def test_update_group_persists_camel_case(self, unit_env):
        """Updates should be stored normalized under camelCase keys."""
        # Arrange
        settings_service = await unit_env.get(SettingsService)
        settings_repo = await unit_env.get(SettingsRepository)

        # Act
        await settings_service.update_group("smtp", {"port": "0", "from": "a@example.com"})

        # Assert
        stored = (await settings_repo.get_all())["smtp"]
        assert stored["port"] == 0
        assert stored["from"] == "a@example.com"
        smtp = await settings_service.smtp()
        assert smtp.from_address == "a@example.com"
        assert smtp.is_configured is False

    @pytest.mark.asyncio
    async def test_update_notifies_media_server_cache(self, unit_env):
        """Saving mediaServer should clear discovered server state."""
        # Arrange
        settings_service = await unit_env.get(SettingsService)
        cache = await unit_env.get(MediaServerCache)
        cache.set_descriptor("tok", "srv", ServerDescriptor(machine_identifier="srv"))

        # Act
        await settings_service.update_group("mediaServer", {"token": "new"})

        # Assert
        assert cache.get_descriptor("tok", "srv") is None

    @pytest.mark.asyncio
    async def test_preview_does_not_save(self, unit_env):
        """Previewing overrides should leave storage untouched."""
        settings_service = await unit_env.get(SettingsService)
        settings_repo = await unit_env.get(SettingsRepository)

        preview = await settings_service.preview_group("portal", {"baseUrl": "https://p"})

        assert preview.base_url == "https://p"
        assert "portal" not in await settings_repo.get_all()

    @pytest.mark.asyncio
    async def test_announcement_tone_falls_back_to_info(self, unit_env):
        """Unknown banner tones should be reported as info."""
        settings_service = await unit_env.get(SettingsService)
        await settings_service.update_group(
            "announcements", {"bannerEnabled": "true", "bannerTone": "Purple"}
        )

        banner = await settings_service.get_announcements()

        assert banner.banner_enabled is True
        assert banner.banner_tone == "info"

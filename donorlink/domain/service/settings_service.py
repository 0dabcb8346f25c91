"""Runtime settings store.

Admin-editable provider configuration lives in the ``settings`` table as
one key/value record per group. Every read and write passes through
``normalize_group`` so callers always see a complete, typed group.
"""

import math
from typing import Any, TypeVar

import logfire

from donorlink.domain.error import ValidationError
from donorlink.domain.model.settings import (
    SETTINGS_GROUPS,
    AnnouncementSettings,
    AppSettings,
    MediaServerSettings,
    PayPalSettings,
    PortalSettings,
    SettingsGroup,
    SmtpSettings,
)
from donorlink.domain.repository import SettingsRepository
from donorlink.domain.value import AnnouncementTone

from .base import Service

TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"0", "false", "no", "off"})

G = TypeVar("G", bound=SettingsGroup)


def _coerce_bool(value: Any, default: bool, fallback: Any) -> bool:
    if value is None:
        return bool(fallback) if fallback is not None else default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_STRINGS:
            return True
        if normalized in FALSE_STRINGS:
            return False
        if not normalized:
            return bool(fallback) if fallback is not None else default
    return bool(value)


def _coerce_number(value: Any, default: int | float, fallback: Any) -> int | float:
    resolved_default = fallback if fallback is not None else default
    if value is None or (isinstance(value, str) and not value.strip()):
        return resolved_default
    try:
        numeric = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return resolved_default
    if not math.isfinite(numeric):
        return resolved_default
    if isinstance(default, int):
        return int(round(numeric))
    return numeric


def coerce_value(value: Any, default: Any, fallback: Any = None) -> Any:
    """Coerce a raw value to the type of its default.

    Booleans accept true/false/1/0/yes/no/on/off case-insensitively. Numbers
    parse strings and fall back on blanks or garbage. Strings are trimmed;
    lists are joined with commas.

    Args:
        value: Raw value from storage or an admin request
        default: The group default, which decides the target type
        fallback: Value used instead of the default when ``value`` is unusable

    Returns:
        The coerced value
    """
    if isinstance(default, bool):
        return _coerce_bool(value, default, fallback)
    if isinstance(default, (int, float)):
        return _coerce_number(value, default, fallback)
    if value is None:
        return fallback if fallback is not None else ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(item).strip() for item in value if str(item).strip())
    return str(value).strip()


def normalize_group(
    name: str,
    values: dict[str, Any] | None = None,
    base: dict[str, Any] | SettingsGroup | None = None,
) -> SettingsGroup:
    """Build a complete group from defaults, a base, and updates.

    Keys of ``base`` are coerced against the defaults; keys of ``values`` are
    coerced with the current value as fallback. Unknown keys are ignored.

    Raises:
        ValidationError: If the group name is unknown
    """
    model = SETTINGS_GROUPS.get(name)
    if model is None:
        raise ValidationError(f"Unknown settings group: {name}")

    defaults = model().to_values()
    normalized = dict(defaults)

    if isinstance(base, SettingsGroup):
        base = base.to_values()
    if isinstance(base, dict):
        for key, default in defaults.items():
            if key in base:
                normalized[key] = coerce_value(base[key], default, default)

    if isinstance(values, dict):
        for key, default in defaults.items():
            if key in values:
                normalized[key] = coerce_value(values[key], default, normalized[key])

    if name == "mediaServer":
        # Share permissions are never granted to donors
        normalized["allowSync"] = False
        normalized["allowCameraUpload"] = False
        normalized["allowChannels"] = False

    return model.model_validate(normalized)


class SettingsListener:
    """Component holding state derived from a settings group."""

    def settings_changed(self, group: str) -> None:
        """Called after ``group`` has been persisted."""
        raise NotImplementedError


class SettingsService(Service):
    """Domain service for the runtime settings store."""

    def __init__(
        self,
        settings_repository: SettingsRepository,
        listeners: list[SettingsListener] | None = None,
    ) -> None:
        self.settings_repository = settings_repository
        self.listeners = listeners or []

    async def get_settings(self) -> dict[str, SettingsGroup]:
        """Load and normalize every group."""
        with logfire.span("settings_service.get_settings"):
            stored = await self.settings_repository.get_all()
            return {
                name: normalize_group(name, stored.get(name))
                for name in SETTINGS_GROUPS
            }

    async def get_group(self, name: str) -> SettingsGroup:
        with logfire.span("settings_service.get_group", group=name):
            if name not in SETTINGS_GROUPS:
                raise ValidationError(f"Unknown settings group: {name}")
            stored = await self.settings_repository.get_all()
            return normalize_group(name, stored.get(name))

    async def update_group(self, name: str, updates: dict[str, Any]) -> SettingsGroup:
        """Merge updates into a group, persist it, and notify listeners.

        Args:
            name: Group name, e.g. ``portal``
            updates: Camel-cased keys to change

        Returns:
            The normalized group as stored
        """
        with logfire.span("settings_service.update_group", group=name):
            current = await self.get_group(name)
            normalized = normalize_group(name, updates, current)
            await self.settings_repository.save_group(name, normalized.to_values())
            for listener in self.listeners:
                listener.settings_changed(name)
            logfire.info(
                "Settings group updated",
                group=name,
                keys=sorted(k for k in updates if k in normalized.to_values()),
            )
            return normalized

    async def preview_group(
        self, name: str, overrides: dict[str, Any] | None = None
    ) -> SettingsGroup:
        """Normalize overrides on top of the stored group without saving."""
        with logfire.span("settings_service.preview_group", group=name):
            current = await self.get_group(name)
            return normalize_group(name, overrides, current)

    async def get_announcements(
        self, overrides: dict[str, Any] | None = None
    ) -> AnnouncementSettings:
        """Public banner settings with the tone restricted to known values."""
        with logfire.span("settings_service.get_announcements"):
            group = await self.get_group("announcements")
            if overrides:
                group = normalize_group("announcements", overrides, group)
            tone = group.banner_tone.strip().lower()
            valid_tones = {item.value for item in AnnouncementTone}
            if tone not in valid_tones:
                tone = AnnouncementTone.INFO.value
            return group.model_copy(update={"banner_tone": tone})

    async def _typed(self, name: str, model: type[G]) -> G:
        group = await self.get_group(name)
        assert isinstance(group, model)
        return group

    async def app(self) -> AppSettings:
        return await self._typed("app", AppSettings)

    async def paypal(self) -> PayPalSettings:
        return await self._typed("paypal", PayPalSettings)

    async def portal(self) -> PortalSettings:
        return await self._typed("portal", PortalSettings)

    async def media_server(self) -> MediaServerSettings:
        return await self._typed("mediaServer", MediaServerSettings)

    async def smtp(self) -> SmtpSettings:
        return await self._typed("smtp", SmtpSettings)

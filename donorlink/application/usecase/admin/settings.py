"""Admin settings use cases."""

from typing import Any

import logfire
from pydantic import BaseModel, Field

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.domain.error import ValidationError
from donorlink.domain.model.settings import (
    MediaServerSettings,
    PayPalSettings,
    PortalSettings,
    SmtpSettings,
)
from donorlink.domain.service import (
    EventService,
    InviteService,
    MediaServerService,
    NotificationService,
    PaymentService,
    SettingsService,
)

TESTABLE_GROUPS = ("paypal", "portal", "mediaServer", "smtp")


class SettingsResponse(BaseModel):
    """Every group keyed by name, with camelCase field names."""

    settings: dict[str, dict[str, Any]]


class GetSettingsUseCase(BaseUseCase):
    def __init__(self, settings_service: SettingsService) -> None:
        self.settings_service = settings_service

    async def execute(self, request: None = None) -> SettingsResponse:
        with logfire.span("get_settings.execute"):
            groups = await self.settings_service.get_settings()
            return SettingsResponse(
                settings={name: group.to_values() for name, group in groups.items()}
            )


class UpdateSettingsRequest(BaseModel):
    group: str
    values: dict[str, Any] = Field(default_factory=dict)


class UpdateSettingsResponse(BaseModel):
    group: str
    settings: dict[str, Any]


class UpdateSettingsUseCase(BaseUseCase):
    def __init__(
        self, settings_service: SettingsService, event_service: EventService
    ) -> None:
        self.settings_service = settings_service
        self.event_service = event_service

    async def execute(self, request: UpdateSettingsRequest) -> UpdateSettingsResponse:
        """Persist a group; adapters drop caches derived from it.

        Raises:
            ValidationError: If the group is unknown
        """
        with logfire.span("update_settings.execute", group=request.group):
            group = await self.settings_service.update_group(
                request.group, request.values
            )
            values = group.to_values()
            await self.event_service.log(
                "settings.updated",
                {
                    "group": request.group,
                    "keys": sorted(k for k in request.values if k in values),
                },
            )
            return UpdateSettingsResponse(group=request.group, settings=values)


class VerifySettingsRequest(BaseModel):
    group: str
    overrides: dict[str, Any] = Field(default_factory=dict)


class VerifySettingsResponse(ApiModel):
    group: str
    message: str
    status: int | None = None
    details: Any = None
    libraries: list[dict[str, Any]] | None = None


class VerifySettingsUseCase(BaseUseCase):
    """Verify a provider connection using stored settings plus unsaved edits."""

    def __init__(
        self,
        settings_service: SettingsService,
        payment_service: PaymentService,
        invite_service: InviteService,
        media_server_service: MediaServerService,
        notification_service: NotificationService,
    ) -> None:
        self.settings_service = settings_service
        self.payment_service = payment_service
        self.invite_service = invite_service
        self.media_server_service = media_server_service
        self.notification_service = notification_service

    async def execute(self, request: VerifySettingsRequest) -> VerifySettingsResponse:
        """Run the provider's connection check against a preview group.

        Raises:
            ValidationError: If the group has no connection test
            AdapterError: If the provider check fails
        """
        with logfire.span("verify_settings.execute", group=request.group):
            if request.group not in TESTABLE_GROUPS:
                raise ValidationError(
                    f"Connection tests are not available for {request.group}"
                )
            preview = await self.settings_service.preview_group(
                request.group, request.overrides
            )

            if isinstance(preview, PayPalSettings):
                report = await self.payment_service.verify_connection(preview)
            elif isinstance(preview, PortalSettings):
                report = await self.invite_service.verify_connection(preview)
            elif isinstance(preview, MediaServerSettings):
                report = await self.media_server_service.verify_connection(preview)
            elif isinstance(preview, SmtpSettings):
                report = await self.notification_service.verify_connection(preview)
            else:
                raise ValidationError(
                    f"Connection tests are not available for {request.group}"
                )

            logfire.info("Connection test passed", group=request.group)
            return VerifySettingsResponse(
                group=request.group,
                message=report.message,
                status=report.status,
                details=report.details,
                libraries=report.libraries,
            )

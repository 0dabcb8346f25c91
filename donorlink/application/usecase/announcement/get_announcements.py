"""Get announcements use case."""

import logfire

from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.domain.service import SettingsService


class AnnouncementResponse(ApiModel):
    """Public banner; call-to-action fields are blank unless enabled."""

    enabled: bool
    title: str
    body: str
    tone: str
    dismissible: bool
    cta_enabled: bool
    cta_label: str
    cta_url: str
    cta_open_in_new_tab: bool


class GetAnnouncementsUseCase(BaseUseCase):
    def __init__(self, settings_service: SettingsService) -> None:
        self.settings_service = settings_service

    async def execute(self, request: None = None) -> AnnouncementResponse:
        with logfire.span("get_announcements.execute"):
            banner = await self.settings_service.get_announcements()
            cta_enabled = bool(
                banner.banner_cta_enabled
                and banner.banner_cta_label
                and banner.banner_cta_url
            )
            return AnnouncementResponse(
                enabled=banner.banner_enabled,
                title=banner.banner_title,
                body=banner.banner_body,
                tone=banner.banner_tone,
                dismissible=banner.banner_dismissible,
                cta_enabled=cta_enabled,
                cta_label=banner.banner_cta_label if cta_enabled else "",
                cta_url=banner.banner_cta_url if cta_enabled else "",
                cta_open_in_new_tab=banner.banner_cta_open_in_new_tab,
            )

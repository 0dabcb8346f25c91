"""Admin prospect use cases."""

import logfire

from donorlink.application.usecase.admin.views import ProspectView, ShareLinkSummary
from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.domain.service import (
    EventService,
    ProspectService,
    SettingsService,
    ShareLinkService,
)


class ListProspectsResponse(ApiModel):
    prospects: list[ProspectView]


class ListProspectsUseCase(BaseUseCase):
    def __init__(self, prospect_service: ProspectService) -> None:
        self.prospect_service = prospect_service

    async def execute(self, request: None = None) -> ListProspectsResponse:
        with logfire.span("list_prospects.execute"):
            prospects = await self.prospect_service.list_prospects()
            return ListProspectsResponse(
                prospects=[ProspectView.of(prospect) for prospect in prospects]
            )


class CreateProspectRequest(ApiModel):
    email: str = ""
    name: str = ""
    note: str | None = None


class CreateProspectResponse(ApiModel):
    prospect: ProspectView
    share_link: ShareLinkSummary


class CreateProspectUseCase(BaseUseCase):
    """Record a lead and mint the share link they will pay and sign up with."""

    def __init__(
        self,
        prospect_service: ProspectService,
        share_link_service: ShareLinkService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> None:
        self.prospect_service = prospect_service
        self.share_link_service = share_link_service
        self.settings_service = settings_service
        self.event_service = event_service

    async def execute(self, request: CreateProspectRequest) -> CreateProspectResponse:
        """Create the prospect and its share link.

        Raises:
            ValidationError: If the email is given and invalid
        """
        with logfire.span("create_prospect.execute"):
            prospect = await self.prospect_service.create_prospect(
                request.email, name=request.name, note=request.note
            )
            link = await self.share_link_service.issue_for_prospect(prospect.id)
            await self.event_service.log(
                "share_link.generated",
                {"prospectId": str(prospect.id), "shareLinkId": str(link.id)},
            )
            app = await self.settings_service.app()
            return CreateProspectResponse(
                prospect=ProspectView.of(prospect),
                share_link=ShareLinkSummary.of(link, app.public_base_url),
            )

"""Get share link use case."""

import logfire
from pydantic import BaseModel

from donorlink.application.usecase.base import BaseUseCase
from donorlink.application.usecase.share.projection import (
    ShareProjection,
    build_projection,
    resolve_share_link,
)
from donorlink.domain.service import (
    DonorService,
    InviteService,
    ProspectService,
    SettingsService,
    ShareLinkService,
)


class GetShareLinkRequest(BaseModel):
    token: str


class GetShareLinkUseCase(BaseUseCase):
    """Public read of a share link."""

    def __init__(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        invite_service: InviteService,
        settings_service: SettingsService,
    ) -> None:
        self.share_link_service = share_link_service
        self.donor_service = donor_service
        self.prospect_service = prospect_service
        self.invite_service = invite_service
        self.settings_service = settings_service

    async def execute(self, request: GetShareLinkRequest) -> ShareProjection:
        """Return the projection for a share link.

        Raises:
            NotFoundError: If the link is unknown or no longer valid
            ForbiddenError: If the donor's subscription has ended
        """
        with logfire.span("get_share_link.execute"):
            resolved = await resolve_share_link(
                request.token,
                self.share_link_service,
                self.donor_service,
                self.prospect_service,
            )
            resolved.require_not_blocked()

            invite = (
                await self.invite_service.get_latest_active(resolved.donor.id)
                if resolved.donor
                else None
            )
            paypal = await self.settings_service.paypal()
            return build_projection(
                paypal,
                link=resolved.link,
                donor=resolved.donor,
                prospect=resolved.prospect,
                invite=invite,
            )

"""Start PayPal checkout from a share link use case."""

from urllib.parse import quote

import logfire

from donorlink.adapter.paypal import build_subscriber_details
from donorlink.application.usecase.base import ApiModel, BaseUseCase
from donorlink.application.usecase.share.projection import resolve_share_link
from donorlink.domain.error import ServiceDisabledError, ValidationError
from donorlink.domain.service import (
    DonorService,
    EventService,
    PaymentService,
    ProspectService,
    SettingsService,
    ShareLinkService,
)


class StartShareCheckoutRequest(ApiModel):
    token: str = ""
    email: str | None = None
    name: str | None = None
    session_token: str | None = None


class StartShareCheckoutResponse(ApiModel):
    approval_url: str
    subscription_id: str


class StartShareCheckoutUseCase(BaseUseCase):
    """Create a PayPal subscription for the link's donor to approve."""

    def __init__(
        self,
        share_link_service: ShareLinkService,
        donor_service: DonorService,
        prospect_service: ProspectService,
        payment_service: PaymentService,
        settings_service: SettingsService,
        event_service: EventService,
    ) -> None:
        self.share_link_service = share_link_service
        self.donor_service = donor_service
        self.prospect_service = prospect_service
        self.payment_service = payment_service
        self.settings_service = settings_service
        self.event_service = event_service

    async def execute(
        self, request: StartShareCheckoutRequest
    ) -> StartShareCheckoutResponse:
        """Create the subscription and link it to the donor.

        The new subscription id is stored on the donor right away so that
        the activation webhook finds the donor by subscription.

        Raises:
            UnauthorizedError: If the session token does not match
            ValidationError: If the link still belongs to a prospect
            ServiceDisabledError: If PayPal credentials or plan are missing
            PaymentProviderError: If PayPal rejected the request
        """
        with logfire.span("start_share_checkout.execute"):
            resolved = await resolve_share_link(
                request.token,
                self.share_link_service,
                self.donor_service,
                self.prospect_service,
            )
            self.share_link_service.verify_session(resolved.link, request.session_token)
            donor = resolved.donor
            if donor is None:
                raise ValidationError("Create your account before starting checkout.")

            paypal = await self.settings_service.paypal()
            if not paypal.has_credentials:
                raise ServiceDisabledError("PayPal is not configured")
            if not paypal.plan_id:
                raise ServiceDisabledError("PayPal plan is not configured")

            app = await self.settings_service.app()
            return_url = cancel_url = None
            base = app.public_base_url.strip().rstrip("/")
            if base:
                share_url = f"{base}/share/{quote(resolved.link.token, safe='')}"
                return_url = f"{share_url}?checkout=success"
                cancel_url = f"{share_url}?checkout=cancelled"

            session = await self.payment_service.create_checkout(
                paypal,
                subscriber=build_subscriber_details(
                    request.email or donor.email, request.name or donor.name
                ),
                return_url=return_url,
                cancel_url=cancel_url,
            )
            donor = await self.donor_service.update_subscription_id(
                donor, session.subscription_id
            )
            await self.share_link_service.mark_used(resolved.link)
            await self.event_service.log(
                "share.checkout.started",
                {
                    "donorId": str(donor.id),
                    "subscriptionId": session.subscription_id,
                    "shareLinkId": str(resolved.link.id),
                },
            )
            return StartShareCheckoutResponse(
                approval_url=session.approval_url,
                subscription_id=session.subscription_id,
            )

"""Donor email notifications."""

import logfire

from donorlink.domain.error import ServiceDisabledError
from donorlink.domain.model.donor import Donor
from donorlink.domain.model.invite import Invite
from donorlink.domain.model.settings import SmtpSettings
from donorlink.domain.value import ConnectionReport

from .base import Service

SIGNATURE = "DonorLink"


class Mailer:
    """Outbound email interface."""

    async def send_mail(
        self,
        settings: SmtpSettings,
        *,
        to: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> None:
        raise NotImplementedError

    async def verify_connection(self, settings: SmtpSettings) -> ConnectionReport:
        raise NotImplementedError


class NotificationService(Service):
    """Composes donor emails and hands them to the mailer."""

    def __init__(self, mailer: Mailer) -> None:
        self.mailer = mailer

    @staticmethod
    def _require_configured(settings: SmtpSettings) -> None:
        if not settings.host:
            raise ServiceDisabledError("SMTP configuration is missing")
        if not settings.from_address:
            raise ServiceDisabledError("A sender address is required to send emails")

    async def send_invite_email(
        self, settings: SmtpSettings, donor: Donor, invite: Invite
    ) -> None:
        """Email the invite link to its recipient.

        Raises:
            ServiceDisabledError: If SMTP is not configured
        """
        with logfire.span(
            "notification_service.send_invite_email",
            donor_id=str(donor.id),
            invite_id=str(invite.id),
        ):
            self._require_configured(settings)
            name = donor.name or "there"
            text = (
                f"Hi {name},\n\n"
                "Thank you for supporting our media server!\n\n"
                f"Use your personal link to accept the invite: {invite.url}\n\n"
                f"Subscription ID: {donor.subscription_id or 'n/a'}\n\n"
                "If you did not request this invite or need help, reply to this email.\n\n"
                f"{SIGNATURE}"
            )
            html = (
                f"<p>Hi {name},</p>"
                "<p>Thank you for supporting our media server! "
                "Use the link below to accept your invite.</p>"
                f'<p><a href="{invite.url}">Accept Invite</a></p>'
                f"<p>Subscription ID: {donor.subscription_id or 'n/a'}</p>"
                "<p>If you need help, just reply to this email.</p>"
                f"<p>{SIGNATURE}</p>"
            )
            await self.mailer.send_mail(
                settings,
                to=invite.recipient_email or donor.email,
                subject="Your Plex access invite",
                text=text,
                html=html,
            )
            logfire.info("Invite email sent", invite_id=str(invite.id))

    async def send_cancellation_email(self, settings: SmtpSettings, donor: Donor) -> None:
        with logfire.span(
            "notification_service.send_cancellation_email", donor_id=str(donor.id)
        ):
            self._require_configured(settings)
            name = donor.name or "there"
            text = (
                f"Hi {name},\n\n"
                "Thank you for supporting our media server. "
                "Your access has now ended.\n\n"
                "If you'd like to come back, you can restart your support anytime "
                "with the same email address.\n\n"
                f"Subscription ID: {donor.subscription_id or 'n/a'}\n\n"
                f"{SIGNATURE}"
            )
            await self.mailer.send_mail(
                settings,
                to=donor.email,
                subject="Your Plex access has ended",
                text=text,
            )
            logfire.info("Cancellation email sent", donor_id=str(donor.id))

    async def verify_connection(self, settings: SmtpSettings) -> ConnectionReport:
        with logfire.span("notification_service.verify_connection"):
            self._require_configured(settings)
            return await self.mailer.verify_connection(settings)

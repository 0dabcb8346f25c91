"""SMTP mailer."""

from email.message import EmailMessage

import aiosmtplib
import logfire

from donorlink.adapter.error import MailerError, ProviderNotConfiguredError
from donorlink.domain.model.settings import SmtpSettings
from donorlink.domain.service.notification_service import Mailer
from donorlink.domain.value import ConnectionReport


def build_message(
    settings: SmtpSettings, *, to: str, subject: str, text: str, html: str | None
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = settings.from_address
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")
    return message


class SmtpMailer(Mailer):
    """Sends mail with ``aiosmtplib``.

    ``secure`` selects implicit TLS. Otherwise STARTTLS is used whenever the
    server offers it. Credentials are sent only when a user is configured.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout or 15.0

    def client(self, settings: SmtpSettings) -> aiosmtplib.SMTP:
        """Build an unconnected SMTP client for ``settings``.

        Raises:
            ProviderNotConfiguredError: If no host is configured
        """
        if not settings.host:
            raise ProviderNotConfiguredError("SMTP configuration is missing")
        return aiosmtplib.SMTP(
            hostname=settings.host,
            port=settings.port,
            username=settings.user or None,
            password=settings.password if settings.user else None,
            use_tls=settings.secure,
            start_tls=False if settings.secure else None,
            timeout=self.timeout,
        )

    async def send_mail(
        self,
        settings: SmtpSettings,
        *,
        to: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> None:
        """Deliver one message.

        Raises:
            MailerError: If the SMTP exchange fails
        """
        message = build_message(settings, to=to, subject=subject, text=text, html=html)
        with logfire.span("smtp.send_mail", subject=subject):
            try:
                async with self.client(settings) as smtp:
                    await smtp.send_message(message)
            except (aiosmtplib.SMTPException, OSError) as e:
                logfire.error("Email delivery failed", error=str(e))
                raise MailerError(f"Failed to send email: {e}") from e

    async def verify_connection(self, settings: SmtpSettings) -> ConnectionReport:
        with logfire.span("smtp.verify_connection"):
            try:
                async with self.client(settings) as smtp:
                    await smtp.noop()
            except (aiosmtplib.SMTPException, OSError) as e:
                raise MailerError(f"SMTP connection failed: {e}") from e
            return ConnectionReport(message="SMTP connection verified successfully.")


class RecordingMailer(Mailer):
    """Mailer that keeps messages in memory instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    async def send_mail(
        self,
        settings: SmtpSettings,
        *,
        to: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> None:
        self.sent.append(
            build_message(settings, to=to, subject=subject, text=text, html=html)
        )

    async def verify_connection(self, settings: SmtpSettings) -> ConnectionReport:
        return ConnectionReport(message="SMTP connection verified successfully.")

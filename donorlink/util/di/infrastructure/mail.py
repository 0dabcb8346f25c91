"""Mail infrastructure providers."""

from dishka import Scope, provide

from donorlink.adapter.mail import SmtpMailer
from donorlink.config import Settings
from donorlink.domain.service import Mailer
from donorlink.util.di.base import ProviderBase


class MailProvider(ProviderBase):
    """Mail component base."""

    __mock_component__ = "mail"


class ProdMailProvider(MailProvider):
    """SMTP mailer."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_mailer(self, settings: Settings) -> Mailer:
        """Provide SMTP mailer."""
        return SmtpMailer(timeout=settings.http.timeout_seconds)

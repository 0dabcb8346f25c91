"""Unit tests for SmtpMailer."""

import aiosmtplib
import pytest

from donorlink.adapter.error import MailerError, ProviderNotConfiguredError
from donorlink.adapter.mail import SmtpMailer
from donorlink.domain.model.settings import SmtpSettings


class FakeSmtp:
    """Stands in for ``aiosmtplib.SMTP`` and records what it is asked to do."""

    def __init__(self, **options) -> None:
        self.options = options
        self.sent = []
        self.noops = 0
        self.failure: Exception | None = None

    async def __aenter__(self):
        if self.failure is not None:
            raise self.failure
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def send_message(self, message) -> None:
        self.sent.append(message)

    async def noop(self) -> None:
        self.noops += 1


@pytest.fixture
def clients(monkeypatch):
    created: list[FakeSmtp] = []

    def factory(**options):
        client = FakeSmtp(**options)
        created.append(client)
        return client

    monkeypatch.setattr(aiosmtplib, "SMTP", factory)
    return created


def smtp_settings(**overrides) -> SmtpSettings:
    values = {"host": "smtp.example.com", "from": "donors@example.com", **overrides}
    return SmtpSettings.model_validate(values)


class TestSendMail:
    @pytest.mark.asyncio
    async def test_starttls_with_credentials(self, clients):
        """Should negotiate STARTTLS and log in when a user is configured."""
        # Arrange
        mailer = SmtpMailer(timeout=5)
        settings = smtp_settings(user="mailer", **{"pass": "secret"})

        # Act
        await mailer.send_mail(
            settings, to="a@b.c", subject="Hello", text="plain", html="<p>hi</p>"
        )

        # Assert
        (client,) = clients
        assert client.options["hostname"] == "smtp.example.com"
        assert client.options["port"] == 587
        assert client.options["use_tls"] is False
        assert client.options["start_tls"] is None
        assert client.options["username"] == "mailer"
        assert client.options["password"] == "secret"
        assert client.options["timeout"] == 5
        (message,) = client.sent
        assert message["To"] == "a@b.c"
        assert message["From"] == "donors@example.com"
        assert message.is_multipart()

    @pytest.mark.asyncio
    async def test_implicit_tls_without_credentials(self, clients):
        """Should use implicit TLS and skip login for an anonymous relay."""
        mailer = SmtpMailer()

        await mailer.send_mail(
            smtp_settings(secure=True, port=465), to="a@b.c", subject="S", text="t"
        )

        options = clients[0].options
        assert options["use_tls"] is True
        assert options["start_tls"] is False
        assert options["username"] is None
        assert options["password"] is None

    @pytest.mark.asyncio
    async def test_delivery_failure(self, monkeypatch):
        """Should wrap SMTP errors in MailerError."""
        # Arrange
        def refusing(**options):
            client = FakeSmtp(**options)
            client.failure = aiosmtplib.SMTPConnectError("connection refused")
            return client

        monkeypatch.setattr(aiosmtplib, "SMTP", refusing)

        # Act / Assert
        with pytest.raises(MailerError):
            await SmtpMailer().send_mail(
                smtp_settings(), to="a@b.c", subject="S", text="t"
            )

    @pytest.mark.asyncio
    async def test_missing_host(self, clients):
        with pytest.raises(ProviderNotConfiguredError):
            await SmtpMailer().send_mail(
                smtp_settings(host=""), to="a@b.c", subject="S", text="t"
            )
        assert clients == []


class TestVerifyConnection:
    @pytest.mark.asyncio
    async def test_noop_round_trip(self, clients):
        """Should connect, issue NOOP and report success."""
        report = await SmtpMailer().verify_connection(smtp_settings())

        assert clients[0].noops == 1
        assert "verified" in report.message

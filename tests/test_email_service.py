"""Tests for outbound email transports."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest
from structlog.testing import capture_logs

from app.services.email import (
    EmailDeliveryError,
    EmailTransportFactory,
    OutgoingEmail,
    get_email_transport,
)
from app.services.email.console_transport import ConsoleTransport
from app.services.email.smtp_transport import SMTPTransport

MESSAGE = OutgoingEmail(
    to="ada@example.com",
    subject="Reminder: Acme - Data Analyst (Deadline 2026-10-22)",
    text="Hi Ada",
    html="<p>Hi Ada</p>",
)


def make_transport(**overrides):
    options = dict(
        host="smtp.example.com",
        port=587,
        user="mailer",
        password="app-password",
        from_email="Job Tracker <noreply@example.com>",
        use_ssl=False,
        starttls=True,
    )
    options.update(overrides)
    return SMTPTransport(**options)


def mock_smtp_server(refused=None):
    server = MagicMock()
    server.send_message.return_value = refused or {}
    smtp_class = MagicMock()
    smtp_class.return_value.__enter__.return_value = server
    return smtp_class, server


class TestSMTPTransport:
    async def test_send_with_starttls_and_login(self):
        smtp_class, server = mock_smtp_server()

        with patch("app.services.email.smtp_transport.smtplib.SMTP", smtp_class):
            info = await make_transport().send(MESSAGE)

        smtp_class.assert_called_once_with("smtp.example.com", 587)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "app-password")

        mime = server.send_message.call_args.args[0]
        assert mime["To"] == "ada@example.com"
        assert mime["Subject"] == MESSAGE.subject
        assert server.send_message.call_args.kwargs["from_addr"] == "noreply@example.com"

        assert info.accepted == ["ada@example.com"]
        assert info.rejected == []
        assert info.backend == "smtp"
        assert info.message_id.endswith("@example.com>")

    async def test_ssl_connection_skips_starttls(self):
        smtp_class, server = mock_smtp_server()

        with patch("app.services.email.smtp_transport.smtplib.SMTP_SSL", smtp_class):
            await make_transport(port=465, use_ssl=True).send(MESSAGE)

        smtp_class.assert_called_once_with("smtp.example.com", 465)
        server.starttls.assert_not_called()

    async def test_no_login_without_credentials(self):
        smtp_class, server = mock_smtp_server()

        with patch("app.services.email.smtp_transport.smtplib.SMTP", smtp_class):
            await make_transport(user="", password="").send(MESSAGE)

        server.login.assert_not_called()

    def test_mime_has_text_and_html_parts(self):
        mime = make_transport().build_mime(MESSAGE, "<1@example.com>")

        content_types = [part.get_content_type() for part in mime.get_payload()]
        assert content_types == ["text/plain", "text/html"]
        assert mime["Message-ID"] == "<1@example.com>"

    def test_mime_without_html(self):
        message = OutgoingEmail(to="ada@example.com", subject="Hi", text="plain only")

        mime = make_transport().build_mime(message, "<1@example.com>")

        assert [part.get_content_type() for part in mime.get_payload()] == ["text/plain"]

    @pytest.mark.parametrize(
        "error",
        [
            smtplib.SMTPAuthenticationError(535, b"bad credentials"),
            smtplib.SMTPServerDisconnected("gone"),
            ConnectionRefusedError("connection refused"),
        ],
    )
    async def test_errors_become_delivery_errors(self, error):
        smtp_class, server = mock_smtp_server()
        server.send_message.side_effect = error

        with patch("app.services.email.smtp_transport.smtplib.SMTP", smtp_class):
            with pytest.raises(EmailDeliveryError, match="ada@example.com"):
                await make_transport().send(MESSAGE)

    async def test_refused_recipient_raises(self):
        smtp_class, _ = mock_smtp_server(refused={"ada@example.com": (550, b"mailbox unavailable")})

        with patch("app.services.email.smtp_transport.smtplib.SMTP", smtp_class):
            with pytest.raises(EmailDeliveryError, match="refused"):
                await make_transport().send(MESSAGE)


class TestConsoleTransport:
    async def test_send_logs_and_keeps_outbox(self):
        transport = ConsoleTransport()

        with capture_logs() as logs:
            info = await transport.send(MESSAGE)

        assert list(transport.outbox) == [MESSAGE]
        assert info.accepted == ["ada@example.com"]
        assert info.backend == "console"
        assert logs[0]["event"] == "email_logged"
        assert logs[0]["to"] == "ada@example.com"
        assert logs[0]["message_id"] == info.message_id

    async def test_outbox_keeps_only_recent_messages(self):
        transport = ConsoleTransport(outbox_size=2)
        recipients = ["ada@example.com", "grace@example.com", "linus@example.com"]

        for to in recipients:
            await transport.send(OutgoingEmail(to=to, subject="Reminder", text="Hi"))

        assert [message.to for message in transport.outbox] == recipients[1:]


class TestEmailTransportFactory:
    def setup_method(self):
        EmailTransportFactory.reset()

    def teardown_method(self):
        EmailTransportFactory.reset()

    def test_default_backend_from_settings(self):
        assert isinstance(get_email_transport(), ConsoleTransport)

    def test_explicit_backend(self):
        assert isinstance(get_email_transport("smtp"), SMTPTransport)

    def test_instances_are_cached(self):
        assert get_email_transport("console") is get_email_transport("console")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown email backend"):
            get_email_transport("carrier-pigeon")

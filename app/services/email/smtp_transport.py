"""SMTP email transport."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid, parseaddr
from typing import Optional

from app.config import settings
from .base import DeliveryInfo, EmailDeliveryError, EmailTransport, OutgoingEmail

logger = logging.getLogger(__name__)


class SMTPTransport(EmailTransport):
    """Send email through an SMTP server.

    smtplib is blocking, so each send runs in a worker thread and the event
    loop stays free for HTTP requests while a reminder batch is going out.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        use_ssl: Optional[bool] = None,
        starttls: Optional[bool] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.from_email = from_email or settings.EMAIL_FROM
        self.use_ssl = settings.SMTP_USE_SSL if use_ssl is None else use_ssl
        self.starttls = settings.SMTP_STARTTLS if starttls is None else starttls

    @property
    def name(self) -> str:
        return "smtp"

    def build_mime(self, message: OutgoingEmail, message_id: str) -> MIMEMultipart:
        """Build a multipart/alternative MIME message."""
        msg = MIMEMultipart("alternative")
        msg["From"] = self.from_email
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg["Message-ID"] = message_id

        msg.attach(MIMEText(message.text, "plain", "utf-8"))
        if message.html:
            msg.attach(MIMEText(message.html, "html", "utf-8"))
        return msg

    def _send_sync(self, message: OutgoingEmail) -> DeliveryInfo:
        sender_address = parseaddr(self.from_email)[1] or self.from_email
        domain = sender_address.split("@")[-1] if "@" in sender_address else None
        message_id = make_msgid(domain=domain)
        mime = self.build_mime(message, message_id)

        smtp_class = smtplib.SMTP_SSL if self.use_ssl else smtplib.SMTP
        with smtp_class(self.host, self.port) as server:
            if self.starttls and not self.use_ssl:
                server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            refused = server.send_message(mime, from_addr=sender_address, to_addrs=[message.to])

        refused = refused or {}
        return DeliveryInfo(
            message_id=message_id,
            accepted=[message.to] if message.to not in refused else [],
            rejected=list(refused.keys()),
            backend=self.name,
        )

    async def send(self, message: OutgoingEmail) -> DeliveryInfo:
        try:
            info = await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery to {message.to} failed: {e}") from e

        if not info.accepted:
            raise EmailDeliveryError(f"SMTP server refused recipient {message.to}")

        logger.info(f"Email sent to {message.to} ({info.message_id})")
        return info

"""Console email transport for local development and dry runs."""

import uuid
from collections import deque

import structlog

from .base import DeliveryInfo, EmailTransport, OutgoingEmail

logger = structlog.get_logger(__name__)


class ConsoleTransport(EmailTransport):
    """Log messages instead of sending them.

    The most recent `outbox_size` messages are kept in `outbox`.
    """

    def __init__(self, outbox_size: int = 50):
        self.outbox = deque(maxlen=outbox_size)

    @property
    def name(self) -> str:
        return "console"

    async def send(self, message: OutgoingEmail) -> DeliveryInfo:
        self.outbox.append(message)
        message_id = f"<{uuid.uuid4().hex}@console>"
        logger.info(
            "email_logged",
            to=message.to,
            subject=message.subject,
            body=message.text,
            message_id=message_id,
        )
        return DeliveryInfo(
            message_id=message_id,
            accepted=[message.to],
            backend=self.name,
        )

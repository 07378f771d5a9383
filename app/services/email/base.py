"""
Base Email Transport Interface
Abstract class for all outbound email backends (SMTP, console)
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


class EmailDeliveryError(Exception):
    """Raised when a transport could not hand a message to the mail server."""


@dataclass(frozen=True)
class OutgoingEmail:
    """A single message with plain-text and HTML alternatives."""

    to: str
    subject: str
    text: str
    html: Optional[str] = None


@dataclass
class DeliveryInfo:
    """What the transport reports back after a successful send."""

    message_id: str
    accepted: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    backend: str = ""


class EmailTransport(ABC):
    """Base class for all email transports"""

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> DeliveryInfo:
        """
        Deliver one message.

        Returns:
            DeliveryInfo for the accepted message

        Raises:
            EmailDeliveryError: If the message could not be delivered
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport name"""
        pass

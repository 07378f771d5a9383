"""
Email Transport Factory
Centralized access to the configured email backend
"""
import logging
from typing import Optional

from app.config import settings
from .base import EmailTransport
from .console_transport import ConsoleTransport
from .smtp_transport import SMTPTransport

logger = logging.getLogger(__name__)


class EmailTransportFactory:
    """Factory to get an email transport based on configuration"""

    _transports = {
        'smtp': SMTPTransport,
        'console': ConsoleTransport,
    }

    _instances = {}  # Singleton instances

    @classmethod
    def get_transport(cls, backend: Optional[str] = None) -> EmailTransport:
        """
        Get email transport instance

        Args:
            backend: Backend name ('smtp', 'console').
                     If None, uses settings.EMAIL_BACKEND

        Returns:
            EmailTransport instance

        Raises:
            ValueError: If backend not found
        """
        if backend is None:
            backend = settings.EMAIL_BACKEND

        if backend in cls._instances:
            return cls._instances[backend]

        transport_class = cls._transports.get(backend)
        if not transport_class:
            available = ', '.join(cls._transports.keys())
            raise ValueError(
                f"Unknown email backend: {backend}. "
                f"Available backends: {available}"
            )

        if backend == 'smtp' and not (settings.SMTP_USER and settings.SMTP_PASSWORD):
            logger.warning("SMTP credentials not configured - sending unauthenticated")

        instance = transport_class()
        cls._instances[backend] = instance
        logger.info(f"Initialized email transport: {backend}")
        return instance

    @classmethod
    def reset(cls):
        """Drop cached transports (used when settings change)."""
        cls._instances.clear()


def get_email_transport(backend: Optional[str] = None) -> EmailTransport:
    """Convenience function to get the configured email transport"""
    return EmailTransportFactory.get_transport(backend)

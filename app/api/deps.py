"""
API Dependencies
Common dependencies for API endpoints (database, authentication, scheduler)
"""

from fastapi import HTTPException, Request, status

from app.core.scheduler import ReminderScheduler
from app.core.security import get_current_user
from app.db.session import get_db
from app.services.email import EmailTransport, get_email_transport

__all__ = ["get_db", "get_current_user", "get_email_sender", "get_reminder_scheduler"]


def get_reminder_scheduler(request: Request) -> ReminderScheduler:
    """
    Get the reminder scheduler owned by the running application.

    Raises 503 when reminders are disabled for this process.
    """
    reminder_scheduler = getattr(request.app.state, "reminder_scheduler", None)
    if reminder_scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Deadline reminders are disabled (set REMINDERS_ENABLED=true)",
        )
    return reminder_scheduler


def get_email_sender() -> EmailTransport:
    """Get the configured outbound email transport."""
    return get_email_transport()

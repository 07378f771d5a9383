"""Notification endpoints - test email and deadline reminder controls."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user, get_email_sender, get_reminder_scheduler
from app.core.scheduler import CycleInProgressError, ReminderScheduler
from app.models.user import User
from app.schemas.notification import (
    EmailTestRequest,
    EmailTestResponse,
    ReminderCycleResponse,
    ReminderSchedulerStatus,
)
from app.services.email import EmailDeliveryError, EmailTransport, OutgoingEmail

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/test-email", response_model=EmailTestResponse)
async def send_test_email(
    request: EmailTestRequest,
    current_user: User = Depends(get_current_user),
    transport: EmailTransport = Depends(get_email_sender),
):
    """Send a test email through the configured transport."""
    message = OutgoingEmail(
        to=request.to,
        subject="Test email from Job Tracker",
        text="This is a test email.",
        html="<strong>This is a test email.</strong>",
    )
    try:
        info = await transport.send(message)
    except EmailDeliveryError as e:
        logger.error(f"Test email to {request.to} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Send failed: {e}",
        )

    return EmailTestResponse(message="Email sent", info=asdict(info))


@router.get("/reminders/status", response_model=ReminderSchedulerStatus)
async def reminder_status(
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """Reminder scheduler state, next run time and last cycle summary."""
    return reminder_scheduler.get_status()


@router.post("/reminders/run", response_model=ReminderCycleResponse)
async def run_reminders_now(
    current_user: User = Depends(get_current_user),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """Run a reminder cycle immediately."""
    logger.info(f"Reminder cycle requested by user {current_user.id}")
    try:
        result = await reminder_scheduler.trigger_now()
    except CycleInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return result.to_dict()

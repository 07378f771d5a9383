"""Notification schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr


class EmailTestRequest(BaseModel):
    """Send a test email to an address."""

    to: EmailStr


class EmailTestResponse(BaseModel):
    message: str
    info: Dict[str, Any]


class ReminderOutcomeResponse(BaseModel):
    job_id: int
    email: str
    sent: bool
    flagged: bool
    error: Optional[str] = None


class ReminderCycleResponse(BaseModel):
    """Summary of a reminder cycle."""

    run_date: str
    target_date: str
    started_at: str
    finished_at: Optional[str] = None
    aborted: bool
    dry_run: bool = False
    error: Optional[str] = None
    matched: int
    sent: int
    failed: int
    flag_failures: int
    outcomes: List[ReminderOutcomeResponse] = []


class ReminderSchedulerStatus(BaseModel):
    running: bool
    state: str
    cron: str
    timezone: str
    lead_days: int
    next_run_time: Optional[str] = None
    last_cycle: Optional[ReminderCycleResponse] = None

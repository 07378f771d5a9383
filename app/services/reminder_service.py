"""
Deadline Reminder Service

One reminder cycle:
1. Scan for jobs whose deadline is exactly `lead_days` away and whose
   reminder has not been sent yet.
2. Email each job's owner, one message at a time.
3. Flag each job as reminded after its email went out.

Failures are contained: an unreachable database aborts the cycle, a failed
send only affects that job (it stays eligible for the next cycle), and a
failed flag write is logged and may lead to a duplicate email next time.
"""

import html
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_timezone
from typing import Callable, List, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.job import Job
from app.models.user import User
from app.services.email import DeliveryInfo, EmailTransport, OutgoingEmail
from app.utils.helpers import local_today, reminder_target_date

logger = structlog.get_logger(__name__)

# Errors that mean the row store could not be reached or rejected the query
STORE_ERRORS = (SQLAlchemyError, OSError)


def _utcnow() -> datetime:
    return datetime.now(dt_timezone.utc)


@dataclass(frozen=True)
class ReminderCandidate:
    """A job due for a reminder, joined with its owner's contact details."""

    job_id: int
    company: str
    role: str
    deadline: date
    email: str
    name: str


@dataclass
class ReminderOutcome:
    """What happened to one candidate during a cycle."""

    job_id: int
    email: str
    sent: bool = False
    flagged: bool = False
    error: Optional[str] = None


@dataclass
class ReminderCycleResult:
    """Summary of one scan-notify-update cycle."""

    run_date: date
    target_date: date
    started_at: datetime
    finished_at: Optional[datetime] = None
    aborted: bool = False
    dry_run: bool = False
    error: Optional[str] = None
    outcomes: List[ReminderOutcome] = field(default_factory=list)

    @property
    def matched(self) -> int:
        return len(self.outcomes)

    @property
    def sent(self) -> int:
        return sum(1 for o in self.outcomes if o.sent)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.sent)

    @property
    def flag_failures(self) -> int:
        if self.dry_run:
            return 0
        return sum(1 for o in self.outcomes if o.sent and not o.flagged)

    def to_dict(self) -> dict:
        return {
            "run_date": self.run_date.isoformat(),
            "target_date": self.target_date.isoformat(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "aborted": self.aborted,
            "dry_run": self.dry_run,
            "error": self.error,
            "matched": self.matched,
            "sent": self.sent,
            "failed": self.failed,
            "flag_failures": self.flag_failures,
            "outcomes": [
                {
                    "job_id": o.job_id,
                    "email": o.email,
                    "sent": o.sent,
                    "flagged": o.flagged,
                    "error": o.error,
                }
                for o in self.outcomes
            ],
        }


class ReminderStore:
    """Row store access for the reminder pipeline.

    Every call opens its own session, so flag updates commit independently
    of each other.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_due(self, target_date: date) -> List[ReminderCandidate]:
        """Jobs with `deadline == target_date` and no reminder sent yet."""
        query = (
            select(
                Job.id,
                Job.company,
                Job.role,
                Job.deadline,
                User.email,
                User.name,
            )
            .join(User, Job.user_id == User.id)
            .where(
                Job.reminder_sent.is_(False),
                Job.deadline == target_date,
            )
            .order_by(Job.id)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                ReminderCandidate(
                    job_id=row.id,
                    company=row.company,
                    role=row.role,
                    deadline=row.deadline,
                    email=row.email,
                    name=row.name,
                )
                for row in result.all()
            ]

    async def mark_sent(self, job_id: int) -> bool:
        """Set `reminder_sent` for one job. Returns False if no row changed."""
        statement = (
            update(Job)
            .where(Job.id == job_id, Job.reminder_sent.is_(False))
            .values(reminder_sent=True)
        )
        async with self.session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
            return result.rowcount > 0


class ReminderNotifier:
    """Render and deliver reminder emails."""

    def __init__(self, transport: EmailTransport, lead_days: int):
        self.transport = transport
        self.lead_days = lead_days

    @property
    def lead_phrase(self) -> str:
        unit = "day" if self.lead_days == 1 else "days"
        return f"in {self.lead_days} {unit}"

    def build_message(self, candidate: ReminderCandidate) -> OutgoingEmail:
        deadline = candidate.deadline.isoformat()
        subject = f"Reminder: {candidate.company} - {candidate.role} (Deadline {deadline})"
        text = (
            f"Hi {candidate.name},\n\n"
            f"This is a reminder that your application for {candidate.role} at "
            f"{candidate.company} has a deadline on {deadline} ({self.lead_phrase}).\n\n"
            f"Good luck!\n\n"
            f"Job Tracker"
        )
        body_html = (
            f"<p>Hi {html.escape(candidate.name)},</p>"
            f"<p>This is a reminder that your application for "
            f"<strong>{html.escape(candidate.role)}</strong> at "
            f"<strong>{html.escape(candidate.company)}</strong> has a deadline on "
            f"<strong>{deadline}</strong> ({self.lead_phrase}).</p>"
            f"<p>Good luck!</p>"
            f"<p>Job Tracker</p>"
        )
        return OutgoingEmail(to=candidate.email, subject=subject, text=text, html=body_html)

    async def notify(self, candidate: ReminderCandidate) -> DeliveryInfo:
        """Send the reminder for one job. Transport errors propagate."""
        return await self.transport.send(self.build_message(candidate))


class ReminderService:
    """Runs reminder cycles over an injected store and notifier.

    With `dry_run` the cycle scans and notifies but never writes
    `reminder_sent`, so the jobs stay eligible for a real cycle.
    """

    def __init__(
        self,
        store: ReminderStore,
        notifier: ReminderNotifier,
        timezone: str = "UTC",
        clock: Optional[Callable[[], date]] = None,
        dry_run: bool = False,
    ):
        self.store = store
        self.dry_run = dry_run
        self.notifier = notifier
        self.timezone = timezone
        self.clock = clock or (lambda: local_today(self.timezone))

    @property
    def lead_days(self) -> int:
        return self.notifier.lead_days

    async def scan(self, today: date) -> List[ReminderCandidate]:
        return await self.store.find_due(reminder_target_date(today, self.lead_days))

    async def mark_sent(self, outcome: ReminderOutcome) -> None:
        try:
            changed = await self.store.mark_sent(outcome.job_id)
        except STORE_ERRORS as e:
            outcome.error = f"flag update failed: {e}"
            logger.error(
                "reminder_flag_update_failed",
                job_id=outcome.job_id,
                email=outcome.email,
                error=str(e),
            )
            return

        outcome.flagged = True
        if not changed:
            # Another cycle (or a manual edit) flagged it first
            logger.warning("reminder_flag_already_set", job_id=outcome.job_id)

    async def process(self, candidate: ReminderCandidate) -> ReminderOutcome:
        outcome = ReminderOutcome(job_id=candidate.job_id, email=candidate.email)
        try:
            info = await self.notifier.notify(candidate)
        except Exception as e:
            # One job's transport failure must not stop the rest of the batch
            outcome.error = str(e) or e.__class__.__name__
            logger.error(
                "reminder_send_failed",
                job_id=candidate.job_id,
                email=candidate.email,
                error=outcome.error,
                exc_info=True,
            )
            return outcome

        outcome.sent = True
        logger.info(
            "reminder_sent",
            job_id=candidate.job_id,
            email=candidate.email,
            message_id=info.message_id,
        )
        if self.dry_run:
            logger.info("reminder_flag_skipped", job_id=candidate.job_id, reason="dry_run")
        else:
            await self.mark_sent(outcome)
        return outcome

    async def run_cycle(self, today: Optional[date] = None) -> ReminderCycleResult:
        """
        Run one full scan-notify-update cycle.

        Never raises for store or transport failures; they are recorded on the
        returned result and logged.

        Args:
            today: Override the current date (defaults to the service clock)

        Returns:
            ReminderCycleResult
        """
        today = today or self.clock()
        result = ReminderCycleResult(
            run_date=today,
            target_date=reminder_target_date(today, self.lead_days),
            started_at=_utcnow(),
            dry_run=self.dry_run,
        )
        logger.info(
            "reminder_cycle_started",
            run_date=today.isoformat(),
            target_date=result.target_date.isoformat(),
            dry_run=self.dry_run,
        )

        try:
            candidates = await self.scan(today)
        except STORE_ERRORS as e:
            result.aborted = True
            result.error = str(e)
            result.finished_at = _utcnow()
            logger.error("reminder_cycle_aborted", error=str(e), exc_info=True)
            return result

        if not candidates:
            result.finished_at = _utcnow()
            logger.info("reminder_cycle_noop", target_date=result.target_date.isoformat())
            return result

        for candidate in candidates:
            result.outcomes.append(await self.process(candidate))

        result.finished_at = _utcnow()
        logger.info(
            "reminder_cycle_completed",
            matched=result.matched,
            sent=result.sent,
            failed=result.failed,
            flag_failures=result.flag_failures,
        )
        return result

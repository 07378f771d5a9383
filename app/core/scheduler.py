"""
Application Scheduler - APScheduler Integration

Drives the daily deadline-reminder cycle for the FastAPI application.
The scheduler is an owned object (created in the app lifespan or a script)
wrapping an AsyncIOScheduler, with the reminder service injected.
"""

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.services.reminder_service import ReminderCycleResult, ReminderService
from app.utils.cron import crontab_trigger

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "deadline_reminders"

STATE_IDLE = "idle"
STATE_RUNNING = "running"


class CycleInProgressError(RuntimeError):
    """Raised when a manual run is requested while a cycle is running."""


def scheduler_listener(event):
    """
    Listener for scheduler events (executed jobs, errors, misfires).

    Args:
        event: APScheduler event object
    """
    if event.code == EVENT_JOB_MISSED:
        logger.warning(f"Job '{event.job_id}' missed its run time {event.scheduled_run_time}")
    elif event.exception:
        logger.error(
            f"Job '{event.job_id}' failed with exception: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.info(f"Job '{event.job_id}' executed successfully")


class ReminderScheduler:
    """Runs the reminder cycle on a cron schedule.

    States: idle and running. A tick that fires while a cycle is still running
    is skipped, so cycles never overlap within this process.
    """

    def __init__(
        self,
        service: ReminderService,
        cron: Optional[str] = None,
        timezone: Optional[str] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.service = service
        self.cron = cron or settings.REMINDER_CRON
        self.timezone = timezone or settings.REMINDER_TIMEZONE
        self.scheduler = scheduler or AsyncIOScheduler(
            timezone=self.timezone,
            job_defaults={
                'coalesce': True,  # Combine missed executions into one
                'max_instances': 1,
                'misfire_grace_time': 3600,  # Job can run up to 1 hour late
            },
        )
        self.scheduler.add_listener(
            scheduler_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED
        )
        self._cycle_running = False
        self.last_result: Optional[ReminderCycleResult] = None

    @property
    def state(self) -> str:
        return STATE_RUNNING if self._cycle_running else STATE_IDLE

    @property
    def running(self) -> bool:
        """Whether the underlying scheduler is started."""
        return self.scheduler.running

    def build_trigger(self) -> CronTrigger:
        return crontab_trigger(self.cron, self.timezone)

    async def run_cycle(self) -> Optional[ReminderCycleResult]:
        """
        Scheduled task: run one reminder cycle unless one is already running.

        Returns:
            The cycle result, or None if the tick was skipped
        """
        if self._cycle_running:
            logger.warning("Reminder cycle already in progress - skipping this tick")
            return None

        self._cycle_running = True
        try:
            result = await self.service.run_cycle()
            self.last_result = result
            return result
        finally:
            self._cycle_running = False

    async def trigger_now(self) -> ReminderCycleResult:
        """
        Manually run a cycle immediately.

        Raises:
            CycleInProgressError: If a cycle is already running
        """
        logger.info("Manually triggering reminder cycle")
        result = await self.run_cycle()
        if result is None:
            raise CycleInProgressError("A reminder cycle is already running")
        return result

    def start(self):
        """
        Register the reminder job and start the scheduler.

        Must be called from a running event loop (the app lifespan).
        """
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        self.scheduler.add_job(
            self.run_cycle,
            self.build_trigger(),
            id=REMINDER_JOB_ID,
            name=f"Deadline reminders ({self.cron})",
            replace_existing=True,
        )
        self.scheduler.start()

        job = self.scheduler.get_job(REMINDER_JOB_ID)
        logger.info(
            f"Reminder scheduler started: cron='{self.cron}' tz={self.timezone} "
            f"lead_days={self.service.lead_days} next_run={job.next_run_time}"
        )

    def stop(self, wait: bool = True):
        """Stop the scheduler. An in-flight cycle is not cancelled."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Reminder scheduler stopped")
        else:
            logger.warning("Scheduler not running")

    def get_status(self) -> dict:
        """
        Get scheduler status and reminder job information.

        Returns:
            Dict with scheduler state, next run time and last cycle summary
        """
        job = self.scheduler.get_job(REMINDER_JOB_ID)
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            'running': self.scheduler.running,
            'state': self.state,
            'cron': self.cron,
            'timezone': self.timezone,
            'lead_days': self.service.lead_days,
            'next_run_time': next_run.isoformat() if next_run else None,
            'last_cycle': self.last_result.to_dict() if self.last_result else None,
        }


def build_reminder_scheduler(transport=None, session_factory=None, dry_run=False) -> ReminderScheduler:
    """
    Wire the reminder pipeline from application settings.

    Args:
        transport: Email transport override (defaults to the configured backend)
        session_factory: Session factory override (defaults to the app's)
        dry_run: Leave `reminder_sent` untouched after sending
    """
    from app.db.session import AsyncSessionLocal
    from app.services.email import get_email_transport
    from app.services.reminder_service import ReminderNotifier, ReminderStore

    service = ReminderService(
        store=ReminderStore(session_factory or AsyncSessionLocal),
        notifier=ReminderNotifier(
            transport or get_email_transport(),
            lead_days=settings.REMINDER_LEAD_DAYS,
        ),
        timezone=settings.REMINDER_TIMEZONE,
        dry_run=dry_run,
    )
    return ReminderScheduler(service)

#!/usr/bin/env python3
"""
Deadline Reminder Runner Script

Runs a single reminder cycle outside the API process, for deployments that
prefer system cron over the in-process scheduler.

Usage:
    python scripts/run_reminder_cycle.py
    python scripts/run_reminder_cycle.py --date 2026-10-19 --dry-run

Cron example (daily at 08:00):
    0 8 * * * cd /path/to/project && .venv/bin/python scripts/run_reminder_cycle.py >> logs/reminders.log 2>&1
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.config import settings  # noqa: E402
from app.core.logging import setup_logging  # noqa: E402
from app.core.scheduler import build_reminder_scheduler  # noqa: E402
from app.db.session import engine  # noqa: E402
from app.services.email import get_email_transport  # noqa: E402

setup_logging()

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Send deadline reminder emails once")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Run as if today were this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log emails instead of sending them and leave reminder flags unset",
    )
    return parser.parse_args(argv)


async def main(argv=None, session_factory=None) -> int:
    """
    Run one cycle and print its summary.

    Args:
        argv: Command line arguments (defaults to sys.argv)
        session_factory: Session factory override (defaults to the app's)

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    transport = get_email_transport("console" if args.dry_run else None)
    reminder_scheduler = build_reminder_scheduler(
        transport=transport,
        session_factory=session_factory,
        dry_run=args.dry_run,
    )

    logger.info(
        f"Running reminder cycle: lead_days={settings.REMINDER_LEAD_DAYS} "
        f"backend={transport.name} date={args.date or 'today'} dry_run={args.dry_run}"
    )

    try:
        result = await reminder_scheduler.service.run_cycle(today=args.date)
    finally:
        if session_factory is None:
            await engine.dispose()

    print(json.dumps(result.to_dict(), indent=2))
    return 1 if result.aborted else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

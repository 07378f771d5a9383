"""Helper utilities."""

import math
from datetime import date, datetime, timedelta
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from app.config import settings


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Strip a string and map empty results to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_pagination(page: Optional[int], limit: Optional[int]) -> Dict:
    """
    Clamp pagination input instead of rejecting it.

    A page below 1 becomes 1; a limit outside 1..MAX_PAGE_SIZE falls back to
    DEFAULT_PAGE_SIZE.
    """
    page = page if page and page >= 1 else 1
    if not limit or limit < 1 or limit > settings.MAX_PAGE_SIZE:
        limit = settings.DEFAULT_PAGE_SIZE
    return {
        "page": page,
        "limit": limit,
        "offset": (page - 1) * limit,
    }


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for `total` rows."""
    return math.ceil(total / limit) if limit else 0


def local_today(timezone: str) -> date:
    """Current calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(timezone)).date()


def reminder_target_date(today: date, lead_days: int) -> date:
    """Deadline that falls inside the reminder window for `today`."""
    return today + timedelta(days=lead_days)

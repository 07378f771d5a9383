"""Crontab expressions as APScheduler triggers."""

from apscheduler.triggers.cron import CronTrigger

# crontab counts weekdays from sunday (0 or 7), APScheduler from monday
CRONTAB_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")


def _crontab_weekdays(part: str) -> str:
    """
    Translate one comma-separated day-of-week item to APScheduler syntax.

    Numeric items (`3`, `0-4`, `1-5/2`, `*/2`) are expanded to an explicit
    list of weekday names. Names are passed through unchanged.
    """
    span, _, step = part.partition("/")
    if span == "*" and not step:
        return span

    if span == "*":
        start, end = 0, 6
    else:
        bounds = span.split("-")
        if not all(bound.isdigit() for bound in bounds):
            return part
        if len(bounds) > 2:
            raise ValueError(f"Invalid day-of-week range '{span}'")
        start = int(bounds[0])
        end = int(bounds[-1]) if len(bounds) == 2 else (6 if step else start)

    if step and (not step.isdigit() or int(step) == 0):
        raise ValueError(f"Invalid day-of-week step '{step}'")
    if end >= len(CRONTAB_WEEKDAYS) or start > end:
        raise ValueError(f"Invalid day-of-week value '{part}' (expected 0-7)")

    names = []
    for day in range(start, end + 1, int(step) if step else 1):
        name = CRONTAB_WEEKDAYS[day]
        if name not in names:
            names.append(name)
    return ",".join(names)


def crontab_trigger(expr: str, timezone: str = "UTC") -> CronTrigger:
    """
    Build a CronTrigger from a standard 5-field crontab expression.

    Numeric day-of-week values use crontab numbering (0 and 7 are sunday).

    Raises:
        ValueError: If the expression is malformed
    """
    fields = expr.split()
    if len(fields) != 5:
        raise ValueError(f"Wrong number of fields; got {len(fields)}, expected 5")
    minute, hour, day, month, day_of_week = fields

    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=",".join(_crontab_weekdays(part) for part in day_of_week.split(",")),
        timezone=timezone,
    )

"""Validators."""

import re
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.utils.constants import PASSWORD_SPECIAL_CHARACTERS
from app.utils.cron import crontab_trigger

_ALLOWED_PASSWORD_CHARS = re.compile(
    r"^[A-Za-z\d" + re.escape(PASSWORD_SPECIAL_CHARACTERS) + r"]+$"
)


def validate_password_strength(password: str) -> tuple[bool, List[str]]:
    """Validate password strength."""
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        errors.append("Password must contain at least one digit")

    if not any(ch in PASSWORD_SPECIAL_CHARACTERS for ch in password):
        errors.append(
            f"Password must contain at least one special character ({PASSWORD_SPECIAL_CHARACTERS})"
        )

    if password and not _ALLOWED_PASSWORD_CHARS.match(password):
        errors.append(
            f"Password may only contain letters, digits and {PASSWORD_SPECIAL_CHARACTERS}"
        )

    return len(errors) == 0, errors


def validate_file_extension(filename: str, allowed_extensions: List[str]) -> bool:
    """Validate file extension."""
    if not filename or "." not in filename:
        return False

    extension = filename.rsplit('.', 1)[-1].lower()
    return extension in [ext.lower() for ext in allowed_extensions]


def validate_cron_expression(expression: str) -> bool:
    """Check that a crontab string is a valid five-field schedule."""
    try:
        crontab_trigger(expression)
    except ValueError:
        return False
    return True


def validate_timezone(name: str) -> bool:
    """Check that `name` is a known IANA timezone."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True

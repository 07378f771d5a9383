"""Common constants."""

DEFAULT_JOB_STATUS = "Applied"

# Special characters accepted (and one required) in passwords
PASSWORD_SPECIAL_CHARACTERS = "@$!%*?&"

PASSWORD_RULES_MESSAGE = (
    "Password must be 8+ characters, include uppercase, lowercase, number, "
    "and special character."
)

# backend/app/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas.

This module provides:
- Investment code validation and normalization
- Password strength rules
- Timestamp normalization (UTC, not in the future)

Each function raises ValueError, which Pydantic turns into a 422 entry
for the field being validated.
"""

import re
from datetime import date, datetime, time, timezone

# =============================================================================
# CONSTANTS
# =============================================================================

# Investment code: 1-20 chars, letters/digits, may carry an exchange suffix (BHP.L)
CODE_PATTERN = re.compile(r'^[A-Z0-9][A-Z0-9.\-]{0,19}$')
CODE_MAX_LENGTH = 20

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PASSWORD_SYMBOLS = "@$!%*?&"


# =============================================================================
# CODE VALIDATION
# =============================================================================

def validate_code(value: str) -> str:
    """
    Validate and normalize an investment code.

    Example:
        >>> validate_code(" vas ")
        'VAS'

    Raises:
        ValueError: If the code is empty or malformed
    """
    if not value or not value.strip():
        raise ValueError("Code cannot be empty")

    normalized = value.strip().upper()

    if len(normalized) > CODE_MAX_LENGTH:
        raise ValueError(f"Code cannot exceed {CODE_MAX_LENGTH} characters")

    if not CODE_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid code format: '{normalized}'. "
            "Code must be alphanumeric and may include dots (.) or dashes (-)"
        )

    return normalized


# =============================================================================
# PASSWORD VALIDATION
# =============================================================================

def validate_password_strength(value: str) -> str:
    """
    Enforce the password policy.

    At least one lower-case letter, one upper-case letter, one digit and one
    of @$!%*?&. Length limits are enforced by the Field definition.
    """
    if not re.search(r"\d", value):
        raise ValueError("Password must include at least one numeric character")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must include at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must include at least one lowercase letter")
    if not any(ch in PASSWORD_SYMBOLS for ch in value):
        raise ValueError(f"Password must include at least one special character ({PASSWORD_SYMBOLS})")
    return value


# =============================================================================
# TIMESTAMP VALIDATION
# =============================================================================

def to_utc_datetime(value: datetime | date) -> datetime:
    """Plain dates become midnight UTC; naive datetimes are read as UTC."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_not_future(value: datetime | date, field_name: str = "Date") -> datetime:
    """
    Normalize to UTC and reject instants after now.

    Raises:
        ValueError: If the moment is in the future
    """
    moment = to_utc_datetime(value)
    now = datetime.now(timezone.utc)
    if moment > now:
        raise ValueError(f"{field_name} cannot be in the future (sent: {moment}, now: {now})")
    return moment

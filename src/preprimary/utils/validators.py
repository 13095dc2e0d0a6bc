"""Data validation helpers.

Functions:
- validate_email(email) -> bool: Check email address format
- normalize_email(email) -> str: Trim and lowercase for storage
- check_date_range(start, end): Reject ranges that end before they start
"""

from __future__ import annotations

import re
from datetime import date

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


def validate_email(email: str) -> bool:
    """Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if the address looks like user@domain.tld
    """
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def normalize_email(email: str) -> str:
    return email.strip().lower()


def check_date_range(start: date | None, end: date | None) -> None:
    """Raise ValueError if both dates are given and end precedes start."""
    if start is not None and end is not None and end < start:
        raise ValueError("End date must be on or after start date")

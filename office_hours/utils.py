"""Shared utilities used across the scheduling engine."""

import re
import uuid

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def new_id(prefix: str) -> str:
    """Return a short unique identifier such as ``SLT-1A2B3C4D``."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("+1-555-0101")
        '+15550101'
        >>> normalize_phone("(555) 010-2")
        '5550102'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def is_valid_email(value: str) -> bool:
    """Loose ``local@domain.tld`` check, matching what the sign-up form accepts."""
    return bool(EMAIL_PATTERN.match(value.strip()))

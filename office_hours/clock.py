"""
Pure time helpers: interval overlap, lead-time policy checks, formatting.

Nothing here reads the system clock except ``utc_now``; every policy
check takes an explicit ``now`` so a caller can freeze time.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

from office_hours.config import settings

Timestamp = Union[datetime, str]

SECONDS_PER_HOUR = 3600


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso(value: Timestamp) -> datetime:
    """Parse an ISO 8601 string (``Z`` suffix accepted) into an aware datetime.

    Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso(value: Timestamp) -> str:
    """Render a timestamp as a UTC ISO 8601 string."""
    return parse_iso(value).astimezone(timezone.utc).isoformat()


def ranges_overlap(
    a_start: Timestamp, a_end: Timestamp, b_start: Timestamp, b_end: Timestamp
) -> bool:
    """Half-open overlap test: ranges that only touch at an endpoint do not overlap."""
    return parse_iso(a_start) < parse_iso(b_end) and parse_iso(b_start) < parse_iso(a_end)


def hours_until(target: Timestamp, now: Timestamp) -> float:
    """Hours from ``now`` to ``target``; negative when the target is in the past."""
    delta = parse_iso(target) - parse_iso(now)
    return delta.total_seconds() / SECONDS_PER_HOUR


def is_booking_allowed(
    slot_start: Timestamp, now: Timestamp, window_hours: Optional[float] = None
) -> bool:
    """True when more than the booking window remains before the slot starts."""
    if window_hours is None:
        window_hours = settings.policy.booking_window_hours
    return hours_until(slot_start, now) > window_hours


def is_cancellation_allowed(
    slot_start: Timestamp, now: Timestamp, window_hours: Optional[float] = None
) -> bool:
    """True when more than the cancellation window remains before the slot starts."""
    if window_hours is None:
        window_hours = settings.policy.cancellation_window_hours
    return hours_until(slot_start, now) > window_hours


def is_past(slot_end: Timestamp, now: Timestamp) -> bool:
    return parse_iso(slot_end) < parse_iso(now)


def combine_date_time(day: Union[date, str], clock_time: str, tz: tzinfo = timezone.utc) -> datetime:
    """Join a calendar date and an ``HH:MM`` string into an aware datetime."""
    if isinstance(day, str):
        day = date.fromisoformat(day)
    hour, minute = (int(part) for part in clock_time.split(":"))
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def day_start(now: Timestamp) -> datetime:
    """Midnight at the start of ``now``'s day, in ``now``'s timezone."""
    return parse_iso(now).replace(hour=0, minute=0, second=0, microsecond=0)


def days_from_now(days: int, now: Timestamp) -> datetime:
    return parse_iso(now) + timedelta(days=days)


# --- Display formatting ---

def format_date(value: Timestamp) -> str:
    """``Tuesday, November 25, 2025``"""
    dt = parse_iso(value)
    return f"{dt:%A}, {dt:%B} {dt.day}, {dt.year}"


def format_short_date(value: Timestamp) -> str:
    """``Nov 25, 2025``"""
    dt = parse_iso(value)
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_time(value: Timestamp) -> str:
    """``10:00 AM``"""
    dt = parse_iso(value)
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_time_range(start: Timestamp, end: Timestamp) -> str:
    return f"{format_time(start)} - {format_time(end)}"


def relative_time(value: Timestamp, now: Timestamp) -> str:
    """Coarse human description such as ``in 3 hours`` or ``2 days ago``."""
    diff_hours = hours_until(value, now)
    hours = abs(diff_hours)
    days = hours / 24

    if diff_hours > 0:
        if hours < 1:
            return "in less than 1 hour"
        if hours < 24:
            return f"in {int(hours)} hours"
        if days < 7:
            return f"in {int(days)} days"
        return "in over a week"

    if hours < 1:
        return "less than 1 hour ago"
    if hours < 24:
        return f"{int(hours)} hours ago"
    if days < 7:
        return f"{int(days)} days ago"
    return "over a week ago"

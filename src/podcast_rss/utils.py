"""
Utility functions for timestamps and field defaulting.
"""

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Optional


def now_rfc2822() -> str:
    """Current UTC time in RFC-2822 form."""
    return format_datetime(datetime.now(timezone.utc), usegmt=True)


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a 'Z' suffix."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def parse_pub_date(value: Any) -> Optional[datetime]:
    """Parse an RFC-2822 or ISO-8601 date into an aware UTC datetime.

    Returns None when the value cannot be understood as a date. Naive
    values are taken to be UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        parsed = None

    try:
        if parsed is None:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Offsets can push dates at the calendar edges out of range
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def format_rfc2822(value: Any) -> str:
    """Normalise a date to RFC-2822 GMT, leaving unparseable text as is."""
    parsed = parse_pub_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return format_datetime(parsed, usegmt=True)


def or_default(value: Any, default: Any) -> Any:
    """Return value unless it is empty/falsy, in which case return default."""
    return value if value else default

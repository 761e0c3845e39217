# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from datetime import datetime, timezone

_WHITESPACE = re.compile(r"\s")


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Serialise a datetime the way Postgres timestamptz columns expect.

    Naive datetimes are assumed to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a timestamp read back from Supabase.

    PostgREST returns ISO 8601 strings, sometimes with a trailing "Z".

    Example:
        parse_timestamp("2024-01-15T10:30:00Z")  # datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        parse_timestamp(None)                    # None
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Contact Utilities
# =============================================================================

def normalize_phone(phone: str) -> str:
    """
    Normalise a phone number for storage lookups.

    Removes all whitespace and adds a leading "+" when missing.

    Example:
        normalize_phone("234 801 234 5678")  # "+2348012345678"
    """
    cleaned = _WHITESPACE.sub("", phone)
    return cleaned if cleaned.startswith("+") else f"+{cleaned}"


def mask_phone(phone: str) -> str:
    """Hide all but the country prefix and last two digits for logs."""
    if len(phone) <= 6:
        return "***"
    return f"{phone[:4]}***{phone[-2:]}"

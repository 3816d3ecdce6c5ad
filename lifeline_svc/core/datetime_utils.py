"""
UTC-first datetime utilities for Lifeline Records API.

Drivers hand back dates in different shapes: PyMySQL returns ``date`` and
``datetime`` objects, SQLite returns TEXT. These helpers normalize them so
rows can be serialized to JSON and timestamps from different tables can be
compared.

Design Principles:
- Internal comparison: always timezone-aware datetimes in UTC
- Naive values from the store are assumed to already be UTC
- API responses: ISO 8601 strings
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC

    Example:
        >>> from datetime import timedelta
        >>> ist = timezone(timedelta(hours=5, minutes=30))
        >>> to_utc(datetime(2024, 1, 15, 16, 0, tzinfo=ist)).hour
        10
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# =============================================================================
# PARSING
# =============================================================================

def parse_datetime(value: Union[str, date, datetime]) -> datetime:
    """
    Parse a store value to a UTC datetime.

    Accepts:
    - datetime object (returned after UTC conversion)
    - date object (midnight UTC of that day)
    - ISO 8601 string, date-only or with time, with or without timezone

    Raises:
        ValueError: If the value cannot be parsed.

    Examples:
        >>> parse_datetime("2024-01-15 10:30:00")
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
        >>> parse_datetime(date(2024, 1, 15))
        datetime.datetime(2024, 1, 15, 0, 0, tzinfo=datetime.timezone.utc)
    """
    # datetime is a subclass of date, so it must be checked first
    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if not isinstance(value, str):
        raise ValueError(f"Expected datetime, date or string, got {type(value).__name__}")

    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        pass

    for fmt in ("%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError(f"Cannot parse datetime: '{value}'")


def parse_datetime_safe(value: Any) -> Optional[datetime]:
    """
    Parse datetime with graceful error handling.

    Returns:
        Parsed datetime in UTC, or None if parsing fails or input is None.
    """
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError as e:
        logger.warning(f"Failed to parse datetime '{value}': {e}")
        return None


# =============================================================================
# FORMATTING
# =============================================================================

def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with 'Z' suffix.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def serialize_db_value(value: Any) -> Any:
    """
    Make a single column value JSON friendly.

    ``datetime`` becomes ``YYYY-MM-DDTHH:MM:SS``, ``date`` becomes
    ``YYYY-MM-DD``; everything else is returned untouched.
    """
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value

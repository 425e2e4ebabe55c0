"""Timezone utilities.

Single source of truth for timestamp parsing and UTC conversion.
All comparisons inside the matcher happen on aware UTC datetimes.
"""

import logging
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser

logger = logging.getLogger(__name__)

__all__ = [
    "get_tz",
    "now_utc",
    "to_utc",
    "parse_timestamp",
    "format_utc",
    "hours_between",
]


def get_tz(tz_name: str | None = None) -> tzinfo:
    """Get timezone from an IANA name, falling back to UTC.

    Args:
        tz_name: IANA timezone name (e.g., 'Europe/Amsterdam')

    Returns:
        tzinfo for the timezone
    """
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("[TZ] Unknown timezone '%s', using UTC", tz_name)
    return UTC


def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert any datetime to UTC.

    Args:
        dt: Datetime to convert (must be timezone-aware)

    Returns:
        Datetime in UTC
    """
    if dt.tzinfo is None:
        raise ValueError("Cannot convert naive datetime - must be timezone-aware")
    return dt.astimezone(UTC)


def parse_timestamp(raw: str | datetime | None, default_tz: str | None = "UTC") -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Values without an offset are interpreted in default_tz. Fails softly:
    anything that cannot be parsed returns None and the caller skips the
    comparison.

    Args:
        raw: ISO string ("2025-10-16T20:25:00+02:00", "2025-10-16T17:30:13.300Z")
             or a datetime
        default_tz: IANA timezone for naive values

    Returns:
        UTC datetime, or None if raw is not a valid timestamp
    """
    if isinstance(raw, datetime):
        dt = raw
    else:
        if not raw or not isinstance(raw, str):
            return None
        try:
            dt = parser.isoparse(raw.strip())
        except (ValueError, OverflowError):
            logger.debug("[TZ] Failed to parse timestamp: %r", raw)
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=get_tz(default_tz))
    try:
        return dt.astimezone(UTC)
    except OverflowError:
        logger.debug("[TZ] Timestamp outside UTC range: %r", raw)
        return None


def format_utc(dt: datetime) -> str:
    """Format an aware datetime as ISO 8601 UTC with a Z suffix.

    E.g. 2025-10-16T17:00:00Z (sub-seconds dropped).
    """
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return to_utc(dt).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from start to end."""
    return (end - start).total_seconds() / 3600

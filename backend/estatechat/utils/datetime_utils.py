"""
Timezone-aware datetime utilities.

Thread timestamps travel as ISO 8601 strings with millisecond precision and
a "Z" suffix so they sort lexicographically.
"""

from datetime import datetime, timezone

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def to_iso_string(value: datetime) -> str:
    """
    Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Naive datetimes are assumed to be UTC.

    Example:
        >>> to_iso_string(datetime(2024, 1, 20, 9, 0, tzinfo=UTC))
        '2024-01-20T09:00:00.000Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def now_iso() -> str:
    """Current UTC time as an ISO string."""
    return to_iso_string(now_utc())

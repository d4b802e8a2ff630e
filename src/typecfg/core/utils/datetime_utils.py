"""
Datetime helpers for the date validator and the JSON codec.

All parsed datetimes are returned timezone-aware in UTC so that values
loaded from different files compare consistently.
"""

from datetime import date, datetime, timezone
from typing import Union


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime is in UTC timezone.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    if dt.tzinfo == timezone.utc:
        return dt
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: str) -> datetime:
    """
    Parse ISO datetime string to datetime object.

    Handles the formats found in configuration files:
    - 2024-01-01
    - 2024-01-01T12:00:00
    - 2024-01-01T12:00:00Z
    - 2024-01-01T12:00:00+00:00
    - 2024-01-01 12:00:00.123456+02:00

    Args:
        iso_string: ISO format datetime string

    Returns:
        Parsed datetime in UTC with timezone info

    Raises:
        ValueError: If string cannot be parsed as ISO datetime
    """
    text = iso_string.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise ValueError(f"Invalid ISO datetime string: {iso_string}") from e


def format_iso(dt: Union[datetime, date]) -> str:
    """
    Format datetime to ISO string with Z suffix.

    Plain dates are formatted as-is (YYYY-MM-DD).

    Example: "2024-01-15T10:30:45.123456Z"
    """
    if not isinstance(dt, datetime):
        return dt.isoformat()
    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')

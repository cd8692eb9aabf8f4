"""
Timestamp conversion utilities for cookie expiry handling.

Provides centralized conversion functions for the expiry formats found in
captured cookie data.

Formats supported:
- ISO 8601 strings (``2030-01-01T00:00:00Z``)
- RFC 1123 / HTTP-date strings (``Tue, 01 Jan 2030 00:00:00 GMT``)
- Unix: Seconds since 1970-01-01 (DevTools ``expirationDate``)
- JavaScript: Milliseconds since 1970-01-01 (``Date.parse`` output)
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Union

# Numbers above this are treated as milliseconds (year 5138 in seconds)
MILLISECONDS_THRESHOLD = 100_000_000_000


def unix_to_datetime(seconds: Union[int, float]) -> Optional[datetime]:
    """
    Convert Unix timestamp to datetime.

    Args:
        seconds: Unix timestamp (seconds since 1970)

    Returns:
        datetime in UTC, or None if invalid/zero
    """
    if not seconds or seconds <= 0:
        return None

    try:
        if seconds > 32503680000:  # Beyond year 3000
            return None
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OSError, OverflowError):
        return None


def utc_now() -> str:
    """
    Get current UTC time as ISO 8601 string.

    Returns:
        Current UTC time in ISO 8601 format without microseconds
    """
    return datetime.now(tz=timezone.utc).replace(microsecond=0).isoformat()


def now_ms() -> int:
    """Return the current time as milliseconds since the Unix epoch."""
    return int(datetime.now(tz=timezone.utc).timestamp() * 1000)


def parse_iso(iso_string: Optional[str]) -> Optional[datetime]:
    """
    Parse ISO 8601 string to datetime.

    Args:
        iso_string: ISO 8601 formatted string

    Returns:
        datetime in UTC, or None if invalid
    """
    if not iso_string:
        return None

    try:
        # Handle various ISO formats
        dt = datetime.fromisoformat(iso_string.replace('Z', '+00:00'))
        # Ensure UTC timezone
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except (ValueError, TypeError):
        return None


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an RFC 1123 date as used in ``Expires`` attributes.

    Returns:
        datetime in UTC, or None if invalid
    """
    if not value:
        return None

    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_expiry(value: Any) -> Optional[datetime]:
    """
    Convert a cookie expiry value to an aware datetime.

    Accepts datetimes, epoch numbers (seconds or milliseconds) and
    ISO 8601 or RFC 1123 strings. Anything else, including the session
    marker, yields None.

    Example:
        >>> parse_expiry("Tue, 01 Jan 2030 00:00:00 GMT").year
        2030
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        if value > MILLISECONDS_THRESHOLD:
            value = value / 1000
        return unix_to_datetime(value)
    if isinstance(value, str):
        text = value.strip()
        return parse_iso(text) or parse_http_date(text)
    return None


def to_epoch_ms(dt: datetime) -> int:
    """Return milliseconds since the Unix epoch for an aware datetime."""
    return int(dt.timestamp() * 1000)


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Human-readable duration string

    Example:
        >>> format_duration(90061)
        '1d 1h 1m 1s'
    """
    if seconds < 0:
        return "0s"

    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)

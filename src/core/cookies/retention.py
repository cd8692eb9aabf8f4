"""Retention-period classification for cookie expiry values."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from core.enums import RetentionBucket
from core.timestamps import now_ms, parse_expiry, to_epoch_ms

from .records import is_session_marker

DAY_MS = 86_400_000
WEEK_MS = 604_800_000
# Average Gregorian month
MONTH_MS = 2_629_743_833


def _reference_ms(now: Optional[datetime | int | float]) -> int:
    if now is None:
        return now_ms()
    if isinstance(now, datetime):
        return to_epoch_ms(parse_expiry(now))
    return int(now)


def classify_retention(expiry: Any, now: Optional[datetime | int | float] = None) -> Optional[RetentionBucket]:
    """
    Classify an expiry value into a retention bucket.

    ``now`` defaults to the current time and is read on every call, so the
    same cookie can move to a shorter bucket between evaluations. Already
    expired cookies fall into SHORT. Unparseable values yield None.

    Args:
        expiry: Session marker, datetime, epoch number or date string
        now: Reference time as datetime or epoch milliseconds

    Returns:
        The bucket, or None when the expiry cannot be interpreted
    """
    if is_session_marker(expiry):
        return RetentionBucket.SESSION

    expires_at = parse_expiry(expiry)
    if expires_at is None:
        return None

    remaining = to_epoch_ms(expires_at) - _reference_ms(now)
    if remaining < DAY_MS:
        return RetentionBucket.SHORT
    if remaining < WEEK_MS:
        return RetentionBucket.MEDIUM
    if remaining < MONTH_MS:
        return RetentionBucket.LONG
    return RetentionBucket.EXTENDED


def retention_comparator(value: Any, label: str) -> bool:
    """Facet comparator: does the expiry fall into the bucket named ``label``?"""
    return classify_retention(value) == label

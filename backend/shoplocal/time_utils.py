from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_REFERENCE_TIMEZONE = "America/Los_Angeles"


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_reference_zone(dt: datetime, tz_name: str = DEFAULT_REFERENCE_TIMEZONE) -> datetime:
    """
    Convert a stored datetime into the reference timezone.

    Naive values are interpreted as UTC, matching how they are persisted.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ZoneInfo(tz_name))


def reference_date(now: Optional[datetime] = None, tz_name: str = DEFAULT_REFERENCE_TIMEZONE) -> date:
    """Calendar date of `now` (default: current time) in the reference timezone."""
    return to_reference_zone(now or utcnow(), tz_name).date()


def to_naive_utc(dt: datetime) -> datetime:
    """Normalize an aware datetime to the UTC-naive storage form."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")

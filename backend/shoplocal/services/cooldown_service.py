# Overview: Per-user, per-location check-in cooldown.

from __future__ import annotations

from datetime import datetime, timedelta

from ..extensions import db
from ..models import CheckIn

DEFAULT_WINDOW_HOURS = 24


def is_rate_limited(
    last_check_in_at: datetime | None,
    now: datetime,
    window_hours: int = DEFAULT_WINDOW_HOURS,
) -> bool:
    """
    True while fewer than `window_hours` have passed since the last check-in.

    Exactly `window_hours` elapsed is allowed. No previous check-in is never
    limited.
    """
    if last_check_in_at is None:
        return False
    return now - last_check_in_at < timedelta(hours=window_hours)


def seconds_until_allowed(
    last_check_in_at: datetime,
    now: datetime,
    window_hours: int = DEFAULT_WINDOW_HOURS,
) -> int:
    remaining = (last_check_in_at + timedelta(hours=window_hours)) - now
    return max(0, int(remaining.total_seconds()))


def last_check_in_at(user_id: int, location_id: int) -> datetime | None:
    """Most recent check-in time for this user at this location, any season."""
    row = (
        db.session.query(CheckIn.created_at)
        .filter(CheckIn.user_id == user_id, CheckIn.location_id == location_id)
        .order_by(CheckIn.created_at.desc(), CheckIn.id.desc())
        .first()
    )
    return row[0] if row else None

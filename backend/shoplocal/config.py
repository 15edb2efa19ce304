# backend/shoplocal/config.py
from __future__ import annotations
import os


def _csv(value: str | None) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shoplocal.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # HMAC key for daily check-in tokens. No default: issuing or verifying
    # tokens without it is a configuration error.
    TOKEN_SECRET = os.environ.get("TOKEN_SECRET")

    # Usernames allowed to call /api/admin/* routes
    ADMIN_USERNAMES = _csv(os.environ.get("ADMIN_USERNAMES"))

    # Token dates and season weeks are computed in this zone
    REFERENCE_TIMEZONE = os.environ.get("REFERENCE_TIMEZONE", "America/Los_Angeles")

    CHECKIN_COOLDOWN_HOURS = int(os.environ.get("CHECKIN_COOLDOWN_HOURS", "24"))

    SEASON_CITY = os.environ.get("SEASON_CITY", "Ventura")

# backend/shoplocal/routes/system.py
"""
System health endpoint.

Reports database reachability and whether the service can currently issue
and verify check-in tokens.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Location, Season
from shoplocal.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and report the board's basic state.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        location_count = db.session.query(Location).filter_by(is_active=True).count()
        active_season = db.session.query(Season.id).filter_by(is_active=True).first()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy" if active_season else "degraded",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "active_locations": location_count,
                "active_season_id": active_season[0] if active_season else None,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_token_config() -> dict:
    if current_app.config.get("TOKEN_SECRET"):
        return {"status": "healthy"}
    return {"status": "unhealthy", "error": "TOKEN_SECRET is not configured"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy, or degraded (no active season yet)
    - 503: database unreachable or token signing not configured
    """
    checks = {
        "database": check_database_health(),
        "token_signing": check_token_config(),
    }
    statuses = {check["status"] for check in checks.values()}

    if "unhealthy" in statuses:
        overall_status, http_status = "unhealthy", 503
    elif "degraded" in statuses:
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "checks": checks,
    }, http_status

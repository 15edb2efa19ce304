# Overview: Flask API routes for check-ins; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import BingoError
from ..services import checkin_service
from ..decorators import require_auth
from .common import error_response, reference_timezone, token_secret

checkins_bp = Blueprint("checkins", __name__, url_prefix="/api/checkins")


@checkins_bp.post("")
@require_auth
def check_in_route():
    """
    Apply a scanned token to the caller's board.

    Body: {"token": str, "device_hash": str}
    Rejections use the error codes invalid_token, token_expired,
    no_active_season and rate_limited.
    """
    data = request.get_json(silent=True) or {}
    token = str(data.get("token") or "").strip()
    device_hash = str(data.get("device_hash") or "").strip()

    if not token or not device_hash:
        return jsonify({"error": "token and device_hash are required"}), 400

    try:
        result = checkin_service.check_in(
            g.current_user.id,
            token,
            device_hash,
            secret=token_secret(),
            cooldown_hours=current_app.config["CHECKIN_COOLDOWN_HOURS"],
            tz_name=reference_timezone(),
        )
        return jsonify(result.to_dict()), 200

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to check in")
        return jsonify({"error": "Internal server error"}), 500

# Overview: Flask API routes for daily location tokens; called by the in-store display.

from flask import Blueprint, request, jsonify, current_app

from ..errors import BingoError
from ..services import location_service
from .common import error_response, reference_timezone, token_secret

tokens_bp = Blueprint("tokens", __name__, url_prefix="/api/tokens")


@tokens_bp.get("/daily")
def daily_token_route():
    """
    Fresh signed token for today at one location.

    Unauthenticated: the token only proves presence at the location today.
    """
    location_id = request.args.get("location_id", type=int)
    if not location_id:
        return jsonify({"error": "location_id required"}), 400

    try:
        result = location_service.issue_daily_token(
            location_id,
            secret=token_secret(),
            tz_name=reference_timezone(),
        )
        return jsonify(result), 200

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to issue daily token")
        return jsonify({"error": "Internal server error"}), 500

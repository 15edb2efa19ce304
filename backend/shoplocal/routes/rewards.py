# Overview: Flask API routes for the caller's rewards and redemption.

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import BingoError
from ..services import reward_service
from ..decorators import require_auth
from .common import error_response

rewards_bp = Blueprint("rewards", __name__, url_prefix="/api/rewards")


@rewards_bp.get("")
@require_auth
def list_rewards_route():
    season_id = request.args.get("season_id", type=int)
    rewards = reward_service.list_user_rewards(g.current_user.id, season_id)
    return jsonify({"rewards": rewards}), 200


@rewards_bp.post("/<int:issued_reward_id>/redeem")
@require_auth
def redeem_reward_route(issued_reward_id: int):
    """
    Redeem one of the caller's rewards.

    Idempotent: a second call answers 200 with already_redeemed=true.
    """
    try:
        result = reward_service.redeem(issued_reward_id, g.current_user.id)
        return jsonify(result), 200

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to redeem reward")
        return jsonify({"error": "Internal server error"}), 500

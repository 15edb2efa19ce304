# Overview: Flask API routes for the player's view of the active board.

from flask import Blueprint, jsonify, g

from ..errors import NoActiveSeason
from ..services import checkin_service, season_service
from ..decorators import require_auth
from .common import error_response

seasons_bp = Blueprint("seasons", __name__, url_prefix="/api/seasons")


@seasons_bp.get("/active")
@require_auth
def active_season_route():
    """Active season, its 25 cells and the caller's progress on it."""
    season = season_service.get_active_season()
    if not season:
        return error_response(NoActiveSeason("No active season."))

    return jsonify({
        "season": season.to_dict(),
        "cells": season_service.board_for_season(season),
        "progress": checkin_service.get_progress(g.current_user.id, season.id),
    }), 200

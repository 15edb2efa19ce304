# Overview: Flask API routes for operators; seeding, season rotation and analytics.

import random

from flask import Blueprint, request, jsonify, current_app

from ..errors import BingoError
from ..services import analytics_service, location_service, season_service
from ..decorators import require_auth, require_admin
from .common import error_response, reference_timezone

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _rotate():
    return season_service.create_season(
        city=current_app.config["SEASON_CITY"],
        rng=random.SystemRandom(),
        tz_name=reference_timezone(),
    )


@admin_bp.post("/seed")
@require_auth
@require_admin
def seed_route():
    """Seed sample locations if none exist, then start a fresh season."""
    try:
        created = location_service.seed_sample_locations()
        season = _rotate()
        current_app.logger.info("Seeded %d locations; season %s is active", created, season.id)
        return jsonify({"created_locations": created, "season": season.to_dict()}), 201

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to seed")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.post("/seasons/rotate")
@require_auth
@require_admin
def rotate_season_route():
    """Deactivate the current season and mint a new board."""
    try:
        season = _rotate()
        current_app.logger.info("Rotated to season %s", season.id)
        return jsonify({
            "season": season.to_dict(),
            "cells": season_service.board_for_season(season),
        }), 201

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to rotate season")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/analytics")
@require_auth
@require_admin
def analytics_route():
    season_id = request.args.get("season_id", type=int)
    try:
        return jsonify(analytics_service.season_analytics(season_id)), 200

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to compute analytics")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/locations")
@require_auth
@require_admin
def list_locations_route():
    active_only = request.args.get("active_only", "false").lower() == "true"
    return jsonify({"locations": location_service.list_locations(active_only)}), 200


@admin_bp.post("/locations")
@require_auth
@require_admin
def create_location_route():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify({"error": "name required"}), 400

    try:
        location = location_service.create_location(name, data.get("address"), data.get("category"))
        current_app.logger.info("Created location %s (%s)", location.id, location.name)
        return jsonify({"location": location.to_dict()}), 201

    except BingoError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create location")
        return jsonify({"error": "Internal server error"}), 500

# Overview: Small helpers shared by the API blueprints.

from flask import current_app, jsonify

from ..errors import BingoError


def error_response(err: BingoError):
    return jsonify(err.to_dict()), err.http_status


def token_secret() -> str:
    secret = current_app.config.get("TOKEN_SECRET")
    if not secret:
        raise RuntimeError("TOKEN_SECRET is not configured")
    return secret


def reference_timezone() -> str:
    return current_app.config["REFERENCE_TIMEZONE"]

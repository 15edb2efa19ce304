# Overview: Request decorators for API routes; bearer authentication and the admin allow-list.

from functools import wraps
from flask import request, jsonify, g, current_app

from .services import session_service, audit_service
from .errors import Unauthenticated, PermissionDenied


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1]


def is_admin(user) -> bool:
    return user is not None and user.username in current_app.config.get("ADMIN_USERNAMES", [])


def require_auth(f):
    """
    Require a valid bearer session.

    Sets g.current_user. Returns 401 if the header is missing or the token
    is invalid, expired or revoked.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            err = Unauthenticated("Authentication required.")
            return jsonify(err.to_dict()), err.http_status

        user = session_service.validate_session(token)
        if not user:
            err = Unauthenticated("Invalid or expired token")
            return jsonify(err.to_dict()), err.http_status

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """
    Require the authenticated user to be on the ADMIN_USERNAMES allow-list.

    Denials are written to security_events.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not hasattr(g, 'current_user'):
            err = Unauthenticated("Authentication required.")
            return jsonify(err.to_dict()), err.http_status

        user = g.current_user
        if not is_admin(user):
            current_app.logger.warning("Admin route %s denied for user %s", request.path, user.id)
            audit_service.log_security_event(
                user_id=user.id,
                event_type="PERMISSION_DENIED",
                success=False,
                resource=request.path,
                action=request.method,
                reason="Not in admin allow-list",
                ip_address=request.remote_addr,
                user_agent=request.headers.get("User-Agent"),
            )
            err = PermissionDenied("Admin only.")
            return jsonify(err.to_dict()), err.http_status

        return f(*args, **kwargs)

    return decorated_function

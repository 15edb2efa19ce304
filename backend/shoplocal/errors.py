# Overview: Domain error taxonomy shared by services and routes.

from __future__ import annotations


class BingoError(Exception):
    """Base for every rejected request. Carries a stable code and HTTP status."""

    error_code = "error"
    http_status = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.message, "code": self.error_code}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidCredential(BingoError):
    """Scanned token is malformed or forged. The message never says which check failed."""
    error_code = "invalid_token"
    http_status = 400


class CredentialExpired(BingoError):
    """Token was issued for a different day."""
    error_code = "token_expired"
    http_status = 412


class NoActiveSeason(BingoError):
    error_code = "no_active_season"
    http_status = 412


class RateLimited(BingoError):
    """Cooldown window for this user/location has not elapsed."""
    error_code = "rate_limited"
    http_status = 429


class NotFound(BingoError):
    error_code = "not_found"
    http_status = 404


class LocationNotFound(NotFound):
    pass


class Forbidden(BingoError):
    error_code = "forbidden"
    http_status = 403


class NotRedeemable(BingoError):
    """Raffle entries are recorded automatically and never redeemed."""
    error_code = "not_redeemable"
    http_status = 412


class InsufficientLocations(BingoError):
    error_code = "insufficient_locations"
    http_status = 412


class Unauthenticated(BingoError):
    error_code = "unauthenticated"
    http_status = 401


class PermissionDenied(BingoError):
    error_code = "permission_denied"
    http_status = 403


class DuplicateLocation(BingoError):
    """A location with this name already exists."""
    error_code = "conflict"
    http_status = 409

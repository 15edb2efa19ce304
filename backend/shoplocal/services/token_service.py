# Overview: Signing and verification of daily, location-scoped check-in tokens.

"""
Daily Check-in Token Codec

Token layout: <payload>.<signature>
- payload:   base64url (no padding) of compact JSON {location_id, nonce, token_date}
- signature: base64url (no padding) of HMAC-SHA256(secret, payload)

The codec is purely cryptographic. It does not know what "today" is;
freshness of token_date is checked by the check-in transaction.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from shoplocal.time_utils import DEFAULT_REFERENCE_TIMEZONE, reference_date

SEPARATOR = "."
NONCE_BYTES = 8


class TokenError(Exception):
    """Base for token verification failures."""


class InvalidFormat(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class InvalidPayload(TokenError):
    pass


@dataclass(frozen=True)
class TokenPayload:
    location_id: str
    token_date: str
    nonce: str


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _encode_payload(payload: TokenPayload) -> str:
    raw = json.dumps(asdict(payload), sort_keys=True, separators=(",", ":"))
    return _b64url_encode(raw.encode("utf-8"))


def _sign(data: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).digest()


def sign_token(payload: TokenPayload, secret: str) -> str:
    data = _encode_payload(payload)
    return f"{data}{SEPARATOR}{_b64url_encode(_sign(data, secret))}"


def verify_token(token: str, secret: str) -> TokenPayload:
    """
    Verify a token and return its payload.

    Raises InvalidFormat, InvalidSignature or InvalidPayload. The signature
    comparison is constant-time over the encoded signature bytes.
    """
    parts = token.split(SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise InvalidFormat("Invalid token format")
    data, sig = parts

    # Compare canonical encodings, not decoded digests: unpadded base64 has
    # spare low bits in its last character, so two strings can decode alike.
    expected = _b64url_encode(_sign(data, secret)).encode("ascii")
    if not hmac.compare_digest(sig.encode("utf-8"), expected):
        raise InvalidSignature("Invalid token signature")

    try:
        decoded = json.loads(_b64url_decode(data).decode("utf-8"))
    except (binascii.Error, ValueError):
        raise InvalidPayload("Invalid token payload")

    if not isinstance(decoded, dict):
        raise InvalidPayload("Invalid token payload")

    fields = {}
    for name in ("location_id", "token_date", "nonce"):
        value = decoded.get(name)
        if not isinstance(value, str) or not value:
            raise InvalidPayload("Invalid token payload")
        fields[name] = value

    return TokenPayload(**fields)


def today_token_date(now: Optional[datetime] = None, tz_name: str = DEFAULT_REFERENCE_TIMEZONE) -> str:
    """ISO date of `now` in the reference timezone."""
    return reference_date(now, tz_name).isoformat()


def generate_daily_token(location_id: int | str, token_date: str, secret: str) -> str:
    nonce = secrets.token_hex(NONCE_BYTES)
    return sign_token(TokenPayload(location_id=str(location_id), token_date=token_date, nonce=nonce), secret)

"""
Daily token codec tests.

Verifies:
- sign/verify round trip preserves every field
- tampering with either half is rejected, down to a single flipped bit
- malformed shapes and payloads are rejected
- token_date follows the reference timezone, not UTC
"""

import base64
import json
from datetime import datetime

import pytest

from shoplocal.services import token_service
from shoplocal.services.token_service import (
    InvalidFormat,
    InvalidPayload,
    InvalidSignature,
    TokenPayload,
)

SECRET = "unit-secret"
FIXED_TOKEN = token_service.sign_token(
    TokenPayload(location_id="7", token_date="2026-03-04", nonce="a1b2c3d4e5f60718"), SECRET
)


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class TestSignAndVerify:

    def test_round_trip(self):
        payload = TokenPayload(location_id="7", token_date="2026-03-04", nonce="a1b2c3d4e5f60718")
        token = token_service.sign_token(payload, SECRET)
        assert token_service.verify_token(token, SECRET) == payload

    def test_generated_tokens_use_fresh_nonces(self):
        first = token_service.generate_daily_token(7, "2026-03-04", SECRET)
        second = token_service.generate_daily_token(7, "2026-03-04", SECRET)
        assert first != second

        a = token_service.verify_token(first, SECRET)
        b = token_service.verify_token(second, SECRET)
        assert a.location_id == b.location_id == "7"
        assert len(a.nonce) == 16
        assert a.nonce != b.nonce

    def test_payload_is_readable_json(self):
        token = token_service.generate_daily_token(3, "2026-03-04", SECRET)
        encoded = token.split(".")[0]
        padded = encoded + "=" * (-len(encoded) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded))
        assert data["location_id"] == "3"
        assert data["token_date"] == "2026-03-04"


class TestRejection:

    def test_wrong_secret(self):
        token = token_service.generate_daily_token(7, "2026-03-04", SECRET)
        with pytest.raises(InvalidSignature):
            token_service.verify_token(token, "other-secret")

    def test_tampered_payload(self):
        token = token_service.generate_daily_token(7, "2026-03-04", SECRET)
        _, sig = token.split(".")
        forged = _b64(json.dumps({"location_id": "8", "token_date": "2026-03-04", "nonce": "x"}).encode())
        with pytest.raises(InvalidSignature):
            token_service.verify_token(f"{forged}.{sig}", SECRET)

    def test_tampered_signature(self):
        token = token_service.generate_daily_token(7, "2026-03-04", SECRET)
        body, sig = token.split(".")
        flipped = ("A" if sig[0] != "A" else "B") + sig[1:]
        with pytest.raises(InvalidSignature):
            token_service.verify_token(f"{body}.{flipped}", SECRET)

    @pytest.mark.parametrize("bit", range(7))
    def test_single_bit_flip_anywhere(self, bit):
        for position, char in enumerate(FIXED_TOKEN):
            flipped = FIXED_TOKEN[:position] + chr(ord(char) ^ (1 << bit)) + FIXED_TOKEN[position + 1:]
            with pytest.raises(token_service.TokenError):
                token_service.verify_token(flipped, SECRET)

    @pytest.mark.parametrize("token", ["", "no-separator", "a.b.c", ".sig", "body."])
    def test_malformed_shape(self, token):
        with pytest.raises(InvalidFormat):
            token_service.verify_token(token, SECRET)

    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"[1, 2, 3]",
            json.dumps({"location_id": "7", "token_date": "2026-03-04"}).encode(),
            json.dumps({"location_id": 7, "token_date": "2026-03-04", "nonce": "ab"}).encode(),
            json.dumps({"location_id": "", "token_date": "2026-03-04", "nonce": "ab"}).encode(),
        ],
    )
    def test_bad_payload_with_valid_signature(self, body):
        encoded = _b64(body)
        sig = _b64(token_service._sign(encoded, SECRET))
        with pytest.raises(InvalidPayload):
            token_service.verify_token(f"{encoded}.{sig}", SECRET)

    def test_all_failures_share_a_base(self):
        for exc in (InvalidFormat, InvalidSignature, InvalidPayload):
            assert issubclass(exc, token_service.TokenError)


class TestTokenDate:

    def test_uses_reference_timezone(self):
        # 03:00 UTC on the 5th is still the evening of the 4th in Los Angeles
        now = datetime(2026, 3, 5, 3, 0, 0)
        assert token_service.today_token_date(now, "America/Los_Angeles") == "2026-03-04"
        assert token_service.today_token_date(now, "UTC") == "2026-03-05"

    def test_format(self):
        assert token_service.today_token_date(datetime(2026, 1, 9, 20, 0)) == "2026-01-09"

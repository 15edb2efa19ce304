from datetime import timedelta

import pytest

from shoplocal.models import SessionToken
from shoplocal.services import auth_service, session_service
from shoplocal.services.auth_service import PasswordValidationError


class TestPasswords:

    @pytest.mark.parametrize("password", ["short1", "lettersonly", "12345678"])
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)

    def test_hash_and_verify(self):
        hashed = auth_service.hash_password("Password123")
        assert auth_service.verify_password("Password123", hashed)
        assert not auth_service.verify_password("Password124", hashed)

    def test_malformed_hash_is_a_mismatch(self):
        assert not auth_service.verify_password("Password123", "not-a-bcrypt-hash")


class TestUsers:

    def test_duplicate_username(self, player):
        with pytest.raises(ValueError):
            auth_service.create_user("player1", "Password123")

    def test_duplicate_email(self, player):
        with pytest.raises(ValueError):
            auth_service.create_user("someone", "Password123", email="player1@example.com")

    def test_authenticate(self, player):
        assert auth_service.authenticate("player1", "Password123").id == player.id
        assert auth_service.authenticate("player1", "nope") is None
        assert player.last_login_at is not None

    def test_inactive_user_cannot_log_in(self, db_session, player):
        player.is_active = False
        db_session.commit()
        assert auth_service.authenticate("player1", "Password123") is None


class TestSessions:

    def test_create_and_validate(self, player):
        session, token = session_service.create_session(player.id)
        assert session.token_hash == session_service.hash_token(token)
        assert session.token_hash != token
        assert session_service.validate_session(token).id == player.id

    def test_revoked(self, player):
        _, token = session_service.create_session(player.id)
        assert session_service.revoke_session(token) is True
        assert session_service.validate_session(token) is None
        assert session_service.revoke_session(token) is False

    def test_idle_timeout(self, db_session, player):
        session, token = session_service.create_session(player.id)
        session.last_used_at = session.last_used_at - timedelta(hours=3)
        db_session.commit()

        assert session_service.validate_session(token) is None
        db_session.refresh(session)
        assert session.is_revoked
        assert session.revoked_reason == "Idle timeout"

    def test_absolute_expiry(self, db_session, player):
        session, token = session_service.create_session(player.id)
        session.expires_at = session.created_at - timedelta(seconds=1)
        db_session.commit()
        assert session_service.validate_session(token) is None
        assert db_session.query(SessionToken).count() == 1

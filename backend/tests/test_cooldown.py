from datetime import datetime, timedelta

from shoplocal.models import CheckIn
from shoplocal.services import cooldown_service

from conftest import FIXED_NOW, FIXED_TOKEN_DATE

T = datetime(2026, 3, 4, 12, 0, 0)


class TestWindow:

    def test_no_previous_check_in(self):
        assert not cooldown_service.is_rate_limited(None, T)

    def test_just_inside_window(self):
        last = T - timedelta(hours=23, minutes=59, seconds=59)
        assert cooldown_service.is_rate_limited(last, T)

    def test_exact_boundary_is_allowed(self):
        assert not cooldown_service.is_rate_limited(T - timedelta(hours=24), T)

    def test_after_window(self):
        assert not cooldown_service.is_rate_limited(T - timedelta(hours=25), T)

    def test_custom_window(self):
        last = T - timedelta(hours=2)
        assert cooldown_service.is_rate_limited(last, T, window_hours=3)
        assert not cooldown_service.is_rate_limited(last, T, window_hours=2)

    def test_seconds_until_allowed(self):
        last = T - timedelta(hours=23)
        assert cooldown_service.seconds_until_allowed(last, T) == 3600
        assert cooldown_service.seconds_until_allowed(T - timedelta(hours=30), T) == 0


class TestLastCheckIn:

    def test_none_without_history(self, season, player):
        assert cooldown_service.last_check_in_at(player.id, season.cells[0].location_id) is None

    def test_latest_for_user_and_location(self, db_session, season, player, other_player):
        loc_a = season.cells[0].location_id
        loc_b = season.cells[1].location_id
        earlier = FIXED_NOW - timedelta(days=3)
        later = FIXED_NOW - timedelta(days=1)

        db_session.add_all([
            CheckIn(user_id=player.id, location_id=loc_a, season_id=season.id,
                    device_hash="d", token_date=FIXED_TOKEN_DATE, created_at=earlier),
            CheckIn(user_id=player.id, location_id=loc_a, season_id=season.id,
                    device_hash="d", token_date=FIXED_TOKEN_DATE, created_at=later),
            CheckIn(user_id=player.id, location_id=loc_b, season_id=season.id,
                    device_hash="d", token_date=FIXED_TOKEN_DATE, created_at=FIXED_NOW),
            CheckIn(user_id=other_player.id, location_id=loc_a, season_id=season.id,
                    device_hash="d", token_date=FIXED_TOKEN_DATE, created_at=FIXED_NOW),
        ])
        db_session.commit()

        assert cooldown_service.last_check_in_at(player.id, loc_a) == later

"""
Location catalog tests.
"""

import pytest

from shoplocal.errors import DuplicateLocation, LocationNotFound
from shoplocal.models import Location
from shoplocal.services import location_service, token_service

from conftest import FIXED_NOW, FIXED_TOKEN_DATE, TEST_SECRET


class TestCatalog:

    def test_seed_once(self, db_session):
        assert location_service.seed_sample_locations() == len(location_service.SAMPLE_LOCATIONS)
        assert location_service.seed_sample_locations() == 0
        assert db_session.query(Location).count() == len(location_service.SAMPLE_LOCATIONS)

    def test_duplicate_name_is_rejected(self, db_session, locations):
        with pytest.raises(DuplicateLocation) as exc:
            location_service.create_location(locations[0].name)
        assert exc.value.http_status == 409
        assert db_session.query(Location).count() == 24

    def test_active_only(self, db_session, locations):
        locations[0].is_active = False
        db_session.commit()
        assert len(location_service.list_locations(active_only=True)) == 23
        assert len(location_service.list_locations()) == 24


class TestDailyToken:

    def test_token_verifies_for_today(self, locations):
        issued = location_service.issue_daily_token(locations[0].id, secret=TEST_SECRET, now=FIXED_NOW)
        payload = token_service.verify_token(issued["token"], TEST_SECRET)
        assert issued["token_date"] == FIXED_TOKEN_DATE
        assert payload.location_id == str(locations[0].id)

    def test_inactive_location(self, db_session, locations):
        locations[0].is_active = False
        db_session.commit()
        with pytest.raises(LocationNotFound):
            location_service.issue_daily_token(locations[0].id, secret=TEST_SECRET, now=FIXED_NOW)

"""
Pytest fixtures for shop-local bingo backend tests.

Provides an in-memory app, per-test table wipes, players, locations and a
seeded active season.
"""

import random
from datetime import datetime

import pytest

from shoplocal import create_app
from shoplocal.extensions import db
from shoplocal.models import Location, User
from shoplocal.services import auth_service, season_service, token_service

TEST_SECRET = "test-secret"

# 10:00 in Los Angeles on a Wednesday
FIXED_NOW = datetime(2026, 3, 4, 18, 0, 0)
FIXED_TOKEN_DATE = "2026-03-04"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'TOKEN_SECRET': TEST_SECRET,
        'ADMIN_USERNAMES': ['admin'],
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(auth_service, "BCRYPT_ROUNDS", 4)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session()

        db.session.rollback()


@pytest.fixture(scope='function')
def player(db_session):
    return auth_service.create_user("player1", "Password123", email="player1@example.com")


@pytest.fixture(scope='function')
def other_player(db_session):
    return auth_service.create_user("player2", "Password123")


@pytest.fixture(scope='function')
def admin_user(db_session):
    return auth_service.create_user("admin", "Password123")


def make_locations(db_session, count: int) -> list[Location]:
    locations = [Location(name=f"Shop {n:02d}", category="Test", is_active=True) for n in range(count)]
    db_session.add_all(locations)
    db_session.commit()
    return locations


@pytest.fixture(scope='function')
def locations(db_session):
    """Exactly enough active locations for one board."""
    return make_locations(db_session, 24)


@pytest.fixture(scope='function')
def season(db_session, locations):
    """Active season with a reproducible layout."""
    return season_service.create_season(city="Ventura", rng=random.Random(7), now=FIXED_NOW)


def location_at(season, index: int) -> int:
    """Location id placed on `index` of the season's board."""
    for cell in season.cells:
        if cell.cell_index == index:
            return cell.location_id
    raise AssertionError(f"no cell {index}")


def token_for(location_id, token_date: str = FIXED_TOKEN_DATE, secret: str = TEST_SECRET) -> str:
    return token_service.generate_daily_token(location_id, token_date, secret)


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}

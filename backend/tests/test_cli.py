from shoplocal.models import Location, Season
from shoplocal.services import token_service

from conftest import TEST_SECRET


class TestBingoCommands:

    def test_seed_then_rotate(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["bingo", "seed"])
        assert "PASS Created 24 locations" in result.output
        assert runner.invoke(args=["bingo", "seed"]).output.startswith("SKIP")

        result = runner.invoke(args=["bingo", "rotate-season", "--seed", "3"])
        assert result.exit_code == 0
        assert "FREE" in result.output
        assert db_session.query(Season).filter_by(is_active=True).count() == 1

    def test_rotate_without_locations_fails(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["bingo", "rotate-season"])
        assert result.exit_code == 1
        assert "FAIL" in result.output

    def test_token(self, app, db_session, locations):
        result = app.test_cli_runner().invoke(args=["bingo", "token", str(locations[0].id)])
        assert result.exit_code == 0
        payload = token_service.verify_token(result.output.strip(), TEST_SECRET)
        assert payload.location_id == str(locations[0].id)

    def test_token_unknown_location(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["bingo", "token", "404"])
        assert result.exit_code == 1
        assert db_session.query(Location).count() == 0


class TestUserCommands:

    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["users", "create", "--username", "admin", "--password", "Password123"])
        assert "PASS Created user admin" in result.output

        listing = runner.invoke(args=["users", "list"])
        assert "admin" in listing.output

    def test_weak_password(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "create", "--username", "bob", "--password", "weak"])
        assert result.exit_code == 1

# Overview: Flask CLI command groups for bootstrap, rotation and accounts.

# backend/shoplocal/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "shoplocal:create_app" and TOKEN_SECRET.
# - Use: python -m flask <group> <command> [options]
#
# Board bootstrap:
# - python -m flask bingo init-db
#   Create all tables (use `flask db upgrade` once migrations are in play).
# - python -m flask bingo seed
#   Insert the sample locations if none exist.
# - python -m flask bingo rotate-season [--seed 42]
#   Deactivate the active season and mint a new board.
# - python -m flask bingo token 7
#   Print today's signed token for location 7.
#
# Accounts:
# - python -m flask users create --username alice --password "Password123"
# - python -m flask users list

import random

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .errors import BingoError
from .models import User
from .services import location_service, season_service
from .services.auth_service import create_user, PasswordValidationError


@click.group('bingo')
def bingo_group():
    """Board bootstrap and season rotation commands."""


@bingo_group.command('init-db')
@with_appcontext
def init_db():
    db.create_all()
    click.echo("PASS Tables created")


@bingo_group.command('seed')
@with_appcontext
def seed_locations():
    """Insert the 24 sample locations (idempotent)."""
    created = location_service.seed_sample_locations()
    if created:
        click.echo(f"PASS Created {created} locations")
    else:
        click.echo("SKIP Locations already exist")


@bingo_group.command('rotate-season')
@click.option('--seed', 'rng_seed', type=int, default=None, help='Seed the board shuffle (reproducible layouts)')
@with_appcontext
def rotate_season(rng_seed):
    """Deactivate the active season and create a new one."""
    rng = random.Random(rng_seed) if rng_seed is not None else random.SystemRandom()
    try:
        season = season_service.create_season(
            city=current_app.config["SEASON_CITY"],
            rng=rng,
            tz_name=current_app.config["REFERENCE_TIMEZONE"],
        )
    except BingoError as e:
        click.echo(f"FAIL {e.message} {e.details}")
        raise SystemExit(1)

    click.echo(f"PASS Season {season.id} active ({season.starts_at} -> {season.ends_at} UTC)")
    for cell in season_service.board_for_season(season):
        label = "FREE" if cell["is_free"] else cell["location_name"]
        click.echo(f"  [{cell['index']:>2}] {label}")


@bingo_group.command('token')
@click.argument('location_id', type=int)
@with_appcontext
def print_token(location_id):
    """Print today's signed token for a location."""
    secret = current_app.config.get("TOKEN_SECRET")
    if not secret:
        click.echo("FAIL TOKEN_SECRET is not configured")
        raise SystemExit(1)
    try:
        result = location_service.issue_daily_token(
            location_id,
            secret=secret,
            tz_name=current_app.config["REFERENCE_TIMEZONE"],
        )
    except BingoError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(result["token"])


@click.group('users')
def users_group():
    """Account inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', default=None, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cli(username, email, password):
    """
    Create a new account.

    Admin rights come from ADMIN_USERNAMES, not from this command.
    """
    try:
        user = create_user(username=username, password=password, email=email)
    except (ValueError, PasswordValidationError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(f"PASS Created user {user.username} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    admins = set(current_app.config.get("ADMIN_USERNAMES", []))
    for user in db.session.query(User).order_by(User.id).all():
        flags = []
        if user.username in admins:
            flags.append("admin")
        if not user.is_active:
            flags.append("inactive")
        click.echo(f"{user.id:>5}  {user.username:<24} {','.join(flags)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(bingo_group)
    app.cli.add_command(users_group)

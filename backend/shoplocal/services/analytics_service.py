# Overview: Admin analytics; simple counting over the check-in log and reward tables.

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import NoActiveSeason, NotFound
from ..models import CheckIn, IssuedReward, Location, RaffleEntry, Season, SeasonProgress
from ..models.rewards import STATUS_REDEEMED
from .season_service import get_active_season


def _per_location(season_id: int) -> list[dict]:
    counts = (
        db.session.query(
            CheckIn.location_id,
            func.count(CheckIn.id),
            func.count(func.distinct(CheckIn.user_id)),
        )
        .filter(CheckIn.season_id == season_id)
        .group_by(CheckIn.location_id)
        .all()
    )
    by_location = {location_id: (total, unique) for location_id, total, unique in counts}

    rows = []
    for location in db.session.query(Location).order_by(Location.id).all():
        total, unique = by_location.pop(location.id, (0, 0))
        rows.append({
            "location_id": location.id,
            "name": location.name,
            "total_check_ins": total,
            "unique_users": unique,
            "repeat_check_ins": total - unique,
        })

    # Check-ins at locations that were since removed
    for location_id, (total, unique) in by_location.items():
        rows.append({
            "location_id": location_id,
            "name": "Unknown",
            "total_check_ins": total,
            "unique_users": unique,
            "repeat_check_ins": total - unique,
        })
    return rows


def season_analytics(season_id: int | None = None) -> dict:
    """Counters for one season (default: the active one)."""
    if season_id is None:
        season = get_active_season()
        if not season:
            raise NoActiveSeason("No active season.")
    else:
        season = db.session.get(Season, season_id)
        if not season:
            raise NotFound("Season not found")

    board_completions = 0
    row_completions = 0
    for progress in db.session.query(SeasonProgress).filter_by(season_id=season.id):
        if progress.board_complete:
            board_completions += 1
        row_completions += len(progress.completed_rows or [])

    rewards = db.session.query(IssuedReward).filter_by(season_id=season.id)
    rewards_issued = rewards.count()
    rewards_redeemed = rewards.filter(IssuedReward.status == STATUS_REDEEMED).count()

    raffle_entries = db.session.query(RaffleEntry).filter_by(season_id=season.id).count()

    return {
        "season_id": season.id,
        "location_analytics": _per_location(season.id),
        "board_completions": board_completions,
        "row_completions": row_completions,
        "rewards_issued": rewards_issued,
        "rewards_redeemed": rewards_redeemed,
        "raffle_entries": raffle_entries,
    }

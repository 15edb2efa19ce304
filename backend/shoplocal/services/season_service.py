# Overview: Season rotation; random board layout and reward definitions for a new week.

"""
Season Rotation

A new season gets:
- calendar-week bounds (Monday 00:00 reference time, seven days)
- 25 grid cells: a uniform shuffle of the active locations, first 24 laid
  out row-major around the free space
- five ROW reward definitions and one BOARD_RAFFLE definition

Everything, including deactivating the previous season, is one commit, so
at most one season is ever active.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..extensions import db
from ..errors import InsufficientLocations
from ..models import GridCell, Location, RewardDefinition, Season
from ..models.rewards import REWARD_TYPE_BOARD_RAFFLE, REWARD_TYPE_ROW, RULE_BOARD_COMPLETE, row_rule
from shoplocal.time_utils import DEFAULT_REFERENCE_TIMEZONE, to_naive_utc, to_reference_zone, utcnow
from .board import BOARD_SIZE, CELL_COUNT, FREE_SPACE_INDEX
from .concurrency import run_with_retry

ROW_REWARD_DESCRIPTION = "Show this reward to redeem your in-store freebie."
RAFFLE_TITLE = "Full Board Raffle Entry"
RAFFLE_DESCRIPTION = "You earned one raffle entry for this season."


@dataclass(frozen=True)
class CellAssignment:
    index: int
    location_id: Optional[int]


def build_season_cells(location_ids: Sequence[int], rng: random.Random | None = None) -> list[CellAssignment]:
    """
    Lay out a board from candidate locations.

    `rng` is injectable so tests can pin the permutation; each location
    appears at most once and the free space is always empty.
    """
    needed = CELL_COUNT - 1
    if len(location_ids) < needed:
        raise InsufficientLocations(
            "Not enough active locations to fill the board",
            details={"required": needed, "available": len(location_ids)},
        )

    shuffled = list(location_ids)
    (rng or random.SystemRandom()).shuffle(shuffled)
    chosen = iter(shuffled[:needed])

    return [
        CellAssignment(index=index, location_id=None if index == FREE_SPACE_INDEX else next(chosen))
        for index in range(CELL_COUNT)
    ]


def week_bounds(now: datetime | None = None, tz_name: str = DEFAULT_REFERENCE_TIMEZONE) -> tuple[datetime, datetime]:
    """
    Monday 00:00 to the following Monday 00:00 in the reference timezone,
    returned as naive UTC for storage.
    """
    local_now = to_reference_zone(now or utcnow(), tz_name)
    start_date = local_now.date() - timedelta(days=local_now.weekday())
    end_date = start_date + timedelta(days=7)

    tz = local_now.tzinfo
    start = datetime(start_date.year, start_date.month, start_date.day, tzinfo=tz)
    end = datetime(end_date.year, end_date.month, end_date.day, tzinfo=tz)
    return to_naive_utc(start), to_naive_utc(end)


def get_active_season() -> Season | None:
    return db.session.query(Season).filter_by(is_active=True).order_by(Season.id.desc()).first()


def active_location_ids() -> list[int]:
    rows = db.session.query(Location.id).filter_by(is_active=True).order_by(Location.id).all()
    return [row[0] for row in rows]


def _reward_definitions(season_id: int, now: datetime) -> list[RewardDefinition]:
    definitions = [
        RewardDefinition(
            season_id=season_id,
            reward_type=REWARD_TYPE_ROW,
            rule=row_rule(row),
            title=f"Row {row + 1} Reward",
            description=ROW_REWARD_DESCRIPTION,
            is_active=True,
            created_at=now,
        )
        for row in range(BOARD_SIZE)
    ]
    definitions.append(RewardDefinition(
        season_id=season_id,
        reward_type=REWARD_TYPE_BOARD_RAFFLE,
        rule=RULE_BOARD_COMPLETE,
        title=RAFFLE_TITLE,
        description=RAFFLE_DESCRIPTION,
        is_active=True,
        created_at=now,
    ))
    return definitions


def create_season(
    *,
    city: str,
    rng: random.Random | None = None,
    now: datetime | None = None,
    tz_name: str = DEFAULT_REFERENCE_TIMEZONE,
) -> Season:
    """
    Mint a new active season from the current active locations.

    Raises InsufficientLocations before anything is written.
    """
    def _op():
        ts = now or utcnow()
        cells = build_season_cells(active_location_ids(), rng)
        starts_at, ends_at = week_bounds(ts, tz_name)

        previous = db.session.query(Season).filter_by(is_active=True).all()
        for old in previous:
            old.is_active = False
            old.deactivated_at = ts
        # Deactivation must hit the database before the new active row
        db.session.flush()

        season = Season(
            city=city,
            is_active=True,
            starts_at=starts_at,
            ends_at=ends_at,
            board_size=BOARD_SIZE,
            free_index=FREE_SPACE_INDEX,
            created_at=ts,
        )
        db.session.add(season)
        db.session.flush()

        db.session.add_all(
            GridCell(season_id=season.id, cell_index=cell.index, location_id=cell.location_id, created_at=ts)
            for cell in cells
        )
        db.session.add_all(_reward_definitions(season.id, ts))

        db.session.commit()
        return season

    try:
        return run_with_retry(_op)
    except InsufficientLocations:
        db.session.rollback()
        raise


def board_for_season(season: Season) -> list[dict]:
    return [cell.to_dict() for cell in season.cells]

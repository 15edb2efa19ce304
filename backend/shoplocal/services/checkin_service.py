# Overview: The check-in transaction; verifies a scanned token and advances the user's board.

"""
Check-in Ledger

One call = one database transaction:
1. verify token (any codec failure -> InvalidCredential)
2. token_date must be today in the reference timezone (CredentialExpired)
3. an active season must exist (NoActiveSeason)
4. claim the (user, season) progress row; the free space is always earned
5. per-user/per-location cooldown (RateLimited), read while holding the claim
6. resolve the location's cell on the active board (zero or one cell)
7. mark the cell earned if new; repeat visits are logged but inert
8. recompute completed rows and board completion
9. issue ROW rewards for newly completed rows
10. on first board completion, create the raffle entry and BOARD_RAFFLE reward
11. commit check-in, progress, rewards and raffle entry together

Claiming flushes the progress row before anything else is read: an existing
row gets a version bump (StaleDataError if a twin committed since it was
read), a new row hits the (user, season) unique key (IntegrityError if a
twin inserted it first). The loser is rolled back and re-run, and its
cooldown read then sees the winner's check-in. Nothing is committed until
step 11; any failure rolls back the whole unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm.attributes import flag_modified

from ..extensions import db
from ..errors import CredentialExpired, InvalidCredential, NoActiveSeason, RateLimited
from ..models import CheckIn, GridCell, RewardDefinition, SeasonProgress
from ..models.rewards import REWARD_TYPE_BOARD_RAFFLE, REWARD_TYPE_ROW, row_rule
from shoplocal.time_utils import DEFAULT_REFERENCE_TIMEZONE, to_utc_z, utcnow
from . import board, cooldown_service, reward_service, token_service
from .concurrency import UNIQUE_CONFLICT_ERRORS, lock_for_update, run_with_retry
from .season_service import get_active_season


@dataclass
class CheckInResult:
    season_id: int
    location_id: int
    earned_square: bool
    earned_index: Optional[int]
    board_complete: bool
    raffle_entry_created: bool
    new_row_rewards: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "season_id": self.season_id,
            "location_id": self.location_id,
            "earned_square": self.earned_square,
            "earned_index": self.earned_index,
            "new_row_rewards": list(self.new_row_rewards),
            "board_complete": self.board_complete,
            "raffle_entry_created": self.raffle_entry_created,
        }


def _decode_credential(token: str, secret: str) -> tuple[token_service.TokenPayload, int]:
    try:
        payload = token_service.verify_token(token, secret)
        location_id = int(payload.location_id)
    except (token_service.TokenError, ValueError):
        raise InvalidCredential("Invalid token.")
    return payload, location_id


def _claim_progress(user_id: int, season_id: int, now: datetime) -> SeasonProgress:
    """
    Lock or create the user's progress row and flush it, so a concurrent
    check-in for the same (user, season) conflicts here rather than later.
    """
    progress = lock_for_update(
        db.session.query(SeasonProgress).filter_by(user_id=user_id, season_id=season_id)
    ).first()
    if progress:
        progress.updated_at = now
        # Force the versioned UPDATE even when the timestamp is unchanged
        flag_modified(progress, "updated_at")
    else:
        progress = SeasonProgress(
            user_id=user_id,
            season_id=season_id,
            earned_indices=[board.FREE_SPACE_INDEX],
            earned_by_location={},
            completed_rows=[],
            board_complete=False,
            created_at=now,
            updated_at=now,
        )
        db.session.add(progress)
    db.session.flush()
    return progress


def _cell_index_for_location(season_id: int, location_id: int) -> Optional[int]:
    row = db.session.query(GridCell.cell_index).filter_by(
        season_id=season_id, location_id=location_id
    ).first()
    return row[0] if row else None


def _active_definitions(season_id: int) -> tuple[dict[str, RewardDefinition], Optional[RewardDefinition]]:
    row_defs: dict[str, RewardDefinition] = {}
    board_def = None
    for definition in db.session.query(RewardDefinition).filter_by(season_id=season_id, is_active=True):
        if definition.reward_type == REWARD_TYPE_ROW:
            row_defs[definition.rule] = definition
        elif definition.reward_type == REWARD_TYPE_BOARD_RAFFLE:
            board_def = definition
    return row_defs, board_def


def check_in(
    user_id: int,
    token: str,
    device_hash: str,
    *,
    secret: str,
    cooldown_hours: int = cooldown_service.DEFAULT_WINDOW_HOURS,
    tz_name: str = DEFAULT_REFERENCE_TIMEZONE,
    now: datetime | None = None,
) -> CheckInResult:
    """
    Validate a scanned token and apply it to the user's board for the
    active season. Raises a BingoError subclass on any rejection.
    """
    payload, location_id = _decode_credential(token, secret)

    def _op() -> CheckInResult:
        ts = now or utcnow()

        if payload.token_date != token_service.today_token_date(ts, tz_name):
            raise CredentialExpired("Token is expired for today.")

        season = get_active_season()
        if not season:
            raise NoActiveSeason("No active season.")

        progress = _claim_progress(user_id, season.id, ts)

        last = cooldown_service.last_check_in_at(user_id, location_id)
        if cooldown_service.is_rate_limited(last, ts, cooldown_hours):
            raise RateLimited(
                f"You can only check in once per location every {cooldown_hours} hours.",
                details={"retry_after_seconds": cooldown_service.seconds_until_allowed(last, ts, cooldown_hours)},
            )

        cell_index = _cell_index_for_location(season.id, location_id)

        previous_rows = set(progress.completed_rows or [])
        was_complete = bool(progress.board_complete)
        earned = set(progress.earned_indices or [])
        earned.add(board.FREE_SPACE_INDEX)

        earned_square = cell_index is not None and cell_index not in earned
        if earned_square:
            earned.add(cell_index)
            by_location = dict(progress.earned_by_location or {})
            by_location[str(location_id)] = to_utc_z(ts)
            progress.earned_by_location = by_location

        earned_indices = board.normalize_indices(earned)
        completed = board.completed_rows(earned_indices)
        newly_completed = [row for row in completed if row not in previous_rows]
        board_complete = was_complete or board.is_board_complete(earned_indices)

        db.session.add(CheckIn(
            user_id=user_id,
            location_id=location_id,
            season_id=season.id,
            device_hash=device_hash,
            token_date=payload.token_date,
            created_at=ts,
        ))

        progress.earned_indices = earned_indices
        progress.completed_rows = board.normalize_indices(previous_rows.union(completed))
        progress.board_complete = board_complete
        progress.updated_at = ts

        row_defs, board_def = _active_definitions(season.id)

        new_row_rewards = []
        for row in newly_completed:
            definition = row_defs.get(row_rule(row))
            if definition is None:
                continue
            issued = reward_service.issue_reward_if_absent(
                user_id=user_id,
                season_id=season.id,
                definition=definition,
                details={"row": row},
                now=ts,
            )
            if issued:
                new_row_rewards.append({
                    "reward_id": definition.id,
                    "issued_reward_id": issued.id,
                    "title": definition.title,
                    "row": row,
                })

        raffle_entry_created = False
        if board_complete and not was_complete:
            entry = reward_service.create_raffle_entry_if_absent(user_id=user_id, season_id=season.id, now=ts)
            raffle_entry_created = entry is not None
            if board_def is not None:
                reward_service.issue_reward_if_absent(
                    user_id=user_id,
                    season_id=season.id,
                    definition=board_def,
                    details={"board_complete": True},
                    now=ts,
                )

        db.session.commit()

        return CheckInResult(
            season_id=season.id,
            location_id=location_id,
            earned_square=earned_square,
            earned_index=cell_index if earned_square else None,
            board_complete=board_complete,
            raffle_entry_created=raffle_entry_created,
            new_row_rewards=new_row_rewards,
        )

    try:
        return run_with_retry(_op, retry_on=UNIQUE_CONFLICT_ERRORS)
    except Exception:
        db.session.rollback()
        raise


def get_progress(user_id: int, season_id: int) -> dict:
    """Stored progress, or the default (free space only) when none exists yet."""
    progress = db.session.query(SeasonProgress).filter_by(user_id=user_id, season_id=season_id).first()
    if progress:
        return progress.to_dict()
    return {
        "id": None,
        "user_id": user_id,
        "season_id": season_id,
        "earned_indices": [board.FREE_SPACE_INDEX],
        "earned_by_location": {},
        "completed_rows": [],
        "board_complete": False,
        "created_at": None,
        "updated_at": None,
    }

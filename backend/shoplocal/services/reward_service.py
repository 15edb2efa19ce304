# Overview: Service-layer operations for issued rewards; issuance guard and redemption.

"""
Reward issuance and redemption

INVARIANTS:
- At most one IssuedReward per (user, season, reward definition). Issuance
  re-checks existence inside the caller's transaction; the unique constraint
  catches the remaining race.
- Redemption is AVAILABLE -> REDEEMED, terminal. Redeeming twice is a
  success that reports already_redeemed, so clients may retry freely.
- BOARD_RAFFLE rewards are never redeemable.
"""

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..errors import Forbidden, NotFound, NotRedeemable
from ..models import IssuedReward, RaffleEntry, RewardDefinition
from ..models.rewards import STATUS_AVAILABLE, STATUS_REDEEMED
from shoplocal.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry


def issue_reward_if_absent(
    *,
    user_id: int,
    season_id: int,
    definition: RewardDefinition,
    details: dict,
    now: datetime,
) -> IssuedReward | None:
    """
    Stage a new AVAILABLE reward unless this user already holds one for
    `definition`. Returns the new row, or None when it already existed.

    Does not commit; the caller's transaction owns the write.
    """
    existing = db.session.query(IssuedReward.id).filter_by(
        user_id=user_id,
        season_id=season_id,
        reward_definition_id=definition.id,
    ).first()
    if existing:
        return None

    reward = IssuedReward(
        user_id=user_id,
        season_id=season_id,
        reward_definition_id=definition.id,
        reward_type=definition.reward_type,
        title=definition.title,
        description=definition.description,
        status=STATUS_AVAILABLE,
        details=details,
        issued_at=now,
    )
    db.session.add(reward)
    db.session.flush()  # assigns reward.id without committing
    return reward


def create_raffle_entry_if_absent(*, user_id: int, season_id: int, now: datetime) -> RaffleEntry | None:
    """Stage the user's raffle entry for this season. None if it already exists."""
    existing = db.session.query(RaffleEntry.id).filter_by(user_id=user_id, season_id=season_id).first()
    if existing:
        return None

    entry = RaffleEntry(user_id=user_id, season_id=season_id, created_at=now)
    db.session.add(entry)
    db.session.flush()
    return entry


def redeem(issued_reward_id: int, requesting_user_id: int, now: datetime | None = None) -> dict:
    """
    Mark an issued reward as redeemed.

    Raises NotFound, Forbidden (not the requester's reward) or NotRedeemable
    (raffle). Returns {"redeemed": True, "already_redeemed": bool}.
    """
    def _op():
        reward = lock_for_update(
            db.session.query(IssuedReward).filter_by(id=issued_reward_id)
        ).first()
        if not reward:
            raise NotFound("Reward not found.")

        if reward.user_id != requesting_user_id:
            raise Forbidden("Not your reward.")

        if not reward.is_redeemable:
            raise NotRedeemable("Raffle entries are auto-recorded and not redeemable.")

        if reward.status == STATUS_REDEEMED:
            result = {"redeemed": True, "already_redeemed": True, "reward": reward.to_dict()}
            # Nothing to write; release the row lock
            db.session.rollback()
            return result

        reward.status = STATUS_REDEEMED
        reward.redeemed_at = now or utcnow()
        db.session.commit()
        return {"redeemed": True, "already_redeemed": False, "reward": reward.to_dict()}

    try:
        return run_with_retry(_op)
    except (NotFound, Forbidden, NotRedeemable):
        db.session.rollback()
        raise


def list_user_rewards(user_id: int, season_id: int | None = None) -> list[dict]:
    q = db.session.query(IssuedReward).filter_by(user_id=user_id)
    if season_id is not None:
        q = q.filter_by(season_id=season_id)
    return [r.to_dict() for r in q.order_by(IssuedReward.issued_at.desc(), IssuedReward.id.desc()).all()]

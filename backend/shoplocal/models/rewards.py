from __future__ import annotations

from ..extensions import db
from shoplocal.time_utils import to_utc_z, utcnow

REWARD_TYPE_ROW = "ROW"
REWARD_TYPE_BOARD_RAFFLE = "BOARD_RAFFLE"

RULE_BOARD_COMPLETE = "BOARD_COMPLETE"

STATUS_AVAILABLE = "AVAILABLE"
STATUS_REDEEMED = "REDEEMED"


def row_rule(row: int) -> str:
    return f"ROW_{row}"


class RewardDefinition(db.Model):
    """
    Per-season reward template: one per row (rule ROW_n) plus one
    board-wide raffle (rule BOARD_COMPLETE). Immutable once created.
    """
    __tablename__ = "reward_definitions"
    __table_args__ = (
        db.UniqueConstraint("season_id", "rule", name="uq_reward_definitions_season_rule"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False, index=True)

    reward_type = db.Column(db.String(32), nullable=False)  # ROW, BOARD_RAFFLE
    rule = db.Column(db.String(32), nullable=False)  # ROW_0..ROW_4, BOARD_COMPLETE
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "season_id": self.season_id,
            "reward_type": self.reward_type,
            "rule": self.rule,
            "title": self.title,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class IssuedReward(db.Model):
    """
    A reward granted to one user.

    IDEMPOTENCY: (user_id, season_id, reward_definition_id) is unique, so a
    retried or racing check-in can never grant the same reward twice.

    STATE MACHINE: AVAILABLE -> REDEEMED (terminal). BOARD_RAFFLE rewards
    are never redeemable.
    """
    __tablename__ = "issued_rewards"
    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "season_id", "reward_definition_id",
            name="uq_issued_rewards_user_season_definition",
        ),
        db.Index("ix_issued_rewards_user_season", "user_id", "season_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)
    reward_definition_id = db.Column(db.Integer, db.ForeignKey("reward_definitions.id"), nullable=False)

    # Copied from the definition at issue time
    reward_type = db.Column(db.String(32), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default=STATUS_AVAILABLE, index=True)
    details = db.Column(db.JSON, nullable=True)  # {"row": n} or {"board_complete": true}

    issued_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    redeemed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    definition = db.relationship("RewardDefinition", lazy=True)

    @property
    def is_redeemable(self) -> bool:
        return self.reward_type != REWARD_TYPE_BOARD_RAFFLE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "season_id": self.season_id,
            "reward_definition_id": self.reward_definition_id,
            "reward_type": self.reward_type,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "details": self.details or {},
            "redeemable": self.is_redeemable,
            "issued_at": to_utc_z(self.issued_at),
            "redeemed_at": to_utc_z(self.redeemed_at),
        }


class RaffleEntry(db.Model):
    """One entry per (user, season), created when the board is first completed."""
    __tablename__ = "raffle_entries"
    __table_args__ = (
        db.UniqueConstraint("user_id", "season_id", name="uq_raffle_entries_user_season"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "season_id": self.season_id,
            "created_at": to_utc_z(self.created_at),
        }

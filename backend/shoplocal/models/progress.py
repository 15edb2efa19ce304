from __future__ import annotations

from ..extensions import db
from shoplocal.time_utils import to_utc_z, utcnow


class SeasonProgress(db.Model):
    """
    A user's board state for one season.

    MONOTONIC: earned_indices and completed_rows only grow, board_complete
    only flips False -> True. Written exclusively by the check-in
    transaction. JSON columns are always reassigned, never mutated in place,
    so the ORM sees the change.

    version_id makes concurrent updates of the same row fail with
    StaleDataError instead of silently overwriting each other.
    """
    __tablename__ = "season_progress"
    __table_args__ = (
        db.UniqueConstraint("user_id", "season_id", name="uq_season_progress_user_season"),
        db.Index("ix_season_progress_season", "season_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)

    earned_indices = db.Column(db.JSON, nullable=False, default=list)
    earned_by_location = db.Column(db.JSON, nullable=False, default=dict)  # str(location_id) -> ISO timestamp
    completed_rows = db.Column(db.JSON, nullable=False, default=list)
    board_complete = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "season_id": self.season_id,
            "earned_indices": list(self.earned_indices or []),
            "earned_by_location": dict(self.earned_by_location or {}),
            "completed_rows": list(self.completed_rows or []),
            "board_complete": self.board_complete,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CheckIn(db.Model):
    """
    Append-only log of accepted check-ins.

    IMMUTABLE: never updated or deleted. Feeds the cooldown lookup and
    analytics. Repeat visits to an already earned square are still logged.
    """
    __tablename__ = "check_ins"
    __table_args__ = (
        db.Index("ix_check_ins_user_location_created", "user_id", "location_id", "created_at"),
        db.Index("ix_check_ins_season", "season_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey("locations.id"), nullable=False)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)

    device_hash = db.Column(db.String(255), nullable=False)
    token_date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD in the reference timezone

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "location_id": self.location_id,
            "season_id": self.season_id,
            "device_hash": self.device_hash,
            "token_date": self.token_date,
            "created_at": to_utc_z(self.created_at),
        }

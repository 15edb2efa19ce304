from __future__ import annotations

from ..extensions import db
from shoplocal.time_utils import to_utc_z, utcnow
from ..services.board import row_of


class Season(db.Model):
    """
    One weekly board. Exactly one season may be active at a time.

    Rotation flips the previous season's is_active to False in the same
    transaction that inserts the new one; the partial unique index is the
    backstop if two rotations race.
    """
    __tablename__ = "seasons"
    __table_args__ = (
        db.Index(
            "uq_seasons_single_active",
            "is_active",
            unique=True,
            sqlite_where=db.text("is_active = 1"),
            postgresql_where=db.text("is_active"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    city = db.Column(db.String(120), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Calendar week in the reference timezone, stored as UTC
    starts_at = db.Column(db.DateTime(timezone=True), nullable=False)
    ends_at = db.Column(db.DateTime(timezone=True), nullable=False)

    board_size = db.Column(db.Integer, nullable=False, default=5)
    free_index = db.Column(db.Integer, nullable=False, default=12)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    deactivated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    cells = db.relationship(
        "GridCell",
        backref="season",
        lazy=True,
        order_by="GridCell.cell_index",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "city": self.city,
            "is_active": self.is_active,
            "starts_at": to_utc_z(self.starts_at),
            "ends_at": to_utc_z(self.ends_at),
            "board_size": self.board_size,
            "free_index": self.free_index,
            "created_at": to_utc_z(self.created_at),
            "deactivated_at": to_utc_z(self.deactivated_at),
        }


class GridCell(db.Model):
    """
    One square of a season's board.

    location_id is NULL only for the free space. Rows are written once when
    the season is created and never updated.
    """
    __tablename__ = "grid_cells"
    __table_args__ = (
        db.UniqueConstraint("season_id", "cell_index", name="uq_grid_cells_season_index"),
        db.UniqueConstraint("season_id", "location_id", name="uq_grid_cells_season_location"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False, index=True)
    cell_index = db.Column(db.Integer, nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey("locations.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    location = db.relationship("Location", lazy="joined")

    @property
    def is_free(self) -> bool:
        return self.location_id is None

    def to_dict(self) -> dict:
        return {
            "index": self.cell_index,
            "row": row_of(self.cell_index),
            "location_id": self.location_id,
            "location_name": self.location.name if self.location else None,
            "is_free": self.is_free,
        }

from __future__ import annotations

from ..extensions import db
from shoplocal.time_utils import to_utc_z, utcnow


class Location(db.Model):
    """
    A participating business whose QR code users scan.

    Never deleted; deactivate instead. Once a season's grid references a
    location its identity must stay stable for the rest of that season.
    """
    __tablename__ = "locations"
    __table_args__ = (
        db.Index("ix_locations_active", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    address = db.Column(db.String(255), nullable=True)
    category = db.Column(db.String(64), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "category": self.category,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }

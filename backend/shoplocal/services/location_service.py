# Overview: Service-layer operations for locations; seeding, listing and daily token issuance.

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..errors import DuplicateLocation, LocationNotFound
from ..models import Location
from shoplocal.time_utils import DEFAULT_REFERENCE_TIMEZONE, utcnow
from . import token_service

SAMPLE_LOCATIONS = [
    {"name": "Harbor Bean Coffee", "address": "123 Main St, Ventura, CA", "category": "Cafe"},
    {"name": "Coastal Threads", "address": "45 Oak Ave, Ventura, CA", "category": "Apparel"},
    {"name": "Seaside Book Nook", "address": "78 Harbor Blvd, Ventura, CA", "category": "Books"},
    {"name": "Ventura Vinyl", "address": "210 Palm St, Ventura, CA", "category": "Music"},
    {"name": "Citrus Bowl Eatery", "address": "15 Citrus Dr, Ventura, CA", "category": "Food"},
    {"name": "Downtown Craft Co.", "address": "98 Santa Clara St, Ventura, CA", "category": "Gifts"},
    {"name": "Pierview Florals", "address": "6 Pier Ave, Ventura, CA", "category": "Florist"},
    {"name": "Channel Island Outfitters", "address": "300 Coast Hwy, Ventura, CA", "category": "Outdoor"},
    {"name": "Mission Bicycle", "address": "52 Mission Ave, Ventura, CA", "category": "Bikes"},
    {"name": "Sunset Smoothies", "address": "19 Sunset Blvd, Ventura, CA", "category": "Juice"},
    {"name": "Starlight Toy Box", "address": "87 California St, Ventura, CA", "category": "Toys"},
    {"name": "Pacific Plant Shop", "address": "12 Thompson Blvd, Ventura, CA", "category": "Plants"},
    {"name": "Boardwalk Bakes", "address": "201 Seaward Ave, Ventura, CA", "category": "Bakery"},
    {"name": "Surfside Gallery", "address": "33 Figueroa St, Ventura, CA", "category": "Art"},
    {"name": "Lighthouse Leather", "address": "9 Ventura Ave, Ventura, CA", "category": "Accessories"},
    {"name": "Marina Pet Supply", "address": "1410 Harbor Blvd, Ventura, CA", "category": "Pets"},
    {"name": "Rincon Roasters", "address": "77 Rincon St, Ventura, CA", "category": "Cafe"},
    {"name": "Seaside Soapery", "address": "65 Poli St, Ventura, CA", "category": "Bath"},
    {"name": "Ventura Vintage", "address": "220 Chestnut St, Ventura, CA", "category": "Vintage"},
    {"name": "Channel Chocolates", "address": "5 Thompson Blvd, Ventura, CA", "category": "Sweets"},
    {"name": "Harbor Hardware", "address": "410 East Main St, Ventura, CA", "category": "Hardware"},
    {"name": "Oceanview Yoga", "address": "27 Cedar St, Ventura, CA", "category": "Wellness"},
    {"name": "Downtown Deli Co.", "address": "18 Oak St, Ventura, CA", "category": "Deli"},
    {"name": "Ventura Game Loft", "address": "70 Santa Clara St, Ventura, CA", "category": "Games"},
]


def seed_sample_locations() -> int:
    """
    Insert the sample locations when the table is empty.

    Safe to call repeatedly (idempotent). Returns the number created.
    """
    if db.session.query(Location.id).first():
        return 0

    now = utcnow()
    db.session.add_all(
        Location(is_active=True, created_at=now, **entry) for entry in SAMPLE_LOCATIONS
    )
    db.session.commit()
    return len(SAMPLE_LOCATIONS)


def create_location(name: str, address: str | None = None, category: str | None = None) -> Location:
    """Raises DuplicateLocation if the name is taken."""
    if db.session.query(Location.id).filter_by(name=name).first():
        raise DuplicateLocation("Location name already exists", details={"name": name})

    location = Location(name=name, address=address, category=category, is_active=True)
    db.session.add(location)
    db.session.commit()
    return location


def list_locations(active_only: bool = False) -> list[dict]:
    q = db.session.query(Location)
    if active_only:
        q = q.filter_by(is_active=True)
    return [loc.to_dict() for loc in q.order_by(Location.id).all()]


def get_active_location(location_id: int) -> Location:
    location = db.session.query(Location).filter_by(id=location_id, is_active=True).first()
    if not location:
        raise LocationNotFound("Location not found")
    return location


def issue_daily_token(
    location_id: int,
    *,
    secret: str,
    now: datetime | None = None,
    tz_name: str = DEFAULT_REFERENCE_TIMEZONE,
) -> dict:
    """Fresh signed token for today's date at an active location."""
    location = get_active_location(location_id)
    token_date = token_service.today_token_date(now, tz_name)
    return {
        "token": token_service.generate_daily_token(location.id, token_date, secret),
        "location_id": location.id,
        "token_date": token_date,
    }

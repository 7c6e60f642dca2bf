"""Read helpers shared by routes and orchestrators."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from travel_companion.models import Guide, TravelPreferences
from travel_companion.schemas import GuideOut, dump


def preferences_for(db: Session, user_id: Optional[int]) -> Optional[Dict[str, Any]]:
    """Stored preferences as a plain dict, or ``None`` when the user has none."""
    if user_id is None:
        return None
    row = db.scalar(select(TravelPreferences).where(TravelPreferences.user_id == user_id))
    if row is None:
        return None
    return {
        "travel_style": row.travel_style,
        "activities": list(row.activities or []),
        "accommodation": row.accommodation,
        "transportation": row.transportation,
        "budget": row.budget,
        "food_preferences": row.food_preferences,
    }


def _all_guides(db: Session) -> List[Guide]:
    stmt = select(Guide).options(selectinload(Guide.user)).order_by(Guide.id)
    return list(db.scalars(stmt))


def list_guides(db: Session) -> List[Dict[str, Any]]:
    return [dump(GuideOut, guide) for guide in _all_guides(db)]


def guides_matching_destination(db: Session, destination: str) -> List[Dict[str, Any]]:
    """Guides with any location containing ``destination`` (like ``%dest%``, case-insensitive).

    Locations live in a JSON array, so the element-wise match runs here rather
    than in dialect-specific SQL. Fetch order (guide id) is preserved.
    """
    pattern = destination.strip().lower()
    matches = []
    for guide in _all_guides(db):
        locations = guide.locations or []
        if any(isinstance(loc, str) and pattern in loc.lower() for loc in locations):
            matches.append(dump(GuideOut, guide))
    return matches


def guides_at_location(db: Session, location: str) -> List[Dict[str, Any]]:
    """Guides listing ``location`` exactly (ignoring case)."""
    wanted = location.strip().lower()
    return [
        dump(GuideOut, guide)
        for guide in _all_guides(db)
        if any(isinstance(loc, str) and loc.strip().lower() == wanted for loc in guide.locations or [])
    ]

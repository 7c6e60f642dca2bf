"""AI packing-list generation and item bookkeeping."""
from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session, selectinload

from travel_companion.errors import AuthorizationError, NotFoundError, UpstreamError
from travel_companion.llm import PackingSuggester
from travel_companion.log import get_logger
from travel_companion.models import PackingItem, PackingList
from travel_companion.schemas import PackingListGenerateRequest, SuggestedItem

logger = get_logger(__name__)

SECONDS_PER_DAY = 86400

PACKING_TEMPLATE = """You are an expert AI travel packing assistant. Generate a detailed, personalized packing list for a {duration}-day trip to {destination} in {month}.

Consider these traveler preferences:
- Travel Style: {travel_style}
- Activities: {activities}
- Transportation: {transportation}
- Budget Level: {budget}
- Food Preferences: {food_preferences}

Consider the following factors:
1. Weather and seasonal conditions in {destination} during {month}
2. Common activities and cultural norms at the destination
3. Travel style and planned activities
4. Transportation mode and related restrictions
5. Budget considerations for equipment recommendations

Provide a JSON response with this format:
{{
  "items": [
    {{
      "name": "Item name",
      "category": "Category (Clothing, Electronics, Documents, Toiletries, Gear, etc.)",
      "quantity": "Suggested quantity with unit (e.g., '2 pairs', '1 set', 'As needed')",
      "isEssential": true,
      "notes": "Packing tips, specific recommendations, or usage context"
    }}
  ]
}}
"""


def trip_duration_days(start: datetime, end: datetime) -> int:
    """Whole days spanned by the trip, rounding partial days up."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def _pref(preferences: Optional[Dict[str, Any]], key: str) -> str:
    value = (preferences or {}).get(key)
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value if v)
    return str(value) if value else "Not specified"


def build_packing_prompt(
    destination: str,
    start: datetime,
    end: datetime,
    preferences: Optional[Dict[str, Any]] = None,
) -> str:
    return PACKING_TEMPLATE.format(
        duration=trip_duration_days(start, end),
        destination=destination,
        month=start.strftime("%B"),
        travel_style=_pref(preferences, "travel_style"),
        activities=_pref(preferences, "activities"),
        transportation=_pref(preferences, "transportation"),
        budget=_pref(preferences, "budget"),
        food_preferences=_pref(preferences, "food_preferences"),
    )


def parse_items(raw: Optional[str]) -> List[SuggestedItem]:
    """Extract the ``items`` list; any structural problem is an upstream failure."""
    try:
        payload = json.loads(raw or "")
    except ValueError as exc:
        logger.warning("Packing assistant returned non-JSON content")
        raise UpstreamError("Failed to generate packing list") from exc

    entries = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        logger.warning("Packing assistant payload had no items list")
        raise UpstreamError("Failed to generate packing list")

    items: List[SuggestedItem] = []
    for entry in entries:
        try:
            items.append(SuggestedItem.model_validate(entry))
        except ValidationError:
            logger.warning("Dropping malformed packing item: %s", entry)
    return items


async def generate_packing_list(
    request: PackingListGenerateRequest,
    user_id: int,
    suggester: PackingSuggester,
    db: Session,
    preferences: Optional[Dict[str, Any]] = None,
) -> PackingList:
    """Ask the assistant for items and persist them as a new list.

    Nothing is written unless the assistant answered with a usable item list.
    """
    prompt = build_packing_prompt(
        request.destination, request.start_date, request.end_date, preferences
    )
    try:
        raw = await suggester.suggest(prompt)
    except Exception as exc:
        logger.exception("Packing suggestion call failed: %s", exc)
        raise UpstreamError("Failed to generate packing list") from exc

    suggestions = parse_items(raw)
    logger.info(
        "Packing assistant suggested %d items for %s", len(suggestions), request.destination
    )

    packing_list = PackingList(
        user_id=user_id,
        trip_id=request.trip_id,
        name=f"Packing List for {request.destination}",
    )
    packing_list.items = [
        PackingItem(
            name=item.name,
            category=item.category,
            quantity=item.quantity,
            is_essential=item.is_essential,
            notes=item.notes,
            ai_suggested=True,
        )
        for item in suggestions
    ]
    db.add(packing_list)
    db.commit()
    db.refresh(packing_list)
    return packing_list


def lists_for_trip(db: Session, user_id: int, trip_id: int) -> List[PackingList]:
    return list(
        db.query(PackingList)
        .options(selectinload(PackingList.items))
        .filter(PackingList.user_id == user_id, PackingList.trip_id == trip_id)
        .order_by(PackingList.id)
    )


def toggle_packing_item(db: Session, item_id: int, is_packed: bool, user_id: int) -> PackingItem:
    item = db.get(PackingItem, item_id)
    if item is None:
        raise NotFoundError("Packing item not found")
    if item.packing_list.user_id != user_id:
        raise AuthorizationError("Not authorized to update this item")
    item.is_packed = is_packed
    db.commit()
    db.refresh(item)
    return item

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from travel_companion.agents.packing_planner import generate_packing_list, toggle_packing_item
from travel_companion.auth import require_user
from travel_companion.db import get_db
from travel_companion.errors import NotFoundError
from travel_companion.models import Trip, User
from travel_companion.queries import preferences_for
from travel_companion.schemas import PackingItemOut, PackingItemUpdate, PackingListGenerateRequest, PackingListOut, dump
from travel_companion.services import Services, get_services

router = APIRouter(tags=["packing"])


@router.post("/packing-lists/generate")
async def generate(
    payload: PackingListGenerateRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if payload.trip_id is not None:
        trip = db.get(Trip, payload.trip_id)
        if trip is None or trip.user_id != user.id:
            raise NotFoundError("Trip not found")

    packing_list = await generate_packing_list(
        payload,
        user.id,
        services.packing_suggester,
        db,
        preferences=preferences_for(db, user.id),
    )
    return dump(PackingListOut, packing_list)


@router.patch("/packing-items/{item_id}")
def update_item(
    item_id: int,
    payload: PackingItemUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    item = toggle_packing_item(db, item_id, payload.is_packed, user.id)
    return dump(PackingItemOut, item)

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from travel_companion.agents.packing_planner import lists_for_trip
from travel_companion.agents.trip_planner import plan_trip
from travel_companion.auth import current_user, require_user
from travel_companion.db import get_db
from travel_companion.models import Trip, User
from travel_companion.schemas import PackingListOut, TripCreate, TripOut, TripPlanRequest, dump
from travel_companion.services import Services, get_services

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/plan")
async def plan(
    payload: TripPlanRequest,
    user: Optional[User] = Depends(current_user),
    db: Session = Depends(get_db),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await plan_trip(
        payload,
        services.itinerary_generator,
        db,
        user_id=user.id if user is not None else None,
    )


@router.post("")
def save_trip(
    payload: TripCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    trip = Trip(
        user_id=user.id,
        destination=payload.destination,
        start_date=payload.start_date,
        end_date=payload.end_date,
        itinerary=payload.itinerary,
    )
    db.add(trip)
    db.commit()
    db.refresh(trip)
    return dump(TripOut, trip)


@router.get("")
def my_trips(user: User = Depends(require_user), db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    stmt = select(Trip).where(Trip.user_id == user.id).order_by(Trip.id)
    return [dump(TripOut, trip) for trip in db.scalars(stmt)]


@router.get("/{trip_id}/packing-lists")
def trip_packing_lists(
    trip_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    return [dump(PackingListOut, packing_list) for packing_list in lists_for_trip(db, user.id, trip_id)]

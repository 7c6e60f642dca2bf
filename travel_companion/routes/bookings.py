from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from travel_companion.auth import require_user
from travel_companion.db import get_db
from travel_companion.errors import AuthorizationError, NotFoundError
from travel_companion.log import get_logger
from travel_companion.models import Booking, BookingStatus, Guide, Trip, User
from travel_companion.schemas import (
    BookingCreate,
    BookingOut,
    BookingStatusUpdate,
    GuideBookingOut,
    TravelerBookingOut,
    dump,
)

logger = get_logger(__name__)

router = APIRouter(tags=["bookings"])


@router.post("/bookings")
def create_booking(
    payload: BookingCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    if db.get(Guide, payload.guide_id) is None:
        raise NotFoundError("Guide not found")
    if payload.trip_id is not None:
        trip = db.get(Trip, payload.trip_id)
        if trip is None or trip.user_id != user.id:
            raise NotFoundError("Trip not found")

    booking = Booking(
        user_id=user.id,
        guide_id=payload.guide_id,
        trip_id=payload.trip_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        notes=payload.notes,
        status=BookingStatus.PENDING.value,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s created by %s for guide %s", booking.id, user.username, booking.guide_id)
    return dump(BookingOut, booking)


@router.get("/bookings")
def my_bookings(user: User = Depends(require_user), db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    stmt = (
        select(Booking)
        .options(selectinload(Booking.guide).selectinload(Guide.user), selectinload(Booking.trip))
        .where(Booking.user_id == user.id)
        .order_by(Booking.id)
    )
    return [dump(TravelerBookingOut, booking) for booking in db.scalars(stmt)]


@router.get("/guide/bookings")
def guide_bookings(user: User = Depends(require_user), db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    guide = db.scalar(select(Guide).where(Guide.user_id == user.id))
    if guide is None:
        raise AuthorizationError("Not a guide")
    stmt = (
        select(Booking)
        .options(selectinload(Booking.user), selectinload(Booking.trip))
        .where(Booking.guide_id == guide.id)
        .order_by(Booking.id)
    )
    return [dump(GuideBookingOut, booking) for booking in db.scalars(stmt)]


@router.patch("/bookings/{booking_id}")
def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    if booking.user_id != user.id and booking.guide.user_id != user.id:
        raise AuthorizationError("Not authorized to update this booking")

    booking.status = payload.status.value
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s moved to %s by %s", booking.id, booking.status, user.username)
    return dump(BookingOut, booking)

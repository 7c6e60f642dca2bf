from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from travel_companion.auth import require_user
from travel_companion.db import get_db
from travel_companion.models import TravelPreferences, User
from travel_companion.schemas import PreferencesIn, PreferencesOut, dump

router = APIRouter(tags=["preferences"])


@router.get("/preferences")
def read_preferences(
    user: User = Depends(require_user), db: Session = Depends(get_db)
) -> Optional[Dict[str, Any]]:
    row = db.scalar(select(TravelPreferences).where(TravelPreferences.user_id == user.id))
    return dump(PreferencesOut, row) if row is not None else None


@router.post("/preferences")
def save_preferences(
    payload: PreferencesIn,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    row = db.scalar(select(TravelPreferences).where(TravelPreferences.user_id == user.id))
    if row is None:
        row = TravelPreferences(user_id=user.id)
        db.add(row)
    for key, value in payload.model_dump().items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return dump(PreferencesOut, row)

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from travel_companion.auth import require_user
from travel_companion.db import get_db
from travel_companion.errors import NotFoundError, TravelCompanionError, UpstreamError, ValidationFailed
from travel_companion.log import get_logger
from travel_companion.models import Guide, User
from travel_companion.queries import guides_at_location, list_guides
from travel_companion.schemas import GuideOut, GuideRegistrationIn, GuideTranslationOut, dump
from travel_companion.services import Services, get_services

logger = get_logger(__name__)

router = APIRouter(prefix="/guides", tags=["guides"])


@router.get("")
def all_guides(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return list_guides(db)


@router.get("/location/{location}")
def guides_by_location(location: str, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return guides_at_location(db, location)


@router.post("/register")
def register_guide(
    payload: GuideRegistrationIn,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    # fast path; the unique user_id column is authoritative
    if db.scalar(select(Guide).where(Guide.user_id == user.id)) is not None:
        raise ValidationFailed("Already registered as a guide")

    user.is_guide = True
    if payload.bio is not None:
        user.bio = payload.bio
    guide = Guide(
        user_id=user.id,
        specialties=payload.specialties,
        locations=payload.locations,
        rating="0.0",
        verified=False,
    )
    db.add(guide)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Guide registration lost a race for user %s", user.username)
        raise ValidationFailed("Already registered as a guide") from exc
    db.refresh(guide)
    logger.info("User %s registered as guide %s", user.username, guide.id)
    return dump(GuideOut, guide)


@router.get("/{guide_id}/translate/{lang}")
async def translate_guide(
    guide_id: int,
    lang: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    guide = db.get(Guide, guide_id)
    if guide is None or not guide.specialties:
        raise NotFoundError("Guide not found or missing required data")

    translator = services.translator
    bio = guide.user.bio if guide.user is not None else None
    # every call runs to completion before the first failure is reported
    outcomes = await asyncio.gather(
        translator.translate(bio or "", lang),
        *[translator.translate(specialty, lang) for specialty in guide.specialties],
        return_exceptions=True,
    )
    failure = next((o for o in outcomes if isinstance(o, BaseException)), None)
    if isinstance(failure, TravelCompanionError):
        raise failure
    if failure is not None:
        logger.error("Guide %s translation to %s failed: %r", guide_id, lang, failure)
        raise UpstreamError("Failed to translate guide profile") from failure
    bio_result, *specialty_results = outcomes

    result = GuideTranslationOut(
        bio=asdict(bio_result),
        specialties=[asdict(item) for item in specialty_results],
    )
    return result.model_dump(by_alias=True, mode="json")

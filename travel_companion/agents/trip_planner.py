"""Trip planning: itinerary generation followed by guide matching."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from travel_companion.agents.guide_matcher import score_guide
from travel_companion.errors import UpstreamError
from travel_companion.llm import ItineraryGenerator, ItineraryRequest
from travel_companion.log import get_logger
from travel_companion.queries import guides_matching_destination, preferences_for
from travel_companion.schemas import TripPlanRequest

logger = get_logger(__name__)

FALLBACK_SPECIALTIES = ["Culture", "Food", "Adventure"]


def rank_guides(
    guides: List[Dict[str, Any]],
    plan: Dict[str, Any],
    preferences: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Score each guide and sort best-first.

    A guide that cannot be scored is logged and left out; ties keep fetch order.
    """
    scored: List[Dict[str, Any]] = []
    for guide in guides:
        try:
            result = score_guide(guide, plan, preferences)
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping guide %s: %s", guide.get("id"), exc)
            continue
        logger.debug(
            "Guide %s scored %.2f (%s)", guide.get("id"), result.score, result.details
        )
        scored.append({**guide, "matchScore": result.score, "matchDetails": result.details})

    scored.sort(key=lambda g: g["matchScore"], reverse=True)
    return scored


async def plan_trip(
    request: TripPlanRequest,
    generator: ItineraryGenerator,
    db: Session,
    user_id: Optional[int] = None,
) -> Dict[str, Any]:
    logger.info(
        "Trip planning request: destination=%s, dates=%s-%s, user=%s",
        request.destination,
        request.start_date,
        request.end_date,
        user_id,
    )
    preferences = preferences_for(db, user_id)

    try:
        plan = await generator.generate(
            ItineraryRequest(
                destination=request.destination,
                start_date=request.start_date,
                end_date=request.end_date,
                preferences=request.preferences,
                travel_preferences=preferences,
            )
        )
    except Exception as exc:
        logger.exception("Itinerary generation failed: %s", exc)
        raise UpstreamError("Failed to generate trip recommendations") from exc

    plan = dict(plan)
    specialties = plan.get("recommendedSpecialties")
    if not isinstance(specialties, list) or not specialties:
        logger.info("Itinerary lacked recommendedSpecialties; using fallback list")
        plan["recommendedSpecialties"] = list(FALLBACK_SPECIALTIES)
    if not isinstance(plan.get("destination"), str) or not plan["destination"].strip():
        plan["destination"] = request.destination

    candidates = guides_matching_destination(db, request.destination)
    logger.info("Guides found for %s: %d", request.destination, len(candidates))

    available = rank_guides(candidates, plan, preferences)
    logger.info(
        "Ranked %d of %d guides; top score %s",
        len(available),
        len(candidates),
        available[0]["matchScore"] if available else "n/a",
    )
    return {**plan, "availableGuides": available}

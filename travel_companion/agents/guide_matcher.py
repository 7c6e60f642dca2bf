"""Guide/trip compatibility scoring."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

SPECIALTY_WEIGHT = 0.3
LOCATION_WEIGHT = 0.3
RATING_WEIGHT = 0.2
PREFERENCE_WEIGHT = 0.2

MAX_RATING = 5.0


class MissingScoreData(ValueError):
    """The guide or trip plan lacks a field the score depends on."""


@dataclass
class MatchResult:
    score: float
    specialty_match: float
    location_match: float
    rating_score: float
    preference_match: float

    @property
    def details(self) -> Dict[str, float]:
        return {
            "specialtyMatch": self.specialty_match,
            "locationMatch": self.location_match,
            "ratingScore": self.rating_score,
            "preferenceMatch": self.preference_match,
        }


def _required_list(source: Mapping[str, Any], key: str, owner: str) -> List[str]:
    value = source.get(key)
    items = [str(item) for item in value if item] if isinstance(value, (list, tuple)) else []
    if not items:
        raise MissingScoreData(f"{owner} is missing '{key}'")
    return items


def _rating_score(rating: Any) -> float:
    if rating is None or (isinstance(rating, str) and not rating.strip()):
        return 0.0
    try:
        value = float(rating)
    except (TypeError, ValueError) as exc:
        raise MissingScoreData(f"Unreadable rating {rating!r}") from exc
    return min(1.0, max(0.0, value / MAX_RATING))


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


def _preference_match(specialties: List[str], preferences: Optional[Mapping[str, Any]]) -> float:
    if not preferences:
        return 0.0

    lowered = [s.lower() for s in specialties]
    matches = 0
    total = 0

    travel_style = preferences.get("travel_style")
    if travel_style:
        total += 1
        style = str(travel_style).lower()
        if any(style in specialty for specialty in lowered):
            matches += 1

    for activity in preferences.get("activities") or []:
        if not activity:
            continue
        total += 1
        act = str(activity).lower()
        if any(_overlaps(act, specialty) for specialty in lowered):
            matches += 1

    return matches / total if total else 0.0


def score_guide(
    guide: Mapping[str, Any],
    trip_plan: Mapping[str, Any],
    preferences: Optional[Mapping[str, Any]] = None,
) -> MatchResult:
    """Weighted fit of ``guide`` for ``trip_plan``.

    ``guide`` needs ``specialties``, ``locations`` and optionally ``rating``
    (a decimal string on a 0-5 scale). ``trip_plan`` needs ``destination`` and
    ``recommendedSpecialties``. ``preferences`` uses the stored preference
    keys (``travel_style``, ``activities``); when omitted the preference
    component contributes 0 rather than being dropped from the sum.

    Raises ``MissingScoreData`` instead of returning a partial score.
    """
    specialties = _required_list(guide, "specialties", "guide")
    locations = _required_list(guide, "locations", "guide")
    recommended = _required_list(trip_plan, "recommendedSpecialties", "trip plan")
    destination = trip_plan.get("destination")
    if not isinstance(destination, str) or not destination.strip():
        raise MissingScoreData("trip plan is missing 'destination'")

    recommended_lower = {s.lower() for s in recommended}
    specialty_hits = sum(1 for s in specialties if s.lower() in recommended_lower)
    specialty_match = min(1.0, specialty_hits / len(recommended))

    trip_loc = destination.lower()
    location_match = 1.0 if any(_overlaps(loc.lower(), trip_loc) for loc in locations) else 0.0

    rating_score = _rating_score(guide.get("rating"))
    preference_match = _preference_match(specialties, preferences)

    score = (
        specialty_match * SPECIALTY_WEIGHT
        + location_match * LOCATION_WEIGHT
        + rating_score * RATING_WEIGHT
        + preference_match * PREFERENCE_WEIGHT
    )
    return MatchResult(
        score=round(min(1.0, max(0.0, score)), 2),
        specialty_match=specialty_match,
        location_match=location_match,
        rating_score=rating_score,
        preference_match=preference_match,
    )

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from travel_companion.models import BookingStatus


class CamelModel(BaseModel):
    """Wire format is camelCase (browser client); attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


# ------- Request models -------
class Credentials(CamelModel):
    username: str = Field(..., min_length=1, max_length=120)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username is required")
        return value


class PreferencesIn(CamelModel):
    travel_style: Optional[str] = None
    accommodation: Optional[str] = None
    activities: List[str] = Field(default_factory=list)
    transportation: Optional[str] = None
    budget: Optional[str] = None
    food_preferences: Optional[str] = None

    @field_validator("activities", mode="before")
    @classmethod
    def _coerce_activities(cls, value: Any) -> List[str]:
        # the quiz page posts a bare string when only one activity is ticked
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value


class BlogPostIn(CamelModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class CommentIn(CamelModel):
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter a comment")
        return value.strip()


class GuideRegistrationIn(CamelModel):
    specialties: List[str] = Field(..., min_length=1)
    locations: List[str] = Field(..., min_length=1)
    bio: Optional[str] = None


class TripPlanRequest(CamelModel):
    destination: str = Field(..., min_length=1)
    start_date: str = Field(..., min_length=1)
    end_date: str = Field(..., min_length=1)
    preferences: str = ""

    @field_validator("preferences", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> str:
        return value or ""


class DateRange(CamelModel):
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        # rows store naive UTC; mixing aware and naive values breaks arithmetic
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _ordered_dates(self) -> "DateRange":
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self


class TripCreate(DateRange):
    destination: str = Field(..., min_length=1)
    itinerary: Optional[Dict[str, Any]] = None


class BookingCreate(DateRange):
    guide_id: int
    trip_id: Optional[int] = None
    notes: Optional[str] = None


class BookingStatusUpdate(CamelModel):
    status: BookingStatus


class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1)


class PackingListGenerateRequest(DateRange):
    destination: str = Field(..., min_length=1)
    trip_id: Optional[int] = None


class PackingItemUpdate(CamelModel):
    is_packed: bool


class BudgetRequest(CamelModel):
    budget: float = Field(..., gt=0)


# ------- Upstream payloads -------
class SuggestedItem(CamelModel):
    """One entry of the ``items`` list returned by the packing assistant."""

    name: str = Field(..., min_length=1)
    category: str = "Miscellaneous"
    quantity: str = "1"
    is_essential: bool = False
    notes: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_as_text(cls, value: Any) -> str:
        if value is None or value == "":
            return "1"
        return str(value)


# ------- Response models -------
class UserSummary(CamelModel):
    id: int
    username: str


class UserOut(CamelModel):
    id: int
    username: str
    is_guide: bool = False
    is_admin: bool = False
    bio: Optional[str] = None


class PreferencesOut(CamelModel):
    id: int
    user_id: int
    travel_style: Optional[str] = None
    accommodation: Optional[str] = None
    activities: List[str] = Field(default_factory=list)
    transportation: Optional[str] = None
    budget: Optional[str] = None
    food_preferences: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GuideUser(CamelModel):
    id: int
    username: str
    bio: Optional[str] = None


class GuideOut(CamelModel):
    id: int
    user_id: int
    specialties: Optional[List[str]] = None
    locations: Optional[List[str]] = None
    rating: Optional[str] = None
    verified: bool = False
    user: Optional[GuideUser] = None


class MatchDetails(CamelModel):
    specialty_match: float
    location_match: float
    rating_score: float
    preference_match: float


class TripOut(CamelModel):
    id: int
    user_id: int
    destination: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    itinerary: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class BookingOut(CamelModel):
    id: int
    user_id: int
    guide_id: int
    trip_id: Optional[int] = None
    start_date: datetime
    end_date: datetime
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TravelerBookingOut(BookingOut):
    guide: Optional[GuideOut] = None
    trip: Optional[TripOut] = None


class GuideBookingOut(BookingOut):
    user: Optional[UserSummary] = None
    trip: Optional[TripOut] = None


class PackingItemOut(CamelModel):
    id: int
    list_id: int
    name: str
    category: str
    quantity: str
    is_packed: bool = False
    is_essential: bool = False
    notes: Optional[str] = None
    ai_suggested: bool = False


class PackingListOut(CamelModel):
    id: int
    user_id: int
    trip_id: Optional[int] = None
    name: str
    created_at: Optional[datetime] = None
    items: List[PackingItemOut] = Field(default_factory=list)


class AuthorOut(CamelModel):
    id: int
    username: str


class BlogPostOut(CamelModel):
    id: int
    title: str
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[AuthorOut] = None


class CommentOut(CamelModel):
    id: int
    post_id: int
    content: str
    created_at: Optional[datetime] = None
    author: Optional[AuthorOut] = None


class TranslationOut(CamelModel):
    original_text: str
    translated_text: str
    detected_source_language: Optional[str] = None


class GuideTranslationOut(CamelModel):
    bio: TranslationOut
    specialties: List[TranslationOut] = Field(default_factory=list)


class BudgetBreakdown(CamelModel):
    accommodation: float
    transportation: float
    activities: float
    food: float
    miscellaneous: float


def dump(model_cls: type[BaseModel], obj: Any) -> Dict[str, Any]:
    """Validate an ORM row (or dict) into ``model_cls`` and emit camelCase JSON."""
    return model_cls.model_validate(obj).model_dump(by_alias=True, mode="json")

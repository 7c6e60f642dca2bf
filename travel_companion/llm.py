# travel_companion/llm.py
"""Hosted LLM capabilities.

Orchestrators only see the ``Protocol`` classes below, so tests hand them
deterministic fakes while production wires the OpenAI-backed versions.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from openai import AsyncOpenAI

from travel_companion.log import get_logger

logger = get_logger(__name__)

ITINERARY_SYSTEM = (
    "You are an expert travel planner with deep knowledge of destinations worldwide. "
    "Focus on creating highly personalized recommendations that match user preferences."
)

ITINERARY_TEMPLATE = """As an expert travel planner, create a detailed personalized trip plan for {destination} from {start_date} to {end_date}. {preferences_context}
Additional preferences: {free_text}

Provide a JSON response with:
{{
  "destination": "{destination}",
  "summary": "A compelling 2-3 sentence overview of the trip",
  "numberOfDays": "Calculate based on start and end dates",
  "travelStyle": "Adventure/Luxury/Cultural/etc based on preferences",
  "recommendedSpecialties": ["List 3-4 relevant guide specialties based on user preferences"],
  "itinerary": {{
    "day1": {{
      "activities": ["3-4 specific activities with timing"],
      "accommodation": {{
        "luxury": "Specific luxury hotel recommendation",
        "budget": "Specific budget accommodation option"
      }}
    }}
  }},
  "tips": ["4-5 specific local tips and cultural insights"]
}}
Repeat the itinerary entry for each day.

Important guidelines:
1. Activities should match user's preferred style and interests
2. Include a mix of popular and off-the-beaten-path recommendations
3. Consider local events happening during the travel dates
4. Match guide specialties to both destination highlights and user preferences
"""

PREFERENCES_TEMPLATE = """Consider these user preferences:
Travel Style: {travel_style}
Preferred Activities: {activities}
Accommodation: {accommodation}
Transportation: {transportation}
Budget: {budget}
Food Preferences: {food_preferences}"""

NO_PREFERENCES = "No specific user preferences available"


@dataclass
class ItineraryRequest:
    destination: str
    start_date: str
    end_date: str
    preferences: str = ""
    travel_preferences: Optional[Dict[str, Any]] = None


class ItineraryGenerator(Protocol):
    async def generate(self, request: ItineraryRequest) -> Dict[str, Any]:
        ...


class ChatCompleter(Protocol):
    async def complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        ...


class PackingSuggester(Protocol):
    async def suggest(self, prompt: str) -> Optional[str]:
        ...


def _or_unspecified(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(v) for v in value if v)
    return str(value) if value else "Not specified"


def describe_preferences(prefs: Optional[Dict[str, Any]]) -> str:
    """Render stored travel preferences for inclusion in a prompt."""
    if not prefs:
        return NO_PREFERENCES
    return PREFERENCES_TEMPLATE.format(
        travel_style=_or_unspecified(prefs.get("travel_style")),
        activities=_or_unspecified(prefs.get("activities")),
        accommodation=_or_unspecified(prefs.get("accommodation")),
        transportation=_or_unspecified(prefs.get("transportation")),
        budget=_or_unspecified(prefs.get("budget")),
        food_preferences=_or_unspecified(prefs.get("food_preferences")),
    )


def build_itinerary_prompt(request: ItineraryRequest) -> str:
    return ITINERARY_TEMPLATE.format(
        destination=request.destination,
        start_date=request.start_date,
        end_date=request.end_date,
        preferences_context=describe_preferences(request.travel_preferences),
        free_text=request.preferences or "No specific preferences",
    )


def build_client(api_key: str, timeout: float) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, timeout=timeout)


class OpenAIItineraryGenerator:
    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    async def generate(self, request: ItineraryRequest) -> Dict[str, Any]:
        logger.info("Invoking LLM model %s for itinerary to %s", self.model, request.destination)
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": ITINERARY_SYSTEM},
                {"role": "user", "content": build_itinerary_prompt(request)},
            ],
            response_format={"type": "json_object"},
        )
        raw = resp.choices[0].message.content
        if not raw:
            raise ValueError("No response content from the itinerary model")
        plan = json.loads(raw)
        if not isinstance(plan, dict):
            raise ValueError("Itinerary model returned a non-object payload")
        logger.info("Itinerary payload parsed with keys: %s", ", ".join(sorted(plan.keys())))
        return plan


class OpenAIChatCompleter:
    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    async def complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        logger.info("Invoking LLM model %s for chat with %d messages", self.model, len(messages))
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0.7,
            max_tokens=500,
            response_format={"type": "json_object"},
        )
        return resp.choices[0].message.content


class OpenAIPackingSuggester:
    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    async def suggest(self, prompt: str) -> Optional[str]:
        logger.info("Invoking LLM model %s for packing suggestions", self.model)
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": prompt}],
            temperature=0.7,
            response_format={"type": "json_object"},
        )
        return resp.choices[0].message.content

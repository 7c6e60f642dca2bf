"""External capabilities wired into the app at startup."""
from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Request

from travel_companion.agents.chat_assistant import ChatSessionStore
from travel_companion.config import Settings
from travel_companion.llm import (
    ChatCompleter,
    ItineraryGenerator,
    OpenAIChatCompleter,
    OpenAIItineraryGenerator,
    OpenAIPackingSuggester,
    PackingSuggester,
    build_client,
)
from travel_companion.tools.translate import GoogleTranslator, Translator


@dataclass
class Services:
    itinerary_generator: ItineraryGenerator
    chat_completer: ChatCompleter
    packing_suggester: PackingSuggester
    translator: Translator
    chat_sessions: ChatSessionStore = field(default_factory=ChatSessionStore)


def build_services(settings: Settings) -> Services:
    client = build_client(settings.openai_api_key, settings.llm_timeout)
    return Services(
        itinerary_generator=OpenAIItineraryGenerator(client, settings.llm_model),
        chat_completer=OpenAIChatCompleter(client, settings.llm_model),
        packing_suggester=OpenAIPackingSuggester(client, settings.llm_model),
        translator=GoogleTranslator(
            settings.google_translate_api_key,
            settings.google_project_id,
            timeout=settings.translate_timeout,
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from travel_companion.config import Settings
from travel_companion.main import create_app
from travel_companion.models import Guide, User
from travel_companion.services import Services
from travel_companion.tools.translate import TranslationResult


class FakeItineraryGenerator:
    def __init__(self, plan: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.plan = plan if plan is not None else {
            "destination": "Paris",
            "summary": "Three days of food and museums.",
            "recommendedSpecialties": ["Food", "Culture"],
            "itinerary": {"day1": {"activities": ["Louvre"]}},
        }
        self.error = error
        self.requests: List[Any] = []

    async def generate(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return dict(self.plan)


class FakeChatCompleter:
    def __init__(self, replies: Optional[List[Optional[str]]] = None, error: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    async def complete(self, messages):
        self.calls.append([dict(m) for m in messages])
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return json.dumps({"message": f"reply {len(self.calls)}"})


class FakePackingSuggester:
    def __init__(self, raw: Optional[str] = None, error: Optional[Exception] = None):
        self.raw = raw if raw is not None else json.dumps(
            {
                "items": [
                    {"name": "Passport", "category": "Documents", "quantity": "1", "isEssential": True},
                    {"name": "Rain jacket", "category": "Clothing", "quantity": 1, "notes": "June showers"},
                ]
            }
        )
        self.error = error
        self.prompts: List[str] = []

    async def suggest(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.raw


class FakeTranslator:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[tuple] = []

    async def translate(self, text, target_language):
        self.calls.append((text, target_language))
        if self.error is not None:
            raise self.error
        return TranslationResult(
            original_text=text,
            translated_text=f"[{target_language}] {text}",
            detected_source_language="en",
        )


def make_settings(**overrides) -> Settings:
    values = dict(
        openai_api_key="test-openai",
        google_project_id="test-project",
        google_translate_api_key="test-translate",
        firebase_api_key="test-firebase",
        firebase_project_id="companion-test",
        firebase_app_id="1:test:web:abc",
        session_secret="test-secret",
        database_url="sqlite://",
        admin_usernames=["admin"],
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def services() -> Services:
    return Services(
        itinerary_generator=FakeItineraryGenerator(),
        chat_completer=FakeChatCompleter(),
        packing_suggester=FakePackingSuggester(),
        translator=FakeTranslator(),
    )


@pytest.fixture
def app(services):
    return create_app(make_settings(), services)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def register(client: TestClient, username: str, password: str = "s3cret-pass"):
    response = client.post("/api/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["user"]


def add_guide(
    db,
    username: str,
    specialties: Optional[List[str]],
    locations: Optional[List[str]],
    rating: Optional[str] = "4.0",
    bio: Optional[str] = None,
) -> Guide:
    user = User(username=username, password="unused.unused", is_guide=True, bio=bio)
    db.add(user)
    db.flush()
    guide = Guide(user_id=user.id, specialties=specialties, locations=locations, rating=rating)
    db.add(guide)
    db.commit()
    db.refresh(guide)
    return guide

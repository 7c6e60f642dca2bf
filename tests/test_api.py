import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from conftest import add_guide, register
from travel_companion.errors import UpstreamError
from travel_companion.models import Guide
from travel_companion.tools.translate import TranslationResult


def test_preferences_upsert(client):
    register(client, "ana")
    assert client.get("/api/preferences").json() is None

    first = client.post("/api/preferences", json={"travelStyle": "budget", "activities": "hiking"})
    assert first.status_code == 200
    assert first.json()["activities"] == ["hiking"]

    second = client.post("/api/preferences", json={"travelStyle": "luxury", "activities": ["spa", "food"]})
    assert second.json()["id"] == first.json()["id"]
    stored = client.get("/api/preferences").json()
    assert stored["travelStyle"] == "luxury"
    assert stored["activities"] == ["spa", "food"]


def test_blog_writes_are_admin_only(app, client):
    register(client, "admin")
    created = client.post("/api/blog", json={"title": "Hello", "content": "First post"})
    assert created.status_code == 201
    post_id = created.json()["id"]
    assert created.json()["author"]["username"] == "admin"

    reader = TestClient(app)
    assert reader.get("/api/blog").json()[0]["title"] == "Hello"
    assert reader.post("/api/blog", json={"title": "x", "content": "y"}).status_code == 401
    register(reader, "reader")
    assert reader.put(f"/api/blog/{post_id}", json={"title": "x", "content": "y"}).status_code == 403
    assert reader.delete(f"/api/blog/{post_id}").status_code == 403

    updated = client.put(f"/api/blog/{post_id}", json={"title": "Hello again", "content": "Edited"})
    assert updated.json()["title"] == "Hello again"
    assert client.put("/api/blog/999", json={"title": "x", "content": "y"}).status_code == 404

    assert client.delete(f"/api/blog/{post_id}").status_code == 200
    assert client.get("/api/blog").json() == []


def test_comments_need_login_to_post(app, client):
    register(client, "admin")
    post_id = client.post("/api/blog", json={"title": "Hello", "content": "First post"}).json()["id"]

    anonymous = TestClient(app)
    assert anonymous.post(f"/api/blog/{post_id}/comments", json={"content": "hi"}).status_code == 401

    register(anonymous, "reader")
    created = anonymous.post(f"/api/blog/{post_id}/comments", json={"content": "  nice trip  "})
    assert created.status_code == 201
    comments = client.get(f"/api/blog/{post_id}/comments").json()
    assert [(c["content"], c["author"]["username"]) for c in comments] == [("nice trip", "reader")]
    assert client.get("/api/blog/999/comments").status_code == 404


def test_guide_registration_and_directory(client):
    register(client, "marta")
    response = client.post(
        "/api/guides/register",
        json={"specialties": ["Food", "History"], "locations": ["Lisbon", "Porto"], "bio": "Local foodie"},
    )
    assert response.status_code == 200
    guide = response.json()
    assert guide["rating"] == "0.0"
    assert guide["verified"] is False

    assert client.get("/api/user").json()["isGuide"] is True
    assert client.post(
        "/api/guides/register", json={"specialties": ["Food"], "locations": ["Lisbon"]}
    ).status_code == 400

    directory = client.get("/api/guides").json()
    assert directory[0]["user"]["bio"] == "Local foodie"
    assert [g["id"] for g in client.get("/api/guides/location/porto").json()] == [guide["id"]]
    assert client.get("/api/guides/location/Port").json() == []


def test_guide_translation(client, db, services):
    guide = add_guide(db, "marta", ["Food", "History"], ["Lisbon"], bio="Local foodie")
    register(client, "ana")

    response = client.get(f"/api/guides/{guide.id}/translate/pt")

    assert response.status_code == 200
    body = response.json()
    assert body["bio"]["translatedText"] == "[pt] Local foodie"
    assert [s["translatedText"] for s in body["specialties"]] == ["[pt] Food", "[pt] History"]
    assert client.get("/api/guides/999/translate/pt").status_code == 404


def test_guide_translation_failure_is_generic(client, db, services):
    guide = add_guide(db, "marta", ["Food"], ["Lisbon"], bio="Local foodie")
    register(client, "ana")
    services.translator.error = RuntimeError("API key invalid: abc123")

    response = client.get(f"/api/guides/{guide.id}/translate/pt")

    assert response.status_code == 500
    assert "abc123" not in response.text


def test_booking_lifecycle(app, client):
    register(client, "marta")
    guide = client.post(
        "/api/guides/register", json={"specialties": ["Food"], "locations": ["Lisbon"]}
    ).json()

    traveller = TestClient(app)
    register(traveller, "ana")
    trip = traveller.post(
        "/api/trips", json={"destination": "Lisbon", "startDate": "2024-06-01", "endDate": "2024-06-06"}
    ).json()
    booking = traveller.post(
        "/api/bookings",
        json={
            "guideId": guide["id"],
            "tripId": trip["id"],
            "startDate": "2024-06-02",
            "endDate": "2024-06-03",
            "notes": "Food tour please",
        },
    )
    assert booking.status_code == 200
    booking_id = booking.json()["id"]
    assert booking.json()["status"] == "pending"

    mine = traveller.get("/api/bookings").json()
    assert mine[0]["guide"]["user"]["username"] == "marta"
    assert mine[0]["trip"]["destination"] == "Lisbon"

    assert traveller.get("/api/guide/bookings").status_code == 403
    incoming = client.get("/api/guide/bookings").json()
    assert incoming[0]["user"]["username"] == "ana"

    assert client.patch(f"/api/bookings/{booking_id}", json={"status": "accepted"}).json()["status"] == "accepted"
    assert client.patch(f"/api/bookings/{booking_id}", json={"status": "cancelled"}).status_code == 400

    stranger = TestClient(app)
    register(stranger, "eve")
    assert stranger.patch(f"/api/bookings/{booking_id}", json={"status": "rejected"}).status_code == 403
    assert stranger.patch("/api/bookings/999", json={"status": "rejected"}).status_code == 404

    assert traveller.patch(f"/api/bookings/{booking_id}", json={"status": "completed"}).status_code == 200


def test_booking_validation(client):
    register(client, "ana")
    missing_guide = client.post(
        "/api/bookings", json={"guideId": 42, "startDate": "2024-06-02", "endDate": "2024-06-03"}
    )
    assert missing_guide.status_code == 404

    backwards = client.post(
        "/api/bookings", json={"guideId": 42, "startDate": "2024-06-05", "endDate": "2024-06-03"}
    )
    assert backwards.status_code == 400


def test_trips_are_per_user(app, client):
    register(client, "ana")
    client.post(
        "/api/trips",
        json={"destination": "Rome", "startDate": "2024-06-01", "endDate": "2024-06-06", "itinerary": {"day1": {}}},
    )

    other = TestClient(app)
    register(other, "bo")
    assert other.get("/api/trips").json() == []
    assert client.get("/api/trips").json()[0]["itinerary"] == {"day1": {}}


def test_budget_split_sums_to_total(client):
    response = client.post("/api/budget/optimize", json={"budget": 1234.57})

    assert response.status_code == 200
    body = response.json()
    assert body["accommodation"] == 493.83
    assert round(sum(body.values()), 2) == 1234.57
    assert client.post("/api/budget/optimize", json={"budget": 0}).status_code == 400


def test_identity_config_and_health(client):
    config = client.get("/api/config/identity").json()
    assert config["projectId"] == "companion-test"
    assert config["authDomain"] == "companion-test.firebaseapp.com"
    assert client.get("/api/health").json() == {"status": "ok"}


def test_guide_profile_is_unique_per_user(db):
    guide = add_guide(db, "marta", ["Food"], ["Lisbon"])
    db.add(Guide(user_id=guide.user_id, specialties=["Wine"], locations=["Porto"]))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


class FlakyTranslator:
    def __init__(self, failing_text):
        self.failing_text = failing_text
        self.finished = []

    async def translate(self, text, target_language):
        await asyncio.sleep(0)
        if text == self.failing_text:
            raise UpstreamError("Failed to translate text")
        await asyncio.sleep(0.01)
        self.finished.append(text)
        return TranslationResult(original_text=text, translated_text=text.upper())


def test_guide_translation_waits_for_every_call_before_failing(client, db, services):
    guide = add_guide(db, "marta", ["Food", "History", "Wine"], ["Lisbon"], bio="Local foodie")
    register(client, "ana")
    services.translator = FlakyTranslator("History")

    response = client.get(f"/api/guides/{guide.id}/translate/pt")

    assert response.status_code == 500
    assert response.text == "Failed to translate text"
    assert sorted(services.translator.finished) == ["Food", "Local foodie", "Wine"]

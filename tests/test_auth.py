import inspect

from fastapi.testclient import TestClient
from sqlalchemy import select

from conftest import register
from travel_companion.auth import hash_password, verify_password
from travel_companion.models import User


def test_hash_round_trip_and_format():
    stored = hash_password("correct horse")
    hashed, salt = stored.split(".")

    assert len(bytes.fromhex(hashed)) == 64
    assert len(salt) == 32
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)
    assert hash_password("correct horse") != stored


def test_verify_rejects_malformed_stored_values():
    assert not verify_password("x", "")
    assert not verify_password("x", "no-delimiter")
    assert not verify_password("x", "zz-not-hex.abcd")


def test_register_logs_in_and_returns_summary(client):
    response = client.post("/api/register", json={"username": "ana", "password": "pw12345"})

    assert response.status_code == 201
    assert response.json()["user"]["username"] == "ana"
    me = client.get("/api/user").json()
    assert me["username"] == "ana"
    assert me["isAdmin"] is False
    assert "password" not in me


def test_duplicate_registration_is_rejected(client, db):
    register(client, "ana")

    response = TestClient(client.app).post("/api/register", json={"username": "ana", "password": "other"})

    assert response.status_code == 400
    assert response.text == "Username already exists"
    assert len(db.scalars(select(User).where(User.username == "ana")).all()) == 1


def test_register_validates_input(client):
    response = client.post("/api/register", json={"username": "   ", "password": "pw"})
    assert response.status_code == 400
    assert response.text.startswith("Invalid input")


def test_login_failures_do_not_reveal_which_part_was_wrong(app, client):
    register(client, "ana", "right-password")
    anonymous = TestClient(app)

    wrong_password = anonymous.post("/api/login", json={"username": "ana", "password": "nope"})
    unknown_user = anonymous.post("/api/login", json={"username": "nobody", "password": "nope"})

    assert wrong_password.status_code == unknown_user.status_code == 400
    assert wrong_password.text == unknown_user.text
    assert anonymous.get("/api/user").status_code == 401


def test_login_then_logout(app, client):
    register(client, "ana", "right-password")
    browser = TestClient(app)

    assert browser.post("/api/login", json={"username": "ana", "password": "right-password"}).status_code == 200
    assert browser.get("/api/user").status_code == 200

    assert browser.post("/api/logout").status_code == 200
    assert browser.get("/api/user").status_code == 401


def test_configured_admin_gets_admin_flag(client):
    register(client, "admin")
    assert client.get("/api/user").json()["isAdmin"] is True


def test_protected_routes_require_session(client):
    for method, path in [
        ("get", "/api/preferences"),
        ("get", "/api/trips"),
        ("get", "/api/bookings"),
        ("get", "/api/guide/bookings"),
        ("get", "/api/trips/1/packing-lists"),
    ]:
        assert getattr(client, method)(path).status_code == 401, path


def test_password_hashing_routes_run_off_the_event_loop(app):
    endpoints = {route.path: route.endpoint for route in app.routes if hasattr(route, "endpoint")}

    for path in ("/api/register", "/api/login", "/api/preferences", "/api/bookings", "/api/blog"):
        assert not inspect.iscoroutinefunction(endpoints[path]), path

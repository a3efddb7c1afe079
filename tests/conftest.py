"""Pytest fixtures — file-backed SQLite database, recreated for every test."""
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("APP_ENV", "test")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from rsvp_app.database import Base, get_db
from rsvp_app.main import app
from rsvp_app.models.user import RoleName, User
from rsvp_app.services.auth_service import create_access_token, get_roles

import rsvp_app.models  # noqa: F401  registers every table on Base.metadata

SQLITE_URL = "sqlite:///./test.db"
PASSWORD = "s3cret-pass"


@pytest.fixture
def db_engine():
    """SQLite engine with the full schema; dropped again after the test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _pragmas(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    """Session for arranging rows directly, outside the API."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """TestClient whose requests each get a fresh session on the test database."""

    def _test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _test_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    return create_staff_user(db, "admin", RoleName.admin)


@pytest.fixture
def host(db):
    return create_staff_user(db, "host", RoleName.event_host)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(client: TestClient, username: str = "guestuser", email: str = None) -> dict:
    """Helper — POST /api/auth/register and return response JSON (token + user)."""
    resp = client.post("/api/auth/register", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "password": PASSWORD,
        "first_name": username.title(),
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_staff_user(db, username: str, *roles: RoleName) -> dict:
    """Insert a user holding ``roles`` directly and return its id and auth headers."""
    user = User(username=username, email=f"{username}@example.com")
    user.password = PASSWORD
    user.roles = get_roles(db, roles)
    db.add(user)
    db.commit()
    return {"id": user.id, "headers": auth_headers(create_access_token(user.id))}


def future(days: int = 30, hours: int = 0) -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=days, hours=hours)


def create_test_event(client: TestClient, headers: dict, name: str = "Summer Wedding", **fields) -> dict:
    """Helper — POST /api/events and return response JSON."""
    start = fields.pop("start_date", future())
    end = fields.pop("end_date", start + timedelta(hours=5))
    payload = {
        "name": name,
        "type": "wedding",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "timezone": "Europe/Paris",
        **fields,
    }
    resp = client.post("/api/events/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def publish_event(client: TestClient, headers: dict, event_id: str) -> dict:
    resp = client.post(f"/api/events/{event_id}/status", json={"status": "published"}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_test_guest(client: TestClient, headers: dict, first_name: str = "Ada", **fields) -> dict:
    """Helper — POST /api/guests and return response JSON."""
    payload = {"first_name": first_name, "last_name": "Lovelace", "email": f"{first_name.lower()}@example.com", **fields}
    resp = client.post("/api/guests/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def invite(client: TestClient, headers: dict, event_id: str, guest_id: str) -> dict:
    resp = client.post(f"/api/events/{event_id}/guests", json={"guest_id": guest_id}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def rsvp_for(client: TestClient, headers: dict, event_id: str, guest_id: str) -> dict:
    """The RSVP row opened for a guest on an event."""
    resp = client.get(f"/api/guests/{guest_id}/rsvps", headers=headers)
    assert resp.status_code == 200, resp.text
    return next(r for r in resp.json() if r["event_id"] == event_id)

"""Shared test fixtures for the docward test suite.

All tests use a throwaway SQLite database file. The schema is created once
on import; every test starts from empty tables.

Identity tokens are minted with the same HS256 factory the auth dependency
decodes, and the collaboration service is replaced by an in-memory fake via
``app.dependency_overrides``.
"""

import os
import tempfile

# Point the app at a test database before any app imports.
_DB_DIR = tempfile.mkdtemp(prefix="docward-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}",
)
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"

import json
from typing import Any, Optional

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from docward.core import clock
from docward.core.auth import Principal
from docward.core.config import settings
from docward.core.token_factory import create_token
from docward.database import get_db, init_db, SessionLocal
from docward.main import app
from docward.api.session_auth import get_collaboration_client
from docward.middleware.request_context import _rate_buckets

init_db()

# Tables to empty between tests (children first for foreign keys).
_CLEAN_TABLES = ["versions", "share_links", "permissions", "documents", "folders"]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test for isolation.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for table in _CLEAN_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


class FakeCollaborationClient:
    """Records authorize_user calls and answers with a canned session body."""

    def __init__(self, status_code: int = 200, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body if body is not None else json.dumps({"token": "session-token"})
        self.calls: list[dict[str, Any]] = []
        self.error: Optional[Exception] = None

    def authorize_user(self, user_id, room, permissions, user_info):
        self.calls.append({
            "user_id": user_id,
            "room": room,
            "permissions": list(permissions),
            "user_info": user_info,
        })
        if self.error is not None:
            raise self.error
        return self.status_code, self.body


@pytest.fixture()
def collaboration():
    return FakeCollaborationClient()


@pytest.fixture()
def client(db, collaboration):
    """FastAPI TestClient with the DB and collaboration dependencies overridden."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_collaboration_client] = lambda: collaboration
    _rate_buckets.clear()  # Reset rate limiter so tests don't hit 429
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


class FrozenClock:
    """Controllable replacement for ``clock.now_ms``."""

    def __init__(self, start: int):
        self.value = start

    def __call__(self) -> int:
        return self.value

    def advance(self, ms: int) -> None:
        self.value += ms

    def advance_days(self, days: float) -> None:
        self.value += int(days * clock.MS_PER_DAY)


@pytest.fixture()
def frozen_clock(monkeypatch):
    """Freeze ``clock.now_ms`` at a fixed instant for the duration of a test."""
    fake = FrozenClock(1_700_000_000_000)
    monkeypatch.setattr(clock, "now_ms", fake)
    return fake


def make_principal(user_id: str = "u1", org: Optional[str] = None, **claims) -> Principal:
    return Principal(principal_id=user_id, organization_id=org, **claims)


def auth_headers(user_id: str = "u1", org: Optional[str] = None, **claims) -> dict:
    """Authorization header carrying an identity token for *user_id*."""
    token = create_token(
        user_id,
        settings.jwt_secret_key,
        o={"id": org} if org else None,
        **claims,
    )
    return {"Authorization": f"Bearer {token}"}


def make_document(
    client: TestClient,
    owner: str = "u1",
    org: Optional[str] = None,
    title: str = "Test Document",
    **overrides,
) -> dict:
    """Create a document over HTTP and return its JSON."""
    payload = {"title": title, "initial_content": "Hello world."}
    payload.update(overrides)
    resp = client.post("/api/documents", json=payload, headers=auth_headers(owner, org))
    assert resp.status_code == 201, resp.text
    return resp.json()

# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Builds apps with injected fakes (store, verifier, chat, job registry)
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================

os.environ.setdefault("PORT", "3000")
os.environ.setdefault("CLIENT_URL", "http://localhost:5173")
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("DB_URL", "https://test-project.supabase.co")
os.environ.setdefault("DB_SERVICE_KEY", "test-service-key")
os.environ.setdefault("CLERK_PUBLISHABLE_KEY", "pk_test_key")
os.environ.setdefault("CLERK_SECRET_KEY", "sk_test_key")
os.environ.setdefault("INNGEST_EVENT_KEY", "test-event-key")
os.environ.setdefault("INNGEST_SIGNING_KEY", "signkey-test-0123456789abcdef")
os.environ.setdefault("STREAM_API_KEY", "test-stream-key")
os.environ.setdefault("STREAM_API_SECRET", "test-stream-secret")
os.environ.setdefault("DB_CONNECT_BACKOFF_SECONDS", "0")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth import SessionTokenError
from app.config import load_settings
from app.main import create_app
from lib.database import Database
from lib.stream_client import StreamClient
from workers.registry import JobFunction, JobRegistry

CLIENT_ORIGIN = "http://localhost:5173"
GOOD_TOKEN = "good-token"
ORPHAN_TOKEN = "orphan-token"


class FakeVerifier:
    """Session verifier that knows a fixed set of tokens."""

    def __init__(self, tokens: dict[str, dict]):
        self.tokens = tokens
        self.closed = False

    def verify(self, token: str) -> dict:
        if token not in self.tokens:
            raise SessionTokenError("unknown token")
        return self.tokens[token]

    def close(self) -> None:
        self.closed = True


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_settings():
    """Build settings from the test environment plus overrides (no .env)."""
    def _make(**overrides):
        return load_settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def sample_user():
    """A synced user row."""
    return {
        "id": "6f1c2b1e-0000-4000-8000-000000000001",
        "clerk_id": "user_123",
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "profile_image": "https://img.example.com/ada.png",
    }


@pytest.fixture
def database(sample_user):
    """Store handle that knows one user."""
    db = MagicMock(spec=Database)
    db.fetch_user_by_clerk_id.side_effect = (
        lambda clerk_id: sample_user if clerk_id == sample_user["clerk_id"] else None
    )
    return db


@pytest.fixture
def verifier():
    return FakeVerifier({
        GOOD_TOKEN: {"sub": "user_123", "sid": "sess_1"},
        ORPHAN_TOKEN: {"sub": "user_without_row", "sid": "sess_2"},
    })


@pytest.fixture
def stream():
    client = MagicMock(spec=StreamClient)
    client.create_user_token.return_value = "chat-token"
    return client


@pytest.fixture
def job_tasks():
    """Stand-in Celery tasks; .delay() returns something with an id."""
    sync_task = MagicMock()
    sync_task.delay.return_value = MagicMock(id="task-sync-1")
    delete_task = MagicMock()
    delete_task.delay.return_value = MagicMock(id="task-delete-1")
    return {"sync": sync_task, "delete": delete_task}


@pytest.fixture
def job_registry(job_tasks):
    return JobRegistry([
        JobFunction(id="sync-user", name="Sync User", event="clerk/user.created", task=job_tasks["sync"]),
        JobFunction(id="delete-user-from-db", name="Delete User From DB", event="clerk/user.deleted", task=job_tasks["delete"]),
    ])


@pytest.fixture
def frontend_dist(tmp_path):
    """A built frontend bundle."""
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_text("<!doctype html><html><body>arena</body></html>")
    (dist / "assets" / "app.js").write_text("console.log('arena');")
    return dist


@pytest.fixture
def make_client(settings, database, verifier, stream, job_registry):
    """Build a TestClient around an app wired with the fakes above."""
    def _make(app_settings=None, **kwargs):
        app = create_app(
            app_settings or settings,
            database=database,
            verifier=verifier,
            stream=stream,
            job_registry=job_registry,
        )
        return TestClient(app, **kwargs)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()

"""Pytest fixtures: in-memory SQLite, test client, stores and a recording broadcaster."""
import os
from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

# Must be set before markboard is imported: settings are read once
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("VAPID_PUBLIC_KEY", "test-public-key")
os.environ.setdefault("VAPID_PRIVATE_KEY", "test-private-key")
os.environ.setdefault("MARKS_RATE_LIMIT", "10000/minute")
# The app's own sweeper must not fire in the middle of a test
os.environ.setdefault("SWEEP_INTERVAL_SECONDS", "3600")

from sqlalchemy import delete
from sqlmodel import Session

from markboard.db import engine, init_db
from markboard.main import app
from markboard.models import Mark, PushSubscription
from markboard.services.mark_store import MarkStore
from markboard.services.subscription_store import SubscriptionStore


class RecordingBroadcaster:
    """Stands in for ConnectionManager and remembers every event."""

    def __init__(self):
        self.events = []

    async def publish_created(self, mark):
        self.events.append(("mark.created", mark.id))
        return 1

    async def publish_expired(self, mark_id):
        self.events.append(("mark.expired", mark_id))
        return 1

    def of_type(self, event_type):
        return [mark_id for kind, mark_id in self.events if kind == event_type]


@pytest.fixture(autouse=True)
def _clean_tables():
    init_db()
    yield
    with Session(engine) as session:
        session.exec(delete(Mark))
        session.exec(delete(PushSubscription))
        session.commit()


@pytest.fixture(autouse=True)
def fake_webpush():
    """No test talks to a real push service."""
    with patch("markboard.services.web_push.webpush") as mocked:
        mocked.return_value = None
        yield mocked


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def mark_store():
    return MarkStore(engine)


@pytest.fixture
def subscription_store():
    return SubscriptionStore(engine)


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def make_mark():
    """Build a fully-formed Mark with explicit timestamps."""
    def _make(created_at, ttl=timedelta(minutes=30), color="blue", note=None):
        return Mark(
            id=str(uuid4()),
            lat=50.45,
            lng=30.52,
            color=color,
            street="Location",
            note=note,
            created_at=created_at,
            expires_at=created_at + ttl,
        )

    return _make

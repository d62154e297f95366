"""
Shared pytest fixtures.

Uses a throwaway SQLite database so no Postgres is required for tests,
plus deterministic timers/notifier doubles for the tracker.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///./test_dailyflow.db"

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import dailyflow.models  # noqa: F401
from dailyflow.db.base import Base, get_db
from dailyflow.main import app
from dailyflow.tracker.reminders import Permission

SQLITE_URL = os.environ["DATABASE_URL"]

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def mobile():
    """A mobile number no other test uses."""
    return f"+1555{uuid.uuid4().int % 10_000_000:07d}"


# ---------------------------------------------------------------------------
# Tracker doubles
# ---------------------------------------------------------------------------

class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeTimers:
    """Stand-in for SchedulerTimers; time only moves on advance()."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def active(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds):
        self.now += seconds
        for handle in sorted(self.active, key=lambda h: h.when):
            if handle.when <= self.now and not handle.cancelled:
                handle.fired = True
                handle.callback(*handle.args)


class FakeNotifier:
    def __init__(self, permission=Permission.GRANTED, grant_on_request=True):
        self._permission = permission
        self.grant_on_request = grant_on_request
        self.requests = 0
        self.notifications = []
        self.alerts = []

    def permission(self):
        return self._permission

    def request_permission(self):
        self.requests += 1
        self._permission = Permission.GRANTED if self.grant_on_request else Permission.DENIED
        return self._permission

    def notify(self, title, body):
        self.notifications.append((title, body))

    def alert(self, message):
        self.alerts.append(message)


@pytest.fixture()
def timers():
    return FakeTimers()


@pytest.fixture()
def notifier():
    return FakeNotifier()


@pytest.fixture()
def make_notifier():
    return FakeNotifier

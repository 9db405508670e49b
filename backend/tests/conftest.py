# tests/conftest.py

"""
Pytest configuration and shared fixtures.

The suite never touches PostgreSQL: `FakeRepo` keeps events in a list and
mirrors `EventRepo`'s contract (dict rows, newest-first reads, inclusive
bounds, `StorageUnavailable` on failure).
"""

import itertools
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from errors import StorageUnavailable
from service_events import EventService
from settings import settings


class FakeRepo:
    def __init__(self):
        self.rows = []
        self.down = False
        self._ids = itertools.count(1)

    def _check(self):
        if self.down:
            raise StorageUnavailable("Query failed: connection refused")

    def insert_event(self, user_id, ts, type, category, name, value=None, unit=None):
        self._check()
        row = {
            "id": str(next(self._ids)),
            "userId": user_id,
            "timestamp": ts,
            "type": type,
            "category": category,
            "name": name,
        }
        if value is not None:
            row["value"] = value
            row["unit"] = unit
        self.rows.append(row)
        return dict(row)

    def fetch_events(self, user_id, start=None, end=None):
        self._check()
        out = [
            dict(r) for r in self.rows
            if r["userId"] == user_id
            and (start is None or r["timestamp"] >= start)
            and (end is None or r["timestamp"] <= end)
        ]
        return sorted(out, key=lambda r: (r["timestamp"], int(r["id"])), reverse=True)

    def fetch_latest(self, user_id, type, before, after):
        self._check()
        hits = [
            r for r in self.fetch_events(user_id, after, None)
            if r["type"] == type and r["timestamp"] < before
        ]
        return hits[0] if hits else None

    def ping(self):
        self._check()


@pytest.fixture(autouse=True)
def fixed_settings(monkeypatch):
    """Pin the knobs tests rely on, whatever a local .env says."""
    monkeypatch.setattr(settings, "local_tz", "UTC")
    monkeypatch.setattr(settings, "default_user", "demo-user-id")
    monkeypatch.setattr(settings, "sleep_window_nights", 7)
    monkeypatch.setattr(settings, "sleep_bucketing", "calendar_date")
    monkeypatch.setattr(settings, "max_session_hours", 16)


@pytest.fixture
def repo():
    return FakeRepo()


@pytest.fixture
def svc(repo):
    return EventService(repo)


@pytest.fixture
def client(svc) -> Generator[TestClient, None, None]:
    """Test client with the service swapped for one over `FakeRepo`."""
    from main import app, get_service

    app.dependency_overrides[get_service] = lambda: svc
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

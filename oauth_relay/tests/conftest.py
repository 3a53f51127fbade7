"""
Pytest configuration for oauth_relay. Server-side OAuth credentials are set before the app is imported;
the handoff store is replaced per test with one driven by a fake clock.
"""
import os

os.environ["OAUTH_CLIENT_ID"] = "test-client"
os.environ["OAUTH_CLIENT_SECRET"] = "test-secret"
os.environ["OAUTH_REDIRECT_URI"] = "http://127.0.0.1:8000/auth/callback"

import pytest
from fastapi.testclient import TestClient

from oauth_relay.handoff_store import HandoffStore
from oauth_relay.main import app
from oauth_relay.oauth import get_handoff_store


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return HandoffStore(ttl_seconds=90, clock=clock)


@pytest.fixture
def make_client(store):
    """Factory for TestClients sharing the fake-clock store (e.g. with a preset state cookie)."""
    app.dependency_overrides[get_handoff_store] = lambda: store
    yield lambda **kwargs: TestClient(app, **kwargs)
    app.dependency_overrides.pop(get_handoff_store, None)


@pytest.fixture
def client(make_client):
    return make_client()

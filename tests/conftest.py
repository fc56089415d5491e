"""Shared fixtures: settings, fake Firestore, fake clock, app and client."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from fintrack.core.settings import Settings
from fintrack.main import create_app
from fintrack.services.ai_plugin.mock_provider import MockAIProvider
from fintrack.services.rate_limiter import RateLimiter
from tests.fakes import FakeClock, FakeFirestore

TODAY = date(2025, 9, 15)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        AI_PROVIDER="mock",
        OPENAI_API_KEY=None,
        GEMINI_API_KEY=None,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def clock():
    return FakeClock(start_ms=1_000_000.0)


@pytest.fixture
def limiter(clock):
    return RateLimiter(max_buckets=100, clock=clock)


@pytest.fixture
def mock_provider():
    return MockAIProvider(today=lambda: TODAY)


@pytest.fixture
def app(settings, fake_db, mock_provider, limiter):
    return create_app(settings=settings, db=fake_db, ai_provider=mock_provider, rate_limiter=limiter)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def alice():
    return {"X-User-ID": "alice"}


@pytest.fixture
def bob():
    return {"X-User-ID": "bob"}

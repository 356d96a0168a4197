import pytest
from fastapi.testclient import TestClient

from globetrotter.core.config import Settings
from globetrotter.core.rate_limit import build_limiter
from globetrotter.main import app


@pytest.fixture
def strict_limiter():
    default = app.state.limiter
    app.state.limiter = build_limiter(Settings(ENVIRONMENT="production", RATE_LIMIT_MAX=2), storage_uri="memory://")
    yield app.state.limiter
    app.state.limiter = default


def test_limit_only_active_in_production_or_strict_mode():
    assert Settings(ENVIRONMENT="production").rate_limit_active
    assert not Settings(ENVIRONMENT="development").rate_limit_active
    assert Settings(ENVIRONMENT="development", ENABLE_STRICT_RATE_LIMIT=True).rate_limit_active
    assert not Settings(ENVIRONMENT="production", DISABLE_RATE_LIMIT=True).rate_limit_active
    assert Settings(ENVIRONMENT="production").rate_limit_max == 500
    assert Settings(ENVIRONMENT="development", RATE_LIMIT_MAX=3).rate_limit_max == 3


def test_limiter_follows_settings():
    assert build_limiter(Settings(ENVIRONMENT="production"), storage_uri="memory://").enabled
    assert not build_limiter(Settings(ENVIRONMENT="development"), storage_uri="memory://").enabled
    assert not app.state.limiter.enabled


def test_middleware_returns_429_with_envelope(strict_limiter):
    client = TestClient(app)
    first = client.get("/api/health")
    client.get("/api/health")
    blocked = client.get("/api/health")

    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "Too many requests, please try again later."}


def test_disabled_limiter_never_blocks():
    client = TestClient(app)

    assert all(client.get("/api/health").status_code == 200 for _ in range(5))

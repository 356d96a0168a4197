import asyncio
import fnmatch
import os
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so the environment must be in place first
_DB_DIR = tempfile.mkdtemp(prefix="globetrotter-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("OPENROUTER_API_KEY", None)
for _key in ("IMAGEKIT_PUBLIC_KEY", "IMAGEKIT_PRIVATE_KEY", "IMAGEKIT_URL_ENDPOINT"):
    os.environ.pop(_key, None)

from fastapi.testclient import TestClient  # noqa: E402

from globetrotter.core.cache import RedisCache, get_cache  # noqa: E402
from globetrotter.core.init_db import drop_db, init_db  # noqa: E402
from globetrotter.main import app  # noqa: E402
from globetrotter.utils.image_cdn import ImageKitClient, get_image_cdn  # noqa: E402


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls the app makes."""

    def __init__(self):
        self.store = {}
        self.expiry = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan(self, cursor=0, match="*", count=None):
        return 0, [key for key in self.store if fnmatch.fnmatch(key, match)]

    async def aclose(self):
        pass


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return RedisCache(fake_redis)


@pytest.fixture
def image_cdn():
    # No credentials: uploads resolve to the placeholder and deletes are skipped
    return ImageKitClient(fallback_url="https://placehold.co/800x500")


@pytest.fixture
def client(cache, image_cdn):
    asyncio.run(drop_db())
    asyncio.run(init_db())

    async def override_cache():
        yield cache

    app.dependency_overrides[get_cache] = override_cache
    app.dependency_overrides[get_image_cdn] = lambda: image_cdn

    yield TestClient(app)

    app.dependency_overrides.clear()


def signup(client, name="Asha", email="asha@tripmail.com", password="wanderlust1"):
    resp = client.post("/api/auth/signup", json={
        "name": name,
        "email": email,
        "password": password,
        "country": "India",
        "phone": "+91 98765 43210",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client):
    data = signup(client)
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth_headers(data["token"])}


@pytest.fixture
def other_user(client):
    data = signup(client, name="Ben", email="ben@tripmail.com")
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth_headers(data["token"])}


def trip_payload(**overrides):
    payload = {
        "name": "Lisbon Escape",
        "start_date": "2030-05-01",
        "end_date": "2030-05-05",
        "description": "Tiles, trams and pastel de nata",
        "participants": 2,
        "suggestions": ["City Explorer", "Food Tour"],
        "sections": [
            {"title": "Alfama", "budget": 200, "start_date": "2030-05-01", "end_date": "2030-05-02"},
            {"title": "Belem", "budget": 150, "start_date": "2030-05-03", "end_date": "2030-05-05"},
        ],
        "planned_budget": 1200,
        "visibility": "private",
    }
    payload.update(overrides)
    return payload

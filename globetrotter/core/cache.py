import json
from typing import Any, AsyncGenerator, Iterable, Optional
import redis.asyncio as redis
from globetrotter.core.config import settings

TRIP_PREFIX = "trips"


def trip_key(trip_id: int) -> str:
    return f"{TRIP_PREFIX}:id:{trip_id}"


def user_trips_key(user_id: int) -> str:
    return f"{TRIP_PREFIX}:user:{user_id}:all"


def user_trips_pattern(user_id: int) -> str:
    return f"{TRIP_PREFIX}:user:{user_id}:*"


class RedisCache:
    """JSON values in Redis. Keys are built with the helpers above."""

    def __init__(self, redis_client: redis.Redis, default_ttl: int = settings.CACHE_TTL_SECONDS):
        self.redis = redis_client
        self.default_ttl = default_ttl

    async def get(self, key: str) -> Optional[Any]:
        data = await self.redis.get(key)
        if data:
            return json.loads(data)
        return None

    async def set(self, key: str, value: Any, expire: Optional[int] = None) -> None:
        await self.redis.set(
            key,
            json.dumps(value, default=str),
            ex=expire or self.default_ttl
        )

    async def delete_pattern(self, pattern: str) -> int:
        """SCAN-based delete so large keyspaces are never blocked by KEYS."""
        removed = 0
        cursor = 0
        while True:
            cursor, keys = await self.redis.scan(cursor=cursor, match=pattern, count=100)
            if keys:
                removed += await self.redis.delete(*keys)
            if not cursor or cursor in (b"0", "0"):
                break
        return removed

    async def invalidate(self, patterns: Iterable[str]) -> int:
        removed = 0
        for pattern in patterns:
            removed += await self.delete_pattern(pattern)
        return removed


_redis_client: Optional[redis.Redis] = None
_cache: Optional[RedisCache] = None


async def init_redis_client() -> redis.Redis:
    global _redis_client

    if _redis_client is None:
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        try:
            await client.ping()
        except redis.ConnectionError as e:
            raise RuntimeError(f"Could not connect to Redis at {settings.REDIS_URL}") from e
        _redis_client = client
    return _redis_client


async def get_cache() -> AsyncGenerator[RedisCache, None]:
    """Shared cache for route dependencies; the client connects on first use."""
    global _cache

    if _cache is None:
        _cache = RedisCache(await init_redis_client())
    yield _cache


async def close_redis() -> None:
    global _redis_client, _cache
    if _redis_client is not None:
        await _redis_client.aclose()
    _redis_client = None
    _cache = None

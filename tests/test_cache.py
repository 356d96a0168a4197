import asyncio
from unittest.mock import patch

from globetrotter.core import cache as cache_module
from globetrotter.core.cache import trip_key, user_trips_key, user_trips_pattern


def test_values_round_trip_as_json_with_default_ttl(cache, fake_redis):
    async def scenario():
        await cache.set(trip_key(4), {"id": 4, "start_date": "2030-01-01"})
        return await cache.get(trip_key(4)), await cache.get(trip_key(5))

    hit, miss = asyncio.run(scenario())

    assert hit == {"id": 4, "start_date": "2030-01-01"}
    assert miss is None
    assert fake_redis.expiry["trips:id:4"] == cache.default_ttl


def test_invalidate_removes_only_matching_keys(cache, fake_redis):
    async def scenario():
        await cache.set(user_trips_key(1), [])
        await cache.set(user_trips_key(2), [])
        await cache.set(trip_key(10), {})
        return await cache.invalidate([user_trips_pattern(1), trip_key(10)])

    assert asyncio.run(scenario()) == 2
    assert list(fake_redis.store) == ["trips:user:2:all"]


def test_shared_cache_connects_once_and_resets_on_close(fake_redis):
    async def scenario():
        first = await cache_module.get_cache().__anext__()
        second = await cache_module.get_cache().__anext__()
        await cache_module.close_redis()
        return first, second

    with patch("globetrotter.core.cache.redis.from_url", return_value=fake_redis) as from_url:
        first, second = asyncio.run(scenario())

    assert first is second
    assert first.redis is fake_redis
    from_url.assert_called_once()
    assert cache_module._cache is None

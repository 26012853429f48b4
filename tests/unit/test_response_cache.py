"""
응답 캐시 단위 테스트
"""

from unittest.mock import AsyncMock

import pytest

from app.core.response_cache import (
    MemoryResponseCache,
    RedisResponseCache,
    create_response_cache,
    generate_cache_key,
)
from config.settings import CacheConfig

BASE = "https://apis.example.test/B551011/KorService2/areaBasedList2"


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_cache_key_ignores_service_key_and_order():
    """서비스 키와 파라미터 순서는 캐시 키에 영향 없음"""
    key_a = generate_cache_key(f"{BASE}?serviceKey=aaa&areaCode=1&numOfRows=20")
    key_b = generate_cache_key(f"{BASE}?numOfRows=20&areaCode=1&serviceKey=bbb")

    assert key_a == key_b
    assert key_a.startswith("tour_api:areaBasedList2:")


def test_cache_key_differs_by_params():
    assert generate_cache_key(f"{BASE}?areaCode=1") != generate_cache_key(f"{BASE}?areaCode=2")


@pytest.mark.asyncio
async def test_memory_cache_expires():
    clock = FakeClock()
    cache = MemoryResponseCache(clock=clock)

    assert await cache.set_if_absent("k", {"v": 1}, 300)
    clock.now += 299
    assert await cache.get("k") == {"v": 1}

    clock.now += 1
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_memory_cache_write_if_absent():
    """유효한 항목은 덮어쓰지 않음"""
    clock = FakeClock()
    cache = MemoryResponseCache(clock=clock)

    assert await cache.set_if_absent("k", "first", 300)
    assert not await cache.set_if_absent("k", "second", 300)
    assert await cache.get("k") == "first"

    clock.now += 301
    assert await cache.set_if_absent("k", "third", 300)
    assert await cache.get("k") == "third"


@pytest.mark.asyncio
async def test_memory_cache_ignores_zero_ttl():
    cache = MemoryResponseCache()

    assert not await cache.set_if_absent("k", "v", 0)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_redis_cache_delegates_to_client():
    redis_client = AsyncMock()
    redis_client.get_cache.return_value = {"v": 1}
    redis_client.set_if_absent.return_value = True
    cache = RedisResponseCache(redis_client)

    assert await cache.get("k") == {"v": 1}
    assert await cache.set_if_absent("k", {"v": 1}, 3600)
    redis_client.set_if_absent.assert_awaited_once_with("k", {"v": 1}, 3600)

    await cache.close()
    redis_client.close.assert_awaited_once()


def test_create_response_cache_backends():
    assert create_response_cache(CacheConfig(backend="none")) is None
    assert isinstance(create_response_cache(CacheConfig(backend="memory")), MemoryResponseCache)
    assert isinstance(create_response_cache(CacheConfig(backend="redis")), RedisResponseCache)
    assert isinstance(create_response_cache(CacheConfig(backend="unknown")), MemoryResponseCache)


@pytest.mark.asyncio
async def test_redis_client_set_nx_and_get():
    """SET NX EX 로 저장하고 JSON 으로 조회"""
    from utils.redis_client import RedisClient

    client = RedisClient(CacheConfig(backend="redis"))
    client._client = AsyncMock()
    client._client.set.return_value = True
    client._client.get.return_value = '{"name": "서울"}'

    assert await client.set_if_absent("k", {"name": "서울"}, 3600)
    client._client.set.assert_awaited_once_with(
        "k", '{"name": "서울"}', ex=3600, nx=True
    )
    assert await client.get_cache("k") == {"name": "서울"}


@pytest.mark.asyncio
async def test_redis_client_connection_failure_disables_cache():
    """연결 실패 시 캐시 없이 동작"""
    import redis

    from utils.redis_client import RedisClient

    client = RedisClient(CacheConfig(backend="redis"))
    with pytest.MonkeyPatch.context() as mp:
        failing = AsyncMock()
        failing.ping.side_effect = redis.ConnectionError("refused")
        mp.setattr("utils.redis_client.aioredis.Redis", lambda **kwargs: failing)

        assert await client.get_cache("k") is None
        assert not await client.set_if_absent("k", {"v": 1}, 60)

    assert client._connection_failed is True


@pytest.mark.asyncio
async def test_memory_cache_returns_copies():
    """저장 후 원본을 수정하거나 조회 결과를 수정해도 캐시 값은 불변"""
    cache = MemoryResponseCache()
    value = {"items": [{"code": "1"}]}

    await cache.set_if_absent("k", value, 300)
    value["items"].append({"code": "2"})
    fetched = await cache.get("k")
    fetched["items"].clear()

    assert await cache.get("k") == {"items": [{"code": "1"}]}

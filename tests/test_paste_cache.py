"""
Pastebin Backend - Paste Cache Unit Tests
==========================================

What:  The three PasteCache implementations.
How:   RedisPasteCache runs against an AsyncMock client (no Redis server
       needed); failures are simulated with redis exceptions.

What we test:
    ✅ Key layout, JSON values and TTL passed to Redis
    ✅ Every Redis failure is absorbed (get → miss, set/delete → no-op)
    ✅ Undecodable entries are treated as misses
    ✅ In-memory expiry and size bound
    ✅ Redis client built with connect and command timeouts
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from pastebin.schemas.paste import PasteResponse
from pastebin.services.paste_cache import (
    InMemoryPasteCache,
    NullPasteCache,
    PasteCache,
    RedisPasteCache,
    create_cache,
)


@pytest.fixture
def paste():
    return PasteResponse(
        id="AbCd2345",
        timestamp=datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
        content="print('hi')",
        email="a@x.com",
        title="Hello",
        language="python",
    )


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.ping = AsyncMock(return_value=True)
    return client


class TestRedisPasteCache:

    def setup_method(self):
        self.key_prefix = "paste:"

    @pytest.mark.asyncio
    async def test_set_writes_json_with_ttl(self, redis_client, paste):
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        await cache.set(paste)

        redis_client.set.assert_awaited_once()
        args, kwargs = redis_client.set.call_args
        assert args[0] == "paste:AbCd2345"
        assert PasteResponse.model_validate_json(args[1]) == paste
        assert kwargs["ex"] == 120

    @pytest.mark.asyncio
    async def test_get_hit_decodes(self, redis_client, paste):
        redis_client.get.return_value = paste.model_dump_json()
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        result = await cache.get("AbCd2345")

        assert result == paste
        redis_client.get.assert_awaited_once_with("paste:AbCd2345")

    @pytest.mark.asyncio
    async def test_get_miss(self, redis_client):
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)
        assert await cache.get("AbCd2345") is None

    @pytest.mark.asyncio
    async def test_get_failure_is_a_miss(self, redis_client):
        redis_client.get.side_effect = RedisConnectionError("connection refused")
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        assert await cache.get("AbCd2345") is None

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_a_miss(self, redis_client):
        redis_client.get.return_value = "{not json"
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        assert await cache.get("AbCd2345") is None

    @pytest.mark.asyncio
    async def test_set_failure_is_swallowed(self, redis_client, paste):
        redis_client.set.side_effect = RedisTimeoutError("timed out")
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        await cache.set(paste)  # Should not raise

    @pytest.mark.asyncio
    async def test_delete(self, redis_client):
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        await cache.delete("AbCd2345")

        redis_client.delete.assert_awaited_once_with("paste:AbCd2345")

    @pytest.mark.asyncio
    async def test_delete_failure_is_swallowed(self, redis_client):
        redis_client.delete.side_effect = RedisConnectionError("connection reset")
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)

        await cache.delete("AbCd2345")  # Should not raise

    @pytest.mark.asyncio
    async def test_ping(self, redis_client):
        cache = RedisPasteCache(redis_client, ttl=120, key_prefix=self.key_prefix)
        assert await cache.ping() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await cache.ping() is False

    def test_satisfies_protocol(self, redis_client):
        assert isinstance(RedisPasteCache(redis_client), PasteCache)

    def test_from_url_bounds_connect_and_commands(self):
        with patch("pastebin.services.paste_cache.redis.from_url") as from_url:
            RedisPasteCache.from_url("redis://cache:6379/0", timeout=0.25)

        from_url.assert_called_once()
        args, kwargs = from_url.call_args
        assert args[0] == "redis://cache:6379/0"
        assert kwargs["socket_timeout"] == 0.25
        assert kwargs["socket_connect_timeout"] == 0.25
        assert kwargs["decode_responses"] is True


class TestInMemoryPasteCache:

    @pytest.mark.asyncio
    async def test_set_get_delete(self, paste):
        cache = InMemoryPasteCache(ttl=60)

        assert await cache.get(paste.id) is None
        await cache.set(paste)
        assert await cache.get(paste.id) == paste

        await cache.delete(paste.id)
        assert await cache.get(paste.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self):
        cache = InMemoryPasteCache(ttl=60)
        await cache.delete("AbCd2345")
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_entries_expire(self, paste):
        now = [1000.0]
        cache = InMemoryPasteCache(ttl=60, clock=lambda: now[0])
        await cache.set(paste)

        now[0] += 59
        assert await cache.get(paste.id) == paste

        now[0] += 1
        assert await cache.get(paste.id) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_returns_copies(self, paste):
        cache = InMemoryPasteCache(ttl=60)
        await cache.set(paste)

        first = await cache.get(paste.id)
        first.title = "changed"

        assert (await cache.get(paste.id)).title == "Hello"

    @pytest.mark.asyncio
    async def test_full_cache_evicts_oldest_write(self, paste):
        cache = InMemoryPasteCache(ttl=60, max_entries=2)

        for paste_id in ("AAAAAAAA", "BBBBBBBB", "CCCCCCCC"):
            await cache.set(paste.model_copy(update={"id": paste_id}))

        assert len(cache) == 2
        assert await cache.get("AAAAAAAA") is None
        assert await cache.get("CCCCCCCC") is not None

    @pytest.mark.asyncio
    async def test_full_cache_drops_expired_entries_first(self, paste):
        now = [1000.0]
        cache = InMemoryPasteCache(ttl=60, clock=lambda: now[0], max_entries=3)
        await cache.set(paste.model_copy(update={"id": "AAAAAAAA"}))
        await cache.set(paste.model_copy(update={"id": "BBBBBBBB"}))
        now[0] += 50
        await cache.set(paste.model_copy(update={"id": "CCCCCCCC"}))

        now[0] += 11  # A and B expired, C still live
        await cache.set(paste.model_copy(update={"id": "DDDDDDDD"}))

        assert len(cache) == 2
        assert await cache.get("CCCCCCCC") is not None
        assert await cache.get("DDDDDDDD") is not None

    @pytest.mark.asyncio
    async def test_rewrite_does_not_evict(self, paste):
        cache = InMemoryPasteCache(ttl=60, max_entries=2)
        await cache.set(paste.model_copy(update={"id": "AAAAAAAA"}))
        await cache.set(paste.model_copy(update={"id": "BBBBBBBB"}))

        await cache.set(paste.model_copy(update={"id": "AAAAAAAA", "title": "again"}))

        assert len(cache) == 2
        assert (await cache.get("AAAAAAAA")).title == "again"
        assert await cache.get("BBBBBBBB") is not None


class TestNullPasteCache:

    @pytest.mark.asyncio
    async def test_always_misses(self, paste):
        cache = NullPasteCache()
        await cache.set(paste)
        assert await cache.get(paste.id) is None
        await cache.delete(paste.id)
        assert await cache.ping() is True


class TestCreateCache:

    def test_memory(self):
        assert isinstance(create_cache("memory"), InMemoryPasteCache)

    def test_none(self):
        assert isinstance(create_cache("none"), NullPasteCache)

    def test_redis(self):
        # Client connects lazily; nothing is contacted here
        assert isinstance(create_cache("redis"), RedisPasteCache)

"""
Pastebin Backend - Paste Cache
===============================

What:  Best-effort read accelerator for PasteService.get. Never the system
       of record.
How:   PasteCache is a Protocol; any object with these coroutine methods
       satisfies it (structural typing, no inheritance needed).

Implementations:
    - RedisPasteCache:    redis.asyncio, JSON values, per-entry TTL (production)
    - InMemoryPasteCache: bounded per-process dict with TTL (development, tests)
    - NullPasteCache:     caching disabled; every get is a miss

Failure contract:
    get() returns None on a miss AND on any cache failure.
    set() and delete() never raise. Failures are logged at WARNING.
"""

import logging
import time
from typing import Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from pastebin.config import settings
from pastebin.schemas.paste import PasteResponse

logger = logging.getLogger(__name__)


@runtime_checkable
class PasteCache(Protocol):
    """Protocol for paste cache backends."""

    async def get(self, paste_id: str) -> Optional[PasteResponse]:
        """Cached paste, or None on a miss."""
        ...

    async def set(self, paste: PasteResponse) -> None:
        """Cache `paste` under its id."""
        ...

    async def delete(self, paste_id: str) -> None:
        """Drop any entry for `paste_id`."""
        ...

    async def ping(self) -> bool:
        """True if the backend is reachable."""
        ...


class RedisPasteCache:
    """
    Redis-backed cache.

    Entries are `SET {prefix}{id} <PasteResponse JSON> EX ttl`, so a stale
    entry (e.g. after a failed delete) disappears within the TTL.
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl: Optional[int] = None,
        key_prefix: Optional[str] = None,
    ) -> None:
        self._client = client
        self._ttl = ttl or settings.cache_ttl_seconds
        self._prefix = key_prefix if key_prefix is not None else settings.cache_key_prefix

    @classmethod
    def from_url(
        cls,
        url: Optional[str] = None,
        ttl: Optional[int] = None,
        key_prefix: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "RedisPasteCache":
        """
        Build a cache with its own client. Connections open lazily.

        `timeout` bounds both connecting and each command, so an unreachable
        or hung Redis surfaces as redis.exceptions.TimeoutError (a RedisError)
        instead of blocking the caller.
        """
        timeout = timeout or settings.cache_timeout_seconds
        client = redis.from_url(
            url or settings.redis_url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client=client, ttl=ttl, key_prefix=key_prefix)

    def _key(self, paste_id: str) -> str:
        return f"{self._prefix}{paste_id}"

    async def get(self, paste_id: str) -> Optional[PasteResponse]:
        try:
            raw = await self._client.get(self._key(paste_id))
        except RedisError as e:
            logger.warning("Cache get failed for %s: %s", paste_id, str(e))
            return None
        if raw is None:
            return None
        try:
            return PasteResponse.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("Discarding undecodable cache entry for %s", paste_id)
            return None

    async def set(self, paste: PasteResponse) -> None:
        try:
            await self._client.set(self._key(paste.id), paste.model_dump_json(), ex=self._ttl)
        except RedisError as e:
            logger.warning("Cache set failed for %s: %s", paste.id, str(e))

    async def delete(self, paste_id: str) -> None:
        try:
            await self._client.delete(self._key(paste_id))
        except RedisError as e:
            logger.warning("Cache delete failed for %s: %s", paste_id, str(e))

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("Health check: cache unreachable: %s", str(e))
            return False

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryPasteCache:
    """
    Per-process cache with expiry. Only for development and tests: with more
    than one worker, a delete on one worker leaves the others' entries stale
    until they expire.

    Holds at most `max_entries` pastes. When full, set() first drops expired
    entries, then the least recently written ones.
    """

    def __init__(
        self,
        ttl: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        max_entries: Optional[int] = None,
    ) -> None:
        self._ttl = ttl or settings.cache_ttl_seconds
        self._clock = clock
        self._max_entries = max_entries or settings.cache_max_entries
        # Insertion order == write order; the first key is the oldest write
        self._entries: Dict[str, Tuple[float, str]] = {}

    async def get(self, paste_id: str) -> Optional[PasteResponse]:
        entry = self._entries.get(paste_id)
        if entry is None:
            return None
        expires_at, raw = entry
        if self._clock() >= expires_at:
            del self._entries[paste_id]
            return None
        return PasteResponse.model_validate_json(raw)

    async def set(self, paste: PasteResponse) -> None:
        now = self._clock()
        self._entries.pop(paste.id, None)
        if len(self._entries) >= self._max_entries:
            self._evict(now)
        # Stored serialized so callers never share a mutable object with the cache
        self._entries[paste.id] = (now + self._ttl, paste.model_dump_json())

    def _evict(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        while len(self._entries) >= self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))

    async def delete(self, paste_id: str) -> None:
        self._entries.pop(paste_id, None)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)


class NullPasteCache:
    """Caching disabled."""

    async def get(self, paste_id: str) -> Optional[PasteResponse]:
        return None

    async def set(self, paste: PasteResponse) -> None:
        return None

    async def delete(self, paste_id: str) -> None:
        return None

    async def ping(self) -> bool:
        return True


def create_cache(backend: Optional[str] = None) -> PasteCache:
    """Build the cache named by `backend` (defaults to settings.cache_backend)."""
    backend = backend or settings.cache_backend
    if backend == "redis":
        return RedisPasteCache.from_url()
    if backend == "memory":
        return InMemoryPasteCache()
    return NullPasteCache()

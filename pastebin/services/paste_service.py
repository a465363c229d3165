"""
Pastebin Backend - Paste Service (Business Logic Orchestrator)
===============================================================

What:  Implements create / get / delete / list_recent over PasteStore
       (truth) and PasteCache (best-effort).
Who:   Built once at startup, stored on app.state, injected into routes.

Orchestration:
    get (read-through):
        cache.get ── hit ──────────────────────────────▶ return
            └─ miss ─▶ store.get ─▶ cache.set ─────────▶ return
                          └─ NotFoundError propagates (nothing cached)

    create:
        validate ─▶ generate id ─▶ store.create ─▶ cache.set ─▶ id
                         ▲               │
                         └── collision ──┘ (up to max_id_attempts)

    delete:
        store.get ─▶ owner check ─▶ store.delete ─▶ cache.delete
        (404 before 403: existence of a paste is not hidden)

Store work runs under `operation_timeout`; exceeding it raises
RequestTimeoutError. Cache calls sit outside that deadline, each bounded by
`cache_timeout`: a slow cache reads as a miss or a skipped write, and a
committed create or delete is never reported as a failure because of the
cache. There are no retries apart from id regeneration.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, TypeVar

from pastebin.config import settings
from pastebin.exceptions import (
    ForbiddenError,
    IdCollisionError,
    RequestTimeoutError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationError,
)
from pastebin.models.paste import MAX_LANGUAGE_LENGTH, MAX_TITLE_LENGTH
from pastebin.schemas.paste import PasteCreate, PasteResponse, PasteSummary
from pastebin.services.identifiers import generate_id
from pastebin.services.paste_cache import PasteCache
from pastebin.services.paste_store import PasteStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasteService:
    """
    Paste operations for the HTTP surface.

    The acting identity is always an explicit argument; the service never
    looks at request state.
    """

    def __init__(
        self,
        store: PasteStore,
        cache: PasteCache,
        id_length: Optional[int] = None,
        max_id_attempts: Optional[int] = None,
        max_content_length: Optional[int] = None,
        operation_timeout: Optional[float] = None,
        cache_timeout: Optional[float] = None,
        id_generator: Callable[[int], str] = generate_id,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.cache = cache
        self._id_length = id_length or settings.paste_id_length
        self._max_id_attempts = max_id_attempts or settings.paste_id_max_attempts
        self._max_content_length = max_content_length or settings.max_content_length
        self._timeout = operation_timeout or settings.operation_timeout_seconds
        self._cache_timeout = cache_timeout or settings.cache_timeout_seconds
        self._generate_id = id_generator
        self._clock = clock

    @staticmethod
    def require_identity(acting_identity: Optional[str]) -> str:
        """
        Return the identity, or raise UnauthenticatedError when it is missing
        or blank.
        """
        if not acting_identity or not acting_identity.strip():
            raise UnauthenticatedError()
        return acting_identity.strip()

    async def _with_deadline(self, operation: str, coro: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error("%s exceeded its %.1fs deadline", operation, self._timeout)
            raise RequestTimeoutError(operation=operation, timeout=self._timeout)

    # ── cache (best-effort, bounded) ──────────────────────────────────────

    async def _cache_get(self, paste_id: str) -> Optional[PasteResponse]:
        try:
            return await asyncio.wait_for(self.cache.get(paste_id), timeout=self._cache_timeout)
        except asyncio.TimeoutError:
            logger.warning("Cache get for %s timed out; reading the store", paste_id)
            return None

    async def _cache_set(self, paste: PasteResponse) -> None:
        try:
            await asyncio.wait_for(self.cache.set(paste), timeout=self._cache_timeout)
        except asyncio.TimeoutError:
            logger.warning("Cache set for %s timed out; skipped", paste.id)

    async def _cache_delete(self, paste_id: str) -> None:
        try:
            await asyncio.wait_for(self.cache.delete(paste_id), timeout=self._cache_timeout)
        except asyncio.TimeoutError:
            logger.warning("Cache delete for %s timed out; entry expires with its TTL", paste_id)

    # ── create ────────────────────────────────────────────────────────────

    def _validate(self, data: PasteCreate) -> None:
        if not data.content or not data.content.strip():
            raise ValidationError(message="Paste contents are required", field="contents")
        if len(data.content) > self._max_content_length:
            raise ValidationError(
                message=(
                    f"Paste contents exceed the maximum of "
                    f"{self._max_content_length} characters"
                ),
                field="contents",
                context={"max_length": self._max_content_length},
            )
        for field, value, limit in (
            ("title", data.title, MAX_TITLE_LENGTH),
            ("language", data.language, MAX_LANGUAGE_LENGTH),
        ):
            if value and len(value) > limit:
                raise ValidationError(
                    message=f"Paste {field} exceeds the maximum of {limit} characters",
                    field=field,
                    context={"max_length": limit},
                )

    async def create(self, data: PasteCreate, acting_identity: Optional[str]) -> str:
        """
        Store a new paste owned by `acting_identity` and return its id.

        Raises:
            UnauthenticatedError: no identity
            ValidationError: missing/blank contents, or any field over its maximum
            StoreUnavailableError: the store failed, or every generated id collided
            RequestTimeoutError: the store missed the deadline
        """
        email = self.require_identity(acting_identity)
        self._validate(data)
        paste = await self._with_deadline("create", self._insert(data, email))
        await self._cache_set(paste)
        return paste.id

    async def _insert(self, data: PasteCreate, email: str) -> PasteResponse:
        timestamp = self._clock()

        for attempt in range(1, self._max_id_attempts + 1):
            paste = PasteResponse(
                id=self._generate_id(self._id_length),
                timestamp=timestamp,
                content=data.content,
                email=email,
                title=data.title or "",
                language=data.language or "",
            )
            try:
                await self.store.create(paste)
            except IdCollisionError:
                logger.warning(
                    "Generated paste id %s already exists (attempt %d/%d)",
                    paste.id,
                    attempt,
                    self._max_id_attempts,
                )
                continue

            logger.info("Paste %s created by %s", paste.id, email)
            return paste

        raise StoreUnavailableError(
            message="Could not allocate a paste id. Please try again.",
            context={"attempts": self._max_id_attempts, "id_length": self._id_length},
        )

    # ── get ───────────────────────────────────────────────────────────────

    async def get(self, paste_id: str) -> PasteResponse:
        """
        Read-through lookup.

        Raises:
            NotFoundError: no paste with this id
            StoreUnavailableError: cache miss and the store failed
            RequestTimeoutError: cache miss and the store missed the deadline
        """
        cached = await self._cache_get(paste_id)
        if cached is not None:
            logger.info("Found %s in cache", paste_id)
            return cached

        paste = await self._with_deadline("get", self.store.get(paste_id))
        await self._cache_set(paste)
        logger.info("Adding %s to cache", paste_id)
        return paste

    # ── delete ────────────────────────────────────────────────────────────

    async def delete(self, paste_id: str, acting_identity: Optional[str]) -> None:
        """
        Delete a paste on behalf of its owner.

        Raises:
            UnauthenticatedError: no identity
            NotFoundError: no paste with this id (checked before ownership)
            ForbiddenError: `acting_identity` does not own the paste
            StoreUnavailableError: the store failed
            RequestTimeoutError: the store missed the deadline
        """
        email = self.require_identity(acting_identity)
        await self._with_deadline("delete", self._delete(paste_id, email))
        await self._cache_delete(paste_id)
        logger.info("Paste %s deleted by %s", paste_id, email)

    async def _delete(self, paste_id: str, email: str) -> None:
        # Ownership is always judged against the store, never a cache entry
        paste = await self.store.get(paste_id)

        if paste.email != email:
            logger.info("User %s attempting to delete paste %s they do not own", email, paste_id)
            raise ForbiddenError(context={"paste_id": paste_id})

        await self.store.delete(paste_id)

    # ── list_recent ───────────────────────────────────────────────────────

    async def list_recent(self) -> List[PasteSummary]:
        """All pastes as (id, title, email), newest first. Bypasses the cache."""
        return await self._with_deadline("list_recent", self.store.list_recent())

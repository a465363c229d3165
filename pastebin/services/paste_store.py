"""
Pastebin Backend - Paste Store
===============================

What:  Durable persistence of pastes, keyed by id. The source of truth.
How:   Async SQLAlchemy; one short-lived session per operation, taken from
       the session factory built at startup.
Who:   Called only by PasteService.

Error translation:
    Missing rows            → NotFoundError
    Insert on an existing id → IdCollisionError (create only)
    Any driver/pool failure  → StoreUnavailableError (details logged here,
                               generic message for the client)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pastebin.exceptions import IdCollisionError, NotFoundError, StoreUnavailableError
from pastebin.models.paste import Paste
from pastebin.schemas.paste import PasteResponse, PasteSummary

logger = logging.getLogger(__name__)


class PasteStore:
    """
    CRUD over the `pastes` table.

    Responsibilities:
        - create(): conditional insert (refuses an id that already exists)
        - put(): insert or overwrite
        - get() / delete(): single-row access by id
        - list_recent(): archive projection, newest first, unbounded
        - ping(): connectivity probe for /health
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(
        self, operation: str, paste_id: Optional[str] = None
    ) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Store %s failed (paste_id=%s): %s", operation, paste_id, str(e)
            )
            raise StoreUnavailableError(
                context={
                    "operation": operation,
                    "paste_id": paste_id,
                    "original_error": type(e).__name__,
                },
            ) from e

    async def create(self, paste: PasteResponse) -> None:
        """
        Insert `paste` only if no row exists at `paste.id`.

        Raises:
            IdCollisionError: the id is already taken
            StoreUnavailableError: the insert failed for any other reason
        """
        async with self._session("create", paste.id) as session:
            session.add(Paste(**paste.model_dump()))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                # Other constraint failures (NOT NULL, ...) are store errors
                if await session.get(Paste, paste.id) is None:
                    raise
                raise IdCollisionError(paste.id) from e

    async def put(self, paste: PasteResponse) -> None:
        """Insert `paste`, overwriting any row already stored at `paste.id`."""
        async with self._session("put", paste.id) as session:
            await session.merge(Paste(**paste.model_dump()))
            await session.commit()

    async def get(self, paste_id: str) -> PasteResponse:
        """
        Fetch one paste.

        Raises:
            NotFoundError: no row at `paste_id`
        """
        async with self._session("get", paste_id) as session:
            row = await session.get(Paste, paste_id)
            if row is None:
                raise NotFoundError(resource="paste", resource_id=paste_id)
            return PasteResponse.model_validate(row)

    async def delete(self, paste_id: str) -> None:
        """
        Remove one paste.

        Raises:
            NotFoundError: no row at `paste_id`
        """
        async with self._session("delete", paste_id) as session:
            result = await session.execute(delete(Paste).where(Paste.id == paste_id))
            await session.commit()
            if result.rowcount == 0:
                raise NotFoundError(resource="paste", resource_id=paste_id)

    async def list_recent(self) -> List[PasteSummary]:
        """
        All pastes as (id, title, email), newest first.

        Query plan:
            SELECT id, title, email FROM pastes ORDER BY timestamp DESC
            → idx_pastes_timestamp; no LIMIT, the whole table is returned
        """
        async with self._session("list_recent") as session:
            result = await session.execute(
                select(Paste.id, Paste.title, Paste.email).order_by(Paste.timestamp.desc())
            )
            return [
                PasteSummary(id=row.id, title=row.title, email=row.email)
                for row in result.all()
            ]

    async def ping(self) -> bool:
        """True when a trivial query succeeds."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Health check: store unreachable: %s", str(e))
            return False

"""
Pastebin Backend - Database Engine Management
==============================================

What:  Async SQLAlchemy engine factory, session factory and declarative base.
How:   The app factory calls create_engine() once at startup and hands the
       session factory to PasteStore; each store operation opens its own
       short-lived session from it.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests, local hacking) skip the pool arguments: SQLAlchemy
    picks its own pool class for them.
"""

from typing import Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pastebin.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object with Alembic for schema management.
    """
    pass


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Build the async engine for the paste store.

    Args:
        database_url: Overrides settings.database_url when given.

    Returns:
        A configured AsyncEngine. The caller owns it and must dispose it.
    """
    url = make_url(database_url or settings.database_url)
    options = {"echo": settings.log_level == "DEBUG"}

    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps ORM attributes readable after commit, once
    the session that loaded them is gone.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table known to Base.metadata (tests and local SQLite)."""
    # Registers the models with Base.metadata
    from pastebin.models import paste  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()

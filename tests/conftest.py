"""
Pastebin Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Real SQLite database (aiosqlite) in a per-test temp directory, the
       in-memory cache, and an HTTPX AsyncClient over ASGITransport.

Fixture Hierarchy (all function-scoped):
    engine ─▶ store ─┐
              cache ─┴─▶ service ─▶ test_client
    clock: deterministic, strictly increasing paste timestamps
"""

import os
from datetime import datetime, timedelta, timezone

# Override settings for testing BEFORE any pastebin imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["IDENTITY_HEADER"] = "X-Goog-Authenticated-User-Email"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from pastebin.database import create_engine, create_session_factory, create_tables
from pastebin.services.paste_cache import InMemoryPasteCache
from pastebin.services.paste_service import PasteService
from pastebin.services.paste_store import PasteStore

IDENTITY_HEADER = "X-Goog-Authenticated-User-Email"


def as_user(email: str) -> dict:
    """Request headers the authenticating proxy would add for `email`."""
    return {IDENTITY_HEADER: f"accounts.google.com:{email}"}


class TickingClock:
    """Returns a time one second later on every call."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    Fresh SQLite database file with the pastes table created.

    Disposed after the test so aiosqlite worker threads don't outlive it.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'pastes.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine):
    return PasteStore(create_session_factory(engine))


@pytest.fixture
def cache():
    return InMemoryPasteCache(ttl=300)


@pytest.fixture
def service(store, cache, clock):
    return PasteService(store=store, cache=cache, clock=clock)


@pytest_asyncio.fixture
async def test_client(service):
    """
    HTTPX AsyncClient talking to an app built around `service`.

    ASGITransport does not run the lifespan; the service is injected
    through create_app() instead.
    """
    from pastebin.main import create_app

    app = create_app(paste_service=service)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

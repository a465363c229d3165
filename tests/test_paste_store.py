"""
Pastebin Backend - Paste Store Tests
=====================================

What:  PasteStore against a real SQLite database (aiosqlite).

What we test:
    ✅ create/get round trip
    ✅ create refuses an existing id (IdCollisionError), original row kept
    ✅ other constraint failures are store errors, not collisions
    ✅ put overwrites
    ✅ get/delete of a missing id raise NotFoundError
    ✅ list_recent projection and newest-first order
    ✅ driver failures surface as StoreUnavailableError
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from pastebin.database import create_engine, create_session_factory
from pastebin.exceptions import IdCollisionError, NotFoundError, StoreUnavailableError
from pastebin.schemas.paste import PasteResponse, PasteSummary
from pastebin.services.paste_store import PasteStore

BASE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_paste(paste_id="AbCd2345", minutes=0, **overrides) -> PasteResponse:
    fields = {
        "id": paste_id,
        "timestamp": BASE_TIME + timedelta(minutes=minutes),
        "content": "print('hi')",
        "email": "a@x.com",
        "title": "Hello",
        "language": "python",
    }
    fields.update(overrides)
    return PasteResponse(**fields)


@pytest_asyncio.fixture
async def broken_store(tmp_path):
    """A store whose database file can never be opened."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'pastes.db'}")
    yield PasteStore(create_session_factory(engine))
    await engine.dispose()


class TestCreateAndGet:

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        paste = make_paste()
        await store.create(paste)

        fetched = await store.get(paste.id)

        assert fetched.id == paste.id
        assert fetched.content == paste.content
        assert fetched.email == paste.email
        assert fetched.title == paste.title
        assert fetched.language == paste.language

    @pytest.mark.asyncio
    async def test_create_existing_id_raises_collision(self, store):
        await store.create(make_paste(content="first"))

        with pytest.raises(IdCollisionError) as exc_info:
            await store.create(make_paste(content="second", email="b@x.com"))

        assert exc_info.value.paste_id == "AbCd2345"
        fetched = await store.get("AbCd2345")
        assert fetched.content == "first"
        assert fetched.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_other_constraint_failure_is_not_a_collision(self, store):
        # NOT NULL violation on a fresh id: nothing to regenerate around
        broken = PasteResponse.model_construct(
            id="AbCd2345",
            timestamp=BASE_TIME,
            content=None,
            email="a@x.com",
            title="",
            language="",
        )

        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.create(broken)

        assert exc_info.value.context["original_error"] == "IntegrityError"
        with pytest.raises(NotFoundError):
            await store.get("AbCd2345")

    @pytest.mark.asyncio
    async def test_put_overwrites(self, store):
        await store.put(make_paste(content="first"))
        await store.put(make_paste(content="second"))

        fetched = await store.get("AbCd2345")
        assert fetched.content == "second"

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.get("nope2345")
        assert exc_info.value.resource_id == "nope2345"


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, store):
        await store.create(make_paste())

        await store.delete("AbCd2345")

        with pytest.raises(NotFoundError):
            await store.get("AbCd2345")

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, store):
        with pytest.raises(NotFoundError):
            await store.delete("nope2345")


class TestListRecent:

    @pytest.mark.asyncio
    async def test_empty(self, store):
        assert await store.list_recent() == []

    @pytest.mark.asyncio
    async def test_newest_first_projection(self, store):
        # Inserted out of order on purpose: ordering comes from timestamp
        await store.create(make_paste("BBBBBBBB", minutes=1, title="B"))
        await store.create(make_paste("AAAAAAAA", minutes=0, title="A"))
        await store.create(make_paste("CCCCCCCC", minutes=2, title="C", email="c@x.com"))

        result = await store.list_recent()

        assert [p.id for p in result] == ["CCCCCCCC", "BBBBBBBB", "AAAAAAAA"]
        assert result[0] == PasteSummary(id="CCCCCCCC", title="C", email="c@x.com")
        assert all(isinstance(p, PasteSummary) for p in result)


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_get_wraps_driver_error(self, broken_store):
        with pytest.raises(StoreUnavailableError) as exc_info:
            await broken_store.get("AbCd2345")
        assert exc_info.value.context["operation"] == "get"

    @pytest.mark.asyncio
    async def test_create_wraps_driver_error(self, broken_store):
        with pytest.raises(StoreUnavailableError):
            await broken_store.create(make_paste())

    @pytest.mark.asyncio
    async def test_list_recent_wraps_driver_error(self, broken_store):
        with pytest.raises(StoreUnavailableError):
            await broken_store.list_recent()

    @pytest.mark.asyncio
    async def test_ping(self, store, broken_store):
        assert await store.ping() is True
        assert await broken_store.ping() is False

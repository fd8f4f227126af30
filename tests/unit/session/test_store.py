"""Tests for MongoSessionStore query construction."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any

import pytest

from hairlens.core.modules.session.models import Session
from hairlens.core.modules.session.store import MongoSessionStore

pytestmark = pytest.mark.asyncio

CREATED = datetime(2025, 1, 1, tzinfo=UTC)


class RecordingCollection:
    """Records calls made against a MongoDB collection."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.find_result: dict[str, Any] | None = None
        self.deleted_count = 0

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))

    async def create_index(self, *args: Any, **kwargs: Any) -> str:
        self._record("create_index", *args, **kwargs)
        return "index"

    async def insert_one(self, document: dict[str, Any]) -> None:
        self._record("insert_one", document)

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._record("find_one", query)
        return self.find_result

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> None:
        self._record("update_one", query, update)

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        self._record("delete_one", query)
        return SimpleNamespace(deleted_count=self.deleted_count)

    async def delete_many(self, query: dict[str, Any]) -> SimpleNamespace:
        self._record("delete_many", query)
        return SimpleNamespace(deleted_count=self.deleted_count)


class RecordingDatabase:
    def __init__(self) -> None:
        self.collection = RecordingCollection()

    def get_collection(self, name: str) -> RecordingCollection:
        assert name == "sessions"
        return self.collection


@pytest.fixture
def database():
    return RecordingDatabase()


@pytest.fixture
def mongo_store(database):
    return MongoSessionStore(database)


@pytest.fixture
def session():
    return Session(
        owner_id="u1",
        token="tok",
        created_at=CREATED,
        expires_at=CREATED + timedelta(hours=1),
        last_accessed_at=CREATED,
    )


class TestMongoSessionStore:
    async def test_indexes(self, mongo_store, database):
        """Test that token is unique and no TTL index is created."""
        await mongo_store.ensure_indexes()

        calls = database.collection.calls
        assert calls[0] == ("create_index", ([("token", 1)],), {"unique": True})
        assert calls[1] == ("create_index", ([("expires_at", 1)],), {})

    async def test_insert_uses_mongo_id(self, mongo_store, database, session):
        await mongo_store.insert(session)

        _, (document,), _ = database.collection.calls[0]
        assert document["_id"] == session.id
        assert "id" not in document
        assert document["token"] == "tok"

    async def test_find_with_liveness_filter(self, mongo_store, database, session):
        """Test that the liveness filter is part of the query itself."""
        database.collection.find_result = session.to_mongo()
        moment = CREATED + timedelta(minutes=5)

        found = await mongo_store.find_by_token("tok", live_after=moment)

        assert found == session
        assert database.collection.calls[0] == ("find_one", ({"token": "tok", "expires_at": {"$gt": moment}},), {})

    async def test_find_without_filter(self, mongo_store, database):
        assert await mongo_store.find_by_token("tok") is None
        assert database.collection.calls[0] == ("find_one", ({"token": "tok"},), {})

    async def test_update_last_accessed(self, mongo_store, database, session):
        moment = CREATED + timedelta(minutes=1)

        await mongo_store.update_last_accessed(session.id, moment)

        assert database.collection.calls[0] == (
            "update_one",
            ({"_id": session.id}, {"$set": {"last_accessed_at": moment}}),
            {},
        )

    async def test_delete_by_token(self, mongo_store, database):
        database.collection.deleted_count = 1

        assert await mongo_store.delete_by_token("tok") is True
        assert database.collection.calls[0] == ("delete_one", ({"token": "tok"},), {})

    async def test_delete_expired_before(self, mongo_store, database):
        database.collection.deleted_count = 3

        assert await mongo_store.delete_expired_before(CREATED) == 3
        assert database.collection.calls[0] == ("delete_many", ({"expires_at": {"$lt": CREATED}},), {})

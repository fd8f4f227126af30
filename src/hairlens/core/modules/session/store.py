"""Durable session storage."""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from hairlens.core.modules.session.models import Session


class SessionStore(Protocol):
    """Source of truth for sessions. Every call may raise on infrastructure failure."""

    async def ensure_indexes(self) -> None: ...

    async def insert(self, session: Session) -> None: ...

    async def find_by_token(self, token: str, *, live_after: datetime | None = None) -> Session | None:
        """Find a session by token, restricted to expires_at > live_after when given."""
        ...

    async def update_last_accessed(self, session_id: UUID, at: datetime) -> None: ...

    async def delete_by_token(self, token: str) -> bool: ...

    async def delete_expired_before(self, moment: datetime) -> int: ...


class MongoSessionStore:
    """SessionStore backed by the `sessions` MongoDB collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self._collection = database.get_collection("sessions")

    async def ensure_indexes(self) -> None:
        # Unique index for token (for validation lookups)
        await self._collection.create_index([("token", 1)], unique=True)
        # Plain index for expires_at; the cleanup sweep owns reclamation, so no TTL index here
        await self._collection.create_index([("expires_at", 1)])

    async def insert(self, session: Session) -> None:
        await self._collection.insert_one(session.to_mongo())

    async def find_by_token(self, token: str, *, live_after: datetime | None = None) -> Session | None:
        query: dict[str, Any] = {"token": token}
        if live_after is not None:
            query["expires_at"] = {"$gt": live_after}
        doc = await self._collection.find_one(query)
        return Session.from_mongo(doc) if doc else None

    async def update_last_accessed(self, session_id: UUID, at: datetime) -> None:
        await self._collection.update_one({"_id": session_id}, {"$set": {"last_accessed_at": at}})

    async def delete_by_token(self, token: str) -> bool:
        result = await self._collection.delete_one({"token": token})
        return result.deleted_count > 0

    async def delete_expired_before(self, moment: datetime) -> int:
        result = await self._collection.delete_many({"expires_at": {"$lt": moment}})
        return result.deleted_count

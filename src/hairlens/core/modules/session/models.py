"""Session management models."""

from datetime import datetime
from enum import StrEnum
from typing import NewType, Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from hairlens.core.db import MongoModel

SessionToken = NewType("SessionToken", str)


class Session(MongoModel):
    """Durable session record, the source of truth for token validity.

    Indexed on token (unique) and expires_at.
    """

    owner_id: str | None = None  # None for anonymous sessions
    token: str
    created_at: datetime
    expires_at: datetime
    last_accessed_at: datetime

    @model_validator(mode="after")
    def _check_timestamps(self) -> Self:
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        if self.last_accessed_at < self.created_at:
            raise ValueError("last_accessed_at must not precede created_at")
        return self

    def to_cache_entry(self) -> "CacheEntry":
        return CacheEntry(session_id=self.id, owner_id=self.owner_id, expires_at=self.expires_at)


class CacheEntry(BaseModel):
    """Read-only projection of a Session kept in the fast cache under its token."""

    session_id: UUID
    owner_id: str | None = None
    expires_at: datetime

    def is_live(self, moment: datetime) -> bool:
        return moment < self.expires_at


class CreatedSession(BaseModel):
    """What a client receives when a session is issued."""

    token: SessionToken
    expires_at: datetime


class SessionStatus(StrEnum):
    VALID = "valid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


class SessionValidation(BaseModel):
    """Outcome of a validation call. Identity fields are set only for valid sessions."""

    status: SessionStatus
    session_id: UUID | None = None
    owner_id: str | None = None
    expires_at: datetime | None = None

    @property
    def valid(self) -> bool:
        return self.status == SessionStatus.VALID

    @classmethod
    def from_cache_entry(cls, entry: CacheEntry) -> Self:
        return cls(status=SessionStatus.VALID, session_id=entry.session_id, owner_id=entry.owner_id, expires_at=entry.expires_at)

    @classmethod
    def expired(cls) -> Self:
        return cls(status=SessionStatus.EXPIRED)

    @classmethod
    def not_found(cls) -> Self:
        return cls(status=SessionStatus.NOT_FOUND)


class CleanupResult(BaseModel):
    deleted_count: int = Field(ge=0)

"""Bearer token generators."""

import secrets
from typing import Protocol
from uuid import uuid4


class TokenGenerator(Protocol):
    def next(self) -> str: ...


class SecureTokenGenerator:
    """URL-safe tokens from the OS CSPRNG, 32 random bytes each."""

    def __init__(self, nbytes: int = 32) -> None:
        self._nbytes = nbytes

    def next(self) -> str:
        return secrets.token_urlsafe(self._nbytes)


class UuidTokenGenerator:
    """Two concatenated random UUIDs, the token format of the legacy edge backend."""

    def next(self) -> str:
        return f"{uuid4()}{uuid4()}"

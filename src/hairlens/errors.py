from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidSessionError(AuthenticationError):
    """Raised when a session token is unknown or no longer live."""

    def __init__(self, message: str = "Session not found or expired") -> None:
        super().__init__(message)


class SessionExpiredError(AuthenticationError):
    """Raised when a session token was found but its expiry has passed.

    Clients may silently create a new session instead of treating this
    as a security error.
    """

    def __init__(self, message: str = "Your session has expired. Please create a new session.") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class StorageUnavailableError(Exception):
    """Raised when the durable session store cannot be reached.

    Not a UserError, so its message is never shown to clients.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Session storage unavailable during {operation}")
        self.operation = operation

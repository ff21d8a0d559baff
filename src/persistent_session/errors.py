from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested session value is not found."""

    def __init__(self, message: str = "Session value not found") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class SessionError(Exception):
    """Base class for internal session store failures, never shown to the user verbatim."""


class ConfigurationError(SessionError):
    """Raised at startup when the database configuration is invalid or unreachable."""


class TransportUnavailableError(SessionError):
    """Raised when a cookie read or write is needed but no transport is bound to the context."""

    def __init__(self, message: str = "No cookie transport available in this context") -> None:
        super().__init__(message)


class StorageError(SessionError):
    """Raised when the document database rejects or fails an operation.

    The original driver exception is chained as ``__cause__``.
    """

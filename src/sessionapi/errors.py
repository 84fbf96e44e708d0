from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Session not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class CsrfTokenError(AuthenticationError):
    """Raised when the X-CSRF-Token header is missing or does not match the session."""

    def __init__(self, message: str = "Missing or invalid CSRF token") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""

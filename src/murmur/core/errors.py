"""Domain exceptions raised by the Murmur stores.

Services raise these; the HTTP layer maps ``status_code`` onto the response
(see ``murmur.main``). Expected, benign outcomes such as removing a like that
does not exist are reported as return values instead.
"""

from __future__ import annotations


class MurmurError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MurmurError):
    """Malformed input: length, charset or type violations."""

    status_code = 400
    default_message = "Validation failed"


class NotFoundError(MurmurError):
    """Referenced entity is absent or soft-deleted."""

    status_code = 404
    default_message = "Not found"


class ConflictError(MurmurError):
    """Duplicate unique key or an edge in the wrong state."""

    status_code = 409
    default_message = "Conflict"


class SelfFollowError(ConflictError):
    default_message = "Users cannot follow themselves"


class AlreadyFollowingError(ConflictError):
    default_message = "Already following this user"


class NotFollowingError(ConflictError):
    default_message = "Not following this user"


class AuthError(MurmurError):
    """Authentication failure."""

    status_code = 401
    default_message = "Authentication failed"


class InvalidCredentialsError(AuthError):
    default_message = "Invalid credentials"


class TokenExpiredError(AuthError):
    default_message = "Token expired"


class InvalidTokenError(AuthError):
    default_message = "Invalid token"


class InactiveAccountError(AuthError):
    default_message = "Invalid or inactive user"


class InternalError(MurmurError):
    """Unexpected store failure."""


__all__ = [
    "AlreadyFollowingError",
    "AuthError",
    "ConflictError",
    "InactiveAccountError",
    "InternalError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "MurmurError",
    "NotFollowingError",
    "NotFoundError",
    "SelfFollowError",
    "TokenExpiredError",
    "ValidationError",
]

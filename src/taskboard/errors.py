"""Error taxonomy shared by services, the auth layer, and the query pipeline.

Services raise these; the exception handlers in main.py render every one
of them as JSON with a human-readable ``message`` key. Nothing below the
API layer raises HTTPException.
"""

from typing import Optional


class TaskboardError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    message: str = "Server Error"
    headers: Optional[dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationFailed(TaskboardError):
    """Malformed, missing, or conflicting input (including duplicate email)."""

    status_code = 422
    message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]], message: Optional[str] = None):
        self.errors = errors
        if message is None:
            # First field message, like Laravel's summary line
            first = next(iter(errors.values()), [])
            message = first[0] if first else None
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]})

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class InvalidQuery(ValidationFailed):
    """A list request referenced a filter/sort/include outside the allow-list."""


class InvalidCredentials(TaskboardError):
    """Login failed. Deliberately silent about which half was wrong."""

    status_code = 401
    message = "Login information invalid"


class Unauthenticated(TaskboardError):
    """Missing, unknown, revoked, or expired bearer token."""

    status_code = 401
    message = "Unauthenticated."
    headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationDenied(TaskboardError):
    """The identity may not perform the action on this resource."""

    status_code = 403
    message = "This action is unauthorized."


class NotFound(TaskboardError):
    status_code = 404
    message = "Not found"

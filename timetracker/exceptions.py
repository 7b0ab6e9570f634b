"""Domain exceptions for the time tracker.

Services raise these; the HTTP layer renders them through a single exception
handler registered in ``timetracker.main``. Every error carries an
``error_id`` so a response can be matched to its log line.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4


@dataclass
class ErrorResponse:
    """Structured error response for API."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class TimeTrackerError(Exception):
    """Base exception for time tracker errors."""

    error_code: str = "TIME_TRACKER_ERROR"
    status_code: int = 500

    def __init__(self, message: str, error_id: Optional[str] = None):
        self.message = message
        self.error_id = error_id or str(uuid4())
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            error_id=self.error_id,
        )


class ValidationError(TimeTrackerError):
    """Malformed or out-of-range input (e.g. end before start)."""

    error_code: str = "VALIDATION_ERROR"
    status_code: int = 422


class NotFoundError(TimeTrackerError):
    """Referenced entity is absent or not owned by the caller."""

    error_code: str = "NOT_FOUND"
    status_code: int = 404


class ConflictError(TimeTrackerError):
    """Invariant violation, such as a second running entry."""

    error_code: str = "CONFLICT"
    status_code: int = 409


class InvalidStateError(TimeTrackerError):
    """Operation not valid for the entry's current state."""

    error_code: str = "INVALID_STATE"
    status_code: int = 409


class IdentityError(TimeTrackerError):
    """No usable identity could be resolved from the claim set."""

    error_code: str = "IDENTITY_ERROR"
    status_code: int = 401


class StorageError(TimeTrackerError):
    """Unexpected storage failure."""

    error_code: str = "STORAGE_ERROR"
    status_code: int = 503

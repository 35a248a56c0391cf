"""
Test Planner - Domain Errors
Typed errors raised by services and mapped to HTTP responses in app.main
"""
from fastapi import status


class AppError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed input, bad identity or malformed distribution config."""
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientQuestionsError(ValidationError):
    """The question pool cannot satisfy a requested bucket count."""

    def __init__(self, found: int, needed: int, bucket: str | None = None):
        where = f" for {bucket}" if bucket else ""
        super().__init__(
            f"Not enough questions available{where}. Found {found}, needed {needed}"
        )
        self.found = found
        self.needed = needed
        self.bucket = bucket


class UnauthorizedError(AppError):
    """The acting user lacks access to the resource."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """A plan, execution, question or curriculum entry is missing."""
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(AppError):
    """Operation is illegal for the execution's current status."""
    status_code = status.HTTP_409_CONFLICT


class ConcurrentUpdateError(AppError):
    """Another request updated the same row first."""
    status_code = status.HTTP_409_CONFLICT

"""Domain errors raised by services and rendered by the global error handler."""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BadRequestError(AppError):
    """Malformed input or a write the store refused."""

    status_code = 400


class UnauthorizedError(AppError):
    """Bad credentials."""

    status_code = 401


class NotFoundError(AppError):
    """Resource absent or not owned by the caller."""

    status_code = 404


class ConflictError(AppError):
    """Duplicate unique value or an illegal state transition."""

    status_code = 409

"""Domain errors raised by the service layer.

Every error carries the HTTP status it maps to and the extra fields that are
rendered next to ``error`` in the JSON body (see ``install_error_handlers``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class IctDeskError(RuntimeError):
    """Base exception for all service-level failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body describing this error."""
        return {"error": self.message, **self.extra}


class ValidationError(IctDeskError):
    """Malformed or missing input, detected before any I/O."""

    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateError(IctDeskError):
    """A uniquely named record already exists."""

    status_code = status.HTTP_409_CONFLICT


class DuplicateSerialError(DuplicateError):
    """One or more device serials are already recorded."""

    def __init__(self, duplicates: Iterable[str], message: str | None = None) -> None:
        self.duplicates = sorted(set(duplicates))
        super().__init__(
            message or "Duplicate serial numbers found",
            duplicates=self.duplicates,
        )


class NotFoundError(IctDeskError):
    """A referenced batch, device or ticket does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class StateTransitionError(IctDeskError):
    """The requested status change is not allowed from the current state."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, current: str | None = None) -> None:
        super().__init__(message, current=current)
        self.current = current


class PersistenceError(IctDeskError):
    """A transaction could not be committed; nothing was persisted."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str, **extra: Any) -> None:
        extra.setdefault("retryable", True)
        super().__init__(message, **extra)


class AllocationError(PersistenceError):
    """A ticket sequence value could not be allocated."""


class SequenceExhaustedError(AllocationError):
    """The bucket has issued every value that fits the ticket width."""

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=False)


def install_error_handlers(app: FastAPI) -> None:
    """Render ``IctDeskError`` subclasses as ``{"error": ..., ...}`` bodies.

    Database failures that escape a service outside ``transaction`` (plain
    reads) are rendered as a retryable ``PersistenceError``.
    """

    @app.exception_handler(IctDeskError)
    async def handle_ictdesk_error(_request: Request, exc: IctDeskError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        error = PersistenceError("Database unavailable")
        return JSONResponse(status_code=error.status_code, content=error.to_payload())


__all__ = [
    "AllocationError",
    "DuplicateError",
    "DuplicateSerialError",
    "IctDeskError",
    "NotFoundError",
    "PersistenceError",
    "SequenceExhaustedError",
    "StateTransitionError",
    "ValidationError",
    "install_error_handlers",
]

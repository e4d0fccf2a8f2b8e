"""
Error taxonomy and the FastAPI handlers that render it.

Every failure that reaches a route boundary is one of the
``TaskTrackerError`` subclasses below.  Clients only ever see the
user-safe ``message``; details are logged server-side.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TaskTrackerError(Exception):
    """Base class for errors surfaced to HTTP clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class BadRequest(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request body."


class Unauthorized(TaskTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated."


class Conflict(TaskTrackerError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Username is already taken."


class InternalError(TaskTrackerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServiceUnavailable(TaskTrackerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Could not reach the database service."


class StoreError(InternalError):
    """
    Non-success answer from the document store.

    Keeps the raw status and body for logging; the client still only
    receives the generic message.
    """

    def __init__(self, message: str, *, store_status: int, store_body: Any = None) -> None:
        super().__init__(message)
        self.store_status = store_status
        self.store_body = store_body


def error_response(exc: TaskTrackerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach handlers converting domain, validation and unexpected errors to JSON."""

    @app.exception_handler(TaskTrackerError)
    async def _domain_error(request: Request, exc: TaskTrackerError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        logger.debug("Rejected body for %s: %s", request.url.path, exc.errors())
        return error_response(BadRequest())

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return error_response(InternalError())

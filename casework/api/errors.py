"""Translate casework errors into JSON HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from casework.errors import (
    CaseworkError,
    Conflict,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Seconds a client should wait before retrying after lock contention.
RETRY_AFTER_SECONDS = 1

STATUS_CODES: dict[type[CaseworkError], int] = {
    ValidationError: 422,
    PermissionDenied: 403,
    NotFound: 404,
    InvalidTransition: 409,
    Conflict: 503,
}


def status_code_for(exc: CaseworkError) -> int:
    for error_type, code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return code
    return 500


def error_response(exc: CaseworkError) -> JSONResponse:
    headers = {"Retry-After": str(RETRY_AFTER_SECONDS)} if exc.retryable else None
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": str(exc), "error": exc.kind},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the casework error handler with the FastAPI app."""

    @app.exception_handler(CaseworkError)
    async def casework_error_handler(request: Request, exc: CaseworkError) -> JSONResponse:
        response = error_response(exc)
        log_level = logging.WARNING if response.status_code < 500 else logging.ERROR
        if exc.retryable:
            log_level = logging.INFO
        logger.log(
            log_level,
            "%s %s -> %s (%s): %s",
            request.method,
            request.url.path,
            response.status_code,
            exc.kind,
            exc,
        )
        return response

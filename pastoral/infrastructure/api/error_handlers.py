"""Maps domain errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pastoral.domain.errors import (
    ConflictError,
    DataIntegrityError,
    NotFoundError,
    PastoralError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[PastoralError], int] = {
    ValidationError: 422,
    ConflictError: 409,
    NotFoundError: 404,
    TransientError: 503,
    DataIntegrityError: 500,
}

TRANSIENT_RETRY_AFTER_SECONDS = "2"


def _status_for(exc: PastoralError) -> int:
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


async def pastoral_error_handler(request: Request, exc: PastoralError) -> JSONResponse:
    status = _status_for(exc)
    body: dict = {"detail": exc.message, "code": exc.code}
    headers = None

    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    elif isinstance(exc, TransientError):
        headers = {"Retry-After": TRANSIENT_RETRY_AFTER_SECONDS}
    elif status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    return JSONResponse(status_code=status, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PastoralError, pastoral_error_handler)

"""Translation of registry errors into HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stream_quota.core.exceptions import (
    AlreadyExistsError,
    InvalidLimitError,
    LimitBelowActiveError,
    LimitReachedError,
    NotFoundError,
    PreconditionError,
    StorageError,
    ZeroActiveError,
)
from stream_quota.core.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_ERROR: dict[type[PreconditionError], int] = {
    NotFoundError: 404,
    AlreadyExistsError: 409,
    LimitBelowActiveError: 409,
    ZeroActiveError: 409,
    InvalidLimitError: 400,
    LimitReachedError: 429,
}


def status_for(exc: PreconditionError) -> int:
    """Return the HTTP status for a precondition error (400 if unmapped)."""
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]  # type: ignore[index]
    return 400


async def precondition_error_handler(_request: Request, exc: PreconditionError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": str(exc), "error": exc.code},
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    # Sanitized: driver messages may leak paths
    logger.error(
        "Storage failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage unavailable", "error": StorageError.code},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the registry error handlers on an app."""
    app.add_exception_handler(PreconditionError, precondition_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, storage_error_handler)  # type: ignore[arg-type]

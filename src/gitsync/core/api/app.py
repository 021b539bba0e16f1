"""
FastAPI application setup for the gitsync HTTP API.

Creates the FastAPI app instance, registers routes under /api/v1/git and
maps engine errors onto HTTP status codes.
"""

import logging
import traceback

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gitsync import __version__
from gitsync.core.api.responses import STATUS_BY_KIND, ErrorCode, envelope
from gitsync.core.api.routes import repository, sync
from gitsync.core.sync.errors import GitSyncError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/git"

app = FastAPI(
    title="gitsync API",
    description="Push, pull and conflict resolution for local git working copies",
    version=__version__,
)

app.include_router(sync.router, prefix=API_PREFIX, tags=["sync"])
app.include_router(repository.router, prefix=API_PREFIX, tags=["repository"])


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def _log(status_code: int, request: Request, message: object) -> None:
    level = logging.ERROR if status_code >= 500 else logging.INFO
    logger.log(
        level,
        "HTTP %d on %s %s: %s",
        status_code,
        request.method,
        request.url.path,
        message,
        extra={"request_id": id(request)},
    )


@app.exception_handler(GitSyncError)
async def gitsync_error_handler(request: Request, exc: GitSyncError) -> JSONResponse:
    """Map engine errors (invalid repository, branch not found, ...) to status codes."""
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    _log(status_code, request, exc)
    return envelope(
        status_code,
        success=False,
        message=exc.message,
        error_code=ErrorCode.for_kind(exc.kind),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException raised by routes with the standard envelope.

    The error code is derived from the status code and the detail text.
    """
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    error_code = ErrorCode.INTERNAL_ERROR
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code = ErrorCode.NOT_FOUND
    elif exc.status_code == status.HTTP_400_BAD_REQUEST:
        detail_lower = detail.lower()
        if "projectid" in detail_lower:
            error_code = ErrorCode.INVALID_PROJECT_ID
        elif "path" in detail_lower:
            error_code = ErrorCode.INVALID_PATH
        else:
            error_code = ErrorCode.INVALID_REQUEST
    elif exc.status_code < 500:
        error_code = ErrorCode.INVALID_REQUEST

    _log(exc.status_code, request, detail)
    return envelope(exc.status_code, success=False, message=detail, error_code=error_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle validation errors from request bodies and query parameters.

    Returns 400 with the first failing field in the message.
    """
    logger.info(
        "Validation error on %s %s: %s",
        request.method,
        request.url.path,
        exc.errors(),
        extra={"request_id": id(request)},
    )

    first_error = exc.errors()[0] if exc.errors() else {}
    field = " -> ".join(str(loc) for loc in first_error.get("loc", []) if loc != "body")
    error_msg = first_error.get("msg", "Invalid input")

    return envelope(
        status.HTTP_400_BAD_REQUEST,
        success=False,
        message=f"{field}: {error_msg}" if field else error_msg,
        error_code=ErrorCode.VALIDATION_ERROR,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all uncaught exceptions.

    Logs the traceback but returns a clean envelope without internal details.
    """
    logger.error(
        "Unhandled exception on %s %s: %s\n%s",
        request.method,
        request.url.path,
        str(exc),
        traceback.format_exc(),
        extra={"request_id": id(request)},
    )
    return envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        success=False,
        message="An internal server error occurred",
        error_code=ErrorCode.INTERNAL_ERROR,
    )

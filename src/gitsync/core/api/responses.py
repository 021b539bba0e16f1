"""
Response envelope and error codes for the HTTP API.

Every response body has the shape:

    {"success": bool, "data": ..., "message": str | null,
     "errorCode": str | null, "timestamp": ISO-8601}
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import Field

from gitsync.core.sync.errors import ErrorKind
from gitsync.core.sync.models import ApiModel, SyncResult


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PROJECT_ID = "INVALID_PROJECT_ID"
    INVALID_PATH = "INVALID_PATH"
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"

    # Engine error kinds, see ErrorKind.code
    INVALID_REPOSITORY = "INVALID_REPOSITORY"
    BRANCH_NOT_FOUND = "BRANCH_NOT_FOUND"
    UNCOMMITTED_CHANGES = "UNCOMMITTED_CHANGES"
    UNSUPPORTED_STRATEGY = "UNSUPPORTED_STRATEGY"
    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    INTERNAL = "INTERNAL"

    # Pull stopped on conflicts (not an error, returned with 200)
    MERGE_CONFLICTS = "MERGE_CONFLICTS"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @classmethod
    def for_kind(cls, kind: ErrorKind) -> ErrorCode:
        return cls(kind.code)


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_REPOSITORY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNCOMMITTED_CHANGES: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNSUPPORTED_STRATEGY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.BRANCH_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.TIMEOUT: status.HTTP_408_REQUEST_TIMEOUT,
    ErrorKind.NETWORK: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.CANCELLED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiResponse(ApiModel):
    """Envelope wrapped around every API payload."""

    success: bool
    data: Any = None
    message: str | None = None
    error_code: ErrorCode | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def envelope(
    status_code: int = status.HTTP_200_OK,
    *,
    success: bool = True,
    data: Any = None,
    message: str | None = None,
    error_code: ErrorCode | None = None,
) -> JSONResponse:
    """Build a JSONResponse carrying an ApiResponse envelope."""
    if isinstance(data, ApiModel):
        data = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, list):
        data = [
            item.model_dump(mode="json", by_alias=True) if isinstance(item, ApiModel) else item
            for item in data
        ]
    body = ApiResponse(success=success, data=data, message=message, error_code=error_code)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )


def sync_result_response(result: SyncResult) -> JSONResponse:
    """
    Wrap a push/pull result.

    Successful results and pulls that stopped on conflicts return 200;
    other failures use the status for their error kind.
    """
    if result.success:
        return envelope(data=result, message=result.summary())

    if result.has_conflicts and result.error_kind is None:
        return envelope(
            success=False,
            data=result,
            message=result.error_message or result.summary(),
            error_code=ErrorCode.MERGE_CONFLICTS,
        )

    kind = result.error_kind or ErrorKind.INTERNAL
    return envelope(
        STATUS_BY_KIND[kind],
        success=False,
        data=result,
        message=result.error_message,
        error_code=ErrorCode.for_kind(kind),
    )

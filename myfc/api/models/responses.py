"""
Pydantic models for API responses.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from myfc import __version__
from myfc.api.context import correlation_id_ctx
from myfc.api.exceptions import _ERROR_TYPE_MAP, _RETRYABLE_CODES, ErrorCode, ErrorType
from myfc.core.time_utils import UTC

APP_VERSION = os.getenv("APP_VERSION", __version__)


class MetaInfo(BaseModel):
    """Metadata for all API responses."""

    correlation_id: str = Field(default="", serialization_alias="correlationId")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat().replace("+00:00", "Z")
    )
    version: str = APP_VERSION


class ErrorDetail(BaseModel):
    """Error details aligned to API error envelope."""

    code: str
    error_type: str = Field(default=ErrorType.INTERNAL.value, serialization_alias="errorType")
    message: str
    retryable: bool = False
    details: dict[str, Any] | None = None
    correlation_id: str = Field(default="", serialization_alias="correlationId")


class SuccessResponse(BaseModel):
    """Standard success response wrapper."""

    success: bool = True
    data: dict[str, Any]
    meta: MetaInfo = Field(default_factory=MetaInfo)


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    success: bool = False
    error: ErrorDetail
    meta: MetaInfo = Field(default_factory=MetaInfo)


class BookmarkStatusData(BaseModel):
    """Membership of one workout for the caller."""

    is_bookmarked: bool = Field(serialization_alias="isBookmarked")
    workout_id: str = Field(serialization_alias="workoutId")


class BookmarkItem(BaseModel):
    id: int
    workout_id: str = Field(serialization_alias="workoutId")
    created_at: str = Field(serialization_alias="createdAt")


class BookmarkListData(BaseModel):
    """All of the caller's bookmarks, newest first."""

    bookmarks: list[BookmarkItem]
    bookmarked_workout_ids: list[str] = Field(serialization_alias="bookmarkedWorkoutIds")


class CacheResetData(BaseModel):
    reset_token: int = Field(serialization_alias="resetToken")
    cleared: int | None = None


def build_meta(*, correlation_id: str | None = None) -> MetaInfo:
    """Construct meta with the context-aware correlation ID."""
    return MetaInfo(correlation_id=correlation_id or correlation_id_ctx.get() or "")


def success_response(
    data: BaseModel | dict[str, Any],
    *,
    correlation_id: str | None = None,
) -> dict[str, Any]:
    """Helper to build a standardized success response."""
    payload = (
        data.model_dump(by_alias=True, exclude_none=True) if isinstance(data, BaseModel) else data
    )
    meta = build_meta(correlation_id=correlation_id)
    return SuccessResponse(data=payload, meta=meta).model_dump(by_alias=True)


def make_error(
    code: str | ErrorCode,
    message: str,
    *,
    error_type: str | ErrorType | None = None,
    retryable: bool | None = None,
    details: dict[str, Any] | None = None,
) -> ErrorDetail:
    """
    Create an ErrorDetail with proper typing and defaults.

    Args:
        code: Error code (use ErrorCode enum for standard codes)
        message: Human-readable error message
        error_type: Error category (inferred from the code if not provided)
        retryable: Whether client should retry (inferred from the code if not provided)
        details: Additional error context

    Returns:
        Properly typed ErrorDetail
    """
    known = code if isinstance(code, ErrorCode) else ErrorCode._value2member_map_.get(code)
    code_str = code.value if isinstance(code, ErrorCode) else code

    if error_type is None:
        error_type = _ERROR_TYPE_MAP.get(known, ErrorType.INTERNAL) if known else ErrorType.INTERNAL
    error_type_str = error_type.value if isinstance(error_type, ErrorType) else error_type

    if retryable is None:
        retryable = known in _RETRYABLE_CODES if known else False

    return ErrorDetail(
        code=code_str,
        error_type=error_type_str,
        message=message,
        retryable=retryable,
        details=details,
    )


def error_response(
    detail: ErrorDetail,
    *,
    correlation_id: str | None = None,
) -> dict[str, Any]:
    """Helper to build a standardized error response."""
    corr = correlation_id or correlation_id_ctx.get() or ""
    if not detail.correlation_id:
        detail = detail.model_copy(update={"correlation_id": corr})
    meta = build_meta(correlation_id=corr)
    return ErrorResponse(error=detail, meta=meta).model_dump(by_alias=True)

"""Pydantic models for the bookmark API wire format."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from myfc.core.workout_ids import normalize_workout_id, normalize_workout_ids


def unwrap_envelope(payload: Any) -> Any:
    """Return the ``data`` member of a success envelope, or the payload unchanged."""
    if isinstance(payload, dict) and payload.get("success") is True and "data" in payload:
        return payload["data"]
    return payload


class BookmarkRecord(BaseModel):
    """One stored bookmark row."""

    id: int | str | None = None
    workout_id: str = Field(validation_alias=AliasChoices("workoutId", "workout_id"))
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("workout_id", mode="before")
    @classmethod
    def _normalize_workout_id(cls, value: Any) -> str:
        return normalize_workout_id(value)


class BookmarkList(BaseModel):
    """Bulk bookmarks response.

    Accepts either ``{"bookmarkedWorkoutIds": [...]}``, ``{"bookmarks": [...]}``
    or a bare list of bookmark rows.
    """

    bookmarks: list[BookmarkRecord] = Field(default_factory=list)
    bookmarked_workout_ids: frozenset[str] = Field(
        default_factory=frozenset, alias="bookmarkedWorkoutIds"
    )

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"bookmarks": data}
        return data

    @field_validator("bookmarked_workout_ids", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Any) -> frozenset[str]:
        return normalize_workout_ids(value)

    @property
    def workout_ids(self) -> frozenset[str]:
        """All bookmarked workout ids from either representation."""
        return self.bookmarked_workout_ids | {record.workout_id for record in self.bookmarks}


class BookmarkStatus(BaseModel):
    """Toggle and single-status response."""

    is_bookmarked: bool = Field(alias="isBookmarked")
    workout_id: str | None = Field(default=None, alias="workoutId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class ToggleBookmarkRequest(BaseModel):
    """Request body for toggling a bookmark."""

    workout_id: str = Field(serialization_alias="workoutId")

"""Service logic for bookmark endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from myfc.api.exceptions import InvalidWorkoutIdParamError, MissingWorkoutIdError
from myfc.api.models.requests import ToggleBookmarkBody
from myfc.api.models.responses import BookmarkItem, BookmarkListData, BookmarkStatusData
from myfc.core.logging_utils import get_logger
from myfc.core.workout_ids import InvalidWorkoutIdError, normalize_workout_id

if TYPE_CHECKING:
    from myfc.db.database import Database

logger = get_logger(__name__)


def resolve_workout_id(*candidates: Any) -> str:
    """Pick the first supplied workout id and normalize it.

    Raises:
        MissingWorkoutIdError: No candidate carries a value
        InvalidWorkoutIdParamError: The value cannot be normalized
    """
    for candidate in candidates:
        if candidate is None or (isinstance(candidate, str) and not candidate.strip()):
            continue
        try:
            return normalize_workout_id(candidate)
        except InvalidWorkoutIdError as exc:
            raise InvalidWorkoutIdParamError(exc.reason) from exc
    raise MissingWorkoutIdError()


def workout_id_from_body(raw: bytes) -> Any:
    """Read ``workoutId`` from a toggle request body.

    An empty or unparseable body counts as carrying no id; the caller then
    reports the id as missing.
    """
    if not raw.strip():
        return None
    try:
        return ToggleBookmarkBody.model_validate_json(raw).workout_id
    except ValidationError as exc:
        logger.debug("toggle_body_unparseable", extra={"errors": exc.error_count()})
        return None


class BookmarkService:
    """Business logic for the caller's bookmarks."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def toggle(self, user_id: str, workout_id: str) -> BookmarkStatusData:
        is_bookmarked = await self._db.toggle_bookmark(user_id, workout_id)
        return BookmarkStatusData(is_bookmarked=is_bookmarked, workout_id=workout_id)

    async def status(self, user_id: str, workout_id: str) -> BookmarkStatusData:
        is_bookmarked = await self._db.is_bookmarked(user_id, workout_id)
        return BookmarkStatusData(is_bookmarked=is_bookmarked, workout_id=workout_id)

    async def list_all(self, user_id: str) -> BookmarkListData:
        rows = await self._db.list_bookmarks(user_id)
        items = [
            BookmarkItem(id=row["id"], workout_id=row["workoutId"], created_at=row["createdAt"])
            for row in rows
        ]
        logger.debug("bookmarks_listed", extra={"user_id": user_id, "count": len(items)})
        return BookmarkListData(
            bookmarks=items,
            bookmarked_workout_ids=[item.workout_id for item in items],
        )

"""
Bookmark endpoints.

The toggle accepts ``workoutId`` either in the query string, which older
clients send, or in the JSON body. The body is only read when the query string
carries no id, so a stray non-JSON body next to a query id is ignored.
"""

from fastapi import APIRouter, Depends, Query, Request

from myfc.api.auth import get_current_user
from myfc.api.dependencies.state import get_bookmark_service
from myfc.api.models.responses import success_response
from myfc.api.services.bookmark_service import (
    BookmarkService,
    resolve_workout_id,
    workout_id_from_body,
)
from myfc.infrastructure.cache import AuthenticatedUser

router = APIRouter()


@router.post("")
async def toggle_bookmark(
    request: Request,
    workout_id: str | None = Query(default=None, alias="workoutId"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Add the workout to the caller's bookmarks, or remove it if already there."""
    body_id = None
    if workout_id is None or not workout_id.strip():
        body_id = workout_id_from_body(await request.body())
    key = resolve_workout_id(workout_id, body_id)
    result = await service.toggle(user.user_id, key)
    return success_response(result)


@router.get("")
async def get_bookmark_status(
    workout_id: str | None = Query(default=None, alias="workoutId"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Whether the caller has bookmarked one workout."""
    key = resolve_workout_id(workout_id)
    result = await service.status(user.user_id, key)
    return success_response(result)


@router.get("/all")
async def list_bookmarks(
    user: AuthenticatedUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Every bookmark of the caller, newest first."""
    result = await service.list_all(user.user_id)
    return success_response(result)

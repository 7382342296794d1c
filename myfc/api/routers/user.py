"""
User session endpoints.
"""

from fastapi import APIRouter, Depends

from myfc.api.auth import get_current_user
from myfc.api.dependencies.state import get_session_cache
from myfc.api.models.responses import CacheResetData, success_response
from myfc.core.logging_utils import get_logger
from myfc.infrastructure.cache import AuthenticatedUser, SessionCache

logger = get_logger(__name__)
router = APIRouter()


@router.post("/clear-cache")
async def clear_cache(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: SessionCache = Depends(get_session_cache),
):
    """Drop cached sessions and issue a new cache token."""
    cleared = sessions.clear()
    logger.info(
        "session_cache_cleared",
        extra={"user_id": user.user_id, "cleared": cleared, "reset_token": sessions.reset_token},
    )
    return success_response(CacheResetData(reset_token=sessions.reset_token, cleared=cleared))


@router.get("/clear-cache")
async def get_cache_token(
    user: AuthenticatedUser = Depends(get_current_user),
    sessions: SessionCache = Depends(get_session_cache),
):
    """Current cache token; it changes whenever the cache is cleared."""
    return success_response(CacheResetData(reset_token=sessions.reset_token))

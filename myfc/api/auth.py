"""
JWT bearer authentication for the bookmark API.

Tokens are HS256-signed JWTs issued by the web app's sign-in flow; the ``sub``
claim carries the user id. Verified users are kept in the session cache so
repeated requests with the same token skip signature checks until the cache
expires or is cleared.
"""

from typing import Any

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from myfc.api.dependencies.state import get_config, get_session_cache
from myfc.api.exceptions import (
    AuthenticationError,
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
)
from myfc.config import AppConfig, AuthConfig
from myfc.core.logging_utils import get_logger
from myfc.infrastructure.cache import AuthenticatedUser, SessionCache

logger = get_logger(__name__)

# auto_error is off so a missing header goes through the API error envelope
security = HTTPBearer(auto_error=False)


def decode_token(token: str, cfg: AuthConfig) -> dict[str, Any]:
    """Decode and validate a JWT access token.

    Raises:
        ConfigurationError: No signing secret is configured (503)
        TokenExpiredError: Token has expired (401)
        TokenInvalidError: Token is malformed, badly signed or has no subject (401)
    """
    if not cfg.jwt_secret_key:
        raise ConfigurationError("JWT_SECRET_KEY is not configured")

    try:
        payload = jwt.decode(token, cfg.jwt_secret_key, algorithms=[cfg.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError() from None
    except jwt.InvalidTokenError as err:
        raise TokenInvalidError(str(err)) from err

    subject = payload.get("sub")
    if subject in (None, ""):
        raise TokenInvalidError("missing subject")
    return payload


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    cfg: AppConfig = Depends(get_config),
    sessions: SessionCache = Depends(get_session_cache),
) -> AuthenticatedUser:
    """Resolve the signed-in user from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    token = credentials.credentials
    user = sessions.get(token)
    if user is not None:
        request.state.user_id = user.user_id
        return user

    payload = decode_token(token, cfg.auth)
    user = AuthenticatedUser(user_id=str(payload["sub"]), email=payload.get("email"))
    sessions.set(token, user)
    request.state.user_id = user.user_id
    logger.debug("session_authenticated", extra={"user_id": user.user_id})
    return user

"""Cache of authenticated sessions keyed by access token."""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from myfc.infrastructure.cache.ttl_cache import CacheStats, TTLCache

if TYPE_CHECKING:
    from myfc.config import AuthConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    email: str | None = None


def _token_key(token: str) -> str:
    # Raw bearer tokens are never kept as dictionary keys
    return hashlib.sha256(token.encode()).hexdigest()


class SessionCache:
    """Short-lived cache of token -> user lookups.

    ``reset_token`` is the millisecond timestamp of the last :meth:`clear`; clients
    poll it to learn that cached user data should be refetched.
    """

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        max_entries: int = 1000,
        *,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache: TTLCache[str, AuthenticatedUser] = TTLCache(
            ttl_seconds, max_entries, name="session_cache", clock=clock
        )
        self._wall_clock = wall_clock
        self._reset_token = int(wall_clock() * 1000)

    @classmethod
    def from_config(cls, cfg: AuthConfig) -> SessionCache:
        return cls(cfg.session_cache_ttl_sec, cfg.session_cache_max_entries)

    @property
    def reset_token(self) -> int:
        return self._reset_token

    @property
    def stats(self) -> CacheStats:
        return self._cache.stats

    def get(self, token: str) -> AuthenticatedUser | None:
        user = self._cache.get(_token_key(token))
        if user is not None:
            logger.debug("session_cache_hit", extra={"user_id": user.user_id})
        return user

    def set(self, token: str, user: AuthenticatedUser) -> None:
        self._cache.set(_token_key(token), user)

    def invalidate(self, token: str) -> bool:
        return self._cache.delete(_token_key(token))

    def clear(self) -> int:
        dropped = self._cache.clear()
        self._reset_token = max(int(self._wall_clock() * 1000), self._reset_token + 1)
        return dropped

"""Cache helpers."""

from myfc.infrastructure.cache.session_cache import AuthenticatedUser, SessionCache
from myfc.infrastructure.cache.ttl_cache import CacheStats, TTLCache

__all__ = [
    "AuthenticatedUser",
    "CacheStats",
    "SessionCache",
    "TTLCache",
]

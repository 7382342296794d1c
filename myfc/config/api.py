from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._validators import _parse_bounded_int, _parse_csv

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


class AuthConfig(BaseModel):
    """Bookmark API authentication and session cache configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    jwt_secret_key: str = Field(default="", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    session_cache_ttl_sec: int = Field(default=30, validation_alias="SESSION_CACHE_TTL_SEC")
    session_cache_max_entries: int = Field(
        default=1000, validation_alias="SESSION_CACHE_MAX_ENTRIES"
    )
    allowed_origins: tuple[str, ...] = Field(
        default=DEFAULT_ALLOWED_ORIGINS, validation_alias="ALLOWED_ORIGINS"
    )

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def _validate_jwt_secret_key(cls, value: Any) -> str:
        if value in (None, ""):
            return ""
        secret = str(value).strip()
        if len(secret) < 32:
            logger.warning(
                "JWT secret key is shorter than 32 characters - this is insecure for production"
            )
        if len(secret) > 500:
            msg = "JWT secret key appears to be too long"
            raise ValueError(msg)
        return secret

    @field_validator("jwt_algorithm", mode="before")
    @classmethod
    def _validate_algorithm(cls, value: Any) -> str:
        algorithm = str(value or "HS256").upper().strip()
        if algorithm not in {"HS256", "HS384", "HS512"}:
            msg = f"Unsupported JWT algorithm: {algorithm}"
            raise ValueError(msg)
        return algorithm

    @field_validator("session_cache_ttl_sec", mode="before")
    @classmethod
    def _validate_ttl(cls, value: Any) -> int:
        return _parse_bounded_int(
            value, default=30, name="Session cache TTL", minimum=1, maximum=3600
        )

    @field_validator("session_cache_max_entries", mode="before")
    @classmethod
    def _validate_max_entries(cls, value: Any) -> int:
        return _parse_bounded_int(
            value, default=1000, name="Session cache size", minimum=1, maximum=100_000
        )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _validate_origins(cls, value: Any) -> tuple[str, ...]:
        origins = _parse_csv(value)
        if not origins:
            logger.warning(
                "ALLOWED_ORIGINS not configured - defaulting to localhost only. "
                "Set ALLOWED_ORIGINS environment variable for production."
            )
            return DEFAULT_ALLOWED_ORIGINS
        return origins

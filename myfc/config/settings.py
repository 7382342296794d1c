from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .api import AuthConfig
from .bookmarks import BookmarkClientConfig

logger = logging.getLogger(__name__)


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    db_path: str = Field(default="/data/myfc.db", validation_alias="DB_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    db_operation_timeout_sec: float = Field(
        default=30.0, validation_alias="DB_OPERATION_TIMEOUT_SEC"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        log_level = str(value or "INFO").upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_levels:
            msg = f"Invalid log level: {value}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return log_level

    @field_validator("db_path", mode="before")
    @classmethod
    def _validate_db_path(cls, value: Any) -> str:
        path = str(value or "/data/myfc.db").strip()
        if "\x00" in path:
            msg = "DB path contains invalid characters"
            raise ValueError(msg)
        return path

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Any) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        return trimmed or None

    @field_validator("db_operation_timeout_sec", mode="before")
    @classmethod
    def _validate_db_timeout(cls, value: Any) -> float:
        try:
            timeout = float(str(value if value not in (None, "") else 30.0))
        except ValueError as exc:
            msg = "DB operation timeout must be a valid number"
            raise ValueError(msg) from exc
        if timeout <= 0 or timeout > 600:
            msg = "DB operation timeout must be between 0 and 600 seconds"
            raise ValueError(msg)
        return timeout


@dataclass(frozen=True)
class AppConfig:
    runtime: RuntimeConfig
    bookmarks: BookmarkClientConfig
    auth: AuthConfig


class Settings(BaseSettings):
    """Application settings loaded automatically from environment variables.

    Uses pydantic-settings for automatic environment variable loading.
    Nested models are populated by matching validation_alias on each field.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    bookmarks: BookmarkClientConfig = Field(default_factory=BookmarkClientConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Build nested config objects from flat environment variables.

        Constructor arguments take precedence over the environment.
        """
        if not isinstance(data, dict):
            return data

        result = dict(data)
        merged_source = {**os.environ, **data}

        for field_name, field_info in cls.model_fields.items():
            annotation = field_info.annotation
            if not isinstance(annotation, type) or not issubclass(annotation, BaseModel):
                continue

            nested_data: dict[str, Any] = {}
            for nested_field_name, nested_field in annotation.model_fields.items():
                env_value = cls._resolve_env_value(merged_source, nested_field)
                if env_value is not None:
                    nested_data[nested_field_name] = env_value

            if nested_data:
                if field_name in result and isinstance(result[field_name], dict):
                    result[field_name] = {**nested_data, **result[field_name]}
                else:
                    result[field_name] = nested_data

        return result

    @staticmethod
    def _resolve_env_value(data: dict[str, Any], field: Any) -> Any | None:
        """Resolve environment variable value for a field using its aliases."""
        aliases: list[str] = []
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            aliases.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif isinstance(alias, str):
            aliases.append(alias)
        if field.alias:
            aliases.append(field.alias)

        for name in aliases:
            if name in data:
                return data[name]
        return None

    def as_app_config(self) -> AppConfig:
        return AppConfig(runtime=self.runtime, bookmarks=self.bookmarks, auth=self.auth)


def load_config(**overrides: Any) -> AppConfig:
    """Load application configuration from environment variables and ``.env``.

    Args:
        overrides: Per-section dicts (``runtime``, ``bookmarks``, ``auth``) that take
            precedence over the environment

    Returns:
        Immutable AppConfig instance with all configuration sections.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    logger.debug(
        "config_loaded",
        extra={"api_url": settings.bookmarks.api_url, "db_path": settings.runtime.db_path},
    )
    return settings.as_app_config()

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ._validators import _parse_bounded_int, _parse_positive_float


class BookmarkClientConfig(BaseModel):
    """Client-side bookmark synchronization configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_url: str = Field(default="http://localhost:3000", validation_alias="MYFC_API_URL")
    access_token: str = Field(default="", validation_alias="MYFC_ACCESS_TOKEN")
    request_timeout_sec: float = Field(
        default=15.0, validation_alias="BOOKMARK_REQUEST_TIMEOUT_SEC"
    )
    toggle_timeout_sec: float = Field(default=10.0, validation_alias="BOOKMARK_TOGGLE_TIMEOUT_SEC")
    load_timeout_sec: float = Field(default=20.0, validation_alias="BOOKMARK_LOAD_TIMEOUT_SEC")
    max_retries: int = Field(default=3, validation_alias="BOOKMARK_MAX_RETRIES")
    retry_base_delay_sec: float = Field(
        default=0.5, validation_alias="BOOKMARK_RETRY_BASE_DELAY_SEC"
    )
    error_display_sec: float = Field(default=4.0, validation_alias="BOOKMARK_ERROR_DISPLAY_SEC")

    @field_validator("api_url", mode="before")
    @classmethod
    def _validate_api_url(cls, value: Any) -> str:
        url = str(value or "http://localhost:3000").strip()
        if not url:
            return "http://localhost:3000"
        if not url.startswith(("http://", "https://")):
            msg = "MYFC API URL must start with http:// or https://"
            raise ValueError(msg)
        return url.rstrip("/")

    @field_validator("access_token", mode="before")
    @classmethod
    def _validate_access_token(cls, value: Any) -> str:
        if value in (None, ""):
            return ""
        token = str(value).strip()
        if len(token) > 4096:
            msg = "MYFC access token appears to be too long"
            raise ValueError(msg)
        if any(char in token for char in (" ", "\n", "\t")):
            msg = "MYFC access token contains invalid characters"
            raise ValueError(msg)
        return token

    @field_validator(
        "request_timeout_sec",
        "toggle_timeout_sec",
        "load_timeout_sec",
        "error_display_sec",
        mode="before",
    )
    @classmethod
    def _validate_seconds(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        name = info.field_name.replace("_sec", "").replace("_", " ").capitalize()
        return _parse_positive_float(value, default=default, name=name, maximum=300.0)

    @field_validator("retry_base_delay_sec", mode="before")
    @classmethod
    def _validate_retry_delay(cls, value: Any) -> float:
        return _parse_positive_float(value, default=0.5, name="Retry base delay", maximum=60.0)

    @field_validator("max_retries", mode="before")
    @classmethod
    def _validate_max_retries(cls, value: Any) -> int:
        return _parse_bounded_int(value, default=3, name="Max retries", minimum=0, maximum=10)

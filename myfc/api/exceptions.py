"""Custom exceptions and error codes for the bookmark API.

Every error leaves the API in the same JSON envelope with a correlation ID.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"

    # Token/Auth-specific errors
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ErrorType(str, Enum):
    """Categories of errors for client handling."""

    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"
    CONFIGURATION = "configuration"


# Mapping from ErrorCode to ErrorType
_ERROR_TYPE_MAP: dict[ErrorCode, ErrorType] = {
    ErrorCode.VALIDATION_ERROR: ErrorType.VALIDATION,
    ErrorCode.UNAUTHORIZED: ErrorType.AUTHENTICATION,
    ErrorCode.NOT_FOUND: ErrorType.NOT_FOUND,
    ErrorCode.TOKEN_EXPIRED: ErrorType.AUTHENTICATION,
    ErrorCode.TOKEN_INVALID: ErrorType.AUTHENTICATION,
    ErrorCode.INTERNAL_ERROR: ErrorType.INTERNAL,
    ErrorCode.DATABASE_ERROR: ErrorType.INTERNAL,
    ErrorCode.CONFIGURATION_ERROR: ErrorType.CONFIGURATION,
}

# Retryable error codes
_RETRYABLE_CODES: set[ErrorCode] = {
    ErrorCode.TOKEN_EXPIRED,  # Can retry after signing in again
    ErrorCode.DATABASE_ERROR,
}


class APIException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        error_type: ErrorType | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.error_type = error_type or _ERROR_TYPE_MAP.get(error_code, ErrorType.INTERNAL)
        self.retryable = retryable if retryable is not None else (error_code in _RETRYABLE_CODES)


class ValidationError(APIException):
    """Raised when request validation fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, status_code: int = 422):
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=status_code,
            details=details,
        )


class MissingWorkoutIdError(ValidationError):
    """Raised when a bookmark request carries no workout id (400)."""

    def __init__(self):
        super().__init__(
            "Workout ID is required",
            details={"field": "workoutId"},
            status_code=400,
        )


class InvalidWorkoutIdParamError(ValidationError):
    """Raised when the supplied workout id cannot be normalized (400)."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid workout ID: {reason}",
            details={"field": "workoutId"},
            status_code=400,
        )


class AuthenticationError(APIException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code=ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class TokenExpiredError(APIException):
    """Raised when JWT token has expired (401)."""

    def __init__(self):
        super().__init__(
            message="Access token has expired. Please re-authenticate.",
            error_code=ErrorCode.TOKEN_EXPIRED,
            status_code=401,
        )


class TokenInvalidError(APIException):
    """Raised when JWT token is malformed or signature invalid (401)."""

    def __init__(self, reason: str | None = None):
        message = "Invalid token"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message,
            error_code=ErrorCode.TOKEN_INVALID,
            status_code=401,
            retryable=False,
        )


class ConfigurationError(APIException):
    """Raised when the server is missing required configuration."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            status_code=503,
        )

"""NameVault Error Handling Module

This module defines the error handling system for NameVault, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("user_id",)


class ErrorCode(str, Enum):
    """Error codes for NameVault.

    This enum serves as the single source of truth for all error codes
    used throughout the engine.
    """

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_RATE_LIMIT = "API_RATE_LIMIT"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"

    # File System Errors
    FILE_READ_ERROR = "FILE_READ_ERROR"
    DIRECTORY_CREATION_FAILED = "DIRECTORY_CREATION_FAILED"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_KEY = "INVALID_KEY"
    UNKNOWN_TTL_CLASS = "UNKNOWN_TTL_CLASS"

    # Cache Errors
    CACHE_ERROR = "CACHE_ERROR"
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    CACHE_SERIALIZATION_ERROR = "CACHE_SERIALIZATION_ERROR"

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Resolution Errors
    RESOLUTION_UNAVAILABLE = "RESOLUTION_UNAVAILABLE"
    RESOLUTION_INVARIANT_VIOLATED = "RESOLUTION_INVARIANT_VIOLATED"


#: Codes meaning the remote service could not be reached at all.
CONNECTIVITY_ERROR_CODES: frozenset[ErrorCode] = frozenset(
    {ErrorCode.NETWORK_ERROR, ErrorCode.API_TIMEOUT}
)


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to keep log records serializable.

    Attributes:
        file_path: Optional file path associated with the error
        operation: Optional operation name that caused the error
        user_id: Optional user ID (masked in logs)
        additional_data: Optional dict with primitive values only
    """

    file_path: str | None = None
    operation: str | None = None
    user_id: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with masking.

        Args:
            mask_keys: Fields to exclude from output. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked sensitive fields and guaranteed additional_data key.

        Example:
            >>> context = ErrorContext(user_id="12345", file_path="/test")
            >>> context.safe_dict()
            {'file_path': '/test', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.file_path is not None and "file_path" not in mask_keys:
            data["file_path"] = self.file_path
        if self.operation is not None and "operation" not in mask_keys:
            data["operation"] = self.operation
        if self.user_id is not None and "user_id" not in mask_keys:
            data["user_id"] = self.user_id

        if self.additional_data is not None and "additional_data" not in mask_keys:
            data["additional_data"] = self.additional_data
        else:
            data["additional_data"] = {}

        return data


class NameVaultError(Exception):
    """Base exception class for all NameVault errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize NameVaultError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error with code, message,
            masked context, and original_error (if present)
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(NameVaultError):
    """Domain-specific errors.

    Raised when caller input violates engine rules.

    Examples:
    - Non-integer keys
    - Unknown TTL class
    - Invalid batch or window sizes
    """


class InfrastructureError(NameVaultError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems
    like the file system, SQLite or the remote service.
    """


class CacheTierError(InfrastructureError):
    """I/O failure inside one cache tier.

    Never a miss: a tier signals a miss by returning nothing. The tier
    chain treats this error as a full miss for the failing tier.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        tier: str | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.tier = tier


class ResolverNetworkError(InfrastructureError):
    """Network-related errors.

    These errors occur during remote calls: connection failures,
    timeouts and non-2xx responses.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status = status

    @property
    def is_connectivity_failure(self) -> bool:
        """True when the remote could not be reached at all."""
        return self.code in CONNECTIVITY_ERROR_CODES


class RemoteResponseError(DomainError):
    """Undecodable or malformed remote payload."""


class ApplicationError(NameVaultError):
    """Application-level errors.

    Configuration problems and service lifecycle errors.
    """


class ResolutionUnavailableError(InfrastructureError):
    """No cache tier and no network were reachable for a resolve call."""


class ResolutionInvariantError(ApplicationError):
    """The result map does not cover exactly the requested keys."""


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> DomainError:
    """Create a validation error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return DomainError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_cache_tier_error(
    tier: str,
    message: str,
    code: ErrorCode = ErrorCode.CACHE_READ_FAILED,
    operation: str | None = None,
    file_path: str | None = None,
    original_error: Exception | None = None,
) -> CacheTierError:
    """Create a cache tier I/O error with context."""
    context = ErrorContext(
        file_path=file_path,
        operation=operation,
        additional_data={"tier": tier},
    )
    return CacheTierError(
        code,
        message,
        context,
        original_error,
        tier=tier,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        context,
        original_error,
    )

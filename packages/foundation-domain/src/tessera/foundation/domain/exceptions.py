"""Domain exception hierarchy for type-safe error handling.

This module provides the base exception hierarchy for all domain errors.
Exceptions include structured error codes and context for consistent
error handling and logging across the authentication layers.

Example:
    >>> from tessera.foundation.domain.exceptions import FieldFormatError
    >>> raise FieldFormatError("notaduration", "duration")
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "DomainError",
    "FieldFormatError",
    "KeyDecodeError",
]


class DomainError(Exception):
    """Base class for all domain errors.

    Provides error code and structured context for debugging. All domain
    exceptions inherit from this class to enable consistent error handling
    and logging.

    Attributes:
        error_code: Machine-readable error code for client handling.
        message: Human-readable error description.
        context: Structured debugging information (scheme names, field names).

    Example:
        >>> raise DomainError("Operation failed", context={"scheme": "Bearer"})
        DomainError: Operation failed (scheme=Bearer)
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize domain error with message and optional context.

        Args:
            message: Human-readable error description.
            context: Structured debugging information. Keys should be snake_case.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(DomainError):
    """Raised when materialized configuration is inconsistent or unusable.

    Treated as fatal at startup or reconfiguration time. The hosting layer
    is expected to abort scheme activation rather than serve requests with
    a partially valid options record.

    Attributes:
        error_code: "CONFIGURATION_ERROR" (class constant).

    Example:
        >>> raise ConfigurationError(
        ...     "MetadataAddress must use HTTPS", context={"scheme": "Bearer"}
        ... )
    """

    error_code: str = "CONFIGURATION_ERROR"


class FieldFormatError(ConfigurationError, ValueError):
    """Raised when a non-empty configuration value fails type parsing.

    Also a ``ValueError`` so callers that only know about builtin parse
    failures still catch it.

    Attributes:
        error_code: "FIELD_FORMAT_ERROR" (class constant).
        raw_value: The offending raw string.
        expected: Name of the expected type (e.g., "bool", "duration").

    Example:
        >>> raise FieldFormatError("notaduration", "duration")
        FieldFormatError: Invalid duration value: 'notaduration' (expected=duration)
    """

    error_code: str = "FIELD_FORMAT_ERROR"

    def __init__(self, raw_value: str, expected: str, **extra_context: Any) -> None:
        """Initialize field format error.

        Args:
            raw_value: The raw configuration string that failed to parse.
            expected: Human-readable name of the expected type.
            **extra_context: Additional debugging context (e.g., key path).
        """
        self.raw_value = raw_value
        self.expected = expected
        message = f"Invalid {expected} value: {raw_value!r}"
        context = {"expected": expected, **extra_context}
        super().__init__(message, context)


class KeyDecodeError(ConfigurationError, ValueError):
    """Raised when a configured signing key value is not valid base64.

    Only raised for values that are present. A missing key entry is not an
    error.

    Attributes:
        error_code: "KEY_DECODE_ERROR" (class constant).
        issuer: Issuer whose signing key could not be decoded.
    """

    error_code: str = "KEY_DECODE_ERROR"

    def __init__(self, issuer: str, reason: str) -> None:
        """Initialize key decode error.

        Args:
            issuer: Issuer the key entry belongs to.
            reason: Description of the decode failure. Never the key itself.
        """
        self.issuer = issuer
        message = f"Signing key for issuer {issuer!r} is not valid base64: {reason}"
        super().__init__(message, {"issuer": issuer})


class AuthenticationError(DomainError):
    """Raised when authentication fails (missing, expired, invalid token).

    Maps to HTTP 401 Unauthorized. All 401 responses MUST include
    WWW-Authenticate header per RFC 6750.

    Attributes:
        error_code: Machine-readable error code (e.g., "TOKEN_EXPIRED").
        auth_error: RFC 6750 error code for WWW-Authenticate header.

    Example:
        >>> raise AuthenticationError("Token has expired", auth_error="invalid_token",
        ...     error_code="TOKEN_EXPIRED")
    """

    error_code: str = "AUTHENTICATION_ERROR"

    def __init__(
        self,
        message: str,
        auth_error: str = "invalid_token",
        error_code: str = "AUTHENTICATION_ERROR",
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize authentication error.

        Args:
            message: Human-readable error description.
            auth_error: RFC 6750 error code for WWW-Authenticate header.
            error_code: Machine-readable error code for client handling.
            context: Structured debugging information.
        """
        self.auth_error = auth_error
        self.error_code = error_code
        super().__init__(message, context)

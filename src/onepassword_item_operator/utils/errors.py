"""Operator error types and error sanitization utilities."""

from __future__ import annotations

import re


class OperatorError(Exception):
    """Base class for errors raised by a reconciliation attempt."""


class VaultFetchError(OperatorError):
    """The vault item could not be fetched (invalid path or backend unreachable)."""


class StorePersistError(OperatorError):
    """Reading or writing a Kubernetes object failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class OwnerRefResolutionError(OperatorError):
    """Owner reference metadata could not be resolved from the resource."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(bearer)\s+[A-Za-z0-9\-_\.=]+",
    r"(authorization)[:\s]+[^\s,;\)]+",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "token",
    "password",
    "secret",
    "credentials",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[=:]\s*([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))

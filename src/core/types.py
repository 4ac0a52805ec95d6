"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import Protocol


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    The SDK never retries on its own; the category tells callers what a
    retry (or a forced token refresh) could achieve.

    Categories:
        TRANSIENT: Temporary failures that may succeed later
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Authentication failures requiring credential refresh
              (e.g., 401 errors, rejected token exchange)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, validation errors, configuration issues)
        DECODE: Response body did not match the expected shape
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    DECODE = "decode"
    UNKNOWN = "unknown"


class ErrorClassifier(Protocol):
    """
    Protocol for error classification implementations.

    Transport adapters implement this protocol to translate library-specific
    exceptions into standard categories.
    """

    def classify_error(self, error: Exception) -> ErrorCategory:
        """
        Classify an exception into an error category.

        Args:
            error: Exception to classify

        Returns:
            ErrorCategory indicating how to handle this error
        """
        ...

    def is_transient(self, error: Exception) -> bool:
        """
        Check if error is transient.

        Args:
            error: Exception to check

        Returns:
            True if error may succeed on a later attempt
        """
        ...


__all__ = [
    "ErrorCategory",
    "ErrorClassifier",
]

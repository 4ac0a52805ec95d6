"""
SsoError hierarchy and failure classification.

Every failed call surfaces as one of AuthError, TransportError or
DecodeError, each carrying an ErrorCategory.
"""

from core.errors.exceptions import (
    AuthError,
    DecodeError,
    ErrorCategory,
    InvalidConfigurationError,
    NotAuthenticatedWarning,
    SsoError,
    TransportError,
    classify_exception,
    classify_http_status,
    wrap_exception,
)
from core.errors.transport_classifier import HttpErrorClassifier

__all__ = [
    "ErrorCategory",
    "SsoError",
    "AuthError",
    "TransportError",
    "DecodeError",
    "InvalidConfigurationError",
    "NotAuthenticatedWarning",
    "classify_http_status",
    "classify_exception",
    "wrap_exception",
    "HttpErrorClassifier",
]

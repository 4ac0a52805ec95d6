"""
HTTP transport error classification.

Maps aiohttp exceptions, HTTP error statuses and decoding failures onto the
SsoError hierarchy so that every failed call surfaces as AuthError,
TransportError or DecodeError.
"""

import json

import aiohttp
from pydantic import ValidationError

from core.errors.exceptions import (
    AuthError,
    DecodeError,
    SsoError,
    TransportError,
    wrap_exception,
)
from core.types import ErrorCategory

# Maximum number of response body characters kept on a TransportError
MAX_BODY_CHARS = 200

# aiohttp exception type names grouped by category
HTTP_ERROR_MAPPINGS = {
    "transient": [
        "ClientConnectionError",
        "ClientConnectorError",
        "ClientOSError",
        "ServerDisconnectedError",
        "ServerTimeoutError",
        "ConnectionTimeoutError",
        "SocketTimeoutError",
        "ClientPayloadError",
    ],
    "permanent": [
        "InvalidURL",
        "InvalidUrlClientError",
        "TooManyRedirects",
        "ClientConnectorCertificateError",
        "ClientSSLError",
    ],
    "decode": [
        "ContentTypeError",
    ],
}


def classify_error_type(error_type_name: str) -> str | None:
    """
    Classify error by exception type name.

    Args:
        error_type_name: Name of the exception class

    Returns:
        Error category: "transient", "permanent", "decode", or None
    """
    for category, error_types in HTTP_ERROR_MAPPINGS.items():
        if error_type_name in error_types:
            return category
    return None


def _truncate(text: str | None) -> str | None:
    if text is None:
        return None
    return text[:MAX_BODY_CHARS]


class HttpErrorClassifier:
    """
    Centralized error classification for HTTP dispatch.

    Implements the ErrorClassifier protocol and builds typed exceptions for
    status failures and library exceptions.
    """

    def classify_error(self, error: Exception) -> ErrorCategory:
        return self.classify_transport_error(error).category

    def is_transient(self, error: Exception) -> bool:
        return self.classify_error(error) == ErrorCategory.TRANSIENT

    @staticmethod
    def from_status(
        status: int,
        method: str,
        url: str,
        body: str | None = None,
    ) -> TransportError:
        """
        Build a TransportError for a non-2xx HTTP response.

        Args:
            status: HTTP status code
            method: HTTP method of the failed request
            url: Request URL
            body: Response body text (truncated)

        Returns:
            TransportError categorized from the status
        """
        return TransportError(
            f"HTTP {status} for {method} {url}",
            status_code=status,
            url=url,
            body=_truncate(body),
            context={"http_status": status, "http_method": method, "http_url": url},
        )

    @staticmethod
    def classify_transport_error(
        error: Exception,
        context: dict | None = None,
    ) -> SsoError:
        """
        Classify an exception raised while sending a request or reading a response.

        Args:
            error: Original exception
            context: Additional context (method, url, ...)

        Returns:
            Classified SsoError subclass
        """
        # Already classified (AuthError from token setup, TransportError from status)
        if isinstance(error, SsoError):
            if context:
                for key, value in context.items():
                    error.context.setdefault(key, value)
            return error

        error_context = dict(context or {})
        error_context["error_type"] = type(error).__name__
        url = error_context.get("http_url")

        if isinstance(error, (json.JSONDecodeError, UnicodeDecodeError, ValidationError)):
            return DecodeError(f"Response decoding failed: {error}", cause=error, context=error_context)

        category = classify_error_type(type(error).__name__)

        if category == "decode":
            return DecodeError(f"Unexpected response content: {error}", cause=error, context=error_context)

        if category == "permanent":
            transport_error = TransportError(f"Request failed: {error}", url=url, cause=error, context=error_context)
            transport_error.category = ErrorCategory.PERMANENT
            return transport_error

        if isinstance(error, aiohttp.ClientResponseError):
            if error.status == 401:
                return AuthError(f"Unauthorized: {error.message}", cause=error, context=error_context)
            return TransportError(
                f"HTTP {error.status}: {error.message}",
                status_code=error.status,
                url=url,
                cause=error,
                context=error_context,
            )

        if category == "transient" or isinstance(error, (aiohttp.ClientError, TimeoutError)):
            if isinstance(error, TimeoutError):
                return TransportError(f"Request timeout: {error}", url=url, cause=error, context=error_context)
            return TransportError(f"Connection error: {error}", url=url, cause=error, context=error_context)

        # No type match: fall back to string-based classification
        return wrap_exception(error, default_class=TransportError, context=error_context)


__all__ = [
    "HTTP_ERROR_MAPPINGS",
    "MAX_BODY_CHARS",
    "HttpErrorClassifier",
    "classify_error_type",
]

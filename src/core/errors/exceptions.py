"""
Exception hierarchy for the SSO client.

Every failure surfaced by the SDK is an SsoError whose ``category`` tells a
caller whether to re-authenticate, retry later or give up.
"""

# ErrorCategory lives in core.types so there is exactly one enum class
from core.types import ErrorCategory


class SsoError(Exception):
    """
    Base exception for all SSO client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification
        cause: Wrapped exception, if any
        context: Extra fields for logging (method, url, status)
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context or {}

    @property
    def is_transient(self) -> bool:
        return self.category is ErrorCategory.TRANSIENT

    @property
    def should_refresh_auth(self) -> bool:
        return self.category is ErrorCategory.AUTH

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} | Caused by: {self.cause}"


class AuthError(SsoError):
    """Token acquisition failed or no credential was available."""

    category = ErrorCategory.AUTH


class InvalidConfigurationError(SsoError):
    """Client or credential configuration is invalid."""

    category = ErrorCategory.PERMANENT


class TransportError(SsoError):
    """
    Network failure, or a non-2xx status on a resource call.

    With a status code the category follows classify_http_status(); without
    one the failure counts as transient.
    """

    category = ErrorCategory.TRANSIENT

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        body: str | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.status_code = status_code
        self.url = url
        self.body = body
        if status_code is not None:
            self.category = classify_http_status(status_code)


class DecodeError(SsoError):
    """Response body did not match the expected shape."""

    category = ErrorCategory.DECODE


class NotAuthenticatedWarning(UserWarning):
    """No token could be obtained and the call goes out unauthenticated.

    Logged by the dispatcher, never raised.
    """


# Lowercased substrings used when an exception is not an SsoError
_AUTH_MARKERS = ("401", "unauthorized", "authentication", "invalid token", "invalid_grant", "invalid_client")
_NETWORK_MARKERS = (
    "timeout",
    "connectionerror",
    "connection refused",
    "connection reset",
    "name resolution",
    "broken pipe",
)
_DECODE_TYPES = ("jsondecodeerror", "validationerror", "unicodedecodeerror")


def classify_http_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status onto an ErrorCategory (2xx is UNKNOWN, not an error)."""
    if status_code == 401:
        return ErrorCategory.AUTH
    if status_code in (408, 429) or status_code >= 500:
        return ErrorCategory.TRANSIENT
    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT
    return ErrorCategory.UNKNOWN


def classify_exception(exc: Exception) -> ErrorCategory:
    """Best-effort category for an arbitrary exception."""
    if isinstance(exc, SsoError):
        return exc.category

    type_name = type(exc).__name__.lower()
    text = str(exc).lower()

    if type_name in _DECODE_TYPES:
        return ErrorCategory.DECODE
    if any(m in type_name or m in text for m in _NETWORK_MARKERS):
        return ErrorCategory.TRANSIENT
    if any(m in text for m in _AUTH_MARKERS):
        return ErrorCategory.AUTH
    if "403" in text or "forbidden" in text or "404" in text:
        return ErrorCategory.PERMANENT
    return ErrorCategory.UNKNOWN


_CATEGORY_CLASSES = {
    ErrorCategory.AUTH: AuthError,
    ErrorCategory.DECODE: DecodeError,
    ErrorCategory.TRANSIENT: TransportError,
}


def wrap_exception(
    exc: Exception,
    default_class: type = SsoError,
    context: dict | None = None,
) -> SsoError:
    """
    Return ``exc`` as an SsoError.

    SsoErrors are returned as-is with ``context`` merged in. Anything else is
    wrapped in the class matching classify_exception(), or ``default_class``
    when no category applies.
    """
    if isinstance(exc, SsoError):
        if context:
            exc.context.update(context)
        return exc

    context = dict(context or {})
    context.setdefault("error_type", type(exc).__name__)
    error_class = _CATEGORY_CLASSES.get(classify_exception(exc), default_class)
    return error_class(str(exc), cause=exc, context=context)

"""Logging helpers that attach structured fields to records."""

import logging
from typing import Any

from core.logging.formatters import sanitize_url

# Attributes every LogRecord already has; passing them in ``extra`` raises
_RESERVED_LOG_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Field names whose values are credentials
SECRET_FIELDS = frozenset(
    {"access_token", "refresh_token", "token", "password", "client_secret", "authorization"}
)

MAX_ERROR_MESSAGE_CHARS = 500

REDACTED = "[REDACTED]"


def _build_extra(fields: dict[str, Any]) -> dict[str, Any]:
    extra = {}
    for key, value in fields.items():
        if key in _RESERVED_LOG_KEYS:
            continue
        if key.lower() in SECRET_FIELDS and value is not None:
            value = REDACTED
        elif key.endswith("url") and isinstance(value, str):
            value = sanitize_url(value)
        extra[key] = value
    return extra


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured fields.

    Reserved LogRecord attributes are dropped, credential fields are
    redacted and ``*url`` fields have secret query parameters masked.
    ``exc_info`` is passed through to the logger.

    Example:
        log_with_context(
            logger, logging.DEBUG, "GET /api/user -> 200",
            http_method="GET",
            http_status=200,
            duration_ms=elapsed,
        )
    """
    exc_info = kwargs.pop("exc_info", None)
    logger.log(level, msg, exc_info=exc_info, extra=_build_extra(kwargs))


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log an exception (or warning instance) with its type, message and category.

    ``error_category`` is taken from SsoError subclasses. The message is
    truncated to MAX_ERROR_MESSAGE_CHARS.
    """
    category = getattr(exc, "category", None)
    if category is not None and "error_category" not in kwargs:
        kwargs["error_category"] = getattr(category, "value", str(category))
    kwargs.setdefault("error_type", type(exc).__name__)

    error_msg = str(exc)
    if len(error_msg) > MAX_ERROR_MESSAGE_CHARS:
        error_msg = error_msg[:MAX_ERROR_MESSAGE_CHARS] + "..."
    kwargs["error_message"] = error_msg

    logger.log(
        level,
        msg,
        exc_info=exc if include_traceback else None,
        extra=_build_extra(kwargs),
    )


__all__ = ["log_with_context", "log_exception", "SECRET_FIELDS", "MAX_ERROR_MESSAGE_CHARS"]

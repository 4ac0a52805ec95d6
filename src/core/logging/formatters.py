"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any, Callable, Optional

from core.logging.context import get_log_context
from core.utils.json_serializers import json_serializer

_SECRET_QUERY = re.compile(
    r"([?&])(token|access_token|refresh_token|secret|client_secret|password|auth)=[^&#]*",
    re.IGNORECASE,
)


def sanitize_url(url: str) -> str:
    """Mask the values of credential query parameters in a URL."""
    return _SECRET_QUERY.sub(r"\1\2=[REDACTED]", url)


def _coerce(kind: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def convert(value: Any) -> Any:
        try:
            return kind(value)
        except (TypeError, ValueError):
            return None

    return convert


def _passthrough(value: Any) -> Any:
    return value


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Only the record attributes named in FIELDS are emitted, each passed
    through its converter. Numeric fields that cannot be converted are
    written as null. URL-valued fields are sanitized.
    """

    FIELDS: dict[str, Callable[[Any], Any]] = {
        "request_id": _passthrough,
        "duration_ms": _coerce(float),
        "http_status": _coerce(int),
        "http_method": _passthrough,
        "http_url": sanitize_url,
        "response_mode": _passthrough,
        "dispatch_state": _passthrough,
        "items_decoded": _coerce(int),
        "error_category": _passthrough,
        "error_message": _passthrough,
        "error_type": _passthrough,
        "grant_type": _passthrough,
        "client_id": _passthrough,
        "token_endpoint": sanitize_url,
        "token_type": _passthrough,
        "expires_in": _coerce(int),
        "force": _passthrough,
        "transport": _passthrough,
        "strategy": _passthrough,
        "singleton": _passthrough,
        "url": sanitize_url,
    }

    # Levels whose entries carry file:line
    SOURCE_LEVELS = frozenset({logging.DEBUG, logging.ERROR, logging.CRITICAL})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({k: v for k, v in get_log_context().items() if v})

        if record.levelno in self.SOURCE_LEVELS:
            entry["file"] = f"{record.filename}:{record.lineno}"

        for name, convert in self.FIELDS.items():
            value = getattr(record, name, None)
            if value is None:
                continue
            if convert is sanitize_url and not isinstance(value, str):
                entry[name] = value
            else:
                entry[name] = convert(value)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "stacktrace": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line console output: time, level, [operation], short ids, message.

    Level names are colored only when stdout is a terminal.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _level(self, record: logging.LogRecord) -> str:
        color: Optional[str] = self.LEVEL_COLORS.get(record.levelno) if self._use_colors else None
        return f"{color}{record.levelname}{self.RESET}" if color else record.levelname

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()
        head = [datetime.now().strftime("%Y-%m-%d %H:%M:%S"), self._level(record)]
        if ctx["operation"]:
            head.append(f"[{ctx['operation']}]")

        tags = []
        request_id = getattr(record, "request_id", None) or ctx["request_id"]
        if request_id:
            tags.append(f"[{request_id[:8]}]")
        if ctx["session_id"]:
            tags.append(f"[sid:{ctx['session_id'][:8]}]")

        body = record.getMessage()
        if record.exc_info:
            body += "\n" + self.formatException(record.exc_info)
        if tags:
            body = " ".join(tags) + " " + body
        return " - ".join(head) + " - " + body


__all__ = ["JSONFormatter", "ConsoleFormatter", "sanitize_url"]

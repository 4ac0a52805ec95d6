"""Context managers for structured logging."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from core.logging.context import bind_log_context, reset_log_context
from core.logging.utilities import log_exception, log_with_context


class LogContext:
    """
    Bind log context fields for the duration of a block.

    Fields left as None keep their current value. On exit every field is
    restored to what it was before the block, even if the block raised.

    Usage:
        with LogContext(session_id=session.id, principal=user):
            await sso.users.get_user("ann")
    """

    def __init__(
        self,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        session_id: Optional[str] = None,
        principal: Optional[str] = None,
    ):
        self.fields = {
            "request_id": request_id,
            "operation": operation,
            "session_id": session_id,
            "principal": principal,
        }
        self._tokens: dict = {}

    def __enter__(self) -> "LogContext":
        self._tokens = bind_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        reset_log_context(self._tokens)
        self._tokens = {}
        return False


class OperationContext:
    """
    Time a named operation and log its outcome.

    The operation name is bound to the log context while the block runs, so
    records emitted inside it (dispatch, token setup) carry it too. Success
    is logged at ``level``; an exception is logged with its category and
    re-raised.
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.DEBUG,
        **context: Any,
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.context = context
        self._start_time = 0.0
        self._log_context = LogContext(operation=operation)

    @property
    def duration_ms(self) -> float:
        return round((time.perf_counter() - self._start_time) * 1000, 2)

    def __enter__(self) -> "OperationContext":
        self._log_context.__enter__()
        self._start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_val is not None:
                log_exception(
                    self.logger,
                    exc_val,
                    f"Failed: {self.operation}",
                    include_traceback=False,
                    duration_ms=self.duration_ms,
                    **self.context,
                )
            else:
                log_with_context(
                    self.logger,
                    self.level,
                    f"Completed: {self.operation}",
                    duration_ms=self.duration_ms,
                    **self.context,
                )
        finally:
            self._log_context.__exit__(exc_type, exc_val, exc_tb)
        return False

    def add_context(self, **kwargs: Any) -> None:
        """Attach fields learned mid-operation (status code, item count)."""
        self.context.update(kwargs)


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **context: Any,
) -> Iterator[OperationContext]:
    """Functional form of OperationContext."""
    with OperationContext(logger, operation, level=level, **context) as op:
        yield op


__all__ = ["LogContext", "OperationContext", "log_operation"]

"""Context variables for structured logging.

Fields set here are copied onto every record by the formatters. They follow
asyncio task boundaries, so a field bound while serving one inbound session
never leaks into another task.
"""

from contextvars import ContextVar, Token
from typing import Dict, Optional

LOG_CONTEXT_FIELDS = ("request_id", "operation", "session_id", "principal")

_vars: Dict[str, ContextVar[str]] = {
    name: ContextVar(name, default="") for name in LOG_CONTEXT_FIELDS
}


def set_log_context(
    request_id: Optional[str] = None,
    operation: Optional[str] = None,
    session_id: Optional[str] = None,
    principal: Optional[str] = None,
) -> None:
    bind_log_context(
        request_id=request_id,
        operation=operation,
        session_id=session_id,
        principal=principal,
    )


def bind_log_context(**fields: Optional[str]) -> Dict[str, Token]:
    """Set the non-None fields and return tokens for reset_log_context()."""
    tokens = {}
    for name, value in fields.items():
        if value is None:
            continue
        if name not in _vars:
            raise KeyError(f"Unknown log context field: {name}")
        tokens[name] = _vars[name].set(value)
    return tokens


def reset_log_context(tokens: Dict[str, Token]) -> None:
    for name, token in tokens.items():
        _vars[name].reset(token)


def get_log_context() -> Dict[str, str]:
    return {name: var.get() for name, var in _vars.items()}


def clear_log_context() -> None:
    for var in _vars.values():
        var.set("")


__all__ = [
    "LOG_CONTEXT_FIELDS",
    "set_log_context",
    "bind_log_context",
    "reset_log_context",
    "get_log_context",
    "clear_log_context",
]

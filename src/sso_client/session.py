"""
Inbound web session and security context.

When the SDK runs inside a web application, the request handler binds the
inbound ``WebSession`` (and the authenticated principal) to the current task
with ``bind_session``. Calls made while a session is bound use a transport
scoped to that session, authenticated with the principal's own bearer token.

Usage:
    auth = Authentication(principal="alice", token_value=bearer, session_id=sid)
    session = WebSession(sid, auth)
    with bind_session(session):
        user = await client.users.get_user("alice")
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from core.logging.context_managers import LogContext
from core.oauth2.models import OAuth2Token
from sso_client.context import ClientContext
from sso_client.models import User

if TYPE_CHECKING:
    from sso_client.config import SsoClientConfig
    from sso_client.transport import Transport

logger = logging.getLogger(__name__)

_current_session: ContextVar[Optional["WebSession"]] = ContextVar("sso_session", default=None)
_current_authentication: ContextVar[Optional["Authentication"]] = ContextVar(
    "sso_authentication", default=None
)


@dataclass
class Authentication:
    """
    Authenticated principal of an inbound request.

    Attributes:
        principal: Principal name (username)
        token_value: Bearer token the principal authenticated with
        token_type: Token type (typically "Bearer")
        session_id: Id of the web session the token belongs to
        details: Principal details as returned by the userinfo endpoint
    """

    principal: Optional[str] = None
    token_value: Optional[str] = field(default=None, repr=False)
    token_type: str = "Bearer"
    session_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_token(self) -> Optional[OAuth2Token]:
        if not self.token_value:
            return None
        return OAuth2Token(access_token=self.token_value, token_type=self.token_type or "Bearer")


class WebSession:
    """
    Session of an inbound web request.

    Owns a ClientContext whose token comes from the session's authentication,
    and (lazily) a transport bound to that context.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        authentication: Optional[Authentication] = None,
        config: Optional[SsoClientConfig] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.authentication = authentication
        self.context = ClientContext(config=config, token_supplier=self._session_token)
        self.transport: Optional[Transport] = None
        self.invalidated = False

    def _session_token(self) -> Optional[OAuth2Token]:
        if self.authentication is None:
            return None
        return self.authentication.to_token()

    def invalidate(self) -> None:
        """Mark the session unusable and drop its cached token."""
        logger.debug(f"Invalidating session: {self.id}")
        self.invalidated = True
        self.context.clear_token()

    async def close(self) -> None:
        if self.transport is not None:
            await self.transport.close()
            self.transport = None

    def __repr__(self) -> str:
        return f"WebSession(id={self.id!r}, invalidated={self.invalidated})"


def get_current_session() -> Optional[WebSession]:
    return _current_session.get()


def get_authentication() -> Optional[Authentication]:
    """Authentication in the current security context."""
    return _current_authentication.get()


def set_authentication(authentication: Optional[Authentication]) -> None:
    _current_authentication.set(authentication)


def clear_security_context() -> None:
    _current_authentication.set(None)


@contextmanager
def bind_session(
    session: WebSession, authentication: Optional[Authentication] = None
) -> Iterator[WebSession]:
    """Bind an inbound session (and its principal) to the current task."""
    authentication = authentication or session.authentication
    session_token = _current_session.set(session)
    auth_token = _current_authentication.set(authentication)
    principal = authentication.principal if authentication else None
    try:
        with LogContext(session_id=session.id, principal=principal):
            yield session
    finally:
        _current_authentication.reset(auth_token)
        _current_session.reset(session_token)


# Security context helpers


def get_token_value(authentication: Optional[Authentication] = None) -> Optional[str]:
    """Token value of the given (or current) authentication."""
    authentication = authentication or get_authentication()
    if authentication is None:
        return None
    return authentication.token_value


def get_token_type(authentication: Optional[Authentication] = None) -> Optional[str]:
    authentication = authentication or get_authentication()
    if authentication is None:
        return None
    return authentication.token_type


def get_session_id(authentication: Optional[Authentication] = None) -> Optional[str]:
    authentication = authentication or get_authentication()
    if authentication is None:
        return None
    return authentication.session_id


def get_token(authentication: Optional[Authentication] = None) -> Optional[OAuth2Token]:
    """Token of the given (or current) authentication, None when absent."""
    authentication = authentication or get_authentication()
    if authentication is None:
        return None
    return authentication.to_token()


def get_principal_user(authentication: Optional[Authentication] = None) -> Optional[User]:
    """User built from the principal details of the current security context."""
    authentication = authentication or get_authentication()
    if authentication is None or not authentication.details:
        return None
    return User.model_validate(authentication.details)


__all__ = [
    "Authentication",
    "WebSession",
    "bind_session",
    "get_current_session",
    "get_authentication",
    "set_authentication",
    "clear_security_context",
    "get_token_value",
    "get_token_type",
    "get_session_id",
    "get_token",
    "get_principal_user",
]

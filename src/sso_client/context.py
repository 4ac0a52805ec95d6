"""Client contexts: token cache, pinned transport and result slot."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from core.oauth2.cache import TokenCache
from core.oauth2.models import CredentialDescriptor, OAuth2Token

if TYPE_CHECKING:
    from sso_client.config import SsoClientConfig
    from sso_client.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a dispatched call: a value or an error."""

    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Result[T]":
        return cls(error=error)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value, raising the recorded error on failure."""
        if self.error is not None:
            raise self.error
        return self.value


class ClientContext:
    """
    Scope of one logical connection to the SSO server.

    Owns a single-slot token cache, optionally a pinned transport and a
    config override, the credentials used to obtain tokens, and a result
    slot recording the outcome of the last call dispatched through it.

    The process-wide client-credentials context is created with
    ``singleton=True``; its result slot is never written.
    """

    def __init__(
        self,
        config: SsoClientConfig | None = None,
        credentials: CredentialDescriptor | None = None,
        token_supplier: Callable[[], OAuth2Token | None] | None = None,
        transport: Transport | None = None,
        singleton: bool = False,
        admin: bool | None = None,
        token_cache: TokenCache | None = None,
    ):
        self.config = config
        self.credentials = credentials
        self.token_supplier = token_supplier
        self.transport = transport
        self.singleton = singleton
        self.admin = admin
        if token_cache is None:
            token_cache = TokenCache(
                expiry_aware=config.expiry_aware_cache if config else False,
                refresh_buffer_seconds=config.refresh_buffer_seconds if config else 0,
            )
        self.token_cache = token_cache
        self.result: Result[Any] | None = None

    # Token cache

    def get_token(self) -> OAuth2Token | None:
        return self.token_cache.get()

    def set_token(self, token: OAuth2Token) -> None:
        self.token_cache.set(token)

    def clear_token(self) -> None:
        self.token_cache.clear()

    # Result slot

    def record(self, result: Result[Any]) -> None:
        """Store a call outcome unless this is the shared singleton context."""
        if self.singleton:
            return
        self.result = result

    def clear_result(self) -> None:
        self.result = None

    # With

    def with_transport(self, transport: Transport) -> "ClientContext":
        self.transport = transport
        return self

    def with_config(self, config: SsoClientConfig) -> "ClientContext":
        self.config = config
        return self

    def with_admin(self, admin: bool = True) -> "ClientContext":
        self.admin = admin
        return self

    def __repr__(self) -> str:
        grant = self.credentials.grant_type.value if self.credentials else None
        return (
            f"ClientContext(grant={grant}, singleton={self.singleton}, "
            f"pinned={self.transport is not None}, has_token={self.get_token() is not None})"
        )


__all__ = ["ClientContext", "Result"]

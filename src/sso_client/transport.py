"""
HTTP transports and transport selection.

A ``Transport`` is an aiohttp session bound to the ClientContext whose token
authenticates its requests. ``TransportSelector`` picks one per call from an
ordered chain of strategies:

    1. explicit   - the call's context pins a transport
    2. session    - web mode and an inbound WebSession is bound to the task
    3. singleton  - the ProcessScope's client-credentials transport

Transports are closed only by ``ProcessScope.close()``, ``WebSession.close()``
or ``SsoClient.close()``.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import aiohttp

from core.errors.exceptions import SsoError
from core.logging.utilities import log_with_context
from core.oauth2.models import CredentialDescriptor
from sso_client.config import SsoClientConfig
from sso_client.context import ClientContext
from sso_client.session import get_current_session

logger = logging.getLogger(__name__)


def new_client_session(config: SsoClientConfig) -> aiohttp.ClientSession:
    """
    ClientSession with the timeouts, connection limits and TLS verification
    from config. Must be called inside the running event loop.
    """
    timeout = aiohttp.ClientTimeout(
        total=config.timeout_total,
        connect=config.timeout_connect,
    )
    connector = aiohttp.TCPConnector(
        limit=config.max_connections,
        limit_per_host=config.max_connections_per_host,
        ssl=config.verify_ssl,
    )
    return aiohttp.ClientSession(timeout=timeout, connector=connector)


class Transport:
    """
    aiohttp client session bound to one ClientContext.

    The underlying ClientSession is created on first use, inside the running
    event loop, with timeouts and connection limits from config.
    """

    def __init__(
        self,
        context: ClientContext,
        config: Optional[SsoClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        name: str = "transport",
    ):
        self.context = context
        self.config = config or context.config or SsoClientConfig()
        self.name = name
        self._session = session
        self._owns_session = session is None

    async def open(self) -> aiohttp.ClientSession:
        """Get or create the HTTP client session."""
        if self._session is None or self._session.closed:
            self._session = new_client_session(self.config)
            self._owns_session = True
            log_with_context(
                logger,
                logging.DEBUG,
                "Opened HTTP session",
                transport=self.name,
                singleton=self.context.singleton,
            )
        return self._session

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None

    def __repr__(self) -> str:
        return f"Transport(name={self.name!r}, closed={self.closed})"


class ProcessScope:
    """
    Holder of the process-wide context and transport.

    The context uses client credentials unless other credentials are given.

    Passed explicitly to clients instead of living in module globals. The
    transport is created lazily on first use, at most once per scope.
    """

    def __init__(self, config: SsoClientConfig, credentials: Optional[CredentialDescriptor] = None):
        self.config = config
        self.credentials = credentials
        self._lock = threading.Lock()
        self._context: Optional[ClientContext] = None
        self._transport: Optional[Transport] = None

    @property
    def context(self) -> ClientContext:
        """Singleton context (created on first access)."""
        if self._context is None:
            with self._lock:
                if self._context is None:
                    self._context = ClientContext(
                        config=self.config,
                        credentials=self.credentials or self.config.client_credentials(),
                        singleton=True,
                    )
        return self._context

    @property
    def has_transport(self) -> bool:
        return self._transport is not None

    def get_transport(self) -> Transport:
        """Get or lazily create the singleton transport."""
        if self._transport is None:
            context = self.context
            with self._lock:
                if self._transport is None:
                    self._transport = Transport(context, self.config, name="singleton")
                    logger.debug("Created singleton client-credentials transport")
        return self._transport

    async def close(self) -> None:
        with self._lock:
            transport = self._transport
            self._transport = None
        if transport is not None:
            await transport.close()


@dataclass(frozen=True)
class Selection:
    """Transport chosen for a call and the context owning its token."""

    transport: Transport
    context: ClientContext
    strategy: str


class TransportStrategy(ABC):
    name: str = ""

    @abstractmethod
    def select(self, context: Optional[ClientContext]) -> Optional[Selection]:
        """Return a selection, or None to defer to the next strategy."""


class ExplicitTransportStrategy(TransportStrategy):
    """Use the transport pinned on the call's context."""

    name = "explicit"

    def select(self, context: Optional[ClientContext]) -> Optional[Selection]:
        if context is None or context.transport is None:
            return None
        transport = context.transport
        return Selection(transport, transport.context, self.name)


class SessionTransportStrategy(TransportStrategy):
    """Use the transport of the inbound web session bound to this task."""

    name = "session"

    def __init__(self, config: SsoClientConfig):
        self.config = config

    def select(self, context: Optional[ClientContext]) -> Optional[Selection]:
        if not self.config.web:
            return None
        session = get_current_session()
        if session is None or session.invalidated:
            return None
        if session.transport is None:
            if session.context.config is None:
                session.context.config = self.config
            session.transport = Transport(session.context, self.config, name=f"session:{session.id}")
        return Selection(session.transport, session.context, self.name)


class SingletonTransportStrategy(TransportStrategy):
    """Use the process scope's client-credentials transport."""

    name = "singleton"

    def __init__(self, scope: ProcessScope):
        self.scope = scope

    def select(self, context: Optional[ClientContext]) -> Optional[Selection]:
        transport = self.scope.get_transport()
        return Selection(transport, transport.context, self.name)


class TransportSelector:
    """Ordered chain of transport strategies; the first match wins."""

    def __init__(
        self,
        scope: ProcessScope,
        config: Optional[SsoClientConfig] = None,
        strategies: Optional[list[TransportStrategy]] = None,
    ):
        self.scope = scope
        self.config = config or scope.config
        self.strategies = strategies or [
            ExplicitTransportStrategy(),
            SessionTransportStrategy(self.config),
            SingletonTransportStrategy(scope),
        ]

    def select(self, context: Optional[ClientContext] = None) -> Selection:
        for strategy in self.strategies:
            selection = strategy.select(context)
            if selection is not None:
                logger.debug(
                    f"Selected {selection.strategy} transport",
                    extra={"strategy": selection.strategy, "transport": selection.transport.name},
                )
                return selection
        raise SsoError("No transport available for request")


__all__ = [
    "new_client_session",
    "Transport",
    "ProcessScope",
    "Selection",
    "TransportStrategy",
    "ExplicitTransportStrategy",
    "SessionTransportStrategy",
    "SingletonTransportStrategy",
    "TransportSelector",
]

"""OAuth2 token setup for client contexts."""

import asyncio
import logging
import threading
import weakref
from collections.abc import Callable
from typing import Protocol, runtime_checkable

import aiohttp

from core.errors.exceptions import NotAuthenticatedWarning
from core.logging.utilities import log_exception, log_with_context
from core.oauth2.cache import TokenCache
from core.oauth2.models import CredentialDescriptor, OAuth2Token
from core.oauth2.provider import BaseOAuth2Provider, TokenEndpointProvider

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenContext(Protocol):
    """
    Anything that owns a token cache and knows where its tokens come from.

    ``credentials`` is used for the client-credentials and password grants.
    ``token_supplier`` returns the token of an already authenticated
    principal (session-bound contexts).
    """

    token_cache: TokenCache
    credentials: CredentialDescriptor | None
    token_supplier: Callable[[], OAuth2Token | None] | None


class OAuth2TokenManager:
    """
    Obtains and caches tokens for client contexts.

    A cache hit never touches the network. On a miss the token is obtained
    from the context's credential descriptor through a provider (one per
    descriptor, reused), or from the context's token supplier.

    Default providers share one HTTP session, built by ``session_factory``
    on first use so the token endpoint sees the same TLS, timeout and
    connection settings as resource calls.

    Concurrent misses on one context each acquire a token unless
    ``guard_refresh`` is enabled, in which case refresh is serialized per
    context and the cache is re-checked after the lock is taken.

    Usage:
        manager = OAuth2TokenManager()
        token = await manager.setup_token(context)
        headers = {"Authorization": token.authorization_header}
    """

    def __init__(
        self,
        guard_refresh: bool = False,
        provider_factory: Callable[[CredentialDescriptor], BaseOAuth2Provider] | None = None,
        session_factory: Callable[[], aiohttp.ClientSession] | None = None,
    ):
        self.guard_refresh = guard_refresh
        self._provider_factory = provider_factory or self._endpoint_provider
        self._session_factory = session_factory or aiohttp.ClientSession
        self._session: aiohttp.ClientSession | None = None
        self._providers: dict[CredentialDescriptor, BaseOAuth2Provider] = {}
        self._lock = threading.Lock()
        self._refresh_locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

        logger.debug(f"Initialized OAuth2TokenManager (guard_refresh={guard_refresh})")

    def _endpoint_provider(self, descriptor: CredentialDescriptor) -> BaseOAuth2Provider:
        return TokenEndpointProvider(descriptor, session_source=self.get_session)

    async def get_session(self) -> aiohttp.ClientSession:
        """Shared token endpoint session, (re)created inside the running loop."""
        if self._session is None or self._session.closed:
            self._session = self._session_factory()
        return self._session

    def get_provider(self, descriptor: CredentialDescriptor) -> BaseOAuth2Provider:
        """Get or create the provider for a credential descriptor."""
        with self._lock:
            provider = self._providers.get(descriptor)
            if provider is None:
                provider = self._provider_factory(descriptor)
                self._providers[descriptor] = provider
            return provider

    async def acquire_once(self, descriptor: CredentialDescriptor) -> OAuth2Token:
        """
        Exchange an ad-hoc descriptor (a user's password grant) for a token.

        The provider is closed afterwards and never cached, so per-user
        credentials do not accumulate for the life of the manager.

        Raises:
            TokenAcquisitionError: If the token endpoint exchange fails
        """
        provider = self._provider_factory(descriptor)
        try:
            return await provider.acquire_token()
        finally:
            await provider.close()

    def _refresh_lock(self, context: TokenContext) -> asyncio.Lock:
        with self._lock:
            lock = self._refresh_locks.get(context)
            if lock is None:
                lock = asyncio.Lock()
                self._refresh_locks[context] = lock
            return lock

    async def setup_token(
        self, context: TokenContext, force: bool = False
    ) -> OAuth2Token | None:
        """
        Return the context's token, obtaining and caching one on a miss.

        Args:
            context: Context owning the token cache
            force: Skip the cache and always obtain a fresh token

        Returns:
            The token, or None when the context has no way to obtain one

        Raises:
            TokenAcquisitionError: If the token endpoint exchange fails
        """
        if not force:
            cached = context.token_cache.get()
            if cached is not None:
                return cached

        if not self.guard_refresh:
            return await self._obtain_and_store(context, force)

        async with self._refresh_lock(context):
            # Another coroutine may have stored a token while we waited
            if not force:
                cached = context.token_cache.get()
                if cached is not None:
                    logger.debug("Token was set up by another coroutine")
                    return cached
            return await self._obtain_and_store(context, force)

    async def _obtain_and_store(
        self, context: TokenContext, force: bool
    ) -> OAuth2Token | None:
        token = await self.obtain_token(context)
        if token is None:
            log_exception(
                logger,
                NotAuthenticatedWarning("No token found"),
                "setup_token: No token found",
                level=logging.WARNING,
                include_traceback=False,
                force=force,
            )
            return None

        context.token_cache.set(token)
        log_with_context(
            logger,
            logging.DEBUG,
            "Token set up",
            token_type=token.token_type,
            force=force,
        )
        return token

    async def obtain_token(self, context: TokenContext) -> OAuth2Token | None:
        """Obtain a fresh token for the context without touching its cache."""
        if context.credentials is not None:
            provider = self.get_provider(context.credentials)
            return await provider.acquire_token()
        if context.token_supplier is not None:
            return context.token_supplier()
        return None

    def clear_token(self, context: TokenContext) -> None:
        context.token_cache.clear()

    async def close(self) -> None:
        """Close providers and the shared token endpoint session."""
        with self._lock:
            providers = list(self._providers.values())
            self._providers.clear()

        for provider in providers:
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"Error closing token provider: {e}")

        session, self._session = self._session, None
        if session is not None and not session.closed:
            await session.close()
            await asyncio.sleep(0)

        logger.debug("OAuth2TokenManager closed")


__all__ = ["OAuth2TokenManager", "TokenContext"]

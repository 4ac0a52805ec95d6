"""OAuth2 provider: base interface and token endpoint implementation."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

import aiohttp

from core.logging.utilities import log_with_context
from core.oauth2.exceptions import TokenAcquisitionError
from core.oauth2.models import CredentialDescriptor, OAuth2Token

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TIMEOUT_SECONDS = 30


class BaseOAuth2Provider(ABC):
    """
    Abstract base class for OAuth2 token providers.

    Used by OAuth2TokenManager to obtain tokens for a client context.
    """

    @abstractmethod
    async def acquire_token(self) -> OAuth2Token:
        """Acquire a new OAuth2 token."""
        pass

    async def close(self) -> None:
        """Release any resources held by the provider."""
        return None


class TokenEndpointProvider(BaseOAuth2Provider):
    """
    OAuth2 provider for the client-credentials and resource-owner-password grants.

    Performs exactly one POST to the token endpoint per acquisition. There is
    no retry; failures surface as TokenAcquisitionError.

    The HTTP session comes from ``session`` or ``session_source`` (neither is
    closed by the provider), otherwise the provider opens its own.
    ``timeout_seconds`` overrides the session's timeout per request.
    """

    def __init__(
        self,
        descriptor: CredentialDescriptor,
        session: aiohttp.ClientSession | None = None,
        timeout_seconds: float | None = None,
        session_source: Callable[[], Awaitable[aiohttp.ClientSession]] | None = None,
    ):
        self.descriptor = descriptor
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._session_source = session_source
        self._owns_session = False

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session_source is not None:
            return await self._session_source()
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds or DEFAULT_TOKEN_TIMEOUT_SECONDS)
            )
            self._owns_session = True
        return self._session

    async def acquire_token(self) -> OAuth2Token:
        """
        Acquire token using the descriptor's grant.

        Returns:
            OAuth2Token with access token

        Raises:
            TokenAcquisitionError: If token acquisition fails
        """
        session = await self._ensure_session()
        descriptor = self.descriptor
        grant = descriptor.grant_type.value
        request_options = {}
        if self.timeout_seconds is not None:
            request_options["timeout"] = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with session.post(
                descriptor.token_endpoint,
                data=descriptor.form_data(),
                headers={"Accept": "application/json"},
                **request_options,
            ) as response:
                if response.status != 200:
                    error_text = await response.text()
                    log_with_context(
                        logger,
                        logging.ERROR,
                        f"Token acquisition failed: HTTP {response.status}",
                        grant_type=grant,
                        client_id=descriptor.client_id,
                        token_endpoint=descriptor.token_endpoint,
                        http_status=response.status,
                    )
                    raise TokenAcquisitionError(
                        f"HTTP {response.status}: {error_text[:200]}",
                        context={"http_status": response.status},
                    )

                response_data = await response.json(content_type=None)

                if not isinstance(response_data, dict) or not response_data.get(
                    "access_token"
                ):
                    raise TokenAcquisitionError(
                        "Token response did not contain an access_token"
                    )

                log_with_context(
                    logger,
                    logging.DEBUG,
                    "Acquired token",
                    grant_type=grant,
                    client_id=descriptor.client_id,
                    expires_in=response_data.get("expires_in"),
                )

                return OAuth2Token.from_response(response_data)

        except TokenAcquisitionError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                f"HTTP error during token acquisition: {type(e).__name__}",
                extra={"grant_type": grant, "client_id": descriptor.client_id},
            )
            raise TokenAcquisitionError(f"HTTP error: {e}", cause=e) from e
        except Exception as e:
            logger.error(
                f"Unexpected error during token acquisition: {type(e).__name__}",
                extra={"grant_type": grant, "client_id": descriptor.client_id},
            )
            raise TokenAcquisitionError(f"Token acquisition failed: {e}", cause=e) from e

    async def close(self) -> None:
        """Close HTTP client session if this provider created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)


async def acquire_token(
    descriptor: CredentialDescriptor,
    session: aiohttp.ClientSession | None = None,
) -> OAuth2Token:
    """
    One-shot token acquisition for a credential descriptor.

    Args:
        descriptor: How to obtain the token
        session: Optional shared session; a private one is created and
            closed otherwise

    Raises:
        TokenAcquisitionError: If token acquisition fails
    """
    provider = TokenEndpointProvider(descriptor, session=session)
    try:
        return await provider.acquire_token()
    finally:
        await provider.close()


__all__ = ["BaseOAuth2Provider", "TokenEndpointProvider", "acquire_token"]

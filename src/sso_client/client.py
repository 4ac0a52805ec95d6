"""
SSO client facade.

Wires the process scope, token manager, transport selector and dispatcher
together and exposes the resource operations as attributes.

Usage:
    async with make_sso_client(load_config()) as sso:
        page = await sso.users.list_users(UserFilter(q="ann"), Pageable(size=10))
        async for group in sso.groups.stream_groups():
            ...
"""

import logging
from typing import Optional

from core.oauth2 import OAuth2Token, OAuth2TokenManager
from sso_client.config import SsoClientConfig, get_config
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDispatcher
from sso_client.resources import (
    AuthResource,
    ClientsResource,
    GroupsResource,
    InvitationsResource,
    MembersResource,
    RegistrationResource,
    RolesResource,
    UsersResource,
)
from sso_client.session import get_current_session
from sso_client.transport import ProcessScope, Transport, TransportSelector, new_client_session

logger = logging.getLogger(__name__)


class SsoClient:
    """
    Asynchronous client for the SSO server.

    Calls made without a context use the inbound web session's transport when
    one is bound to the task (web mode), otherwise the process-wide
    client-credentials transport. Pass a context from ``make_context()`` to
    run calls as a specific user.
    """

    def __init__(
        self,
        config: Optional[SsoClientConfig] = None,
        scope: Optional[ProcessScope] = None,
        token_manager: Optional[OAuth2TokenManager] = None,
        selector: Optional[TransportSelector] = None,
    ):
        self.config = config or get_config()
        self.scope = scope or ProcessScope(self.config)
        self.token_manager = token_manager or OAuth2TokenManager(
            guard_refresh=self.config.guard_refresh,
            session_factory=lambda: new_client_session(self.config),
        )
        self.selector = selector or TransportSelector(self.scope, self.config)
        self.dispatcher = RequestDispatcher(self.selector, self.token_manager, self.config)
        self._transports: list[Transport] = []

        self.users = UsersResource(self.dispatcher, self.config)
        self.groups = GroupsResource(self.dispatcher, self.config)
        self.members = MembersResource(self.dispatcher, self.config)
        self.invitations = InvitationsResource(self.dispatcher, self.config)
        self.roles = RolesResource(self.dispatcher, self.config)
        self.clients = ClientsResource(self.dispatcher, self.config)
        self.registration = RegistrationResource(self.dispatcher, self.config, self.scope)
        self.auth = AuthResource(self.dispatcher, self.config)

    def make_context(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        admin: Optional[bool] = None,
    ) -> ClientContext:
        """
        Create a context with its own transport.

        With a username (or a configured user) the context uses the password
        grant, otherwise client credentials.
        """
        if username or (password is None and self.config.username):
            credentials = self.config.password_credentials(username, password)
        else:
            credentials = self.config.client_credentials()
        context = ClientContext(config=self.config, credentials=credentials, admin=admin)
        transport = Transport(context, self.config, name=f"context:{credentials.grant_type.value}")
        self._transports.append(transport)
        return context.with_transport(transport)

    # Tokens

    async def setup_token(
        self, context: Optional[ClientContext] = None, force: bool = False
    ) -> Optional[OAuth2Token]:
        """Set up the token of the context the next call through ``context`` would use."""
        selection = self.selector.select(context)
        return await self.token_manager.setup_token(selection.context, force=force)

    async def setup_client_token(self, force: bool = False) -> Optional[OAuth2Token]:
        """Set up the process-wide client-credentials token."""
        return await self.token_manager.setup_token(self.scope.context, force=force)

    async def get_token(
        self,
        username: str,
        password: str,
        context: Optional[ClientContext] = None,
    ) -> OAuth2Token:
        """
        Obtain a token for a user with the password grant.

        The token is stored in ``context`` when one is given. No provider is
        kept for the user afterwards.
        """
        descriptor = self.config.password_credentials(username, password)
        token = await self.token_manager.acquire_once(descriptor)
        if context is not None:
            context.set_token(token)
        return token

    def get_session_token(self) -> Optional[OAuth2Token]:
        """Token cached on the web session bound to this task, if any."""
        session = get_current_session()
        if session is None:
            return None
        return session.context.get_token()

    # Lifecycle

    async def close(self) -> None:
        """Close every transport and token provider this client created."""
        transports, self._transports = self._transports, []
        for transport in transports:
            try:
                await transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport {transport.name}: {e}")
        await self.scope.close()
        await self.token_manager.close()
        logger.debug("SsoClient closed")

    async def __aenter__(self) -> "SsoClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"SsoClient(server={self.config.server!r}, client_id={self.config.client_id!r})"


def make_sso_client(config: Optional[SsoClientConfig] = None) -> SsoClient:
    """Client whose default transport uses the client-credentials grant."""
    return SsoClient(config)


def make_password_sso_client(
    username: str,
    password: str,
    config: Optional[SsoClientConfig] = None,
) -> SsoClient:
    """
    Client whose default transport runs as the given user.

    The process scope's singleton context uses the password grant instead of
    client credentials.
    """
    config = config or get_config()
    scope = ProcessScope(config, credentials=config.password_credentials(username, password))
    return SsoClient(config, scope=scope)


__all__ = ["SsoClient", "make_sso_client", "make_password_sso_client"]

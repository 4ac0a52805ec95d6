"""Tests for the SsoClient facade."""

from unittest.mock import AsyncMock, patch

import pytest

from core.oauth2.manager import OAuth2TokenManager
from core.oauth2.models import GrantType, OAuth2Token
from core.oauth2.provider import BaseOAuth2Provider
from sso_client.client import SsoClient, make_password_sso_client, make_sso_client
from sso_client.config import set_config
from sso_client.resources import AuthResource, UsersResource
from sso_client.session import WebSession, bind_session


class GrantTokenProvider(BaseOAuth2Provider):
    """Issues '<grant>-<n>' tokens and counts exchanges."""

    def __init__(self, descriptor):
        self.descriptor = descriptor
        self.acquire_count = 0
        self.closed = False

    async def acquire_token(self) -> OAuth2Token:
        self.acquire_count += 1
        return OAuth2Token(f"{self.descriptor.grant_type.value}-{self.acquire_count}")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def sso(config):
    return SsoClient(config, token_manager=OAuth2TokenManager(provider_factory=GrantTokenProvider))


class TestConstruction:
    def test_resources_share_dispatcher(self, sso):
        assert isinstance(sso.users, UsersResource)
        assert isinstance(sso.auth, AuthResource)
        assert sso.users.dispatcher is sso.dispatcher
        assert sso.registration.scope is sso.scope

    def test_defaults_to_global_config(self, config):
        set_config(config)

        assert SsoClient().config is config

    def test_guard_refresh_from_config(self, config):
        config.guard_refresh = True

        assert SsoClient(config).token_manager.guard_refresh is True

    def test_repr_has_no_secret(self, sso):
        assert "app-secret" not in repr(sso)
        assert "sso.example.com" in repr(sso)


class TestMakeContext:
    def test_client_credentials_by_default(self, sso):
        context = sso.make_context()

        assert context.credentials.grant_type == GrantType.CLIENT_CREDENTIALS
        assert context.transport.name == "context:client_credentials"
        assert context.transport.context is context

    def test_password_grant_with_username(self, sso):
        context = sso.make_context("ann", "pw", admin=True)

        assert context.credentials.grant_type == GrantType.PASSWORD
        assert context.credentials.username == "ann"
        assert context.admin is True

    def test_configured_user_used_without_arguments(self, config):
        config.username = "svc"
        config.password = "svc-pw"
        sso = SsoClient(config)

        context = sso.make_context()

        assert context.credentials.grant_type == GrantType.PASSWORD
        assert context.credentials.username == "svc"

    @pytest.mark.asyncio
    async def test_context_calls_run_as_user(self, sso, make_response, make_session):
        context = sso.make_context("ann", "pw")
        session = make_session(make_response(200, {"id": "u1"}))
        context.transport._session = session

        user = await sso.users.get_user("u1", context=context)

        assert user.id == "u1"
        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer password-1"
        assert context.get_token().access_token == "password-1"
        assert context.result.succeeded


class TestTokens:
    @pytest.mark.asyncio
    async def test_setup_client_token_is_cached(self, sso):
        first = await sso.setup_client_token()
        second = await sso.setup_client_token()
        forced = await sso.setup_client_token(force=True)

        assert first.access_token == "client_credentials-1"
        assert second is first
        assert forced.access_token == "client_credentials-2"
        assert sso.scope.context.get_token() is forced

    @pytest.mark.asyncio
    async def test_setup_token_for_context(self, sso):
        context = sso.make_context("ann", "pw")

        token = await sso.setup_token(context)

        assert token.access_token == "password-1"
        assert sso.scope.context.get_token() is None

    @pytest.mark.asyncio
    async def test_get_token_stores_on_context(self, sso):
        context = sso.make_context()

        token = await sso.get_token("bob", "pw", context)

        assert token.access_token == "password-1"
        assert context.get_token() is token

    @pytest.mark.asyncio
    async def test_get_token_without_context(self, sso):
        token = await sso.get_token("bob", "pw")

        assert token.access_token == "password-1"
        assert sso.scope.context.get_token() is None

    def test_get_session_token(self, sso, config):
        web_session = WebSession(config=config)
        web_session.context.set_token(OAuth2Token("session-token"))

        assert sso.get_session_token() is None
        with bind_session(web_session):
            assert sso.get_session_token().access_token == "session-token"


class TestTokenEndpointSession:
    @pytest.mark.asyncio
    async def test_password_grants_keep_no_providers(self, sso):
        for i in range(50):
            await sso.get_token(f"user{i}", "pw")

        assert sso.token_manager._providers == {}

    @pytest.mark.asyncio
    async def test_token_session_built_from_config(self, config):
        config.verify_ssl = False
        config.timeout_total = 5.0
        sso = SsoClient(config)

        with patch("sso_client.transport.aiohttp.ClientSession") as session_cls, patch(
            "sso_client.transport.aiohttp.TCPConnector"
        ) as connector_cls:
            session_cls.return_value.closed = False
            session = await sso.token_manager.get_session()
            again = await sso.token_manager.get_session()

        assert session is again
        session_cls.assert_called_once()
        assert session_cls.call_args.kwargs["timeout"].total == 5.0
        assert connector_cls.call_args.kwargs["ssl"] is False
        assert connector_cls.call_args.kwargs["limit"] == config.max_connections


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_close_closes_transports_scope_and_providers(self, sso, make_session):
        context = sso.make_context()
        http_session = make_session()
        context.transport._session = http_session
        context.transport._owns_session = True
        await sso.setup_client_token()
        provider = sso.token_manager.get_provider(sso.scope.context.credentials)

        await sso.close()

        http_session.close.assert_awaited_once()
        assert provider.closed
        assert sso._transports == []

    @pytest.mark.asyncio
    async def test_close_continues_after_transport_error(self, sso):
        context = sso.make_context()
        context.transport.close = AsyncMock(side_effect=RuntimeError("boom"))
        sso.scope.close = AsyncMock()

        await sso.close()

        sso.scope.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_async_context_manager(self, config):
        async with SsoClient(config) as sso:
            sso.scope.close = AsyncMock()

        sso.scope.close.assert_awaited_once()


class TestFactories:
    def test_make_sso_client(self, config):
        sso = make_sso_client(config)

        assert sso.scope.context.credentials.grant_type == GrantType.CLIENT_CREDENTIALS

    def test_make_password_sso_client(self, config):
        sso = make_password_sso_client("ann", "pw", config)

        assert sso.scope.context.credentials.grant_type == GrantType.PASSWORD
        assert sso.scope.context.credentials.username == "ann"
        assert sso.scope.context.singleton

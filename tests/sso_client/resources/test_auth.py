"""Tests for logout."""

import pytest

from core.oauth2.models import OAuth2Token
from sso_client.resources.auth import AuthResource
from sso_client.session import Authentication, WebSession, bind_session, get_authentication

REVOKE_URL = "https://sso.example.com/oauth/revoke"


@pytest.mark.asyncio
async def test_logout_revokes_and_clears_token(dispatcher, config, pinned, make_response):
    context, session = pinned(make_response(200))
    auth = AuthResource(dispatcher, config)

    await auth.logout(context)

    call = session.request.call_args
    assert call.args[:2] == ("POST", REVOKE_URL)
    assert call.kwargs["headers"]["Authorization"] == "Bearer cached"
    assert call.kwargs["headers"]["Content-Type"] == "application/json"
    assert context.get_token() is None


@pytest.mark.asyncio
async def test_logout_without_context_uses_singleton(dispatcher, config, scope, make_response, make_session):
    scope.context.set_token(OAuth2Token("client-token"))
    session = make_session(make_response(200))
    scope.get_transport()._session = session
    auth = AuthResource(dispatcher, config)

    await auth.logout()

    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer client-token"
    assert scope.context.get_token() is None


@pytest.mark.asyncio
async def test_logout_authentication_sends_principal_token(dispatcher, config, pinned, make_response):
    context, session = pinned(make_response(200))
    auth = AuthResource(dispatcher, config)

    await auth.logout_authentication(Authentication(principal="ann", token_value="ann-token"), context)

    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer ann-token"
    assert context.get_token().access_token == "cached"


@pytest.mark.asyncio
async def test_logout_authentication_without_token_is_noop(dispatcher, config, pinned):
    context, session = pinned()
    auth = AuthResource(dispatcher, config)

    await auth.logout_authentication(None, context)
    await auth.logout_authentication(Authentication(principal="ann"), context)

    session.request.assert_not_called()


@pytest.mark.asyncio
async def test_logout_session_invalidates_bound_session(dispatcher, config):
    auth = AuthResource(dispatcher, config)
    web_session = WebSession(authentication=Authentication(principal="ann", token_value="t"), config=config)
    web_session.context.set_token(OAuth2Token("t"))

    with bind_session(web_session):
        assert get_authentication() is not None
        await auth.logout_session()
        assert get_authentication() is None

    assert web_session.invalidated
    assert web_session.context.get_token() is None


@pytest.mark.asyncio
async def test_logout_session_without_session_clears_security_context(dispatcher, config):
    auth = AuthResource(dispatcher, config)

    await auth.logout_session()

    assert get_authentication() is None

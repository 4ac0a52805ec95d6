"""Fixtures for resource tests: a dispatcher and a context pinned to a fake session."""

import pytest

from core.oauth2.manager import OAuth2TokenManager
from core.oauth2.models import OAuth2Token
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDispatcher
from sso_client.transport import ProcessScope, Transport, TransportSelector


@pytest.fixture
def scope(config):
    return ProcessScope(config)


@pytest.fixture
def dispatcher(config, scope):
    return RequestDispatcher(TransportSelector(scope, config), OAuth2TokenManager(), config)


@pytest.fixture
def pinned(config, make_session):
    """Build a context with a cached token whose transport serves the given responses."""

    def _pinned(*responses):
        session = make_session(*responses)
        context = ClientContext(config=config)
        context.set_token(OAuth2Token("cached"))
        context.with_transport(Transport(context, config, session=session, name="test"))
        return context, session

    return _pinned


"""Shared fixtures for SSO client tests: config and fake aiohttp sessions."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from sso_client.config import SsoClientConfig

SERVER = "https://sso.example.com"


def _make_response(status=200, body=None, headers=None, chunks=None):
    """Create a mock async context manager for an aiohttp response."""
    if body is not None and not isinstance(body, str):
        body = json.dumps(body)
    text = body or ""

    async def iter_any():
        for chunk in chunks if chunks is not None else [text.encode("utf-8")]:
            yield chunk

    mock_resp = AsyncMock()
    mock_resp.status = status
    mock_resp.headers = headers or {}
    mock_resp.text = AsyncMock(return_value=text)
    mock_resp.content = MagicMock()
    mock_resp.content.iter_any = iter_any
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)
    return mock_resp


def _make_session(*responses):
    """Create a mock session where request() returns the given responses in order."""
    mock_session = MagicMock()
    mock_session.closed = False
    mock_session.request = MagicMock(side_effect=list(responses))
    mock_session.close = AsyncMock()
    return mock_session


@pytest.fixture
def config():
    return SsoClientConfig(server=SERVER, client_id="app", client_secret="app-secret")


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def make_session():
    return _make_session

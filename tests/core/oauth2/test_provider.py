"""Tests for TokenEndpointProvider - client credentials and password grants."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.oauth2.exceptions import TokenAcquisitionError
from core.oauth2.models import CredentialDescriptor, OAuth2Token
from core.oauth2.provider import TokenEndpointProvider, acquire_token

TOKEN_URL = "https://sso.example.com/oauth/token"


def _descriptor(**overrides):
    defaults = {
        "token_endpoint": TOKEN_URL,
        "client_id": "test_client",
        "client_secret": "test-cs",
    }
    defaults.update(overrides)
    return CredentialDescriptor.client_credentials(**defaults)


def _mock_session_with_response(response_mock):
    """Create a mock session where post() returns the given response context manager."""
    mock_session = MagicMock()
    mock_session.closed = False
    mock_session.post = MagicMock(return_value=response_mock)
    mock_session.close = AsyncMock()
    return mock_session


def _ok_response(data):
    """Create a mock async context manager for a 200 response."""
    mock_resp = AsyncMock()
    mock_resp.status = 200
    mock_resp.json = AsyncMock(return_value=data)
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)
    return mock_resp


def _error_response(status, text="error"):
    """Create a mock async context manager for an error response."""
    mock_resp = AsyncMock()
    mock_resp.status = status
    mock_resp.text = AsyncMock(return_value=text)
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)
    return mock_resp


class TestAcquireToken:
    @pytest.mark.asyncio
    async def test_client_credentials_success(self):
        session = _mock_session_with_response(
            _ok_response({"access_token": "tok", "token_type": "bearer", "expires_in": 60})
        )
        provider = TokenEndpointProvider(_descriptor(), session=session)

        token = await provider.acquire_token()

        assert isinstance(token, OAuth2Token)
        assert token.access_token == "tok"
        assert token.authorization_header == "Bearer tok"
        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == TOKEN_URL
        assert kwargs["data"]["grant_type"] == "client_credentials"
        assert kwargs["data"]["client_secret"] == "test-cs"

    @pytest.mark.asyncio
    async def test_password_grant_sends_user_credentials(self):
        session = _mock_session_with_response(_ok_response({"access_token": "tok"}))
        descriptor = CredentialDescriptor.password_grant(TOKEN_URL, "app", "cs", "ann", "pw")
        provider = TokenEndpointProvider(descriptor, session=session)

        await provider.acquire_token()

        data = session.post.call_args.kwargs["data"]
        assert data["grant_type"] == "password"
        assert data["username"] == "ann"
        assert data["password"] == "pw"

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        session = _mock_session_with_response(_error_response(401, "x" * 500))
        provider = TokenEndpointProvider(_descriptor(), session=session)

        with pytest.raises(TokenAcquisitionError) as exc_info:
            await provider.acquire_token()

        assert "HTTP 401" in str(exc_info.value)
        assert len(exc_info.value.message) < 220
        assert exc_info.value.context["http_status"] == 401

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(self):
        session = _mock_session_with_response(_ok_response({"token_type": "Bearer"}))
        provider = TokenEndpointProvider(_descriptor(), session=session)

        with pytest.raises(TokenAcquisitionError, match="access_token"):
            await provider.acquire_token()

    @pytest.mark.asyncio
    async def test_client_error_is_wrapped(self):
        session = MagicMock()
        session.closed = False
        session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        provider = TokenEndpointProvider(_descriptor(), session=session)

        with pytest.raises(TokenAcquisitionError) as exc_info:
            await provider.acquire_token()

        assert isinstance(exc_info.value.cause, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self):
        session = MagicMock()
        session.closed = False
        session.post = MagicMock(side_effect=asyncio.TimeoutError())
        provider = TokenEndpointProvider(_descriptor(), session=session)

        with pytest.raises(TokenAcquisitionError, match="HTTP error"):
            await provider.acquire_token()


class TestClose:
    @pytest.mark.asyncio
    async def test_does_not_close_injected_session(self):
        session = _mock_session_with_response(_ok_response({"access_token": "tok"}))
        provider = TokenEndpointProvider(_descriptor(), session=session)

        await provider.close()

        session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_one_shot_acquire_token(self):
        session = _mock_session_with_response(_ok_response({"access_token": "one-shot"}))

        token = await acquire_token(_descriptor(), session=session)

        assert token.access_token == "one-shot"
        session.close.assert_not_called()


class TestSessionSource:
    @pytest.mark.asyncio
    async def test_session_source_used_and_not_closed(self):
        session = _mock_session_with_response(_ok_response({"access_token": "tok"}))
        source = AsyncMock(return_value=session)
        provider = TokenEndpointProvider(_descriptor(), session_source=source)

        await provider.acquire_token()
        await provider.close()

        source.assert_awaited_once()
        session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_explicit_timeout_applied_per_request(self):
        session = _mock_session_with_response(_ok_response({"access_token": "tok"}))
        provider = TokenEndpointProvider(_descriptor(), session=session, timeout_seconds=5)

        await provider.acquire_token()

        assert session.post.call_args.kwargs["timeout"].total == 5

    @pytest.mark.asyncio
    async def test_session_timeout_kept_without_override(self):
        session = _mock_session_with_response(_ok_response({"access_token": "tok"}))
        provider = TokenEndpointProvider(_descriptor(), session=session)

        await provider.acquire_token()

        assert "timeout" not in session.post.call_args.kwargs

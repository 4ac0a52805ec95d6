"""Tests for OAuth2TokenManager."""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.oauth2.cache import TokenCache
from core.oauth2.exceptions import TokenAcquisitionError
from core.oauth2.manager import OAuth2TokenManager, TokenContext
from core.oauth2.models import CredentialDescriptor, OAuth2Token
from core.oauth2.provider import BaseOAuth2Provider

TOKEN_URL = "https://sso.example.com/oauth/token"


class MockOAuth2Provider(BaseOAuth2Provider):
    """Mock provider counting token endpoint exchanges."""

    def __init__(self, descriptor: CredentialDescriptor, delay: float = 0):
        self.descriptor = descriptor
        self.acquire_count = 0
        self.delay = delay
        self.should_fail = False
        self.closed = False

    async def acquire_token(self) -> OAuth2Token:
        if self.should_fail:
            raise TokenAcquisitionError("Mock acquisition failure")
        if self.delay:
            await asyncio.sleep(self.delay)
        self.acquire_count += 1
        return OAuth2Token(
            access_token=f"token_{self.acquire_count}",
            expires_at=datetime.now(UTC) + timedelta(hours=1),
        )

    async def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, credentials=None, token_supplier=None):
        self.token_cache = TokenCache()
        self.credentials = credentials
        self.token_supplier = token_supplier


@pytest.fixture
def descriptor():
    return CredentialDescriptor.client_credentials(TOKEN_URL, "app", "secret")


@pytest.fixture
def manager():
    """Create fresh manager for each test."""
    return OAuth2TokenManager(provider_factory=MockOAuth2Provider)


class TestSetupToken:
    @pytest.mark.asyncio
    async def test_cache_miss_acquires_and_stores(self, manager, descriptor):
        context = FakeContext(credentials=descriptor)

        token = await manager.setup_token(context)

        assert token.access_token == "token_1"
        assert context.token_cache.get() is token
        assert manager.get_provider(descriptor).acquire_count == 1

    @pytest.mark.asyncio
    async def test_cache_hit_makes_no_exchange(self, manager, descriptor):
        context = FakeContext(credentials=descriptor)
        cached = OAuth2Token("cached")
        context.token_cache.set(cached)

        token = await manager.setup_token(context)

        assert token is cached
        assert manager.get_provider(descriptor).acquire_count == 0

    @pytest.mark.asyncio
    async def test_force_makes_exactly_one_exchange(self, manager, descriptor):
        context = FakeContext(credentials=descriptor)
        context.token_cache.set(OAuth2Token("cached"))

        token = await manager.setup_token(context, force=True)

        assert token.access_token == "token_1"
        assert context.token_cache.get() is token
        assert manager.get_provider(descriptor).acquire_count == 1

    @pytest.mark.asyncio
    async def test_token_supplier_used_without_credentials(self, manager):
        supplied = OAuth2Token("from-session")
        context = FakeContext(token_supplier=lambda: supplied)

        token = await manager.setup_token(context)

        assert token is supplied
        assert context.token_cache.get() is supplied

    @pytest.mark.asyncio
    async def test_no_source_returns_none(self, manager, caplog):
        context = FakeContext()

        with caplog.at_level("WARNING"):
            token = await manager.setup_token(context)

        assert token is None
        assert context.token_cache.get() is None
        assert "No token found" in caplog.text

    @pytest.mark.asyncio
    async def test_acquisition_failure_propagates(self, manager, descriptor):
        context = FakeContext(credentials=descriptor)
        manager.get_provider(descriptor).should_fail = True

        with pytest.raises(TokenAcquisitionError):
            await manager.setup_token(context)

        assert context.token_cache.get() is None


class TestRefreshGuard:
    @pytest.mark.asyncio
    async def test_unguarded_concurrent_misses_each_acquire(self, descriptor):
        manager = OAuth2TokenManager(provider_factory=lambda d: MockOAuth2Provider(d, delay=0.01))
        context = FakeContext(credentials=descriptor)

        await asyncio.gather(*(manager.setup_token(context) for _ in range(3)))

        assert manager.get_provider(descriptor).acquire_count == 3

    @pytest.mark.asyncio
    async def test_guarded_concurrent_misses_acquire_once(self, descriptor):
        manager = OAuth2TokenManager(
            guard_refresh=True,
            provider_factory=lambda d: MockOAuth2Provider(d, delay=0.01),
        )
        context = FakeContext(credentials=descriptor)

        tokens = await asyncio.gather(*(manager.setup_token(context) for _ in range(3)))

        assert manager.get_provider(descriptor).acquire_count == 1
        assert {t.access_token for t in tokens} == {"token_1"}


class TestProviders:
    def test_provider_reused_per_descriptor(self, manager, descriptor):
        same = CredentialDescriptor.client_credentials(TOKEN_URL, "app", "secret")

        assert manager.get_provider(descriptor) is manager.get_provider(same)

    def test_distinct_descriptors_get_distinct_providers(self, manager, descriptor):
        other = CredentialDescriptor.password_grant(TOKEN_URL, "app", "secret", "ann", "pw")

        assert manager.get_provider(descriptor) is not manager.get_provider(other)

    @pytest.mark.asyncio
    async def test_obtain_token_does_not_touch_cache(self, manager, descriptor):
        context = FakeContext(credentials=descriptor)

        token = await manager.obtain_token(context)

        assert token.access_token == "token_1"
        assert context.token_cache.get() is None

    @pytest.mark.asyncio
    async def test_clear_token(self, manager, descriptor):
        context = FakeContext(credentials=descriptor)
        await manager.setup_token(context)

        manager.clear_token(context)

        assert context.token_cache.get() is None

    @pytest.mark.asyncio
    async def test_close_closes_providers(self, manager, descriptor):
        provider = manager.get_provider(descriptor)

        await manager.close()

        assert provider.closed
        assert manager.get_provider(descriptor) is not provider

    def test_fake_context_satisfies_protocol(self):
        assert isinstance(FakeContext(), TokenContext)


class TestAcquireOnce:
    @pytest.mark.asyncio
    async def test_provider_closed_and_not_kept(self):
        created = []

        def factory(descriptor):
            provider = MockOAuth2Provider(descriptor)
            created.append(provider)
            return provider

        manager = OAuth2TokenManager(provider_factory=factory)
        for i in range(50):
            descriptor = CredentialDescriptor.password_grant(TOKEN_URL, "app", "secret", f"user{i}", "pw")
            token = await manager.acquire_once(descriptor)
            assert token.access_token == "token_1"

        assert manager._providers == {}
        assert len(created) == 50
        assert all(p.closed for p in created)

    @pytest.mark.asyncio
    async def test_provider_closed_on_failure(self):
        created = []

        def factory(descriptor):
            provider = MockOAuth2Provider(descriptor)
            provider.should_fail = True
            created.append(provider)
            return provider

        manager = OAuth2TokenManager(provider_factory=factory)

        with pytest.raises(TokenAcquisitionError):
            await manager.acquire_once(CredentialDescriptor.password_grant(TOKEN_URL, "app", "s", "ann", "pw"))

        assert created[0].closed


def _token_session():
    response = AsyncMock()
    response.status = 200
    response.json = AsyncMock(return_value={"access_token": "shared"})
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=False)
    session = MagicMock()
    session.closed = False
    session.post = MagicMock(return_value=response)
    session.close = AsyncMock()
    return session


class TestSharedSession:
    @pytest.mark.asyncio
    async def test_default_providers_share_factory_session(self, descriptor):
        session = _token_session()
        session_factory = MagicMock(return_value=session)
        manager = OAuth2TokenManager(session_factory=session_factory)
        other = CredentialDescriptor.password_grant(TOKEN_URL, "app", "secret", "ann", "pw")

        await manager.setup_token(FakeContext(credentials=descriptor))
        await manager.setup_token(FakeContext(credentials=other))
        await manager.acquire_once(CredentialDescriptor.password_grant(TOKEN_URL, "app", "secret", "bob", "pw"))

        session_factory.assert_called_once_with()
        assert session.post.call_count == 3
        session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_default_provider_uses_session_timeout(self, descriptor):
        session = _token_session()
        manager = OAuth2TokenManager(session_factory=lambda: session)

        await manager.setup_token(FakeContext(credentials=descriptor))

        assert "timeout" not in session.post.call_args.kwargs

    @pytest.mark.asyncio
    async def test_close_closes_shared_session(self, descriptor):
        session = _token_session()
        manager = OAuth2TokenManager(session_factory=lambda: session)
        await manager.setup_token(FakeContext(credentials=descriptor))

        await manager.close()

        session.close.assert_awaited_once()

"""
OAuth2 token acquisition and caching.

Supports the client-credentials and resource-owner-password grants against a
single token endpoint, with a single-slot cache per client context.

Basic Usage:
    from core.oauth2 import CredentialDescriptor, OAuth2TokenManager

    descriptor = CredentialDescriptor.client_credentials(
        token_endpoint="https://sso.example.com/oauth/token",
        client_id=os.getenv("SSO_CLIENT_ID"),
        client_secret=os.getenv("SSO_CLIENT_SECRET"),
    )
    manager = OAuth2TokenManager()
    token = await manager.setup_token(context)

One-shot:
    from core.oauth2 import acquire_token

    token = await acquire_token(descriptor)
    headers = {"Authorization": token.authorization_header}
"""

from core.oauth2.cache import TokenCache
from core.oauth2.exceptions import (
    InvalidConfigurationError,
    OAuth2Error,
    TokenAcquisitionError,
)
from core.oauth2.manager import OAuth2TokenManager, TokenContext
from core.oauth2.models import CredentialDescriptor, GrantType, OAuth2Token
from core.oauth2.provider import BaseOAuth2Provider, TokenEndpointProvider, acquire_token

__all__ = [
    # Manager
    "OAuth2TokenManager",
    "TokenContext",
    # Providers
    "BaseOAuth2Provider",
    "TokenEndpointProvider",
    "acquire_token",
    # Cache
    "TokenCache",
    # Models
    "GrantType",
    "CredentialDescriptor",
    "OAuth2Token",
    # Exceptions
    "OAuth2Error",
    "TokenAcquisitionError",
    "InvalidConfigurationError",
]

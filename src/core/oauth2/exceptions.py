"""OAuth2-specific exceptions."""

from core.errors.exceptions import AuthError, InvalidConfigurationError


class OAuth2Error(AuthError):
    """Base exception for OAuth2 operations."""

    pass


class TokenAcquisitionError(OAuth2Error):
    """Token could not be acquired from the token endpoint."""

    pass


__all__ = [
    "OAuth2Error",
    "TokenAcquisitionError",
    "InvalidConfigurationError",
]

"""OAuth2 data models: credential descriptors and access tokens."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

from core.errors.exceptions import InvalidConfigurationError


class GrantType(str, Enum):
    """OAuth2 grant used to obtain a token."""

    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"


@dataclass(frozen=True)
class CredentialDescriptor:
    """
    Immutable description of how to obtain a token.

    Attributes:
        grant_type: CLIENT_CREDENTIALS or PASSWORD
        token_endpoint: Token endpoint URL
        client_id: OAuth2 client ID
        client_secret: OAuth2 client secret
        username: Resource owner username (PASSWORD only)
        password: Resource owner password (PASSWORD only)
        scope: Space-separated scopes to request
    """

    grant_type: GrantType
    token_endpoint: str
    client_id: str
    client_secret: str = field(default="", repr=False)
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    scope: str | None = None

    def __post_init__(self) -> None:
        missing = [
            name
            for name in ("token_endpoint", "client_id")
            if not getattr(self, name)
        ]
        if self.grant_type == GrantType.PASSWORD:
            missing.extend(
                name for name in ("username", "password") if not getattr(self, name)
            )
        if missing:
            raise InvalidConfigurationError(
                f"{', '.join(missing)} required for {GrantType(self.grant_type).value} grant"
            )

    @classmethod
    def client_credentials(
        cls,
        token_endpoint: str,
        client_id: str,
        client_secret: str,
        scope: str | None = None,
    ) -> "CredentialDescriptor":
        return cls(
            grant_type=GrantType.CLIENT_CREDENTIALS,
            token_endpoint=token_endpoint,
            client_id=client_id,
            client_secret=client_secret,
            scope=scope,
        )

    @classmethod
    def password_grant(
        cls,
        token_endpoint: str,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        scope: str | None = None,
    ) -> "CredentialDescriptor":
        return cls(
            grant_type=GrantType.PASSWORD,
            token_endpoint=token_endpoint,
            client_id=client_id,
            client_secret=client_secret,
            username=username,
            password=password,
            scope=scope,
        )

    def form_data(self) -> dict[str, str]:
        """Build the token endpoint form body for this grant."""
        data = {
            "grant_type": GrantType(self.grant_type).value,
            "client_id": self.client_id,
        }
        if self.client_secret:
            data["client_secret"] = self.client_secret
        if self.grant_type == GrantType.PASSWORD:
            data["username"] = self.username
            data["password"] = self.password
        if self.scope:
            data["scope"] = self.scope
        return data


@dataclass
class OAuth2Token:
    """
    OAuth2 access token.

    Attributes:
        access_token: The access token string
        token_type: Token type (typically "Bearer")
        expires_at: UTC timestamp when token expires, None when unknown
        scope: Scopes granted
        refresh_token: Optional refresh token
    """

    access_token: str
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    scope: frozenset[str] = frozenset()
    refresh_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_response(cls, response: dict) -> "OAuth2Token":
        """
        Create token from an OAuth2 token endpoint response.

        Args:
            response: Token endpoint JSON response

        Returns:
            OAuth2Token instance

        Raises:
            KeyError: If the response has no access_token
        """
        expires_in = response.get("expires_in")
        expires_at = None
        if expires_in is not None:
            expires_at = datetime.now(UTC) + timedelta(seconds=int(expires_in))

        scope = response.get("scope") or ""
        if isinstance(scope, str):
            scope = scope.split()

        return cls(
            access_token=response["access_token"],
            token_type=response.get("token_type") or "Bearer",
            expires_at=expires_at,
            scope=frozenset(scope),
            refresh_token=response.get("refresh_token"),
        )

    @classmethod
    def bearer(cls, value: str) -> "OAuth2Token":
        """Wrap a bare token value with unknown expiry."""
        return cls(access_token=value)

    def is_expired(self, buffer_seconds: int = 0) -> bool:
        """
        Check if token is expired or close to expiry.

        Tokens without a known expiry never report as expired.
        """
        if self.expires_at is None:
            return False
        return datetime.now(UTC) >= self.expires_at - timedelta(seconds=buffer_seconds)

    @property
    def remaining_lifetime(self) -> timedelta | None:
        if self.expires_at is None:
            return None
        return self.expires_at - datetime.now(UTC)

    @property
    def authorization_header(self) -> str:
        token_type = self.token_type or "Bearer"
        if token_type.lower() == "bearer":
            token_type = "Bearer"
        return f"{token_type} {self.access_token}"


__all__ = ["GrantType", "CredentialDescriptor", "OAuth2Token"]

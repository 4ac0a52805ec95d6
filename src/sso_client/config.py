"""SSO client configuration from YAML file and environment.

Loads the ``sso:`` section of a YAML file:

    sso:
      server: https://sso.example.com
      client_id: ${SSO_CLIENT_ID}
      client_secret: ${SSO_CLIENT_SECRET}
      web: true
      auto_setup_token: true
      connection:
        timeout_total: 30
        max_connections: 100
      registration:
        application:
          name: my-app

Environment variables ARE supported using ${VAR_NAME} and
${VAR_NAME:-default} syntax in YAML files. ``SSO_*`` environment variables
override file values.
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.errors.exceptions import InvalidConfigurationError
from core.oauth2.models import CredentialDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("config.yaml")

TOKEN_PATH = "/oauth/token"
REVOKE_PATH = "/oauth/revoke"

# Environment variable -> config field
ENV_OVERRIDES = {
    "SSO_SERVER": "server",
    "SSO_CLIENT_ID": "client_id",
    "SSO_CLIENT_SECRET": "client_secret",
    "SSO_USERNAME": "username",
    "SSO_PASSWORD": "password",
    "SSO_SCOPE": "scope",
    "SSO_WEB": "web",
    "SSO_AUTO_SETUP_TOKEN": "auto_setup_token",
    "SSO_TOKEN_ENDPOINT": "token_endpoint",
    "SSO_REVOKE_ENDPOINT": "revoke_endpoint",
    "SSO_VERIFY_SSL": "verify_ssl",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        # Support both ${VAR} and ${VAR:-default} syntax
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(f"Expected a boolean, got '{value}'")


@dataclass
class SsoClientConfig:
    """SSO client configuration.

    Server and credentials, token behaviour, and the aiohttp connection
    settings used by every transport. All timeouts in seconds.
    """

    # =========================================================================
    # SERVER AND CREDENTIALS
    # =========================================================================
    server: str = ""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    scope: Optional[str] = None
    token_endpoint: Optional[str] = None
    revoke_endpoint: Optional[str] = None

    # =========================================================================
    # TOKEN AND DISPATCH BEHAVIOUR
    # =========================================================================
    web: bool = True
    auto_setup_token: bool = True
    allow_unauthenticated: bool = True
    guard_refresh: bool = False
    expiry_aware_cache: bool = False
    refresh_buffer_seconds: int = 60
    admin: bool = False

    # =========================================================================
    # CONNECTION SETTINGS
    # =========================================================================
    timeout_total: float = 30.0
    timeout_connect: float = 10.0
    max_connections: int = 100
    max_connections_per_host: int = 20
    verify_ssl: bool = True

    # =========================================================================
    # APPLICATION REGISTRATION
    # =========================================================================
    registration: Dict[str, Any] = field(default_factory=dict)

    @property
    def base_url(self) -> str:
        return self.server.rstrip("/")

    @property
    def token_endpoint_url(self) -> str:
        return self.token_endpoint or f"{self.base_url}{TOKEN_PATH}"

    @property
    def revoke_endpoint_url(self) -> str:
        return self.revoke_endpoint or f"{self.base_url}{REVOKE_PATH}"

    def client_credentials(self) -> CredentialDescriptor:
        """Credential descriptor for the client-credentials grant."""
        return CredentialDescriptor.client_credentials(
            token_endpoint=self.token_endpoint_url,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=self.scope,
        )

    def password_credentials(
        self, username: Optional[str] = None, password: Optional[str] = None
    ) -> CredentialDescriptor:
        """Credential descriptor for the password grant (defaults to configured user)."""
        return CredentialDescriptor.password_grant(
            token_endpoint=self.token_endpoint_url,
            client_id=self.client_id,
            client_secret=self.client_secret,
            username=username or self.username,
            password=password or self.password,
            scope=self.scope,
        )

    def validate(self) -> None:
        """Validate configuration for correctness and constraints."""
        if not self.server:
            raise InvalidConfigurationError("server is required in sso section")
        if not self.server.startswith(("http://", "https://")):
            raise InvalidConfigurationError(
                f"server must be an http(s) URL, got '{self.server}'"
            )
        if not self.client_id:
            raise InvalidConfigurationError("client_id is required in sso section")
        if bool(self.username) != bool(self.password):
            raise InvalidConfigurationError(
                "username and password must be configured together"
            )

        self._validate_min("timeout_total", 0, inclusive=False)
        self._validate_min("timeout_connect", 0, inclusive=False)
        self._validate_min("max_connections", 1, inclusive=True)
        self._validate_min("max_connections_per_host", 1, inclusive=True)
        self._validate_min("refresh_buffer_seconds", 0, inclusive=True)

    def _validate_min(self, key: str, min_value: float, inclusive: bool) -> None:
        """Validate that a setting's value meets a minimum threshold."""
        value = getattr(self, key)
        if inclusive and value < min_value:
            raise InvalidConfigurationError(f"{key} must be >= {min_value}, got {value}")
        elif not inclusive and value <= min_value:
            raise InvalidConfigurationError(f"{key} must be > {min_value}, got {value}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SsoClientConfig":
        """Build config from the ``sso:`` section, flattening ``connection:``."""
        data = dict(data)
        connection = data.pop("connection", None) or {}
        data = _deep_merge(connection, data)

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning(f"Ignoring unknown sso config keys: {unknown}")

        values: Dict[str, Any] = {}
        for name, value in data.items():
            if name not in known or value is None:
                continue
            default = known[name].default
            if isinstance(default, bool):
                value = _to_bool(value)
            elif isinstance(default, int) and not isinstance(default, bool):
                value = int(value)
            elif isinstance(default, float):
                value = float(value)
            values[name] = value
        return cls(**values)


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SsoClientConfig:
    """Load SSO client configuration.

    Reads the ``sso:`` section of ``config_path`` (default ./config.yaml when
    present), applies ``SSO_*`` environment variables, then ``overrides``,
    and validates the result.

    Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
    """
    sso_config: Dict[str, Any] = {}

    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    path = config_path or DEFAULT_CONFIG_FILE
    if path.exists():
        logger.info(f"Loading configuration from file: {path}")
        yaml_data = _expand_env_vars(load_yaml(path))
        if "sso" not in yaml_data:
            raise InvalidConfigurationError(
                f"Invalid config file {path}: missing 'sso:' section"
            )
        sso_config = yaml_data["sso"] or {}

    env_values = {
        key: os.environ[var] for var, key in ENV_OVERRIDES.items() if var in os.environ
    }
    if env_values:
        logger.debug(f"Applying environment overrides: {sorted(env_values)}")
        sso_config = _deep_merge(sso_config, env_values)

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        sso_config = _deep_merge(sso_config, overrides)

    config = SsoClientConfig.from_dict(sso_config)

    logger.debug("Validating configuration...")
    config.validate()
    logger.debug("Configuration validation passed", extra={"client_id": config.client_id})

    return config


_sso_config: Optional[SsoClientConfig] = None


def get_config() -> SsoClientConfig:
    """Get or load the singleton SSO config instance."""
    global _sso_config
    if _sso_config is None:
        _sso_config = load_config()
    return _sso_config


def set_config(config: SsoClientConfig) -> None:
    """Set the singleton SSO config instance (useful for testing)."""
    global _sso_config
    _sso_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _sso_config
    _sso_config = None


__all__ = [
    "SsoClientConfig",
    "DEFAULT_CONFIG_FILE",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]

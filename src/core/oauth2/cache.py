"""Single-slot token cache owned by a client context."""

import logging
import threading

from core.oauth2.models import OAuth2Token

logger = logging.getLogger(__name__)


class TokenCache:
    """
    Holds at most one access token.

    By default a cached token is returned regardless of its expiry. With
    ``expiry_aware=True`` a token whose known expiry falls within
    ``refresh_buffer_seconds`` is reported as absent.
    """

    def __init__(self, expiry_aware: bool = False, refresh_buffer_seconds: int = 0):
        self.expiry_aware = expiry_aware
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self._token: OAuth2Token | None = None
        self._lock = threading.Lock()

    def get(self) -> OAuth2Token | None:
        with self._lock:
            token = self._token
        if token is None:
            return None
        if self.expiry_aware and token.is_expired(self.refresh_buffer_seconds):
            logger.debug("Cached token is within refresh buffer, treating as absent")
            return None
        return token

    def set(self, token: OAuth2Token | None) -> None:
        with self._lock:
            self._token = token

    def clear(self) -> None:
        with self._lock:
            self._token = None


__all__ = ["TokenCache"]

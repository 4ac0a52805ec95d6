"""Logout: token revocation and local session teardown."""

import logging
from typing import Optional

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import JSON_MEDIA_TYPE, RequestDescriptor
from sso_client.resources.base import Resource
from sso_client.session import Authentication, WebSession, clear_security_context, get_current_session

logger = logging.getLogger(__name__)


class AuthResource(Resource):
    """Logout variants."""

    def _revoke_request(self, context: Optional[ClientContext], headers: Optional[dict] = None) -> RequestDescriptor:
        config = context.config if context is not None and context.config is not None else self.config
        merged = {"Content-Type": JSON_MEDIA_TYPE}
        merged.update(headers or {})
        return RequestDescriptor.post(endpoints.token_revoke(config), headers=merged)

    async def logout(self, context: Optional[ClientContext] = None) -> None:
        """Revoke the token of the selected context and drop it from the cache."""
        selection = self.dispatcher.selector.select(context)
        await self._send(self._revoke_request(context), context)
        selection.context.clear_token()
        logger.debug("logout: token revoked", extra={"strategy": selection.strategy})

    async def logout_authentication(
        self,
        authentication: Optional[Authentication],
        context: Optional[ClientContext] = None,
    ) -> None:
        """Revoke the token an inbound principal authenticated with."""
        if authentication is None or not authentication.token_value:
            return
        headers = {"Authorization": f"Bearer {authentication.token_value}"}
        await self._send(self._revoke_request(context, headers), context)
        logger.debug("logout: principal token revoked")

    async def logout_session(self, session: Optional[WebSession] = None) -> None:
        """Invalidate the local web session and clear the security context."""
        session = session or get_current_session()
        if session is not None:
            session.invalidate()
            await session.close()
        clear_security_context()


__all__ = ["AuthResource"]

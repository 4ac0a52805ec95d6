"""Client application registration."""

import logging
from typing import Optional

from core.logging.context_managers import log_operation
from sso_client import endpoints
from sso_client.config import SsoClientConfig
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor, RequestDispatcher
from sso_client.models import Application, SsoRegistration
from sso_client.resources.base import Resource
from sso_client.transport import ProcessScope, Transport

logger = logging.getLogger(__name__)


class RegistrationResource(Resource):
    """
    Registers the client application (and the roles and groups it declares)
    with the server, always with client credentials.
    """

    def __init__(self, dispatcher: RequestDispatcher, config: SsoClientConfig, scope: ProcessScope):
        super().__init__(dispatcher, config)
        self.scope = scope

    def configured_registration(self) -> Optional[SsoRegistration]:
        if not self.config.registration:
            return None
        return SsoRegistration.model_validate(self.config.registration)

    async def register(
        self,
        registration: Optional[SsoRegistration] = None,
        application: Optional[Application] = None,
    ) -> bool:
        """
        Register with the server.

        Args:
            registration: Registration to send (default: from config)
            application: Application overriding the registration's own

        Returns:
            True if a registration was sent, False if none is configured
        """
        registration = registration or self.configured_registration()
        if registration is None:
            logger.debug("No registration configured, skipping")
            return False
        if application is not None:
            registration = registration.model_copy(update={"application": application})

        request = RequestDescriptor.post(endpoints.register(self.config), registration)
        with log_operation(logger, "register", level=logging.INFO, client_id=self.config.client_id) as op:
            if self.scope.credentials is None:
                # Pin the client-credentials transport regardless of any bound web session
                context = ClientContext(config=self.config, singleton=True).with_transport(
                    self.scope.get_transport()
                )
                response = await self._send(request, context)
            else:
                context = ClientContext(config=self.config, credentials=self.config.client_credentials())
                transport = Transport(context, self.config, name="registration")
                try:
                    response = await self._send(request, context.with_transport(transport))
                finally:
                    await transport.close()
            op.add_context(http_status=response.status)
        return True


__all__ = ["RegistrationResource"]

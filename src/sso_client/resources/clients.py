"""OAuth client operations."""

from typing import AsyncIterator, Optional

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor
from sso_client.models import Client, Page
from sso_client.options import ClientFilter, ClientOptions, Pageable, RequestOptions
from sso_client.resources.base import Resource


class ClientsResource(Resource):
    """Registered OAuth clients. Requires client or admin credentials."""

    async def get_client(
        self,
        client_id: str,
        options: Optional[ClientOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[Client]:
        url = endpoints.client(self._id(client_id), self.config, self._admin(options, context))
        return await self._get(self._uri(url, options), Client, context)

    async def list_clients(
        self,
        filter: Optional[ClientFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Client]:
        url = endpoints.clients(self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[Client], context)

    def stream_clients(
        self,
        filter: Optional[ClientFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Client]:
        url = endpoints.clients_stream(self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), Client, context)

    async def create_client(
        self,
        client: Client,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        url = endpoints.clients(self.config, self._admin(options, context))
        return await self._create(self._uri(url, options), client, context)

    async def update_client(
        self,
        client: Client,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        client_id = client.id or client.client_id
        url = endpoints.client(self._id(client_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.put(self._uri(url, options), client), context)

    async def delete_client(
        self,
        client_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.client(self._id(client_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options)), context)


__all__ = ["ClientsResource"]

"""Shared plumbing for resource operations."""

from typing import Any, AsyncIterator, Optional

from sso_client.config import SsoClientConfig
from sso_client.context import ClientContext
from sso_client.dispatcher import BodilessResponse, RequestDescriptor, RequestDispatcher
from sso_client.options import Pageable, encode_query, encode_segment, is_admin_request, with_query


class Resource:
    """
    Base class for a group of resource operations.

    Subclasses build the request for each operation and hand it to the
    dispatcher; they hold no state of their own.
    """

    def __init__(self, dispatcher: RequestDispatcher, config: SsoClientConfig):
        self.dispatcher = dispatcher
        self.config = config

    def _admin(self, options: Any, context: Optional[ClientContext]) -> bool:
        return is_admin_request(options, context, default=self.config.admin)

    @staticmethod
    def _id(value: Optional[str], name: str = "id") -> str:
        if not value:
            raise ValueError(f"{name} is required")
        return encode_segment(value)

    @staticmethod
    def _uri(url: str, options: Any = None, pageable: Optional[Pageable] = None, **params: Any) -> str:
        query = {key: str(value) for key, value in params.items() if value is not None}
        query.update(encode_query(options, pageable))
        return with_query(url, query)

    async def _get(self, uri: str, response_type: Any, context: Optional[ClientContext]) -> Any:
        return await self.dispatcher.retrieve(RequestDescriptor.get(uri), response_type, context)

    def _stream(self, uri: str, response_type: Any, context: Optional[ClientContext]) -> AsyncIterator[Any]:
        return self.dispatcher.stream(RequestDescriptor.get(uri), response_type, context)

    async def _send(self, request: RequestDescriptor, context: Optional[ClientContext]) -> BodilessResponse:
        return await self.dispatcher.retrieve_bodiless(request, context)

    async def _create(self, uri: str, body: Any, context: Optional[ClientContext]) -> Optional[str]:
        """POST and return the created resource's Location."""
        response = await self._send(RequestDescriptor.post(uri, body), context)
        return response.location


__all__ = ["Resource"]

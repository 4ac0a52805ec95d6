"""Group membership operations."""

from typing import AsyncIterator, Optional, Union

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor
from sso_client.models import Member, Page
from sso_client.options import MemberFilter, Pageable, RequestOptions, UserOptions
from sso_client.resources.base import Resource


class MembersResource(Resource):
    """Members of a group."""

    async def list_group_members(
        self,
        group_id: str,
        filter: Optional[MemberFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Member]:
        url = endpoints.group_members(self._id(group_id), self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[Member], context)

    def stream_group_members(
        self,
        group_id: str,
        filter: Optional[MemberFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Member]:
        url = endpoints.group_members_stream(self._id(group_id), self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), Member, context)

    async def count_group_members(
        self,
        group_id: str,
        filter: Optional[MemberFilter] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[int]:
        url = endpoints.count_members(self._id(group_id), self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter), int, context)

    async def get_group_member(
        self,
        group_id: str,
        user_id: str,
        options: Optional[UserOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[Member]:
        url = endpoints.member(
            self._id(group_id), self._id(user_id, "user_id"), self.config, self._admin(options, context)
        )
        return await self._get(self._uri(url, options), Member, context)

    async def add_member_to_group(
        self,
        member: Union[str, Member],
        group_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        """
        Add a user to a group.

        ``member`` is either a user identifier, sent as the ``username`` query
        parameter, or a Member sent as the request body. Returns the Location
        of the new membership.
        """
        url = endpoints.group_members(self._id(group_id), self.config, self._admin(options, context))
        if isinstance(member, Member):
            return await self._create(self._uri(url, options), member, context)
        self._id(member, "user_id")
        return await self._create(self._uri(url, options, username=member), None, context)

    async def remove_member_from_group(
        self,
        user_id: str,
        group_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        self._id(user_id, "user_id")
        url = endpoints.group_members(self._id(group_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options, username=user_id)), context)


__all__ = ["MembersResource"]

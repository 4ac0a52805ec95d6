"""Group operations, including the group tree and a user's groups."""

from typing import AsyncIterator, Optional

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor
from sso_client.models import Group, Page
from sso_client.options import GroupFilter, Pageable, RequestOptions
from sso_client.resources.base import Resource


def _tree_filter(group_id: str, direct: bool, filter: Optional[GroupFilter]) -> GroupFilter:
    """Filter for the sub-groups of a group: direct children or the whole tree."""
    filter = filter or GroupFilter()
    if direct:
        return filter.model_copy(update={"parent": group_id})
    return filter.model_copy(update={"root": group_id})


class GroupsResource(Resource):
    """Groups. Root groups may be addressed by name when names are unique."""

    async def get_group(
        self,
        group_id: str,
        filter: Optional[GroupFilter] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[Group]:
        url = endpoints.group(self._id(group_id), self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter), Group, context)

    async def list_groups(
        self,
        filter: Optional[GroupFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Group]:
        url = endpoints.groups(self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[Group], context)

    def stream_groups(
        self,
        filter: Optional[GroupFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Group]:
        url = endpoints.groups_stream(self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), Group, context)

    async def create_group(
        self,
        group: Group,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        url = endpoints.groups(self.config, self._admin(options, context))
        return await self._create(self._uri(url, options), group, context)

    async def update_group(
        self,
        group: Group,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.group(self._id(group.id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.put(self._uri(url, options), group), context)

    async def delete_group(
        self,
        group_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.group(self._id(group_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options)), context)

    async def count_groups(
        self,
        filter: Optional[GroupFilter] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[int]:
        url = endpoints.count_groups(self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter), int, context)

    # Group tree

    async def list_sub_groups(
        self,
        group_id: str,
        direct: bool = True,
        filter: Optional[GroupFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Group]:
        return await self.list_groups(_tree_filter(group_id, direct, filter), pageable, context)

    def stream_sub_groups(
        self,
        group_id: str,
        direct: bool = True,
        filter: Optional[GroupFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Group]:
        return self.stream_groups(_tree_filter(group_id, direct, filter), pageable, context)

    async def count_sub_groups(
        self,
        group_id: str,
        direct: bool = True,
        filter: Optional[GroupFilter] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[int]:
        return await self.count_groups(_tree_filter(group_id, direct, filter), context)

    # Groups of a user

    async def list_groups_for_user(
        self,
        user_id: str,
        filter: Optional[GroupFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Group]:
        filter = (filter or GroupFilter()).model_copy(update={"owner": user_id})
        return await self.list_groups(filter, pageable, context)

    def stream_groups_for_user(
        self,
        user_id: str,
        filter: Optional[GroupFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Group]:
        filter = (filter or GroupFilter()).model_copy(update={"owner": user_id})
        return self.stream_groups(filter, pageable, context)


__all__ = ["GroupsResource"]

"""Role and role assignment operations."""

from typing import AsyncIterator, Optional

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor
from sso_client.models import Page, Role, User
from sso_client.options import Pageable, RequestOptions, RoleFilter, RoleOptions, UserFilter
from sso_client.resources.base import Resource


def _user_filter(user_id: str, group_id: Optional[str], filter: Optional[RoleFilter]) -> RoleFilter:
    update = {"run_as": user_id}
    if group_id is not None:
        update["group"] = group_id
    return (filter or RoleFilter()).model_copy(update=update)


class RolesResource(Resource):
    """Roles and their assignment to users."""

    async def get_role(
        self,
        role_id: str,
        options: Optional[RoleOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[Role]:
        url = endpoints.role(self._id(role_id), self.config, self._admin(options, context))
        return await self._get(self._uri(url, options), Role, context)

    async def list_roles(
        self,
        filter: Optional[RoleFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Role]:
        url = endpoints.roles(self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[Role], context)

    def stream_roles(
        self,
        filter: Optional[RoleFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Role]:
        url = endpoints.roles_stream(self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), Role, context)

    async def create_role(
        self,
        role: Role,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        url = endpoints.roles(self.config, self._admin(options, context))
        return await self._create(self._uri(url, options), role, context)

    async def update_role(
        self,
        role: Role,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.role(self._id(role.id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.put(self._uri(url, options), role), context)

    async def delete_role(
        self,
        role_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.role(self._id(role_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options)), context)

    # Assignments

    async def list_role_members(
        self,
        role_id: str,
        filter: Optional[UserFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[User]:
        url = endpoints.role_members(self._id(role_id), self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[User], context)

    def stream_role_members(
        self,
        role_id: str,
        filter: Optional[UserFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[User]:
        url = endpoints.role_members_stream(self._id(role_id), self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), User, context)

    async def count_role_members(
        self,
        role_id: str,
        filter: Optional[UserFilter] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[int]:
        url = endpoints.count_role_members(self._id(role_id), self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter), int, context)

    async def assign_role(
        self,
        user_id: str,
        role_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        self._id(user_id, "user_id")
        url = endpoints.role_members(self._id(role_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.post(self._uri(url, options, username=user_id)), context)

    async def unassign_role(
        self,
        user_id: str,
        role_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        self._id(user_id, "user_id")
        url = endpoints.role_members(self._id(role_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options, username=user_id)), context)

    # Roles of a user

    async def list_roles_for_user(
        self,
        user_id: str,
        filter: Optional[RoleFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Role]:
        return await self.list_roles(_user_filter(user_id, None, filter), pageable, context)

    def stream_roles_for_user(
        self,
        user_id: str,
        filter: Optional[RoleFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Role]:
        return self.stream_roles(_user_filter(user_id, None, filter), pageable, context)

    async def list_roles_for_user_in_group(
        self,
        user_id: str,
        group_id: str,
        filter: Optional[RoleFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Role]:
        return await self.list_roles(_user_filter(user_id, group_id, filter), pageable, context)

    def stream_roles_for_user_in_group(
        self,
        user_id: str,
        group_id: str,
        filter: Optional[RoleFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Role]:
        return self.stream_roles(_user_filter(user_id, group_id, filter), pageable, context)


__all__ = ["RolesResource"]

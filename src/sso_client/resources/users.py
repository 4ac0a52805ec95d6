"""User operations."""

from typing import AsyncIterator, Optional

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor
from sso_client.models import Page, User
from sso_client.options import Pageable, RequestOptions, UserFilter, UserOptions
from sso_client.resources.base import Resource


class UsersResource(Resource):
    """
    Users.

    Identifiers are any property with a unique constraint: UUID, username
    or email.
    """

    async def get_user(
        self,
        user_id: str,
        options: Optional[UserOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[User]:
        url = endpoints.user(self._id(user_id), self.config, self._admin(options, context))
        return await self._get(self._uri(url, options), User, context)

    async def list_users(
        self,
        filter: Optional[UserFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[User]:
        url = endpoints.users(self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[User], context)

    def stream_users(
        self,
        filter: Optional[UserFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[User]:
        url = endpoints.users_stream(self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), User, context)

    async def create_user(
        self,
        user: User,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        """Create a user; returns the Location of the new user."""
        url = endpoints.users(self.config, self._admin(options, context))
        return await self._create(self._uri(url, options), user, context)

    async def update_user(
        self,
        user: User,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.user(self._id(user.id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.put(self._uri(url, options), user), context)

    async def delete_user(
        self,
        user_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.user(self._id(user_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options)), context)

    async def change_password(
        self,
        password: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        """Change the password of the calling principal (or run-as user for admins)."""
        url = endpoints.password(self.config, self._admin(options, context))
        await self._send(RequestDescriptor.post(self._uri(url, options, password=password)), context)


__all__ = ["UsersResource"]

"""Invitation operations."""

from typing import AsyncIterator, Optional

from sso_client import endpoints
from sso_client.context import ClientContext
from sso_client.dispatcher import RequestDescriptor
from sso_client.models import Invitation, InvitationStats, Page
from sso_client.options import InvitationFilter, InvitationOptions, Pageable, RequestOptions
from sso_client.resources.base import Resource


class InvitationsResource(Resource):
    """Invitations sent by the calling principal (or all, for admins)."""

    async def get_invitation(
        self,
        invitation_id: str,
        options: Optional[InvitationOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[Invitation]:
        url = endpoints.invitation(self._id(invitation_id), self.config, self._admin(options, context))
        return await self._get(self._uri(url, options), Invitation, context)

    async def list_invitations(
        self,
        filter: Optional[InvitationFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> Page[Invitation]:
        url = endpoints.invitations(self.config, self._admin(filter, context))
        return await self._get(self._uri(url, filter, pageable), Page[Invitation], context)

    def stream_invitations(
        self,
        filter: Optional[InvitationFilter] = None,
        pageable: Optional[Pageable] = None,
        context: Optional[ClientContext] = None,
    ) -> AsyncIterator[Invitation]:
        url = endpoints.invitations_stream(self.config, self._admin(filter, context))
        return self._stream(self._uri(url, filter, pageable), Invitation, context)

    async def invite(
        self,
        invitation: Invitation,
        options: Optional[InvitationOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        """Send an invitation; returns its Location."""
        url = endpoints.invite(self.config, self._admin(options, context))
        return await self._create(self._uri(url, options), invitation, context)

    async def update_invitation(
        self,
        invitation: Invitation,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.invitation(self._id(invitation.id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.put(self._uri(url, options), invitation), context)

    async def delete_invitation(
        self,
        invitation_id: str,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> None:
        url = endpoints.invitation(self._id(invitation_id), self.config, self._admin(options, context))
        await self._send(RequestDescriptor.delete(self._uri(url, options)), context)

    async def get_invitation_stats(
        self,
        options: Optional[RequestOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[InvitationStats]:
        url = endpoints.invitation_stats(self.config, self._admin(options, context))
        return await self._get(url, InvitationStats, context)

    async def get_invitation_token(
        self,
        invitation_id: str,
        options: Optional[InvitationOptions] = None,
        context: Optional[ClientContext] = None,
    ) -> Optional[str]:
        """Issue the invitation's acceptance link; returns it from the Location header."""
        url = endpoints.invitation_token(self._id(invitation_id), self.config, self._admin(options, context))
        return await self._create(self._uri(url, options), None, context)


__all__ = ["InvitationsResource"]

"""Resource operations grouped by resource type."""

from sso_client.resources.auth import AuthResource
from sso_client.resources.base import Resource
from sso_client.resources.clients import ClientsResource
from sso_client.resources.groups import GroupsResource
from sso_client.resources.invitations import InvitationsResource
from sso_client.resources.members import MembersResource
from sso_client.resources.registration import RegistrationResource
from sso_client.resources.roles import RolesResource
from sso_client.resources.users import UsersResource

__all__ = [
    "Resource",
    "AuthResource",
    "ClientsResource",
    "GroupsResource",
    "InvitationsResource",
    "MembersResource",
    "RegistrationResource",
    "RolesResource",
    "UsersResource",
]

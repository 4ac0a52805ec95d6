"""
Asynchronous client SDK for the SSO identity and authorization service.

Usage:
    from sso_client import load_config, make_sso_client

    async with make_sso_client(load_config()) as sso:
        user = await sso.users.get_user("42")
"""

from sso_client.client import SsoClient, make_password_sso_client, make_sso_client
from sso_client.config import SsoClientConfig, get_config, load_config, reset_config, set_config
from sso_client.context import ClientContext, Result
from sso_client.dispatcher import (
    BodilessResponse,
    DispatchState,
    RequestDescriptor,
    RequestDispatcher,
    ResponseMode,
)
from sso_client.models import (
    Application,
    Client,
    Group,
    Invitation,
    InvitationStats,
    Member,
    Page,
    Role,
    SsoRegistration,
    User,
)
from sso_client.options import (
    ClientFilter,
    ClientOptions,
    GroupFilter,
    GroupOptions,
    InvitationFilter,
    InvitationOptions,
    MemberFilter,
    Pageable,
    RequestOptions,
    RoleFilter,
    RoleOptions,
    UserFilter,
    UserOptions,
)
from sso_client.session import (
    Authentication,
    WebSession,
    bind_session,
    clear_security_context,
    get_authentication,
    get_current_session,
    get_principal_user,
    get_session_id,
    get_token_type,
    get_token_value,
)
from sso_client.transport import ProcessScope, Transport, TransportSelector

__all__ = [
    # Client
    "SsoClient",
    "make_sso_client",
    "make_password_sso_client",
    # Config
    "SsoClientConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    # Context and dispatch
    "ClientContext",
    "Result",
    "RequestDescriptor",
    "RequestDispatcher",
    "ResponseMode",
    "DispatchState",
    "BodilessResponse",
    "ProcessScope",
    "Transport",
    "TransportSelector",
    # Session
    "Authentication",
    "WebSession",
    "bind_session",
    "clear_security_context",
    "get_authentication",
    "get_current_session",
    "get_principal_user",
    "get_session_id",
    "get_token_type",
    "get_token_value",
    # Models
    "User",
    "Group",
    "Member",
    "Invitation",
    "InvitationStats",
    "Role",
    "Client",
    "Application",
    "SsoRegistration",
    "Page",
    # Options
    "RequestOptions",
    "Pageable",
    "UserOptions",
    "UserFilter",
    "GroupOptions",
    "GroupFilter",
    "MemberFilter",
    "InvitationOptions",
    "InvitationFilter",
    "RoleOptions",
    "RoleFilter",
    "ClientOptions",
    "ClientFilter",
]

"""
SSO server endpoint URLs.

Resource endpoints live under ``{server}/api``; the admin variants under
``{server}/api/_``. Identifiers passed here must already be path-encoded.
"""

from sso_client.config import SsoClientConfig

API_PATH = "/api"
ADMIN_PATH = "/api/_"


def api_base(config: SsoClientConfig, admin: bool = False) -> str:
    return config.base_url + (ADMIN_PATH if admin else API_PATH)


def _url(config: SsoClientConfig, admin: bool, *segments: str) -> str:
    return "/".join([api_base(config, admin), *segments])


# User

def users(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "user")


def users_stream(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "user", "stream")


def user(user_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "user", user_id)


def password(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "user", "password")


# Group

def groups(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group")


def groups_stream(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", "stream")


def count_groups(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", "count")


def group(group_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", group_id)


# Group members

def group_members(group_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", group_id, "member")


def group_members_stream(group_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", group_id, "member", "stream")


def count_members(group_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", group_id, "member", "count")


def member(group_id: str, user_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "group", group_id, "member", user_id)


# Invitation

def invitations(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "invitation")


def invitations_stream(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "invitation", "stream")


def invite(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "invitation", "invite")


def invitation_stats(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "invitation", "stats")


def invitation(invitation_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "invitation", invitation_id)


def invitation_token(invitation_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "invitation", invitation_id, "token")


# Role

def roles(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "role")


def roles_stream(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "role", "stream")


def role(role_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "role", role_id)


def role_members(role_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "role", role_id, "member")


def role_members_stream(role_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "role", role_id, "member", "stream")


def count_role_members(role_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "role", role_id, "member", "count")


# Client

def clients(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "client")


def clients_stream(config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "client", "stream")


def client(client_id: str, config: SsoClientConfig, admin: bool = False) -> str:
    return _url(config, admin, "client", client_id)


# Registration and OAuth

def register(config: SsoClientConfig) -> str:
    return _url(config, False, "register")


def token(config: SsoClientConfig) -> str:
    return config.token_endpoint_url


def token_revoke(config: SsoClientConfig) -> str:
    return config.revoke_endpoint_url

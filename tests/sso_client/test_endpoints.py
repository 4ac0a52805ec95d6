"""Tests for SSO server endpoint URLs."""

from sso_client import endpoints
from sso_client.config import SsoClientConfig

CONFIG = SsoClientConfig(server="https://sso.example.com/", client_id="app")


class TestEndpoints:
    def test_api_base(self):
        assert endpoints.api_base(CONFIG) == "https://sso.example.com/api"
        assert endpoints.api_base(CONFIG, admin=True) == "https://sso.example.com/api/_"

    def test_users(self):
        assert endpoints.users(CONFIG) == "https://sso.example.com/api/user"
        assert endpoints.users_stream(CONFIG) == "https://sso.example.com/api/user/stream"
        assert endpoints.user("42", CONFIG, admin=True) == "https://sso.example.com/api/_/user/42"
        assert endpoints.password(CONFIG) == "https://sso.example.com/api/user/password"

    def test_groups_and_members(self):
        assert endpoints.count_groups(CONFIG) == "https://sso.example.com/api/group/count"
        assert endpoints.group_members("g1", CONFIG) == "https://sso.example.com/api/group/g1/member"
        assert endpoints.count_members("g1", CONFIG) == "https://sso.example.com/api/group/g1/member/count"
        assert endpoints.member("g1", "u1", CONFIG) == "https://sso.example.com/api/group/g1/member/u1"

    def test_invitations(self):
        assert endpoints.invite(CONFIG) == "https://sso.example.com/api/invitation/invite"
        assert endpoints.invitation_stats(CONFIG) == "https://sso.example.com/api/invitation/stats"
        assert endpoints.invitation_token("i1", CONFIG) == "https://sso.example.com/api/invitation/i1/token"

    def test_roles_and_clients(self):
        assert endpoints.role_members_stream("r1", CONFIG) == "https://sso.example.com/api/role/r1/member/stream"
        assert endpoints.count_role_members("r1", CONFIG) == "https://sso.example.com/api/role/r1/member/count"
        assert endpoints.client("c1", CONFIG, admin=True) == "https://sso.example.com/api/_/client/c1"

    def test_oauth(self):
        assert endpoints.register(CONFIG) == "https://sso.example.com/api/register"
        assert endpoints.token(CONFIG) == "https://sso.example.com/oauth/token"
        assert endpoints.token_revoke(CONFIG) == "https://sso.example.com/oauth/revoke"

"""Tests for SSO resource models."""

from sso_client.models import Client, Group, Invitation, Member, Page, Role, SsoRegistration, User


class TestUser:
    def test_from_camel_case(self):
        user = User.model_validate({"id": "u1", "firstName": "Ann", "lastName": "Lee", "enabled": True})

        assert user.first_name == "Ann"
        assert user.full_name == "Ann Lee"
        assert user.enabled is True

    def test_populate_by_name(self):
        assert User(first_name="Ann").first_name == "Ann"

    def test_full_name_falls_back_to_display_name(self):
        assert User(display_name="A. Lee").full_name == "A. Lee"

    def test_unknown_fields_kept(self):
        user = User.model_validate({"id": "u1", "customAttr": "x"})

        assert user.to_payload() == {"id": "u1", "customAttr": "x"}

    def test_to_payload_uses_aliases_and_drops_none(self):
        assert User(id="u1", first_name="Ann").to_payload() == {"id": "u1", "firstName": "Ann"}

    def test_nested_roles_and_groups(self):
        user = User.model_validate({"roles": [{"name": "admin"}], "groups": [{"name": "ops"}]})

        assert isinstance(user.roles[0], Role)
        assert isinstance(user.groups[0], Group)


class TestGroup:
    def test_tree(self):
        group = Group.model_validate(
            {"id": "g2", "parent": {"id": "g1"}, "subGroups": [{"id": "g3"}], "memberCount": 4}
        )

        assert group.parent.id == "g1"
        assert group.sub_groups[0].id == "g3"
        assert group.member_count == 4


class TestMember:
    def test_user_id(self):
        assert Member(user=User(id="u1", username="ann")).user_id == "u1"
        assert Member(user=User(username="ann")).user_id == "ann"
        assert Member().user_id is None


class TestRole:
    def test_global_alias(self):
        role = Role.model_validate({"name": "viewer", "global": True})

        assert role.global_ is True
        assert role.to_payload() == {"name": "viewer", "global": True}


class TestClient:
    def test_secret_hidden_from_repr(self):
        client = Client.model_validate({"clientId": "app", "clientSecret": "s3cret", "grantTypes": ["password"]})

        assert client.client_id == "app"
        assert client.grant_types == ["password"]
        assert "s3cret" not in repr(client)


class TestInvitationAndRegistration:
    def test_invitation(self):
        invitation = Invitation.model_validate({"email": "a@b.c", "subType": "member", "group": {"id": "g1"}})

        assert invitation.sub_type == "member"
        assert invitation.group.id == "g1"

    def test_registration_from_config_dict(self):
        registration = SsoRegistration.model_validate(
            {"application": {"name": "my-app"}, "roles": [{"name": "admin"}], "auto_roles": True}
        )

        assert registration.application.name == "my-app"
        assert registration.to_payload()["autoRoles"] is True


class TestPage:
    def test_from_envelope(self):
        page = Page[User].model_validate(
            {
                "content": [{"id": "u1"}, {"id": "u2"}],
                "totalElements": 12,
                "number": 1,
                "size": 2,
                "totalPages": 6,
            }
        )

        assert [u.id for u in page.items] == ["u1", "u2"]
        assert page.total_count == 12
        assert page.page_index == 1
        assert page.page_size == 2
        assert page.total_pages == 6

    def test_from_bare_list(self):
        page = Page[Group].model_validate([{"id": "g1"}])

        assert page.items[0].id == "g1"
        assert page.total_count == 1

    def test_empty_content(self):
        page = Page[User].model_validate({"content": None})

        assert page.items == []
        assert page.total_count == 0

"""
SSO resource models.

Pydantic models for the JSON payloads exchanged with the SSO server.
Field names are snake_case in Python and camelCase on the wire; unknown
server fields are kept as extras so a model round-trips without loss.

Resources:
    - User: identity with profile data
    - Group: hierarchical organization unit
    - Member: a User's membership in a Group
    - Invitation / InvitationStats: pending invitations and counters
    - Role: global or group-scoped role
    - Client: registered OAuth client
    - Application / SsoRegistration: client application registration data
    - Page: paginated list envelope
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class SsoModel(BaseModel):
    """Base model: camelCase aliases, populate by name, keep unknown fields."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "allow",
    }

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for a request body (aliases, no None values)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(SsoModel):
    """SSO user account."""

    id: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    title: Optional[str] = None
    phone: Optional[str] = None
    enabled: Optional[bool] = None
    status: Optional[str] = None
    roles: Optional[List["Role"]] = None
    groups: Optional[List["Group"]] = None

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.display_name


class Group(SsoModel):
    """Group in the organization tree. Root groups have no parent."""

    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    owner: Optional[str] = None
    parent: Optional["Group"] = None
    path: Optional[str] = None
    level: Optional[int] = None
    member_count: Optional[int] = None
    sub_groups: Optional[List["Group"]] = None


class Member(SsoModel):
    """Membership of a user in a group."""

    id: Optional[str] = None
    user: Optional[User] = None
    group: Optional[Group] = None
    title: Optional[str] = None
    roles: Optional[List["Role"]] = None

    @property
    def user_id(self) -> Optional[str]:
        if self.user is None:
            return None
        return self.user.id or self.user.username


class Invitation(SsoModel):
    """Invitation sent to a prospective user."""

    id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    username: Optional[str] = None
    type: Optional[str] = None
    sub_type: Optional[str] = None
    owner: Optional[str] = None
    status: Optional[str] = None
    token: Optional[str] = None
    uri: Optional[str] = None
    group: Optional[Group] = None
    roles: Optional[List["Role"]] = None


class InvitationStats(SsoModel):
    """Invitation counters for the calling principal."""

    total: Optional[int] = None
    accepted: Optional[int] = None
    pending: Optional[int] = None
    rejected: Optional[int] = None


class Role(SsoModel):
    """Role, either global or scoped to a group."""

    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    global_: Optional[bool] = Field(default=None, alias="global")
    group: Optional[Group] = None
    permissions: Optional[List[str]] = None


class Client(SsoModel):
    """OAuth client registered with the server."""

    id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = Field(default=None, repr=False)
    name: Optional[str] = None
    description: Optional[str] = None
    scopes: Optional[List[str]] = None
    grant_types: Optional[List[str]] = None
    redirect_uris: Optional[List[str]] = None


class Application(SsoModel):
    """Client application descriptor sent on registration."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    url: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None


class SsoRegistration(SsoModel):
    """Registration payload: application plus the roles and groups it declares."""

    application: Optional[Application] = None
    roles: Optional[List[Role]] = None
    groups: Optional[List[Group]] = None
    auto_roles: Optional[bool] = None
    auto_groups: Optional[bool] = None


class Page(BaseModel, Generic[T]):
    """
    One page of a paginated listing.

    Validates directly from the server envelope
    ``{"content": [...], "totalElements": n, "number": i, "size": s, "totalPages": p}``.
    """

    items: List[T] = Field(default_factory=list)
    total_count: int = 0
    page_index: int = 0
    page_size: int = 0
    total_pages: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _from_envelope(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {
                "items": data,
                "total_count": len(data),
                "page_size": len(data),
            }
        if not isinstance(data, dict) or "content" not in data:
            return data
        content = data.get("content") or []
        return {
            "items": content,
            "total_count": data.get("totalElements", len(content)),
            "page_index": data.get("number", 0),
            "page_size": data.get("size", len(content)),
            "total_pages": data.get("totalPages"),
        }


User.model_rebuild()
Group.model_rebuild()
Member.model_rebuild()
Invitation.model_rebuild()

__all__ = [
    "SsoModel",
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
]

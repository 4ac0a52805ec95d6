"""
Request options, filters and pagination, plus their query-string encoding.

Options tailor a single call (projection, admin selector); filters narrow a
listing. Both are pydantic models dumped by alias onto the query string:
None values are dropped, booleans are lowercase, lists are comma-joined.
The ``admin`` selector only picks the admin endpoint and is never sent.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote, urlencode, urlsplit

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Fields used for endpoint selection, never sent to the server
EXCLUDED_QUERY_FIELDS = {"admin"}


class RequestOptions(BaseModel):
    """Options common to every call."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "allow",
    }

    admin: Optional[bool] = None


class UserOptions(RequestOptions):
    projection: Optional[List[str]] = Field(default=None, alias="fields")
    publish: Optional[bool] = None


class UserFilter(UserOptions):
    q: Optional[str] = None
    status: Optional[str] = None
    group: Optional[str] = None


class GroupOptions(RequestOptions):
    projection: Optional[List[str]] = Field(default=None, alias="fields")


class GroupFilter(GroupOptions):
    q: Optional[str] = None
    type: Optional[str] = None
    owner: Optional[str] = None
    parent: Optional[str] = None
    root: Optional[str] = None
    strict: Optional[bool] = None


class MemberFilter(UserFilter):
    title: Optional[str] = None


class InvitationOptions(RequestOptions):
    send_mail: Optional[bool] = None
    redirect_uri: Optional[str] = None


class InvitationFilter(InvitationOptions):
    q: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    owner: Optional[str] = None


class RoleOptions(RequestOptions):
    projection: Optional[List[str]] = Field(default=None, alias="fields")


class RoleFilter(RoleOptions):
    q: Optional[str] = None
    type: Optional[str] = None
    global_: Optional[bool] = Field(default=None, alias="global")
    group: Optional[str] = None
    run_as: Optional[str] = None


class ClientOptions(RequestOptions):
    projection: Optional[List[str]] = Field(default=None, alias="fields")


class ClientFilter(ClientOptions):
    q: Optional[str] = None


@dataclass
class Pageable:
    """Page request: zero-based page index, page size and sort orders."""

    page: int = 0
    size: int = 20
    sort: List[str] = field(default_factory=list)

    def to_params(self) -> Dict[str, str]:
        params = {"page": str(self.page), "size": str(self.size)}
        if self.sort:
            params["sort"] = ",".join(self.sort)
        return params


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(_encode_value(v) for v in value)
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def encode_query(
    options: Optional[Union[RequestOptions, Dict[str, Any]]] = None,
    pageable: Optional[Pageable] = None,
) -> Dict[str, str]:
    """
    Encode options/filter and paging onto query parameters.

    Args:
        options: Options or filter model (or plain dict)
        pageable: Optional page request

    Returns:
        Ordered dict of query parameters
    """
    params: Dict[str, str] = {}
    if options is not None:
        if isinstance(options, BaseModel):
            data = options.model_dump(by_alias=True, exclude_none=True, exclude=EXCLUDED_QUERY_FIELDS)
        else:
            data = {k: v for k, v in options.items() if v is not None and k not in EXCLUDED_QUERY_FIELDS}
        for key, value in data.items():
            if isinstance(value, (list, tuple)) and not value:
                continue
            params[key] = _encode_value(value)
    if pageable is not None:
        params.update(pageable.to_params())
    return params


def with_query(uri: str, params: Dict[str, str]) -> str:
    """Append query parameters to a URI that may already carry a query."""
    if not params:
        return uri
    separator = "&" if urlsplit(uri).query else "?"
    return f"{uri}{separator}{urlencode(params)}"


def encode_segment(value: str) -> str:
    """Percent-encode an identifier used as a single path segment."""
    return quote(str(value), safe="")


def is_admin_request(options: Optional[Any], context: Optional[Any], default: bool = False) -> bool:
    """
    Decide whether a call targets the admin endpoints.

    The options' ``admin`` selector wins, then the context's, then the default.
    """
    admin = getattr(options, "admin", None)
    if admin is None and isinstance(options, dict):
        admin = options.get("admin")
    if admin is not None:
        return bool(admin)
    admin = getattr(context, "admin", None)
    if admin is not None:
        return bool(admin)
    return default


__all__ = [
    "RequestOptions",
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
    "Pageable",
    "encode_query",
    "with_query",
    "encode_segment",
    "is_admin_request",
]

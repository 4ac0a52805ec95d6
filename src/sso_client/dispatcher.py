"""
Request dispatch: token setup, transport selection, send and decode.

Every call moves through ``CREATED -> TOKEN_PENDING -> SENT -> COMPLETED | FAILED``.
TOKEN_PENDING is skipped when a cached token exists or automatic token setup
is disabled. Failures are classified onto the SsoError hierarchy, recorded
in the caller's context result slot (unless it is the shared singleton) and
re-raised.
"""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, AsyncIterator, Awaitable, Mapping, Optional

from pydantic import TypeAdapter

from core.errors.exceptions import AuthError, NotAuthenticatedWarning, SsoError
from core.errors.transport_classifier import HttpErrorClassifier
from core.logging.formatters import sanitize_url
from core.logging.utilities import log_exception, log_with_context
from core.oauth2.manager import OAuth2TokenManager
from core.utils.json_serializers import json_serializer
from sso_client.config import SsoClientConfig
from sso_client.context import ClientContext, Result
from sso_client.streaming import iter_json_values
from sso_client.transport import Selection, TransportSelector

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


class ResponseMode(str, Enum):
    SINGLE = "single"
    STREAM = "stream"
    BODILESS = "bodiless"


class DispatchState(str, Enum):
    CREATED = "created"
    TOKEN_PENDING = "token_pending"
    SENT = "sent"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Fully formed request. Never mutated once built.

    Attributes:
        method: HTTP method
        uri: Absolute request URI including query
        headers: Read-only request headers
        body: Optional JSON body (pydantic model or plain data)
    """

    method: str
    uri: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @staticmethod
    def _headers(body: Any, headers: Optional[Mapping[str, str]]) -> dict:
        merged = {"Accept": JSON_MEDIA_TYPE}
        if body is not None:
            merged["Content-Type"] = JSON_MEDIA_TYPE
        merged.update(headers or {})
        return merged

    @classmethod
    def get(cls, uri: str, headers: Optional[Mapping[str, str]] = None) -> "RequestDescriptor":
        return cls("GET", uri, cls._headers(None, headers))

    @classmethod
    def post(cls, uri: str, body: Any = None, headers: Optional[Mapping[str, str]] = None) -> "RequestDescriptor":
        return cls("POST", uri, cls._headers(body, headers), body)

    @classmethod
    def put(cls, uri: str, body: Any = None, headers: Optional[Mapping[str, str]] = None) -> "RequestDescriptor":
        return cls("PUT", uri, cls._headers(body, headers), body)

    @classmethod
    def delete(cls, uri: str, headers: Optional[Mapping[str, str]] = None) -> "RequestDescriptor":
        return cls("DELETE", uri, cls._headers(None, headers))

    def has_header(self, name: str) -> bool:
        name = name.lower()
        return any(key.lower() == name for key in self.headers)

    def encode_body(self) -> Optional[bytes]:
        if self.body is None:
            return None
        if isinstance(self.body, (bytes, str)):
            return self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        return json.dumps(self.body, default=json_serializer).encode("utf-8")


@dataclass(frozen=True)
class BodilessResponse:
    """Status and headers of a response whose body was discarded."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("Location")


@lru_cache(maxsize=128)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class DispatchCall:
    """State and timing of one dispatched call."""

    def __init__(self, request: RequestDescriptor, mode: ResponseMode):
        self.request = request
        self.mode = mode
        self.request_id = uuid.uuid4().hex[:12]
        self.state = DispatchState.CREATED
        self.status: Optional[int] = None
        self.url = sanitize_url(request.uri)
        self._start = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        return round((time.perf_counter() - self._start) * 1000, 2)

    def advance(self, state: DispatchState) -> None:
        logger.debug(
            f"{self.request.method} {self.url}: {self.state.value} -> {state.value}",
            extra={"request_id": self.request_id, "dispatch_state": state.value},
        )
        self.state = state

    def log_fields(self) -> dict:
        return {
            "request_id": self.request_id,
            "http_method": self.request.method,
            "http_url": self.url,
            "http_status": self.status,
            "response_mode": self.mode.value,
            "duration_ms": self.duration_ms,
        }


class RequestDispatcher:
    """
    Sends RequestDescriptors and decodes their responses.

    ``dispatch`` returns an awaitable for SINGLE and BODILESS calls and an
    async iterator for STREAM calls. Nothing is sent until the awaitable is
    awaited or the iterator is first advanced.
    """

    def __init__(
        self,
        selector: TransportSelector,
        token_manager: OAuth2TokenManager,
        config: SsoClientConfig,
    ):
        self.selector = selector
        self.token_manager = token_manager
        self.config = config

    def dispatch(
        self,
        request: RequestDescriptor,
        mode: ResponseMode = ResponseMode.SINGLE,
        response_type: Any = None,
        context: Optional[ClientContext] = None,
    ) -> Awaitable[Any] | AsyncIterator[Any]:
        mode = ResponseMode(mode)
        if mode is ResponseMode.STREAM:
            return self._dispatch_stream(request, response_type, context)
        if mode is ResponseMode.BODILESS:
            return self._dispatch_bodiless(request, context)
        return self._dispatch_single(request, response_type, context)

    # Convenience wrappers used by resource operations

    async def retrieve(
        self, request: RequestDescriptor, response_type: Any = None, context: Optional[ClientContext] = None
    ) -> Any:
        return await self._dispatch_single(request, response_type, context)

    async def retrieve_bodiless(
        self, request: RequestDescriptor, context: Optional[ClientContext] = None
    ) -> BodilessResponse:
        return await self._dispatch_bodiless(request, context)

    def stream(
        self, request: RequestDescriptor, response_type: Any = None, context: Optional[ClientContext] = None
    ) -> AsyncIterator[Any]:
        return self._dispatch_stream(request, response_type, context)

    # Steps

    async def _prepare(
        self, request: RequestDescriptor, call: DispatchCall, context: Optional[ClientContext]
    ) -> tuple[Selection, dict]:
        selection = self.selector.select(context)
        headers = dict(request.headers)
        if request.has_header("Authorization"):
            return selection, headers

        token = selection.context.get_token()
        if token is None and self.config.auto_setup_token:
            call.advance(DispatchState.TOKEN_PENDING)
            token = await self.token_manager.setup_token(selection.context)

        if token is not None:
            headers["Authorization"] = token.authorization_header
        elif not self.config.allow_unauthenticated:
            raise AuthError(
                "No token available for request",
                context={"http_method": request.method, "http_url": call.url},
            )
        else:
            log_exception(
                logger,
                NotAuthenticatedWarning("No token available, sending request unauthenticated"),
                "Dispatching unauthenticated request",
                level=logging.WARNING,
                include_traceback=False,
                strategy=selection.strategy,
                **call.log_fields(),
            )
        return selection, headers

    @staticmethod
    async def _raise_for_status(call: DispatchCall, response) -> None:
        call.status = response.status
        if 200 <= response.status < 300:
            return
        try:
            body = await response.text()
        except (UnicodeDecodeError, asyncio.TimeoutError, OSError):
            body = None
        raise HttpErrorClassifier.from_status(
            response.status, call.request.method, call.url, body
        )

    @staticmethod
    def _decode(text: str, response_type: Any) -> Any:
        if not text or not text.strip():
            return None
        data = json.loads(text)
        if response_type is None:
            return data
        return _adapter(response_type).validate_python(data)

    def _fail(
        self, call: DispatchCall, error: Exception, context: Optional[ClientContext]
    ) -> SsoError:
        classified = HttpErrorClassifier.classify_transport_error(
            error,
            context={"http_method": call.request.method, "http_url": call.url},
        )
        call.advance(DispatchState.FAILED)
        log_exception(
            logger,
            classified,
            f"Request failed: {call.request.method} {call.url}",
            level=logging.WARNING,
            include_traceback=False,
            dispatch_state=call.state.value,
            **call.log_fields(),
        )
        if context is not None:
            context.record(Result.failure(classified))
        return classified

    def _complete(self, call: DispatchCall, context: Optional[ClientContext], value: Any, **fields: Any) -> None:
        call.advance(DispatchState.COMPLETED)
        log_with_context(
            logger,
            logging.DEBUG,
            f"{call.request.method} {call.url} -> {call.status}",
            dispatch_state=call.state.value,
            **call.log_fields(),
            **fields,
        )
        if context is not None:
            context.record(Result.success(value))

    # Modes

    async def _dispatch_single(
        self, request: RequestDescriptor, response_type: Any, context: Optional[ClientContext]
    ) -> Any:
        call = DispatchCall(request, ResponseMode.SINGLE)
        try:
            selection, headers = await self._prepare(request, call, context)
            session = await selection.transport.open()
            call.advance(DispatchState.SENT)
            async with session.request(
                request.method, request.uri, headers=headers, data=request.encode_body()
            ) as response:
                await self._raise_for_status(call, response)
                text = await response.text()
            value = self._decode(text, response_type)
        except Exception as e:
            error = self._fail(call, e, context)
            if error is e:
                raise
            raise error from e

        self._complete(call, context, value)
        return value

    async def _dispatch_bodiless(
        self, request: RequestDescriptor, context: Optional[ClientContext]
    ) -> BodilessResponse:
        call = DispatchCall(request, ResponseMode.BODILESS)
        try:
            selection, headers = await self._prepare(request, call, context)
            session = await selection.transport.open()
            call.advance(DispatchState.SENT)
            async with session.request(
                request.method, request.uri, headers=headers, data=request.encode_body()
            ) as response:
                await self._raise_for_status(call, response)
                result = BodilessResponse(status=response.status, headers=response.headers)
        except Exception as e:
            error = self._fail(call, e, context)
            if error is e:
                raise
            raise error from e

        self._complete(call, context, result)
        return result

    async def _dispatch_stream(
        self, request: RequestDescriptor, response_type: Any, context: Optional[ClientContext]
    ) -> AsyncIterator[Any]:
        call = DispatchCall(request, ResponseMode.STREAM)
        adapter = _adapter(response_type) if response_type is not None else None
        count = 0
        try:
            selection, headers = await self._prepare(request, call, context)
            session = await selection.transport.open()
            call.advance(DispatchState.SENT)
            async with session.request(
                request.method, request.uri, headers=headers, data=request.encode_body()
            ) as response:
                await self._raise_for_status(call, response)
                async for item in iter_json_values(response):
                    yield adapter.validate_python(item) if adapter else item
                    count += 1
        except Exception as e:
            error = self._fail(call, e, context)
            if error is e:
                raise
            raise error from e

        self._complete(call, context, count, items_decoded=count)


__all__ = [
    "ResponseMode",
    "DispatchState",
    "RequestDescriptor",
    "BodilessResponse",
    "DispatchCall",
    "RequestDispatcher",
]

"""Message — the unit of state flowing through a middleware chain.

A :class:`RequestMessage` and a :class:`ResponseMessage` share one engine
(:class:`~api_http_protocol.middleware.chain.MiddlewareChain`) by
composition and differ only in the data they carry.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any

import httpx

from .codec import encode_payload
from .constants import (
    BUSINESS_CODE_FAIL,
    BUSINESS_CODE_SUCCESS,
    BUSINESS_MESSAGE_SUCCESS,
    HEADER_REQUEST_ID,
    METADATA_BUSINESS_CODE,
    UNKNOWN_REQUEST_ID,
)
from .correlation import generate_request_id
from .curl import to_curl
from .duplicate import copy_request, copy_response
from .headers import Headers
from .metadata import Metadata
from .middleware.chain import MiddlewareChain
from .middleware.stage import Stage

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_log = logging.getLogger("api_http_protocol")


class Message:
    """State shared by request and response messages."""

    role = "message"

    def __init__(self) -> None:
        self.headers = Headers()
        self.payload: Any = None
        self.payload_type: Any = None
        self.metadata = Metadata()
        self.chain = MiddlewareChain()
        self.logger: logging.Logger | logging.LoggerAdapter[Any] = _log
        self.io_reader: Callable[[Any], Awaitable[None]] | None = None
        self.io_writer: Callable[[Any], Awaitable[None]] | None = None
        self._raw: bytes | None = None
        self._request_id = ""

    # ── Headers / metadata ───────────────────────────────────────

    def set_header(self, key: str, value: str) -> None:
        self.headers.add(key, value)

    def get_header(self, key: str) -> str:
        return self.headers.get(key)

    def get_header_list(self, key: str) -> list[str]:
        return self.headers.get_list(key)

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata.set(key, value)

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    # ── Raw bytes ────────────────────────────────────────────────

    def set_raw(self, data: bytes | None) -> None:
        self._raw = data

    def get_raw(self) -> bytes | None:
        return self._raw

    def set_request_id(self, request_id: str) -> None:
        self._request_id = request_id

    def use_logger(self, logger: logging.Logger | logging.LoggerAdapter[Any]) -> None:
        self.logger = logger

    # ── Chain ────────────────────────────────────────────────────

    def add_middleware(
        self,
        *handlers: Callable[[Any], Awaitable[None]] | None,
        stage: Stage = Stage.DEFAULT,
        order: int = 0,
    ) -> None:
        self.chain.add(*handlers, stage=stage, order=order)

    async def run(self) -> None:
        await self.chain.run(self, role=self.role)

    async def next(self) -> None:
        await self.chain.next(self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(headers={self.headers!r}, "
            f"payload={self.payload!r}, metadata={self.metadata!r})"
        )


class RequestMessage(Message):
    """Outbound (client) or inbound (server) request."""

    role = "request"

    def __init__(self, method: str = "GET", url: str = "") -> None:
        super().__init__()
        self.method = method
        self.url = url
        self.response: ResponseMessage | None = None
        self._duplicate: httpx.Request | None = None

    @property
    def request_id(self) -> str:
        """Correlation id, derived from headers or synthesized once."""
        if not self._request_id and self._duplicate is not None:
            self._request_id = self._duplicate.headers.get(HEADER_REQUEST_ID, "")
        if not self._request_id:
            self._request_id = self.get_header(HEADER_REQUEST_ID)
        if not self._request_id:
            self._request_id = generate_request_id()
            # Stamped onto the snapshot so replays and curl lines carry it.
            if self._duplicate is not None:
                self._duplicate.headers[HEADER_REQUEST_ID] = self._request_id
        return self._request_id

    def to_httpx_request(self) -> httpx.Request:
        """Build the transport request from method, url, headers and body.

        The raw cache is used when populated, otherwise the payload is
        serialized.
        """
        body = self.get_raw()
        if body is None:
            body = encode_payload(self.payload)
        return httpx.Request(
            self.method,
            self.url,
            headers=self.headers.multi_items(),
            content=body,
        )

    # ── Replay ───────────────────────────────────────────────────

    def set_duplicate_request(
        self, request: httpx.Request, body: bytes | None = None
    ) -> None:
        self._duplicate = copy_request(request, body)

    def get_duplicate_request(self) -> tuple[httpx.Request | None, bool]:
        if self._duplicate is None:
            return None, False
        return copy_request(self._duplicate), True

    def curl_command(self) -> str:
        duplicate, exists = self.get_duplicate_request()
        if not exists or duplicate is None:
            return ""
        return to_curl(duplicate)


class ResponseMessage(Message):
    """Inbound (client) or outbound (server) response."""

    role = "response"

    def __init__(self) -> None:
        super().__init__()
        self.status_code: int | None = None
        self.error: BaseException | None = None
        self.request: RequestMessage | None = None
        self._duplicate: httpx.Response | None = None

    @property
    def request_id(self) -> str:
        """Own id, else the paired request's, else the replayed headers'."""
        if self._request_id:
            return self._request_id
        if self.request is not None:
            return self.request.request_id
        duplicate, exists = self.get_duplicate_response()
        if exists and duplicate is not None:
            request_id = ""
            with contextlib.suppress(RuntimeError):
                request_id = duplicate.request.headers.get(HEADER_REQUEST_ID, "")
            request_id = request_id or duplicate.headers.get(HEADER_REQUEST_ID, "")
            if request_id:
                return request_id
        return UNKNOWN_REQUEST_ID

    # ── Business outcome ─────────────────────────────────────────

    @property
    def business_code(self) -> str:
        """Code stored in metadata, else derived from :attr:`error`."""
        code, exists = self.metadata.lookup(METADATA_BUSINESS_CODE)
        if exists and code is not None:
            return str(code)
        if self.error is None:
            return BUSINESS_CODE_SUCCESS
        code = getattr(self.error, "code", None)
        if code is not None:
            return str(code)
        return BUSINESS_CODE_FAIL

    @property
    def business_message(self) -> str:
        if self.error is None:
            return BUSINESS_MESSAGE_SUCCESS
        return str(self.error)

    # ── Replay ───────────────────────────────────────────────────

    def set_duplicate_response(
        self, response: httpx.Response, body: bytes | None = None
    ) -> None:
        """Snapshot *response* with its already-read *body*.

        When *body* is ``None`` the message's raw bytes are used.
        """
        if body is not None:
            self.set_raw(body)
        self._duplicate = copy_response(response, self.get_raw() or b"")

    def get_duplicate_response(self) -> tuple[httpx.Response | None, bool]:
        if self._duplicate is None:
            return None, False
        return copy_response(self._duplicate), True

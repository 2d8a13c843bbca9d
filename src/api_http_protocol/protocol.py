"""Protocol — pairs one request message with one response message.

A protocol instance serves exactly one logical call and must not be shared
between concurrent calls; build a fresh one per outbound call (client) or
per inbound request (server).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from .constants import CONTENT_TYPE_JSON, HEADER_CONTENT_TYPE, METADATA_HTTP_CODE
from .message import RequestMessage, ResponseMessage
from .middleware.stage import Stage
from .primitives.exceptions import IOHandlerMissingError, ResponseWriteError
from .validation import validate_payload

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

TProtocol = TypeVar("TProtocol", bound="Protocol")


class Protocol:
    """Owns a request/response pair and cross-links them.

    ``response.request`` points back at the request and ``request.response``
    at the response; the protocol is the sole owner of both.
    """

    def __init__(self, method: str = "GET", url: str = "") -> None:
        self.request = RequestMessage(method=method, url=url)
        self.response = ResponseMessage()
        self.request.response = self.response
        self.response.request = self.request

    # ── Configuration ────────────────────────────────────────────

    def add_request_middleware(
        self: TProtocol,
        *handlers: Callable[[RequestMessage], Awaitable[None]] | None,
        stage: Stage = Stage.DEFAULT,
        order: int = 0,
    ) -> TProtocol:
        self.request.add_middleware(*handlers, stage=stage, order=order)
        return self

    def add_response_middleware(
        self: TProtocol,
        *handlers: Callable[[ResponseMessage], Awaitable[None]] | None,
        stage: Stage = Stage.DEFAULT,
        order: int = 0,
    ) -> TProtocol:
        self.response.add_middleware(*handlers, stage=stage, order=order)
        return self

    def use_logger(
        self: TProtocol, log: logging.Logger | logging.LoggerAdapter[Any]
    ) -> TProtocol:
        self.request.use_logger(log)
        self.response.use_logger(log)
        return self

    def apply(
        self: TProtocol, *options: Callable[[TProtocol], TProtocol | None]
    ) -> TProtocol:
        """Run option callables against this protocol, in order."""
        protocol = self
        for option in options:
            protocol = option(protocol) or protocol
        return protocol

    # ── Internals ────────────────────────────────────────────────

    @staticmethod
    async def _run_read(message: RequestMessage | ResponseMessage, what: str) -> None:
        reader = message.io_reader
        if reader is None:
            raise IOHandlerMissingError(what)
        message.chain.set_io(reader, Stage.IO_READ)
        await message.run()
        validate_payload(message.payload)

    @staticmethod
    async def _run_write(message: RequestMessage | ResponseMessage, what: str) -> None:
        writer = message.io_writer
        if writer is None:
            raise IOHandlerMissingError(what)
        message.chain.set_io(writer, Stage.IO_WRITE)
        await message.run()


class ClientProtocol(Protocol):
    """Client role: write the request, then read the response."""

    def with_io(
        self,
        reader: Callable[[ResponseMessage], Awaitable[None]],
        writer: Callable[[RequestMessage], Awaitable[None]],
    ) -> ClientProtocol:
        self.response.io_reader = reader
        self.request.io_writer = writer
        return self

    def set_header(self, key: str, value: str) -> ClientProtocol:
        self.request.set_header(key, value)
        return self

    def set_content_type(self, content_type: str = CONTENT_TYPE_JSON) -> ClientProtocol:
        self.request.set_header(HEADER_CONTENT_TYPE, content_type)
        return self

    async def write_request(self, payload: Any = None) -> None:
        """Run the request chain; the I/O writer sits innermost."""
        self.request.payload = payload
        self.request.set_raw(None)
        await self._run_write(self.request, "request writer")

    async def read_response(self, payload_type: Any = None) -> Any:
        """Run the response chain and return the decoded payload.

        A payload exposing ``validate()`` is checked once the chain has
        completed.
        """
        self.response.payload_type = payload_type
        await self._run_read(self.response, "response reader")
        return self.response.payload

    async def do(self, payload: Any = None, payload_type: Any = None) -> Any:
        """Write *payload*, then read and return the response payload."""
        await self.write_request(payload)
        return await self.read_response(payload_type)

    @property
    def http_code(self) -> int:
        return int(self.response.get_metadata(METADATA_HTTP_CODE, 0))


class ServerProtocol(Protocol):
    """Server role: read the request, then answer success or failure."""

    def with_io(
        self,
        reader: Callable[[RequestMessage], Awaitable[None]],
        writer: Callable[[ResponseMessage], Awaitable[None]],
    ) -> ServerProtocol:
        self.request.io_reader = reader
        self.response.io_writer = writer
        return self

    def set_response_header(self, key: str, value: str) -> ServerProtocol:
        self.response.set_header(key, value)
        return self

    async def read_request(self, payload_type: Any = None) -> Any:
        """Run the request chain and return the decoded, validated payload."""
        self.request.payload_type = payload_type
        await self._run_read(self.request, "request reader")
        return self.request.payload

    async def response_success(self, data: Any = None) -> None:
        """Write *data*; a failed write is answered as a failure instead."""
        try:
            await self._write_response(data)
        except Exception as exc:
            logger.warning(
                "Writing success response failed (request_id=%s): %s",
                self.response.request_id,
                exc,
            )
            await self.response_fail(exc)

    async def response_fail(self, error: BaseException) -> None:
        """Write the failure response for *error*.

        A failure while writing it is fatal: :class:`ResponseWriteError` is
        raised and this path is never re-entered.
        """
        self.response.error = error
        try:
            await self._write_response(None)
        except Exception as exc:
            logger.error(
                "Writing failure response failed (request_id=%s): %s",
                self.response.request_id,
                exc,
            )
            raise ResponseWriteError(
                f"failed to write failure response for {error!r}: {exc}"
            ) from exc

    async def _write_response(self, data: Any) -> None:
        self.response.payload = data
        self.response.set_raw(None)
        await self._run_write(self.response, "response writer")

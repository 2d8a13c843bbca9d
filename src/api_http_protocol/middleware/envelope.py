"""Envelope middlewares — wrap and unwrap business envelopes.

Server-side wrappers run before the I/O writer and replace the payload with
its envelope; client-side unwrappers parametrize the decode target, let the
I/O reader decode, then surface ``data`` (or raise :class:`BusinessError`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from ..constants import (
    BUSINESS_CODE_FAIL,
    BUSINESS_CODE_SUCCESS,
    BUSINESS_MESSAGE_SUCCESS,
    METADATA_BUSINESS_CODE,
    METADATA_NESTED_HEAD,
)
from ..envelope import (
    Envelope,
    Head,
    NestedData,
    NestedRequest,
    NestedResponse,
    envelope_of,
    interface_from_path,
)
from ..primitives.exceptions import DecodeError

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..message import RequestMessage, ResponseMessage
    from ..protocol import ClientProtocol, ServerProtocol


async def _decode_wrapped(
    message: RequestMessage | ResponseMessage, wrapper: Any
) -> Any:
    """Run the rest of the chain decoding into ``wrapper[payload_type]``."""
    target = message.payload_type
    message.payload_type = envelope_of(wrapper, target)
    try:
        await message.next()
    finally:
        message.payload_type = target
    wrapped = message.payload
    if not isinstance(wrapped, wrapper):
        raise DecodeError(
            f"body is not a {wrapper.__name__} "
            f"(got {type(wrapped).__name__}, request_id={message.request_id})"
        )
    return wrapped


# ── Flat envelope ────────────────────────────────────────────────────


class EnvelopeResponseMiddleware:
    """Server: wrap the outgoing payload or error as ``{code, message, data}``.

    The code comes from the ``business_code`` metadata when a middleware set
    one, else from the error being answered.
    """

    async def __call__(self, message: ResponseMessage) -> None:
        code = message.business_code
        if message.error is None and code == BUSINESS_CODE_SUCCESS:
            message.payload = Envelope[Any](
                code=code, message=BUSINESS_MESSAGE_SUCCESS, data=message.payload
            )
        elif message.error is None:
            # A middleware flagged failure: the payload carries the reason.
            text = "" if message.payload is None else str(message.payload)
            message.payload = Envelope[Any](code=code, message=text, data=None)
        else:
            message.payload = Envelope[Any](
                code=code, message=message.business_message, data=None
            )
        await message.next()


class EnvelopeUnwrapMiddleware:
    """Client: decode ``{code, message, data}`` and return ``data``."""

    async def __call__(self, message: ResponseMessage) -> None:
        envelope = await _decode_wrapped(message, Envelope)
        message.set_metadata(METADATA_BUSINESS_CODE, envelope.code)
        envelope.raise_for_code()
        message.payload = envelope.data


# ── Nested envelope ──────────────────────────────────────────────────


class NestedRequestMiddleware:
    """Client: wrap the outgoing payload as ``{_head, _param}``.

    Each call gets a fresh timestamp and invoke id; the interface name
    defaults to the dotted url path.
    """

    def __init__(
        self,
        caller_service_id: str = "",
        *,
        interface: str = "",
        head: Head | None = None,
    ) -> None:
        self.caller_service_id = caller_service_id
        self.interface = interface
        self.head = head or Head()

    async def __call__(self, message: RequestMessage) -> None:
        head = self.head.stamped()
        update: dict[str, str] = {}
        if self.caller_service_id:
            update["caller_service_id"] = self.caller_service_id
        interface = self.interface or head.interface
        if not interface and message.url:
            interface = interface_from_path(httpx.URL(message.url).path)
        update["interface"] = interface
        message.payload = NestedRequest[Any](
            head=head.model_copy(update=update), param=message.payload
        )
        await message.next()


class NestedResponseUnwrapMiddleware:
    """Client: decode ``{_head, _data}`` and return ``_data._data``."""

    async def __call__(self, message: ResponseMessage) -> None:
        response = await _decode_wrapped(message, NestedResponse)
        message.set_metadata(METADATA_NESTED_HEAD, response.head)
        message.set_metadata(METADATA_BUSINESS_CODE, response.data.err_code)
        response.raise_for_code()
        message.payload = response.data.data


class NestedRequestUnwrapMiddleware:
    """Server: decode ``{_head, _param}``; keep the head for the answer."""

    async def __call__(self, message: RequestMessage) -> None:
        request = await _decode_wrapped(message, NestedRequest)
        message.set_metadata(METADATA_NESTED_HEAD, request.head)
        message.payload = request.param


class NestedResponseMiddleware:
    """Server: wrap the outgoing payload or error as ``{_head, _data}``.

    The head echoes the inbound request's head (invoke id, caller, interface)
    when :class:`NestedRequestUnwrapMiddleware` captured one.
    """

    async def __call__(self, message: ResponseMessage) -> None:
        head: Head | None = None
        if message.request is not None:
            head = message.request.get_metadata(METADATA_NESTED_HEAD)
        head = (head or Head()).as_response()

        if message.error is None:
            data = NestedData[Any](
                ret=BUSINESS_CODE_SUCCESS,
                err_code=message.business_code,
                err_str=BUSINESS_MESSAGE_SUCCESS,
                data=message.payload,
            )
        else:
            data = NestedData[Any](
                ret=BUSINESS_CODE_FAIL,
                err_code=message.business_code,
                err_str=message.business_message,
                data=None,
            )
        message.payload = NestedResponse[Any](head=head, data=data)
        await message.next()


# ── Protocol options ─────────────────────────────────────────────────


def flat_envelope_client(protocol: ClientProtocol) -> ClientProtocol:
    return protocol.add_response_middleware(EnvelopeUnwrapMiddleware())


def flat_envelope_server(protocol: ServerProtocol) -> ServerProtocol:
    return protocol.add_response_middleware(EnvelopeResponseMiddleware())


def nested_envelope_client(
    caller_service_id: str = "", interface: str = ""
) -> Callable[[ClientProtocol], ClientProtocol]:
    """Option wrapping requests as ``{_head, _param}`` and unwrapping answers."""

    def _apply(protocol: ClientProtocol) -> ClientProtocol:
        protocol.add_request_middleware(
            NestedRequestMiddleware(caller_service_id, interface=interface)
        )
        return protocol.add_response_middleware(NestedResponseUnwrapMiddleware())

    return _apply


def nested_envelope_server(protocol: ServerProtocol) -> ServerProtocol:
    protocol.add_request_middleware(NestedRequestUnwrapMiddleware())
    return protocol.add_response_middleware(NestedResponseMiddleware())

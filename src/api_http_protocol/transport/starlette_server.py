"""Server transport binding for Starlette (and FastAPI) endpoints.

Usage::

    async def update(payload: UpdateIn, protocol: ServerProtocol) -> UpdateOut:
        ...

    app = Starlette(routes=[
        Route("/update", protocol_endpoint(update, UpdateIn, flat_envelope_server),
              methods=["POST"]),
    ])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from starlette.responses import Response

from ..codec import coerce_payload, decode_payload, encode_payload
from ..constants import CONTENT_TYPE_JSON, HEADER_CONTENT_TYPE, HEADER_REQUEST_ID
from ..primitives.exceptions import ResponseWriteError
from ..protocol import ServerProtocol

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request

    from ..message import RequestMessage, ResponseMessage

logger = logging.getLogger(__name__)

DEFAULT_STATUS_CODE = 200


class StarletteIO:
    """Reader/writer pair bound to one inbound Starlette request."""

    def __init__(self, request: Request) -> None:
        self.request = request
        self.response: Response | None = None

    async def read(self, message: RequestMessage) -> None:
        """Buffer the body, snapshot the request and decode the payload.

        Query parameters are the base layer: fields of a JSON object body
        override them, and an empty body uses them alone.
        """
        body = await self.request.body()
        headers = self.request.headers.items()
        for key, value in headers:
            message.headers.add(key, value)
        message.method = self.request.method
        message.url = str(self.request.url)
        message.set_raw(body)
        message.set_duplicate_request(
            httpx.Request(message.method, message.url, headers=headers, content=body),
            body,
        )

        query = dict(self.request.query_params)
        if body and query:
            data = decode_payload(body)
            if isinstance(data, dict):
                message.payload = coerce_payload(
                    {**query, **data}, message.payload_type
                )
            else:
                message.payload = decode_payload(body, message.payload_type)
        elif body:
            message.payload = decode_payload(body, message.payload_type)
        elif query or message.payload_type is not None:
            message.payload = coerce_payload(query, message.payload_type)

    async def write(self, message: ResponseMessage) -> None:
        """Serialize the payload and build the Starlette response."""
        body = message.get_raw()
        if body is None:
            body = encode_payload(message.payload)
            message.set_raw(body)
        status_code = message.status_code or DEFAULT_STATUS_CODE

        media_type = None
        if not message.get_header(HEADER_CONTENT_TYPE):
            media_type = CONTENT_TYPE_JSON
        response = Response(
            content=body, status_code=status_code, media_type=media_type
        )
        for key, value in message.headers.multi_items():
            response.headers.append(key, value)
        if HEADER_REQUEST_ID not in response.headers:
            response.headers[HEADER_REQUEST_ID] = message.request_id

        message.status_code = status_code
        message.set_duplicate_response(
            httpx.Response(
                status_code,
                headers=response.headers.items(),
                content=body,
            ),
            body,
        )
        self.response = response


def protocol_endpoint(
    handler: Callable[[Any, ServerProtocol], Awaitable[Any]],
    payload_type: Any = None,
    *options: Callable[[ServerProtocol], ServerProtocol | None],
) -> Callable[[Request], Awaitable[Response]]:
    """Wrap *handler* as a Starlette endpoint driven by a fresh protocol.

    Every error raised while reading or handling becomes the failure
    response; only :class:`ResponseWriteError` escapes to Starlette.
    """

    async def endpoint(request: Request) -> Response:
        io = StarletteIO(request)
        protocol = (
            ServerProtocol(method=request.method, url=str(request.url))
            .with_io(io.read, io.write)
            .apply(*options)
        )
        try:
            payload = await protocol.read_request(payload_type)
            data = await handler(payload, protocol)
        except Exception as exc:
            logger.debug(
                "Answering %s %s with failure: %r", request.method, request.url.path, exc
            )
            await protocol.response_fail(exc)
        else:
            await protocol.response_success(data)

        if io.response is None:
            raise ResponseWriteError(
                f"no response written (request_id={protocol.request.request_id})"
            )
        return io.response

    endpoint.__name__ = getattr(handler, "__name__", "endpoint")
    return endpoint

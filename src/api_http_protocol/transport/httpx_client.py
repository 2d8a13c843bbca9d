"""Client transport binding on top of ``httpx.AsyncClient``.

The writer prepares the outbound ``httpx.Request`` (and its replay snapshot);
the reader sends it and decodes the answer into the response payload.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..codec import decode_payload, encode_payload
from ..constants import CONTENT_TYPE_JSON, METADATA_HTTP_CODE
from ..primitives.exceptions import HttpStatusError, TransportError
from ..protocol import ClientProtocol
from .client import get_shared_client

if TYPE_CHECKING:
    from ..message import RequestMessage, ResponseMessage

logger = logging.getLogger(__name__)


class HttpxClientIO:
    """Reader/writer pair bound to one outbound call."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._prepared: httpx.Request | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = get_shared_client()
        return self._client

    async def write(self, message: RequestMessage) -> None:
        """Build the transport request from the message as it stands now."""
        self._prepare(message)

    def _prepare(self, message: RequestMessage) -> httpx.Request:
        body = message.get_raw()
        if body is None:
            body = encode_payload(message.payload)
        # build_request merges the client's default headers and timeouts
        request = self.client.build_request(
            message.method,
            message.url,
            headers=message.headers.multi_items(),
            content=body,
        )
        message.set_raw(body)
        message.set_duplicate_request(request, body)
        self._prepared = request
        return request

    async def read(self, message: ResponseMessage) -> None:
        """Send the prepared request, record the answer and decode it."""
        request = self._prepared
        if request is None:
            if message.request is None:
                raise TransportError("no request to send")
            request = self._prepare(message.request)

        try:
            response = await self.client.send(request)
            body = await response.aread()
        except httpx.HTTPError as exc:
            raise TransportError(f"{request.method} {request.url} failed: {exc}") from exc
        logger.debug(
            "%s %s answered %d (%d bytes)",
            request.method,
            request.url,
            response.status_code,
            len(body),
        )

        message.status_code = response.status_code
        message.set_metadata(METADATA_HTTP_CODE, response.status_code)
        for key, value in response.headers.multi_items():
            message.headers.add(key, value)
        message.set_duplicate_response(response, body)

        if not response.is_success:
            raise HttpStatusError(response.status_code, body, str(request.url))
        message.payload = decode_payload(body, message.payload_type)


def new_http_client_protocol(
    method: str,
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    content_type: str | None = CONTENT_TYPE_JSON,
) -> ClientProtocol:
    """Build a client protocol wired to *client* (the shared one by default).

    Build one per call; the shared client underneath is safe to reuse.
    """
    io = HttpxClientIO(client)
    protocol = ClientProtocol(method=method, url=url).with_io(io.read, io.write)
    if content_type:
        protocol.set_content_type(content_type)
    return protocol

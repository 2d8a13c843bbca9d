from __future__ import annotations

import asyncio

import httpx
import pytest

from api_http_protocol.constants import HEADER_REQUEST_ID
from api_http_protocol.correlation import (
    bind_request_id,
    generate_request_id,
    get_request_id,
    inject_request_id,
    set_request_id,
)
from api_http_protocol.protocol import ClientProtocol, ServerProtocol


async def _noop(_message: object) -> None:
    return None


def test_generate_request_id_is_prefixed_and_unique() -> None:
    first, second = generate_request_id(), generate_request_id()

    assert first.startswith("new-")
    assert first != second


@pytest.mark.asyncio
async def test_inject_request_id_forwards_context_value() -> None:
    set_request_id("rid-ctx")
    try:
        protocol = ClientProtocol().with_io(_noop, _noop)
        protocol.add_request_middleware(inject_request_id)

        await protocol.write_request()

        assert protocol.request.get_header(HEADER_REQUEST_ID) == "rid-ctx"
        assert protocol.request.request_id == "rid-ctx"
    finally:
        set_request_id(None)


@pytest.mark.asyncio
async def test_inject_request_id_keeps_explicit_header() -> None:
    set_request_id("rid-ctx")
    try:
        protocol = ClientProtocol().with_io(_noop, _noop)
        protocol.set_header(HEADER_REQUEST_ID, "rid-own")
        protocol.add_request_middleware(inject_request_id)

        await protocol.write_request()

        assert protocol.request.get_header_list(HEADER_REQUEST_ID) == ["rid-own"]
    finally:
        set_request_id(None)


@pytest.mark.asyncio
async def test_bind_request_id_exposes_inbound_header() -> None:
    async def reader(message) -> None:
        request = httpx.Request("GET", "http://svc", headers={HEADER_REQUEST_ID: "rid-in"})
        message.set_duplicate_request(request)

    protocol = ServerProtocol().with_io(reader, _noop)
    protocol.add_request_middleware(bind_request_id)

    async def handle() -> str | None:
        await protocol.read_request()
        return get_request_id()

    # Run in its own task so the context change stays local to it.
    assert await asyncio.create_task(handle()) == "rid-in"
    assert protocol.response.request_id == "rid-in"

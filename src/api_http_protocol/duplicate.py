"""Replay snapshots — independent, fully buffered copies of requests/responses.

HTTP bodies are single-read streams, yet logging, curl reproduction and
signature checks each need the exact bytes. A snapshot buffers the body
once; every copy handed out afterwards owns fresh headers and a body that
can be read from the start.
"""

from __future__ import annotations

import httpx


def copy_request(request: httpx.Request, body: bytes | None = None) -> httpx.Request:
    """Deep-copy *request*.

    *body* overrides the request's own content; otherwise the content is
    read (and therefore buffered) from *request*.
    """
    content = body if body is not None else request.read()
    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.multi_items(),
        content=content,
        extensions=dict(request.extensions),
    )


def copy_response(response: httpx.Response, body: bytes | None = None) -> httpx.Response:
    """Deep-copy *response* with *body* as its content.

    The body is passed explicitly because by the time diagnostics run the
    original stream has usually been consumed by the payload decoder. When
    *body* is ``None`` the response's already-buffered content is used.
    """
    content = body if body is not None else _buffered_content(response)
    request = _attached_request(response)
    return httpx.Response(
        response.status_code,
        headers=response.headers.multi_items(),
        content=content,
        request=copy_request(request) if request is not None else None,
        extensions=dict(response.extensions),
    )


def _buffered_content(response: httpx.Response) -> bytes:
    try:
        return response.content
    except httpx.ResponseNotRead:
        return b""


def _attached_request(response: httpx.Response) -> httpx.Request | None:
    try:
        return response.request
    except RuntimeError:
        return None

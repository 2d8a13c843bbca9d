"""Request-id management across async boundaries."""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING

from .constants import HEADER_REQUEST_ID

if TYPE_CHECKING:
    from .message import RequestMessage

# ContextVar for request-id tracking across async boundaries.
_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get current request ID from context."""
    return _request_id.get()


def set_request_id(request_id: str | None) -> None:
    """Set request ID in context."""
    _request_id.set(request_id)


def generate_request_id() -> str:
    """Generate a new request ID, prefixed so synthesized ids stand out."""
    return f"new-{uuid.uuid4()}"


async def inject_request_id(message: RequestMessage) -> None:
    """Client-side middleware: forward the contextual request id as a header."""
    current = get_request_id()
    if current and not message.get_header(HEADER_REQUEST_ID):
        message.set_header(HEADER_REQUEST_ID, current)
        message.set_request_id(current)
    await message.next()


async def bind_request_id(message: RequestMessage) -> None:
    """Server-side middleware: expose the inbound request id to the context."""
    await message.next()
    set_request_id(message.request_id)

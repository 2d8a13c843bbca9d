"""Encode middleware — fills the raw cache from the payload."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..codec import encode_payload

if TYPE_CHECKING:
    from ..message import RequestMessage, ResponseMessage


async def encode_body(message: RequestMessage | ResponseMessage) -> None:
    """Serialize the payload once so later handlers see the wire bytes.

    A raw body that is already set wins; the I/O writer then sends exactly
    what was encoded (and signed) here.
    """
    if message.get_raw() is None:
        message.set_raw(encode_payload(message.payload))
    await message.next()

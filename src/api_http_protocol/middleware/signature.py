"""Request signing and verification over the raw wire body.

The signature is ``md5(raw_body + b"_" + secret)`` in hex, sent in a
signature header next to a caller-id header. It is always computed over the
exact bytes that travel on the wire, never over a re-serialized payload.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ..constants import HEADER_CALLER_ID, HEADER_SIGNATURE
from ..primitives.exceptions import (
    MissingHeaderError,
    SignatureMismatchError,
    UnknownCallerError,
)
from .encoding import encode_body
from .stage import ORDER_MIN, Stage

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ..message import RequestMessage
    from ..protocol import ClientProtocol, ServerProtocol

logger = logging.getLogger(__name__)

#: Signing runs right after :func:`encode_body` in the ``BEFORE_SEND`` stage.
SIGN_ORDER = ORDER_MIN + 10


def sign_body(body: bytes, secret: str) -> str:
    """Hex signature of *body* for the shared *secret*."""
    return hashlib.md5(body + b"_" + secret.encode("utf-8")).hexdigest()  # noqa: S324


def verify_body(body: bytes, secret: str, signature: str) -> None:
    """Raise :class:`SignatureMismatchError` unless *signature* matches."""
    expected = sign_body(body, secret)
    # Constant-time comparison
    if not hmac.compare_digest(expected, signature):
        raise SignatureMismatchError(expected, signature)


class CallerService(BaseModel):
    """A known caller and the secret it signs with."""

    model_config = ConfigDict(frozen=True)

    caller_id: str
    secret: str
    name: str = ""


class CallerRegistry:
    """Resolves caller ids to their shared secrets."""

    def __init__(self, callers: Iterable[CallerService] = ()) -> None:
        self._callers: dict[str, CallerService] = {}
        for caller in callers:
            self.register(caller)

    def register(self, caller: CallerService) -> None:
        self._callers[caller.caller_id] = caller

    def get(self, caller_id: str) -> CallerService:
        try:
            return self._callers[caller_id]
        except KeyError:
            raise UnknownCallerError(caller_id) from None

    def __contains__(self, caller_id: object) -> bool:
        return caller_id in self._callers

    def __len__(self) -> int:
        return len(self._callers)


# ── Middlewares ──────────────────────────────────────────────────────


class SignRequestMiddleware:
    """Client: sign the raw body and set the caller-id/signature headers.

    Register at ``Stage.BEFORE_SEND`` after :func:`encode_body`; a body that
    has not been encoded yet is signed as empty.
    """

    def __init__(
        self,
        caller_id: str,
        secret: str,
        *,
        caller_header: str = HEADER_CALLER_ID,
        signature_header: str = HEADER_SIGNATURE,
    ) -> None:
        self.caller_id = caller_id
        self.secret = secret
        self.caller_header = caller_header
        self.signature_header = signature_header

    async def __call__(self, message: RequestMessage) -> None:
        body = message.get_raw() or b""
        message.headers.set(self.caller_header, self.caller_id)
        message.headers.set(self.signature_header, sign_body(body, self.secret))
        await message.next()


class RequireSignatureHeadersMiddleware:
    """Server: only check that caller-id and signature headers are present."""

    def __init__(
        self,
        *,
        caller_header: str = HEADER_CALLER_ID,
        signature_header: str = HEADER_SIGNATURE,
    ) -> None:
        self.caller_header = caller_header
        self.signature_header = signature_header

    async def __call__(self, message: RequestMessage) -> None:
        await message.next()
        for header in (self.caller_header, self.signature_header):
            if not message.get_header(header):
                raise MissingHeaderError(header)


class VerifySignatureMiddleware:
    """Server: recompute the signature from the replayed raw body.

    Runs around the I/O reader so the duplicate request holds the exact
    inbound bytes by the time the check happens.
    """

    def __init__(
        self,
        registry: CallerRegistry,
        *,
        caller_header: str = HEADER_CALLER_ID,
        signature_header: str = HEADER_SIGNATURE,
    ) -> None:
        self.registry = registry
        self.caller_header = caller_header
        self.signature_header = signature_header

    async def __call__(self, message: RequestMessage) -> None:
        await message.next()

        caller_id = message.get_header(self.caller_header)
        if not caller_id:
            raise MissingHeaderError(self.caller_header)
        signature = message.get_header(self.signature_header)
        if not signature:
            raise MissingHeaderError(self.signature_header)

        caller = self.registry.get(caller_id)
        duplicate, exists = message.get_duplicate_request()
        if exists and duplicate is not None:
            body = duplicate.content
        else:
            body = message.get_raw() or b""
        try:
            verify_body(body, caller.secret, signature)
        except SignatureMismatchError:
            message.logger.warning(
                "signature rejected for caller %s (request_id=%s)",
                caller_id,
                message.request_id,
            )
            raise


# ── Protocol options ─────────────────────────────────────────────────


def sign_requests(
    caller_id: str, secret: str
) -> Callable[[ClientProtocol], ClientProtocol]:
    """Option for :meth:`ClientProtocol.apply`: encode, then sign, before send."""

    def _apply(protocol: ClientProtocol) -> ClientProtocol:
        protocol.add_request_middleware(
            encode_body, stage=Stage.BEFORE_SEND, order=ORDER_MIN
        )
        protocol.add_request_middleware(
            SignRequestMiddleware(caller_id, secret),
            stage=Stage.BEFORE_SEND,
            order=SIGN_ORDER,
        )
        return protocol

    return _apply


def verify_signatures(
    registry: CallerRegistry,
) -> Callable[[ServerProtocol], ServerProtocol]:
    """Option for :meth:`ServerProtocol.apply`: verify every inbound request."""

    def _apply(protocol: ServerProtocol) -> ServerProtocol:
        return protocol.add_request_middleware(VerifySignatureMiddleware(registry))

    return _apply

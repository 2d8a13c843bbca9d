import hashlib

import httpx
import pytest

from api_http_protocol.codec import decode_payload
from api_http_protocol.constants import HEADER_CALLER_ID, HEADER_SIGNATURE
from api_http_protocol.middleware.signature import (
    CallerRegistry,
    CallerService,
    RequireSignatureHeadersMiddleware,
    SignRequestMiddleware,
    VerifySignatureMiddleware,
    sign_body,
    sign_requests,
    verify_signatures,
)
from api_http_protocol.middleware.stage import Stage
from api_http_protocol.primitives.exceptions import (
    AuthError,
    MissingHeaderError,
    SignatureMismatchError,
    UnknownCallerError,
)
from api_http_protocol.protocol import ClientProtocol, ServerProtocol

SECRET = "s3cret"


class WireWriter:
    """Builds the outbound request the way a transport would."""

    def __init__(self) -> None:
        self.sent: httpx.Request | None = None

    async def __call__(self, message) -> None:
        request = message.to_httpx_request()
        message.set_duplicate_request(request)
        self.sent = request


def wire_reader(request: httpx.Request, body: bytes | None = None):
    content = request.content if body is None else body

    async def _read(message) -> None:
        for key, value in request.headers.multi_items():
            message.headers.add(key, value)
        message.set_raw(content)
        message.set_duplicate_request(request, content)
        message.payload = decode_payload(content, message.payload_type)

    return _read


def registry() -> CallerRegistry:
    return CallerRegistry([CallerService(caller_id="svc-a", secret=SECRET)])


async def signed_request(payload, secret: str = SECRET) -> httpx.Request:
    writer = WireWriter()
    protocol = (
        ClientProtocol("POST", "http://svc/transfer")
        .with_io(wire_reader(httpx.Request("GET", "http://unused")), writer)
        .apply(sign_requests("svc-a", secret))
    )
    await protocol.write_request(payload)
    assert writer.sent is not None
    return writer.sent


def server_protocol(request: httpx.Request, body: bytes | None = None) -> ServerProtocol:
    return (
        ServerProtocol("POST", "/transfer")
        .with_io(wire_reader(request, body), WireWriter())
        .apply(verify_signatures(registry()))
    )


def test_sign_body_matches_md5_convention() -> None:
    expected = hashlib.md5(b'{"x":1}_s3cret').hexdigest()

    assert sign_body(b'{"x":1}', SECRET) == expected


@pytest.mark.asyncio()
async def test_client_signs_raw_wire_body() -> None:
    sent = await signed_request({"x": 1})

    assert sent.content == b'{"x":1}'
    assert sent.headers[HEADER_CALLER_ID] == "svc-a"
    assert sent.headers[HEADER_SIGNATURE] == hashlib.md5(b'{"x":1}_s3cret').hexdigest()


@pytest.mark.asyncio()
async def test_server_accepts_signature_over_same_bytes() -> None:
    sent = await signed_request({"x": 1})

    payload = await server_protocol(sent).read_request()

    assert payload == {"x": 1}


@pytest.mark.asyncio()
async def test_server_rejects_tampered_body() -> None:
    sent = await signed_request({"x": 1})

    with pytest.raises(SignatureMismatchError) as exc:
        await server_protocol(sent, b'{"x":2}').read_request()

    assert exc.value.actual == sent.headers[HEADER_SIGNATURE]
    assert exc.value.expected == sign_body(b'{"x":2}', SECRET)


@pytest.mark.asyncio()
async def test_server_verifies_raw_bytes_not_reserialized_payload() -> None:
    body = b'{ "x" : 1 }'
    request = httpx.Request(
        "POST",
        "http://svc/transfer",
        headers={HEADER_CALLER_ID: "svc-a", HEADER_SIGNATURE: sign_body(body, SECRET)},
        content=body,
    )

    assert await server_protocol(request).read_request() == {"x": 1}


@pytest.mark.asyncio()
async def test_server_rejects_wrong_secret() -> None:
    sent = await signed_request({"x": 1}, secret="other")

    with pytest.raises(SignatureMismatchError):
        await server_protocol(sent).read_request()


@pytest.mark.asyncio()
async def test_server_rejects_unknown_caller() -> None:
    request = httpx.Request(
        "POST",
        "http://svc/transfer",
        headers={HEADER_CALLER_ID: "svc-z", HEADER_SIGNATURE: "abc"},
        content=b"{}",
    )

    with pytest.raises(UnknownCallerError) as exc:
        await server_protocol(request).read_request()

    assert exc.value.caller_id == "svc-z"


@pytest.mark.asyncio()
async def test_server_rejects_missing_signature_header() -> None:
    request = httpx.Request(
        "POST", "http://svc/transfer", headers={HEADER_CALLER_ID: "svc-a"}, content=b"{}"
    )

    with pytest.raises(MissingHeaderError) as exc:
        await server_protocol(request).read_request()

    assert exc.value.header == HEADER_SIGNATURE
    assert isinstance(exc.value, AuthError)


@pytest.mark.asyncio()
async def test_require_headers_only_checks_presence() -> None:
    request = httpx.Request(
        "POST",
        "http://svc/transfer",
        headers={HEADER_CALLER_ID: "svc-a", HEADER_SIGNATURE: "not-checked"},
        content=b"{}",
    )
    protocol = ServerProtocol().with_io(wire_reader(request), WireWriter())
    protocol.add_request_middleware(RequireSignatureHeadersMiddleware())

    assert await protocol.read_request() == {}

    bare = ServerProtocol().with_io(
        wire_reader(httpx.Request("POST", "http://svc", content=b"{}")), WireWriter()
    )
    bare.add_request_middleware(RequireSignatureHeadersMiddleware())
    with pytest.raises(MissingHeaderError):
        await bare.read_request()


@pytest.mark.asyncio()
async def test_signing_after_encode_sees_final_body() -> None:
    writer = WireWriter()
    protocol = ClientProtocol("POST", "http://svc/transfer").with_io(
        wire_reader(httpx.Request("GET", "http://unused")), writer
    )

    async def late_edit(message) -> None:
        message.payload = {"x": 1, "late": True}
        await message.next()

    protocol.add_request_middleware(late_edit)
    protocol.apply(sign_requests("svc-a", SECRET))
    await protocol.write_request({"x": 1})

    assert writer.sent is not None
    assert writer.sent.headers[HEADER_SIGNATURE] == sign_body(
        writer.sent.content, SECRET
    )


def test_sign_middleware_honours_custom_headers() -> None:
    middleware = SignRequestMiddleware(
        "svc-a", SECRET, caller_header="X-App", signature_header="X-Sign"
    )

    assert middleware.caller_header == "X-App"
    assert middleware.signature_header == "X-Sign"
    assert Stage.BEFORE_SEND.priority > Stage.DEFAULT.priority


def test_caller_registry_lookup() -> None:
    callers = registry()

    assert "svc-a" in callers
    assert callers.get("svc-a").secret == SECRET
    with pytest.raises(UnknownCallerError):
        callers.get("nope")


@pytest.mark.asyncio()
async def test_verify_middleware_can_be_added_directly() -> None:
    sent = await signed_request({"x": 1})
    protocol = ServerProtocol().with_io(wire_reader(sent), WireWriter())
    protocol.add_request_middleware(VerifySignatureMiddleware(registry()))

    assert await protocol.read_request() == {"x": 1}

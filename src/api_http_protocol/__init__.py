"""api-http-protocol — middleware pipeline for HTTP request/response exchange.

A :class:`ClientProtocol` or :class:`ServerProtocol` pairs one request
message with one response message; each message runs its own ordered
middleware chain ending in a single transport I/O handler.
"""

from __future__ import annotations

from .codec import coerce_payload, decode_payload, encode_payload
from .correlation import (
    bind_request_id,
    generate_request_id,
    get_request_id,
    inject_request_id,
    set_request_id,
)
from .envelope import (
    Envelope,
    Head,
    NestedData,
    NestedRequest,
    NestedResponse,
    interface_from_path,
)
from .headers import Headers
from .message import Message, RequestMessage, ResponseMessage
from .metadata import Metadata
from .middleware import (
    ORDER_MAX,
    ORDER_MIN,
    CallerRegistry,
    CallerService,
    MiddlewareChain,
    MiddlewareEntry,
    MiddlewareRegistry,
    Stage,
)
from .primitives.exceptions import (
    ApiProtocolError,
    AuthError,
    BusinessError,
    ConfigurationError,
    DecodeError,
    DuplicateIOHandlerError,
    EncodeError,
    HttpStatusError,
    IOHandlerMissingError,
    MissingHeaderError,
    PayloadValidationError,
    ResponseWriteError,
    SignatureMismatchError,
    TransportError,
    UnknownCallerError,
)
from .protocol import ClientProtocol, Protocol, ServerProtocol
from .transport import (
    HttpClientConfig,
    aclose_shared_client,
    get_shared_client,
    new_http_client_protocol,
    shared_client_lifespan,
)
from .validation import validate_payload

__version__ = "0.1.0"

__all__ = [
    "ORDER_MAX",
    "ORDER_MIN",
    # Exceptions
    "ApiProtocolError",
    "AuthError",
    "BusinessError",
    "ConfigurationError",
    "DecodeError",
    "DuplicateIOHandlerError",
    "EncodeError",
    "HttpStatusError",
    "IOHandlerMissingError",
    "MissingHeaderError",
    "PayloadValidationError",
    "ResponseWriteError",
    "SignatureMismatchError",
    "TransportError",
    "UnknownCallerError",
    # Messages & protocols
    "ClientProtocol",
    "Headers",
    "Message",
    "Metadata",
    "Protocol",
    "RequestMessage",
    "ResponseMessage",
    "ServerProtocol",
    # Middleware
    "CallerRegistry",
    "CallerService",
    "MiddlewareChain",
    "MiddlewareEntry",
    "MiddlewareRegistry",
    "Stage",
    # Envelopes
    "Envelope",
    "Head",
    "NestedData",
    "NestedRequest",
    "NestedResponse",
    "interface_from_path",
    # Codec / validation
    "coerce_payload",
    "decode_payload",
    "encode_payload",
    "validate_payload",
    # Correlation
    "bind_request_id",
    "generate_request_id",
    "get_request_id",
    "inject_request_id",
    "set_request_id",
    # Transport
    "HttpClientConfig",
    "aclose_shared_client",
    "get_shared_client",
    "new_http_client_protocol",
    "shared_client_lifespan",
]

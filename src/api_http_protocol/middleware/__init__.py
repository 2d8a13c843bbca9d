"""Middleware components."""

from .chain import MiddlewareChain, MiddlewareEntry
from .definition import MiddlewareDefinition
from .encoding import encode_body
from .envelope import (
    EnvelopeResponseMiddleware,
    EnvelopeUnwrapMiddleware,
    NestedRequestMiddleware,
    NestedRequestUnwrapMiddleware,
    NestedResponseMiddleware,
    NestedResponseUnwrapMiddleware,
    flat_envelope_client,
    flat_envelope_server,
    nested_envelope_client,
    nested_envelope_server,
)
from .logging import RequestLoggingMiddleware, ResponseLoggingMiddleware, use_logger
from .registry import MiddlewareRegistry
from .signature import (
    CallerRegistry,
    CallerService,
    RequireSignatureHeadersMiddleware,
    SignRequestMiddleware,
    VerifySignatureMiddleware,
    sign_body,
    sign_requests,
    verify_signatures,
)
from .stage import ORDER_MAX, ORDER_MIN, Stage

__all__ = [
    "ORDER_MAX",
    "ORDER_MIN",
    "CallerRegistry",
    "CallerService",
    "EnvelopeResponseMiddleware",
    "EnvelopeUnwrapMiddleware",
    "MiddlewareChain",
    "MiddlewareDefinition",
    "MiddlewareEntry",
    "MiddlewareRegistry",
    "NestedRequestMiddleware",
    "NestedRequestUnwrapMiddleware",
    "NestedResponseMiddleware",
    "NestedResponseUnwrapMiddleware",
    "RequestLoggingMiddleware",
    "RequireSignatureHeadersMiddleware",
    "ResponseLoggingMiddleware",
    "SignRequestMiddleware",
    "Stage",
    "VerifySignatureMiddleware",
    "encode_body",
    "flat_envelope_client",
    "flat_envelope_server",
    "nested_envelope_client",
    "nested_envelope_server",
    "sign_body",
    "sign_requests",
    "use_logger",
    "verify_signatures",
]

"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
]

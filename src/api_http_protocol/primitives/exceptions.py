"""Exceptions raised by the protocol pipeline and its middlewares."""

from __future__ import annotations


class ApiProtocolError(Exception):
    """Root exception for the entire api-http-protocol package."""


# ── Configuration ────────────────────────────────────────────────────


class ConfigurationError(ApiProtocolError):
    """Base class for wiring defects detected before any handler runs.

    These are programming errors and are never retryable.
    """


class IOHandlerMissingError(ConfigurationError):
    """Raised when a chain is run without its terminal I/O handler."""

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"io handler is not configured for {role}")


class DuplicateIOHandlerError(ConfigurationError):
    """Raised when a second I/O handler is added to the same chain."""


# ── Transport / codec ────────────────────────────────────────────────


class TransportError(ApiProtocolError):
    """Base class for connection, timeout and status failures."""


class HttpStatusError(TransportError):
    """Raised when the peer answers with a non-2xx status code."""

    def __init__(self, status_code: int, body: bytes = b"", url: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        text = body.decode("utf-8", errors="replace")
        super().__init__(f"http code:{status_code}, url:{url}, response body:{text}")


class DecodeError(ApiProtocolError):
    """Raised when a body cannot be decoded into the expected payload shape."""


class EncodeError(ApiProtocolError):
    """Raised when a payload cannot be serialized to its wire form."""


# ── Validation / auth ────────────────────────────────────────────────


class PayloadValidationError(ApiProtocolError):
    """Raised when a decoded payload fails semantic validation.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class AuthError(ApiProtocolError):
    """Base class for caller identification and signature failures."""


class MissingHeaderError(AuthError):
    """Raised when a required authentication header is absent or empty."""

    def __init__(self, header: str) -> None:
        self.header = header
        super().__init__(f"http header {header} is empty or missing")


class UnknownCallerError(AuthError):
    """Raised when no secret is registered for the presented caller id."""

    def __init__(self, caller_id: str) -> None:
        self.caller_id = caller_id
        super().__init__(f"no caller service configured for caller id {caller_id!r}")


class SignatureMismatchError(AuthError):
    """Raised when the recomputed signature differs from the presented one."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"signature check failed, expected: {expected}, actual: {actual}"
        )


# ── Business / server ────────────────────────────────────────────────


class BusinessError(ApiProtocolError):
    """An error that carries its own business code.

    Any exception exposing a ``code`` attribute is treated the same way by
    the envelope middlewares.
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class ResponseWriteError(ApiProtocolError):
    """Raised when writing the failure response itself fails.

    Fatal for the current call: the failure path is never re-entered.
    """

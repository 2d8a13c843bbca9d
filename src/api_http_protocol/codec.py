"""JSON payload codec backed by pydantic."""

from __future__ import annotations

import functools
from typing import Any

import pydantic_core
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .primitives.exceptions import DecodeError, EncodeError, PayloadValidationError


@functools.lru_cache(maxsize=256)
def _adapter(payload_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(payload_type)


def encode_payload(payload: Any) -> bytes:
    """Serialize *payload* to its wire form.

    ``bytes`` pass through untouched, ``str`` is UTF-8 encoded, ``None``
    becomes an empty body and everything else is rendered as compact JSON.
    """
    if payload is None:
        return b""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(by_alias=True).encode("utf-8")
        return pydantic_core.to_json(payload, by_alias=True)
    except (pydantic_core.PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodeError(f"cannot serialize {type(payload).__name__}: {exc}") from exc


def decode_payload(raw: bytes, payload_type: Any = None) -> Any:
    """Decode *raw* into *payload_type* (plain JSON value when ``None``).

    Malformed JSON, or JSON whose fields are missing or of the wrong type,
    raises :class:`DecodeError`. A body of the right shape that fails a
    field constraint raises :class:`PayloadValidationError` with per-field
    messages.
    """
    if not raw:
        return None
    if payload_type is bytes:
        return raw
    if payload_type is str:
        return raw.decode("utf-8")
    if payload_type is None:
        try:
            return pydantic_core.from_json(raw)
        except ValueError as exc:
            raise DecodeError(f"body is not valid json: {exc}") from exc

    try:
        return _adapter(payload_type).validate_json(raw)
    except PydanticValidationError as exc:
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            raise DecodeError(f"body is not valid json: {exc}") from exc
        raise _translate(exc, payload_type) from exc


def coerce_payload(data: Any, payload_type: Any = None) -> Any:
    """Validate already-parsed *data* (e.g. query parameters) into *payload_type*."""
    if payload_type is None:
        return data
    try:
        return _adapter(payload_type).validate_python(data)
    except PydanticValidationError as exc:
        raise _translate(exc, payload_type) from exc


_SHAPE_ERRORS = frozenset(
    {
        "missing",
        "extra_forbidden",
        "missing_argument",
        "unexpected_keyword_argument",
        "union_tag_invalid",
        "union_tag_not_found",
    }
)


def _is_shape_error(error_type: str) -> bool:
    return (
        error_type in _SHAPE_ERRORS
        or error_type.endswith("_type")
        or error_type.endswith("_parsing")
    )


def _translate(
    exc: PydanticValidationError, payload_type: Any
) -> DecodeError | PayloadValidationError:
    """Wrong or missing fields are a decode failure; failed constraints are not."""
    if any(_is_shape_error(str(error.get("type", ""))) for error in exc.errors()):
        name = getattr(payload_type, "__name__", repr(payload_type))
        return DecodeError(
            f"body does not match {name}: {_collect_errors(exc)}"
        )
    return PayloadValidationError(_collect_errors(exc))


def _collect_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        msg = error.get("msg", "validation error")
        errors.setdefault(loc, []).append(msg)
    return errors

"""Post-decode payload validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from .ports.validation import IValidatable
from .primitives.exceptions import ApiProtocolError, PayloadValidationError


def _is_pydantic_validate(payload: Any) -> bool:
    """Whether ``validate`` is only pydantic's inherited classmethod."""
    if not isinstance(payload, BaseModel):
        return False
    own = getattr(type(payload), "validate", None)
    inherited = getattr(BaseModel, "validate", None)
    return getattr(own, "__func__", own) is getattr(inherited, "__func__", inherited)


def validate_payload(payload: Any) -> None:
    """Invoke the payload's ``validate()`` capability, if it has one.

    Pydantic's inherited ``BaseModel.validate`` classmethod is not the
    capability and is ignored. Errors that are not already part of the
    package hierarchy are wrapped in :class:`PayloadValidationError`.
    """
    if not isinstance(payload, IValidatable) or _is_pydantic_validate(payload):
        return
    try:
        payload.validate()
    except ApiProtocolError:
        raise
    except Exception as exc:
        raise PayloadValidationError(str(exc)) from exc

"""IValidatable — payloads that can check their own semantics."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IValidatable(Protocol):
    """Capability exposed by payload types that validate themselves.

    Invoked once the inbound payload has been decoded. Raising signals a
    rejected payload; payloads without the capability are always valid.
    """

    def validate(self) -> None:
        """Raise if the decoded payload is semantically invalid."""
        ...

"""Metadata — key/value sidecar used for cross-middleware signaling."""

from __future__ import annotations

from typing import Any


class Metadata:
    """Mutable key/value store attached to a message.

    The backing dict is allocated on first write; an untouched store
    reads as empty.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[str, Any] | None = None

    def get(self, key: str, default: Any = None) -> Any:
        if self._data is None:
            return default
        return self._data.get(key, default)

    def lookup(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, exists)`` for *key*."""
        if self._data is None or key not in self._data:
            return None, False
        return self._data[key], True

    def set(self, key: str, value: Any) -> None:
        if self._data is None:
            self._data = {}
        self._data[key] = value

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data or {})

    def __contains__(self, key: object) -> bool:
        return self._data is not None and key in self._data

    def __len__(self) -> int:
        return len(self._data or {})

    def __repr__(self) -> str:
        return f"Metadata({self._data or {}!r})"

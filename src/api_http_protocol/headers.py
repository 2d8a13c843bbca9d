"""Headers — ordered, case-insensitive multi-value header map."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class Headers:
    """HTTP-style header collection.

    Keys are matched case-insensitively, insertion order is kept and
    repeated keys accumulate values (``add`` never overwrites).

    Usage::

        headers = Headers()
        headers.add("Accept", "application/json")
        headers.add("accept", "text/plain")
        headers.get_list("ACCEPT")  # ["application/json", "text/plain"]
    """

    __slots__ = ("_items",)

    def __init__(
        self,
        items: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._items: list[tuple[str, str]] = []
        if items is None:
            return
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self.add(key, value)

    # ── Mutation ─────────────────────────────────────────────────

    def add(self, key: str, value: str) -> None:
        """Append *value* under *key*."""
        self._items.append((key, str(value)))

    def set(self, key: str, value: str) -> None:
        """Replace every value of *key* with a single *value*."""
        self.remove(key)
        self.add(key, value)

    def remove(self, key: str) -> None:
        lowered = key.lower()
        self._items = [(k, v) for k, v in self._items if k.lower() != lowered]

    # ── Lookup ───────────────────────────────────────────────────

    def get(self, key: str, default: str = "") -> str:
        """Return the first value of *key*, or *default*."""
        lowered = key.lower()
        for k, v in self._items:
            if k.lower() == lowered:
                return v
        return default

    def get_list(self, key: str) -> list[str]:
        lowered = key.lower()
        return [v for k, v in self._items if k.lower() == lowered]

    def multi_items(self) -> list[tuple[str, str]]:
        """Every ``(key, value)`` pair, in insertion order."""
        return list(self._items)

    def keys(self) -> list[str]:
        seen: dict[str, str] = {}
        for k, _ in self._items:
            seen.setdefault(k.lower(), k)
        return list(seen.values())

    def copy(self) -> Headers:
        return Headers(self._items)

    # ── Dunder ───────────────────────────────────────────────────

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        lowered = key.lower()
        return any(k.lower() == lowered for k, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return sorted((k.lower(), v) for k, v in self._items) == sorted(
            (k.lower(), v) for k, v in other._items
        )

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"

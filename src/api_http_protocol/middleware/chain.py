"""MiddlewareChain — ordered handlers driven by an index cursor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import DuplicateIOHandlerError, IOHandlerMissingError
from .stage import Stage

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MiddlewareEntry:
    """A handler together with its scheduling position."""

    handler: Callable[[Any], Awaitable[None]]
    stage: Stage = Stage.DEFAULT
    order: int = 0

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.stage.priority, self.order)

    @property
    def name(self) -> str:
        handler = self.handler
        return getattr(handler, "__name__", type(handler).__name__)


class MiddlewareChain:
    """Onion-model execution engine shared by request and response messages.

    The chain holds at most one I/O entry (stage ``IO_READ``/``IO_WRITE``);
    it is the transport action and always sorts innermost. Sorting happens
    once at the start of every :meth:`run`, before the cursor is reset.
    """

    def __init__(self) -> None:
        self._entries: list[MiddlewareEntry] = []
        self._index = -1

    # ── Registration ─────────────────────────────────────────────

    def add(
        self,
        *handlers: Callable[[Any], Awaitable[None]] | None,
        stage: Stage = Stage.DEFAULT,
        order: int = 0,
    ) -> MiddlewareChain:
        """Append *handlers*; ``None`` entries are skipped."""
        for handler in handlers:
            if handler is None:
                continue
            self.add_entry(MiddlewareEntry(handler=handler, stage=stage, order=order))
        return self

    def add_entry(self, entry: MiddlewareEntry) -> MiddlewareChain:
        if entry.stage.is_io and self.io_entry is not None:
            raise DuplicateIOHandlerError(
                f"chain already has io handler {self.io_entry.name!r}"
            )
        self._entries.append(entry)
        return self

    def set_io(
        self,
        handler: Callable[[Any], Awaitable[None]],
        stage: Stage,
    ) -> MiddlewareChain:
        """Install *handler* as the single I/O entry, replacing any previous one."""
        if not stage.is_io:
            raise ValueError(f"stage {stage.value!r} is not an io stage")
        self._entries = [e for e in self._entries if not e.stage.is_io]
        self._entries.append(MiddlewareEntry(handler=handler, stage=stage))
        return self

    # ── Inspection ───────────────────────────────────────────────

    @property
    def io_entry(self) -> MiddlewareEntry | None:
        for entry in self._entries:
            if entry.stage.is_io:
                return entry
        return None

    @property
    def entries(self) -> list[MiddlewareEntry]:
        return list(self._entries)

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._entries)

    # ── Execution ────────────────────────────────────────────────

    def sort(self) -> None:
        """Stable sort by ``(stage priority, order)``, ascending."""
        self._entries.sort(key=lambda e: e.sort_key)

    async def run(self, message: Any, *, role: str = "message") -> None:
        """Sort, verify the I/O entry and start the chain from the top."""
        if self.io_entry is None:
            raise IOHandlerMissingError(role)
        self.sort()
        logger.debug(
            "Running %s chain: %s", role, [entry.name for entry in self._entries]
        )
        self._index = -1
        await self.next(message)

    async def next(self, message: Any) -> None:
        """Advance the cursor and invoke the handler found there."""
        self._index += 1
        if self._index < len(self._entries):
            await self._entries[self._index].handler(message)

"""Stage — coarse ordering buckets for middleware entries."""

from __future__ import annotations

from enum import Enum


class Stage(str, Enum):
    """Phase a middleware belongs to.

    Entries are sorted by ascending :attr:`priority`, then by ascending
    ``order``. The I/O stages carry the highest priority so the terminal
    transport action is always the innermost entry and every other
    middleware wraps around it.
    """

    OBSERVE = "observe"
    DEFAULT = "default"
    BEFORE_SEND = "before-send"
    IO_READ = "io-read"
    IO_WRITE = "io-write"

    @property
    def priority(self) -> int:
        return _PRIORITIES[self]

    @property
    def is_io(self) -> bool:
        return self in (Stage.IO_READ, Stage.IO_WRITE)


_PRIORITIES: dict[Stage, int] = {
    Stage.OBSERVE: 100,
    Stage.DEFAULT: 500,
    Stage.BEFORE_SEND: 900,
    Stage.IO_READ: 1000,
    Stage.IO_WRITE: 1000,
}

ORDER_MIN = 1
ORDER_MAX = 999_999

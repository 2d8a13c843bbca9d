"""MiddlewareRegistry — declarative registration with stage/order scheduling."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .chain import MiddlewareEntry
from .definition import MiddlewareDefinition
from .stage import Stage

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..message import Message
    from ..ports.middleware import IMiddleware

logger = logging.getLogger(__name__)


class MiddlewareRegistry:
    """Collects middleware definitions and installs them onto messages.

    Protocols are built per call, so a registry is the reusable half: it
    is configured once and :meth:`install` copies its entries onto each new
    message. Ordering follows ``(stage priority, order)`` ascending; equal
    keys keep registration order.
    """

    def __init__(self) -> None:
        self._definitions: list[MiddlewareDefinition] = []
        self._sorted: list[MiddlewareDefinition] | None = None  # cache

    # ── Registration ─────────────────────────────────────────────

    def register(
        self,
        middleware: Any,
        *,
        stage: Stage = Stage.DEFAULT,
        order: int = 0,
        factory: Callable[..., IMiddleware] | None = None,
        **kwargs: Any,
    ) -> None:
        """Register a middleware class or async function.

        Parameters
        ----------
        middleware:
            Middleware class (implementing ``async __call__(message)``) or
            an async function taking the message.
        stage:
            Coarse phase; I/O stages are reserved for transport hooks.
        order:
            Tie-break within *stage*, lower runs first. Default ``0``.
        factory:
            Optional custom constructor.
        **kwargs:
            Passed to the constructor or factory.
        """
        if stage.is_io:
            raise ValueError("io stages are installed by the protocol, not registered")
        defn = MiddlewareDefinition(
            middleware=middleware,
            stage=stage,
            order=order,
            factory=factory,
            kwargs=kwargs,
        )
        self._definitions.append(defn)
        self._sorted = None  # invalidate cache
        logger.debug(
            "Registered middleware %s (stage=%s, order=%d)",
            defn.name,
            stage.value,
            order,
        )

    def add(
        self,
        middleware: Any = None,
        *,
        stage: Stage = Stage.DEFAULT,
        order: int = 0,
        factory: Callable[..., IMiddleware] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Decorator-style registration.

        Usage::

            @registry.add
            async def stamp(message): ...

            @registry.add(stage=Stage.BEFORE_SEND, order=10)
            class Signer: ...
        """
        if middleware is None:

            def wrapper(target: Any) -> Any:
                self.register(
                    target, stage=stage, order=order, factory=factory, **kwargs
                )
                return target

            return wrapper

        self.register(middleware, stage=stage, order=order, factory=factory, **kwargs)
        return middleware

    # ── Retrieval ────────────────────────────────────────────────

    def get_ordered_definitions(self) -> list[MiddlewareDefinition]:
        if self._sorted is None:
            self._sorted = sorted(self._definitions, key=lambda d: d.sort_key)
        return list(self._sorted)

    def get_ordered_entries(self) -> list[MiddlewareEntry]:
        """Build fresh entries sorted by ``(stage priority, order)``.

        Every call constructs new middleware instances, so state held by a
        class middleware never leaks between messages.
        """
        return [
            MiddlewareEntry(handler=d.build(), stage=d.stage, order=d.order)
            for d in self.get_ordered_definitions()
        ]

    def install(self, message: Message) -> None:
        """Append freshly built entries to *message*'s chain."""
        for entry in self.get_ordered_entries():
            message.chain.add_entry(entry)

    def __len__(self) -> int:
        return len(self._definitions)

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._definitions.clear()
        self._sorted = None

"""MiddlewareDefinition — descriptor for middleware in a chain."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..utils import default_dict_factory
from .stage import Stage

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports.middleware import IMiddleware


@dataclass
class MiddlewareDefinition:
    """Descriptor for a middleware in the chain.

    Supports **deferred instantiation**: supply a middleware class (built
    with *kwargs*) or a *factory*. Plain async functions are used as-is.
    """

    middleware: Any
    stage: Stage = Stage.DEFAULT
    order: int = 0
    factory: Callable[..., IMiddleware] | None = None
    kwargs: dict[str, Any] = field(default_factory=default_dict_factory)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.stage.priority, self.order)

    @property
    def name(self) -> str:
        return getattr(self.middleware, "__name__", type(self.middleware).__name__)

    def build(self) -> IMiddleware:
        """Construct the middleware instance."""
        if self.factory is not None:
            return self.factory(**self.kwargs)
        if inspect.isclass(self.middleware):
            return self.middleware(**self.kwargs)  # type: ignore[no-any-return]
        if self.kwargs:
            raise TypeError(
                f"middleware {self.name!r} is not a class; kwargs need a factory"
            )
        return self.middleware  # type: ignore[no-any-return]

"""IMiddleware — cursor-driven middleware protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IMiddleware(Protocol):
    """Protocol for middleware in a message chain.

    Middleware receives the message being processed. To continue the chain
    it awaits ``message.next()`` itself and may post-process afterwards;
    returning without calling ``next()`` terminates the chain, raising
    aborts it.
    """

    async def __call__(self, message: Any) -> None:
        """Execute middleware logic.

        Parameters
        ----------
        message:
            The :class:`~api_http_protocol.message.RequestMessage` or
            :class:`~api_http_protocol.message.ResponseMessage` being run.
        """
        ...

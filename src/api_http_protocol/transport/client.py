"""Process-wide shared ``httpx.AsyncClient`` with an explicit lifecycle.

The client is the only shared mutable resource of the package. It is built
lazily on first use and closed by :func:`aclose_shared_client` (or by
leaving :func:`shared_client_lifespan`). Signal handling belongs to the
application entry point, not here.
"""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class HttpClientConfig(BaseModel):
    """Transport settings; timeouts live here, never in the pipeline."""

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=10.0, gt=0)
    connect_timeout: float = Field(default=5.0, gt=0)
    retries: int = Field(default=0, ge=0)
    max_connections: int = Field(default=100, ge=1)
    max_keepalive_connections: int = Field(default=20, ge=0)
    keepalive_expiry: float = Field(default=30.0, ge=0)
    default_headers: dict[str, str] = Field(default_factory=dict)

    def build_client(self) -> httpx.AsyncClient:
        """Construct a new client from these settings."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            limits=httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=self.max_keepalive_connections,
                keepalive_expiry=self.keepalive_expiry,
            ),
            transport=httpx.AsyncHTTPTransport(retries=self.retries),
            headers=self.default_headers,
        )


_lock = threading.Lock()
_client: httpx.AsyncClient | None = None
_config = HttpClientConfig()


def configure_shared_client(config: HttpClientConfig) -> None:
    """Set the config used the next time the shared client is built.

    Raises ``RuntimeError`` once a client exists; close it first.
    """
    global _config
    with _lock:
        if _client is not None and not _client.is_closed:
            raise RuntimeError("shared http client already created; close it first")
        _config = config


def get_shared_client() -> httpx.AsyncClient:
    """Return the shared client, creating it once on first call."""
    global _client
    with _lock:
        if _client is None or _client.is_closed:
            _client = _config.build_client()
            logger.debug(
                "Created shared http client (timeout=%s, retries=%d)",
                _config.timeout,
                _config.retries,
            )
        return _client


async def aclose_shared_client() -> None:
    """Close the shared client, if any. Safe to call more than once."""
    global _client
    with _lock:
        client, _client = _client, None
    if client is not None and not client.is_closed:
        await client.aclose()
        logger.debug("Closed shared http client")


@asynccontextmanager
async def shared_client_lifespan(
    config: HttpClientConfig | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Own the shared client for the duration of the block.

    Usage::

        async with shared_client_lifespan(HttpClientConfig(timeout=3)):
            ...
    """
    if config is not None:
        configure_shared_client(config)
    try:
        yield get_shared_client()
    finally:
        await aclose_shared_client()

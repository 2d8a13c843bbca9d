"""Transport bindings: the shared httpx client and the Starlette server side.

The Starlette binding lives in :mod:`.starlette_server` and is not imported
here, so the client side works without the ``starlette`` extra.
"""

from .client import (
    HttpClientConfig,
    aclose_shared_client,
    configure_shared_client,
    get_shared_client,
    shared_client_lifespan,
)
from .httpx_client import HttpxClientIO, new_http_client_protocol

__all__ = [
    "HttpClientConfig",
    "HttpxClientIO",
    "aclose_shared_client",
    "configure_shared_client",
    "get_shared_client",
    "new_http_client_protocol",
    "shared_client_lifespan",
]

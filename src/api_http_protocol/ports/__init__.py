from api_http_protocol.ports.middleware import IMiddleware
from api_http_protocol.ports.validation import IValidatable

__all__ = [
    "IMiddleware",
    "IValidatable",
]

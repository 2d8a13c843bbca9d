"""Render a request as a reproducible ``curl`` command."""

from __future__ import annotations

import shlex

import httpx

#: Headers httpx adds on its own; curl derives them from the command line.
_IMPLICIT_HEADERS = frozenset({"host", "content-length"})


def to_curl(request: httpx.Request) -> str:
    """Return a shell-quoted ``curl`` command equivalent to *request*."""
    parts = ["curl", "-X", request.method]
    for key, value in request.headers.multi_items():
        if key.lower() in _IMPLICIT_HEADERS:
            continue
        parts.extend(["-H", f"{key}: {value}"])
    body = request.read()
    if body:
        parts.extend(["-d", body.decode("utf-8", errors="replace")])
    parts.append(str(request.url))
    return " ".join(shlex.quote(part) for part in parts)

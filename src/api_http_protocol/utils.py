"""Common utility functions and helpers."""

from __future__ import annotations

from typing import Any


def default_dict_factory() -> dict[str, Any]:
    """Factory for mutable default dict in dataclass fields.

    Use this instead of dict() or {} to avoid dataclass default_factory issues.
    """
    return {}

"""Shared validation helpers for frozen dataclass models.

Private module -- not part of the public API. Used by ``__post_init__``
methods in sibling model modules to enforce runtime type and format
constraints, and by the nips layer for cheap hex checks.
"""

from __future__ import annotations

import re
from typing import Any


_HEX64_RE = re.compile(r"^[0-9a-fA-F]{64}$")
_HEX64_LOWER_RE = re.compile(r"^[0-9a-f]{64}$")


def is_hex64(value: Any, *, lowercase: bool = False) -> bool:
    """True if *value* is a 64-character hex string (optionally lower-case only)."""
    if not isinstance(value, str):
        return False
    pattern = _HEX64_LOWER_RE if lowercase else _HEX64_RE
    return pattern.match(value) is not None


def validate_instance(value: Any, expected: type | tuple[type, ...], name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        names = (
            " or ".join(t.__name__ for t in expected)
            if isinstance(expected, tuple)
            else expected.__name__
        )
        raise TypeError(f"{name} must be {names}, got {type(value).__name__}")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_hex64(value: Any, name: str) -> None:
    """Raise if *value* is not a 64-character hex string."""
    validate_instance(value, str, name)
    if not is_hex64(value):
        raise ValueError(f"{name} must be 64 hex characters, got {len(value)} chars")


def validate_str_not_empty(value: Any, name: str) -> None:
    """Raise if *value* is not a non-empty ``str`` without null bytes."""
    validate_instance(value, str, name)
    if not value:
        raise ValueError(f"{name} must not be empty")
    if "\x00" in value:
        raise ValueError(f"{name} contains null bytes")

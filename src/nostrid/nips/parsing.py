"""
Declarative field parsing for untrusted JSON.

Kind-0 profile content and well-known documents come from arbitrary
servers and users. Each consumer declares a
[FieldSpec][nostrid.nips.parsing.FieldSpec] naming the fields it expects and
their types; [parse_fields][nostrid.nips.parsing.parse_fields] applies the
spec and drops every value that fails its type check.

Supported field types: ``str`` (stripped, empty dropped) and
``dict[str, list[str]]`` (blank or non-string items dropped).

Note:
    No exceptions are raised for invalid data. A profile with a numeric
    ``name`` simply has no name.

See Also:
    [ProfileMetadata][nostrid.nips.nip01.profile.ProfileMetadata]: Declares
        its ``_FIELD_SPEC`` for kind-0 content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable


_SKIP: Any = object()


def _parse_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            return stripped
    return _SKIP


def _parse_str_list(value: Any) -> Any:
    if isinstance(value, list):
        items = [s.strip() for s in value if isinstance(s, str) and s.strip()]
        if items:
            return items
    return _SKIP


def _parse_str_list_map(value: Any) -> Any:
    if not isinstance(value, dict):
        return _SKIP
    result = {}
    for key, items in value.items():
        if isinstance(key, str):
            parsed = _parse_str_list(items)
            if parsed is not _SKIP:
                result[key] = parsed
    return result or _SKIP


_FIELD_PARSERS: tuple[tuple[str, Callable[[Any], Any]], ...] = (
    ("str_fields", _parse_str),
    ("str_list_map_fields", _parse_str_list_map),
)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Declarative specification of expected field types for parsing.

    Attributes:
        str_fields: Fields expected as non-blank ``str`` (whitespace stripped).
        str_list_map_fields: Fields expected as ``dict[str, list[str]]``,
            e.g. a well-known document's ``relays`` mapping.
    """

    str_fields: frozenset[str] = field(default_factory=frozenset)
    str_list_map_fields: frozenset[str] = field(default_factory=frozenset)


def parse_fields(data: Any, spec: FieldSpec) -> dict[str, Any]:
    """Parse a dictionary according to a ``FieldSpec``, dropping invalid values.

    Args:
        data: Raw value to parse. Anything other than a ``dict`` yields ``{}``.
        spec: [FieldSpec][nostrid.nips.parsing.FieldSpec] type specification.

    Returns:
        A new dictionary containing only valid, type-checked fields.
    """
    if not isinstance(data, dict):
        return {}

    dispatch: dict[str, Callable[[Any], Any]] = {}
    for attr_name, parser in _FIELD_PARSERS:
        for name in getattr(spec, attr_name):
            dispatch[name] = parser

    result: dict[str, Any] = {}
    for key, value in data.items():
        handler = dispatch.get(key)
        if handler is not None:
            parsed = handler(value)
            if parsed is not _SKIP:
                result[key] = parsed

    return result


__all__ = ["FieldSpec", "parse_fields"]

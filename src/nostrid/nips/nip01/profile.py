"""
Kind-0 profile metadata.

The ``content`` of a kind-0 event is a JSON object written by the user's
client. Only the fields the DID layer needs are kept, each type-checked by
[parse_fields][nostrid.nips.parsing.parse_fields]; anything else, including
malformed values, is dropped.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict

from nostrid.models.constants import EventKind
from nostrid.nips.parsing import FieldSpec, parse_fields

from .events import event_kind


if TYPE_CHECKING:
    from nostr_sdk import Event


class ProfileMetadata(BaseModel):
    """Parsed kind-0 profile fields. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    _FIELD_SPEC: ClassVar[FieldSpec] = FieldSpec(
        str_fields=frozenset(
            {
                "name",
                "display_name",
                "about",
                "picture",
                "banner",
                "nip05",
                "lud06",
                "lud16",
                "website",
            }
        ),
    )

    name: str | None = None
    display_name: str | None = None
    about: str | None = None
    picture: str | None = None
    banner: str | None = None
    nip05: str | None = None
    lud06: str | None = None
    lud16: str | None = None
    website: str | None = None

    @classmethod
    def parse(cls, data: Any) -> Self:
        """Build from an untrusted dict, dropping invalid values."""
        return cls.model_validate(parse_fields(data, cls._FIELD_SPEC))

    @classmethod
    def from_content(cls, content: str) -> Self:
        """Build from the raw JSON ``content`` string of a kind-0 event."""
        try:
            data = json.loads(content)
        except (TypeError, ValueError):
            data = {}
        return cls.parse(data)

    @classmethod
    def from_event(cls, event: Event) -> Self:
        """Build from a kind-0 event; other kinds raise ``ValueError``."""
        if event_kind(event) != EventKind.SET_METADATA:
            raise ValueError(f"Expected kind {EventKind.SET_METADATA}, got {event_kind(event)}")
        return cls.from_content(event.content())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary, excluding fields with ``None`` values."""
        return self.model_dump(exclude_none=True)

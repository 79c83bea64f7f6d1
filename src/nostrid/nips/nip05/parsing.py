"""
NIP-05 identifier syntax and well-known document matching.

Everything here is pure: parsing an identifier never touches the network,
and matching a fetched document against an identifier never raises.

Identifier grammar (after trimming and lower-casing)::

    identifier := local "@" domain | domain
    local      := [a-z0-9._-]+
    domain     := ([a-z0-9]([a-z0-9-]*[a-z0-9])?\\.)+[a-z]{2,}    (<= 253 chars)

A bare domain stands for the wildcard local part ``_``.
"""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import quote

from nostrid.models.constants import NIP05_WELL_KNOWN_PATH, NIP05_WILDCARD
from nostrid.models.identifier import Nip05Identifier, ParsedIdentifier
from nostrid.nips.nip19.keys import is_valid_pubkey
from nostrid.nips.parsing import FieldSpec, parse_fields


if TYPE_CHECKING:
    from nostrid.nips.nip01.profile import ProfileMetadata


_LOCAL_PART_RE = re.compile(r"^[a-z0-9._-]+$")
_DOMAIN_RE = re.compile(r"^([a-z0-9]([a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,}$")
_MAX_DOMAIN_LENGTH = 253


def is_valid_domain(domain: str) -> bool:
    return bool(domain) and len(domain) <= _MAX_DOMAIN_LENGTH and _DOMAIN_RE.match(domain) is not None


def parse_identifier(text: str) -> ParsedIdentifier | None:
    """Split ``local@domain`` (or a bare domain) into its parts.

    Returns:
        The lower-cased parts, or None if the text is not a valid identifier.
    """
    if not isinstance(text, str):
        return None
    trimmed = text.strip().lower()

    if "@" not in trimmed:
        if is_valid_domain(trimmed):
            return ParsedIdentifier(local_part=NIP05_WILDCARD, domain=trimmed)
        return None

    parts = trimmed.split("@")
    if len(parts) != 2:  # noqa: PLR2004
        return None
    local_part, domain = parts
    if not local_part or _LOCAL_PART_RE.match(local_part) is None:
        return None
    if not is_valid_domain(domain):
        return None
    return ParsedIdentifier(local_part=local_part, domain=domain)


def format_identifier(local_part: str, domain: str) -> str:
    """Inverse of [parse_identifier][nostrid.nips.nip05.parsing.parse_identifier];
    the wildcard local part is written as the bare domain."""
    if local_part == NIP05_WILDCARD:
        return domain
    return f"{local_part}@{domain}"


def well_known_url(local_part: str, domain: str) -> str:
    """URL of the well-known document for *local_part* at *domain*."""
    return f"https://{domain}{NIP05_WELL_KNOWN_PATH}?name={quote(local_part, safe='')}"


def looks_like_nip05(value: Any) -> bool:
    """Loose check that *value* is meant as a NIP-05 identifier rather than a key.

    Used to pick identifiers out of free-form profile data; a True result
    still needs [parse_identifier][nostrid.nips.nip05.parsing.parse_identifier].
    """
    if not isinstance(value, str) or not value.strip():
        return False
    trimmed = value.strip()
    if "@" in trimmed:
        parts = trimmed.split("@")
        return len(parts) == 2 and "." in parts[1]  # noqa: PLR2004
    return "." in trimmed and not trimmed.startswith(("npub", "nprofile"))


def extract_nip05_from_profile(profile: dict[str, Any] | ProfileMetadata) -> str | None:
    """The profile's ``nip05`` claim if it looks like an identifier, else None."""
    value = profile.get("nip05") if isinstance(profile, dict) else profile.nip05
    if isinstance(value, str) and looks_like_nip05(value):
        return value.strip()
    return None


class WellKnownDocument:
    """Strict reader for a ``nostr.json`` document.

    Only two things are trusted: ``names`` must be an object, and the entry
    for the looked-up name must be a 64-hex string. ``relays`` is optional
    and parsed leniently.
    """

    _FIELD_SPEC: ClassVar[FieldSpec] = FieldSpec(str_list_map_fields=frozenset({"relays"}))

    def __init__(self, data: Any) -> None:
        self._names = data.get("names") if isinstance(data, dict) else None
        self._relays: dict[str, list[str]] = parse_fields(data, self._FIELD_SPEC).get("relays", {})

    @property
    def valid(self) -> bool:
        return isinstance(self._names, dict)

    @property
    def names(self) -> dict[str, Any]:
        return self._names if isinstance(self._names, dict) else {}

    def pubkey_for(self, local_part: str) -> str | None:
        pubkey = self.names.get(local_part)
        if not isinstance(pubkey, str) or not is_valid_pubkey(pubkey):
            return None
        return pubkey.lower()

    def relays_for(self, pubkey: str) -> tuple[str, ...] | None:
        relays = self._relays.get(pubkey)
        if relays is None:
            # Some servers key the relay map with the original-case pubkey.
            relays = next((v for k, v in self._relays.items() if k.lower() == pubkey), None)
        return tuple(relays) if relays else None

    def match(self, parsed: ParsedIdentifier, now: int | None = None) -> Nip05Identifier | None:
        """Resolve *parsed* against this document.

        Returns:
            A verified [Nip05Identifier][nostrid.models.identifier.Nip05Identifier],
            or None if the document is malformed or has no valid key for the name.
        """
        if not self.valid:
            return None
        pubkey = self.pubkey_for(parsed.local_part)
        if pubkey is None:
            return None
        return Nip05Identifier(
            identifier=format_identifier(parsed.local_part, parsed.domain),
            local_part=parsed.local_part,
            domain=parsed.domain,
            pubkey=pubkey,
            relays=self.relays_for(pubkey),
            verified=True,
            verified_at=int(time.time()) if now is None else now,
        )

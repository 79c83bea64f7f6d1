"""
NIP-05 identifier value types.

[ParsedIdentifier][nostrid.models.identifier.ParsedIdentifier] is the result
of syntactic parsing (no network);
[Nip05Identifier][nostrid.models.identifier.Nip05Identifier] is the result
of a successful resolution against the domain's well-known document.

See Also:
    [nostrid.nips.nip05][nostrid.nips.nip05]: Parses, fetches and verifies
        identifiers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ._validation import validate_hex64, validate_str_not_empty, validate_timestamp


@dataclass(frozen=True, slots=True)
class ParsedIdentifier:
    """A syntactically valid ``local@domain`` pair, lower-cased.

    A bare domain parses to the wildcard local part ``_``.
    """

    local_part: str
    domain: str

    def __post_init__(self) -> None:
        validate_str_not_empty(self.local_part, "local_part")
        validate_str_not_empty(self.domain, "domain")

    @property
    def identifier(self) -> str:
        return f"{self.local_part}@{self.domain}"


@dataclass(frozen=True, slots=True)
class Nip05Identifier:
    """A resolved NIP-05 identifier.

    ``verified`` is only True when the well-known document maps the local
    part to a valid key and, if an expected key was supplied, that key
    matched. Verifiers never return an instance with ``verified=False``;
    the field is kept so that callers building identities from profile data
    can carry an unverified claim.

    Attributes:
        identifier: Canonical ``local@domain`` form.
        local_part: Name looked up in the ``names`` mapping.
        domain: Domain hosting the well-known document.
        pubkey: Lower-case hex public key from the document.
        relays: Relay hints for the key, or None when the document had none.
        verified: Whether the claim was checked against the document.
        verified_at: Unix timestamp of the successful resolution.
    """

    identifier: str
    local_part: str
    domain: str
    pubkey: str
    relays: tuple[str, ...] | None = None
    verified: bool = False
    verified_at: int | None = None

    def __post_init__(self) -> None:
        validate_str_not_empty(self.identifier, "identifier")
        validate_str_not_empty(self.local_part, "local_part")
        validate_str_not_empty(self.domain, "domain")
        validate_hex64(self.pubkey, "pubkey")
        object.__setattr__(self, "pubkey", self.pubkey.lower())
        if self.relays is not None:
            object.__setattr__(self, "relays", tuple(self.relays))
        if self.verified_at is not None:
            validate_timestamp(self.verified_at, "verified_at")

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form with camelCase keys, as returned by the HTTP API."""
        result: dict[str, Any] = {
            "identifier": self.identifier,
            "localPart": self.local_part,
            "domain": self.domain,
            "pubkey": self.pubkey,
            "verified": self.verified,
        }
        if self.relays is not None:
            result["relays"] = list(self.relays)
        if self.verified_at is not None:
            result["verifiedAt"] = self.verified_at
        return result

"""
Aggregated Nostr identity: key encodings, DID, profile and NIP-05 status.

[create_identity()][nostrid.did.identity.create_identity] verifies the NIP-05
claim (the explicit identifier first, then the profile's ``nip05``) and
generates the DID document. [update_identity()][nostrid.did.identity.update_identity]
re-verifies NIP-05 only when the profile's claim changed.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from nostrid.models.identifier import Nip05Identifier  # noqa: TC001
from nostrid.nips.nip01.profile import ProfileMetadata
from nostrid.nips.nip05.verifier import Nip05Verifier
from nostrid.nips.nip19.keys import parse_to_hex_pubkey, pubkey_to_npub

from .document import generate_document, pubkey_to_did
from .models import DidDocument  # noqa: TC001


if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class NostrIdentity:
    """Everything known about one public key.

    Attributes:
        pubkey: Lower-case hex public key.
        npub: Bech32 encoding of ``pubkey``.
        did: ``did:nostr`` DID of ``pubkey``.
        profile: Kind-0 profile, if supplied.
        nip05: Verified NIP-05 identifier, if any claim checked out.
        did_document: Document generated from the fields above.
        created_at: Creation time in Unix milliseconds.
        updated_at: Time of the last update in Unix milliseconds.
    """

    pubkey: str
    npub: str
    did: str
    did_document: DidDocument
    profile: ProfileMetadata | None = None
    nip05: Nip05Identifier | None = None
    created_at: int = 0
    updated_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "pubkey": self.pubkey,
            "npub": self.npub,
            "did": self.did,
            "profile": self.profile.to_dict() if self.profile is not None else None,
            "nip05": self.nip05.to_dict() if self.nip05 is not None else None,
            "didDocument": self.did_document.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


def _as_profile(profile: ProfileMetadata | dict[str, Any] | None) -> ProfileMetadata | None:
    if profile is None or isinstance(profile, ProfileMetadata):
        return profile
    return ProfileMetadata.parse(profile)


async def create_identity(
    pubkey: str,
    profile: ProfileMetadata | dict[str, Any] | None = None,
    nip05_identifier: str | None = None,
    relays: Sequence[str] | None = None,
    verifier: Nip05Verifier | None = None,
) -> NostrIdentity:
    """Build a [NostrIdentity][nostrid.did.identity.NostrIdentity] for *pubkey*.

    Args:
        pubkey: Hex or npub public key.
        profile: Kind-0 profile data.
        nip05_identifier: NIP-05 identifier to verify for this key.
        relays: Relay URLs for the document's relay service.
        verifier: NIP-05 verifier. A default one is created when a claim
            needs checking and none is given.

    Raises:
        KeyFormatError: If *pubkey* is not a valid hex or npub key.
    """
    hex_pubkey = parse_to_hex_pubkey(pubkey)
    parsed_profile = _as_profile(profile)

    claims = [c for c in (nip05_identifier, parsed_profile.nip05 if parsed_profile else None) if c]
    nip05: Nip05Identifier | None = None
    if claims:
        verifier = verifier or Nip05Verifier()
        for claim in claims:
            nip05 = await verifier.verify(claim, expected_pubkey=hex_pubkey)
            if nip05 is not None:
                break

    return NostrIdentity(
        pubkey=hex_pubkey,
        npub=pubkey_to_npub(hex_pubkey),
        did=pubkey_to_did(hex_pubkey),
        did_document=generate_document(hex_pubkey, profile=parsed_profile, nip05=nip05, relays=list(relays or [])),
        profile=parsed_profile,
        nip05=nip05,
        created_at=_now_ms(),
    )


async def update_identity(
    identity: NostrIdentity,
    profile: ProfileMetadata | dict[str, Any] | None = None,
    relays: Sequence[str] | None = None,
    verifier: Nip05Verifier | None = None,
) -> NostrIdentity:
    """Return *identity* with a new profile and/or relays and a fresh document.

    The NIP-05 claim is re-verified only if the new profile's ``nip05``
    differs from the current one; otherwise the previous result is kept.
    """
    new_profile = _as_profile(profile)
    merged = new_profile or identity.profile

    nip05 = identity.nip05
    old_claim = identity.profile.nip05 if identity.profile else None
    if new_profile is not None and new_profile.nip05 and new_profile.nip05 != old_claim:
        verifier = verifier or Nip05Verifier()
        nip05 = await verifier.verify(new_profile.nip05, expected_pubkey=identity.pubkey)

    return dataclasses.replace(
        identity,
        profile=merged,
        nip05=nip05,
        did_document=generate_document(identity.pubkey, profile=merged, nip05=nip05, relays=list(relays or [])),
        updated_at=_now_ms(),
    )

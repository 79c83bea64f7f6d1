"""``did:nostr`` -- Decentralized Identifiers derived from Nostr public keys.

The DID layer sits above [nostrid.nips][nostrid.nips]: it encodes keys with
NIP-19, verifies NIP-05 claims with the NIP-05 verifier, and reads kind-0
profiles for service endpoints.

Attributes:
    pubkey_to_did, did_to_pubkey: The DID string codec; ``did_to_pubkey``
        is the sole DID validator.
    generate_document, verify_document: Derive a document and check one.
    DidResolver: Resolution with ``invalidDid``/``notFound``/``internalError``
        error codes and a TTL cache.
    NostrIdentity: Key, DID, profile and NIP-05 status in one value.
"""

from .document import (
    did_to_pubkey,
    extract_pubkey,
    generate_document,
    is_valid_did,
    pubkey_to_did,
    verify_document,
)
from .identity import NostrIdentity, create_identity, update_identity
from .models import (
    DID_CONTEXT,
    DID_METHOD,
    DidDocument,
    DidDocumentMetadata,
    DidResolutionMetadata,
    DidResolutionResult,
    DidService,
    VerificationMethod,
)
from .resolver import DidResolver, ProfileFetcher


__all__ = [
    "DID_CONTEXT",
    "DID_METHOD",
    "DidDocument",
    "DidDocumentMetadata",
    "DidResolutionMetadata",
    "DidResolutionResult",
    "DidResolver",
    "DidService",
    "NostrIdentity",
    "ProfileFetcher",
    "VerificationMethod",
    "create_identity",
    "did_to_pubkey",
    "extract_pubkey",
    "generate_document",
    "is_valid_did",
    "pubkey_to_did",
    "update_identity",
    "verify_document",
]

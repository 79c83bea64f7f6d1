"""
``did:nostr`` identifiers and DID document generation and verification.

A ``did:nostr`` DID is the lower-case hex public key behind a fixed prefix::

    did:nostr:7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e

[did_to_pubkey()][nostrid.did.document.did_to_pubkey] is the only DID
validator; [is_valid_did()][nostrid.did.document.is_valid_did] and the
resolver both go through it.

Documents are derived, never stored: the same key and the same optional
data always produce the same document.
"""

from __future__ import annotations

from typing import Any

from nostrid.core.exceptions import DidError
from nostrid.models.identifier import Nip05Identifier  # noqa: TC001
from nostrid.models.keys import is_hex_key
from nostrid.nips.nip01.profile import ProfileMetadata
from nostrid.nips.nip05.parsing import well_known_url
from nostrid.nips.nip19.keys import is_valid_pubkey, pubkey_to_npub

from .models import DID_CONTEXT, DID_PREFIX, DidDocument, DidService, VerificationMethod


VERIFICATION_KEY_TYPE = "EcdsaSecp256k1VerificationKey2019"
KEY_FRAGMENT = "#keys-1"


# ---------------------------------------------------------------------------
# DID strings
# ---------------------------------------------------------------------------


def pubkey_to_did(pubkey: str) -> str:
    """``did:nostr:<lower-case hex>`` for a 64-hex public key.

    Raises:
        DidError: If *pubkey* is not a 64-character hex string.
    """
    if not is_valid_pubkey(pubkey):
        raise DidError(f"Invalid public key: {pubkey!r}")
    return f"{DID_PREFIX}{pubkey.lower()}"


def did_to_pubkey(did: str) -> str:
    """Exact inverse of [pubkey_to_did()][nostrid.did.document.pubkey_to_did].

    Raises:
        DidError: If *did* lacks the ``did:nostr:`` prefix or the key part is
            not exactly 64 lower-case hex characters. Nothing is corrected.
    """
    if not isinstance(did, str) or not did.startswith(DID_PREFIX):
        raise DidError("Invalid Nostr DID format")
    pubkey = did[len(DID_PREFIX) :]
    if not is_hex_key(pubkey) or pubkey != pubkey.lower():
        raise DidError("Invalid public key in DID")
    return pubkey


def is_valid_did(did: Any) -> bool:
    try:
        did_to_pubkey(did)
    except DidError:
        return False
    return True


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


def _relay_service(did: str, relays: list[str]) -> DidService:
    return DidService(
        id=f"{did}#nostr-relays",
        type="NostrRelayService",
        service_endpoint=relays[0] if len(relays) == 1 else relays,
    )


def _nip05_service(did: str, nip05: Nip05Identifier) -> DidService:
    return DidService(
        id=f"{did}#nip05-verification",
        type="Nip05VerificationService",
        service_endpoint=well_known_url(nip05.local_part, nip05.domain),
    )


def _lightning_service(did: str, address: str) -> DidService:
    parts = address.split("@")
    if len(parts) == 2 and all(parts):  # noqa: PLR2004
        name, domain = parts
        return DidService(
            id=f"{did}#lightning",
            type="LightningAddressService",
            service_endpoint=f"https://{domain}/.well-known/lnurlp/{name}",
        )
    return DidService(id=f"{did}#lightning", type="LNURLService", service_endpoint=address)


def _profile_services(did: str, profile: ProfileMetadata) -> list[DidService]:
    services = []
    lightning = profile.lud16 or profile.lud06
    if lightning:
        services.append(_lightning_service(did, lightning))
    if profile.website:
        services.append(DidService(id=f"{did}#website", type="LinkedDomains", service_endpoint=profile.website))
    return services


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def generate_document(
    pubkey: str,
    profile: ProfileMetadata | dict[str, Any] | None = None,
    nip05: Nip05Identifier | None = None,
    relays: list[str] | None = None,
) -> DidDocument:
    """Build the DID document for *pubkey*.

    The document always has one verification method (``#keys-1``) that
    ``authentication`` and ``assertionMethod`` reference, and an
    ``alsoKnownAs`` entry with the key's ``npub``. Services are appended in
    this order, each only if its data is present: relays, NIP-05 (only when
    *nip05* is verified), lightning (``lud16`` preferred over ``lud06``),
    website.

    Args:
        pubkey: 64-hex public key.
        profile: Kind-0 profile data, parsed or raw.
        nip05: Result of a NIP-05 verification for this key.
        relays: Relay URLs where the key publishes.

    Raises:
        DidError: If *pubkey* is invalid.
    """
    did = pubkey_to_did(pubkey)
    pubkey = pubkey.lower()
    key_id = f"{did}{KEY_FRAGMENT}"

    verified_nip05 = nip05 if nip05 is not None and nip05.verified else None
    if verified_nip05 is not None and verified_nip05.pubkey != pubkey:
        verified_nip05 = None

    also_known_as = [f"nostr:{pubkey_to_npub(pubkey)}"]
    if verified_nip05 is not None:
        also_known_as.append(f"nip05:{verified_nip05.identifier}")

    services: list[DidService] = []
    if relays:
        services.append(_relay_service(did, list(relays)))
    if verified_nip05 is not None:
        services.append(_nip05_service(did, verified_nip05))
    if profile is not None:
        parsed = profile if isinstance(profile, ProfileMetadata) else ProfileMetadata.parse(profile)
        services.extend(_profile_services(did, parsed))

    return DidDocument(
        context=list(DID_CONTEXT),
        id=did,
        also_known_as=also_known_as,
        verification_method=[
            VerificationMethod(
                id=key_id,
                type=VERIFICATION_KEY_TYPE,
                controller=did,
                public_key_hex=pubkey,
            )
        ],
        authentication=[key_id],
        assertion_method=[key_id],
        service=services or None,
    )


def _as_dict(document: DidDocument | dict[str, Any]) -> dict[str, Any]:
    return document.to_dict() if isinstance(document, DidDocument) else document


def verify_document(document: DidDocument | dict[str, Any], expected_pubkey: str) -> list[str]:
    """Every way *document* fails to describe *expected_pubkey*.

    Accepts a raw dict so that documents from untrusted sources can be
    checked without first passing model validation.

    Returns:
        Human-readable violations; an empty list means the document is valid.
    """
    data = _as_dict(document)
    if not isinstance(data, dict):
        return ["Document is not a JSON object"]
    errors: list[str] = []

    try:
        expected_did = pubkey_to_did(expected_pubkey)
    except DidError:
        return [f"Invalid expected public key: {expected_pubkey!r}"]
    expected_key = expected_pubkey.lower()

    if data.get("id") != expected_did:
        errors.append(f"DID mismatch: expected {expected_did}, got {data.get('id')}")

    context = data.get("@context")
    if not isinstance(context, list) or not context:
        errors.append("Missing @context")

    methods = data.get("verificationMethod")
    method_ids: set[str] = set()
    if not isinstance(methods, list) or not methods:
        errors.append("No verification methods")
    else:
        keys = []
        for method in methods:
            if not isinstance(method, dict):
                keys.append(None)
                continue
            method_id = method.get("id")
            if isinstance(method_id, str):
                method_ids.add(method_id)
            key = method.get("publicKeyHex")
            keys.append(key.lower() if isinstance(key, str) else None)
        if expected_key not in keys:
            errors.append("No verification method matches the expected public key")
        if any(k is not None and k != expected_key for k in keys):
            errors.append("Verification method with a different public key")

    authentication = data.get("authentication")
    if not isinstance(authentication, list) or not authentication:
        errors.append("No authentication methods")
    else:
        refs = [a if isinstance(a, str) else a.get("id") if isinstance(a, dict) else None for a in authentication]
        if not any(isinstance(ref, str) and ref in method_ids for ref in refs):
            errors.append("Authentication does not reference a verification method")

    return errors


def extract_pubkey(document: DidDocument | dict[str, Any]) -> str | None:
    """Public key named by the document's ``id``, else by its first valid method."""
    data = _as_dict(document)
    if not isinstance(data, dict):
        return None
    try:
        return did_to_pubkey(data.get("id"))  # type: ignore[arg-type]
    except DidError:
        pass
    methods = data.get("verificationMethod")
    for method in methods if isinstance(methods, list) else []:
        key = method.get("publicKeyHex") if isinstance(method, dict) else None
        if is_valid_pubkey(key):
            return key.lower()
    return None

"""Nostr Implementation Possibilities -- protocol encodings and verification.

The NIPs layer sits between [nostrid.models][nostrid.models] and the
[nostrid.did][nostrid.did] and [nostrid.services][nostrid.services] layers.
Only the NIP-05 verifier performs network I/O; everything else is pure
computation plus calls into the ``nostr_sdk`` signing primitive.

Warning:
    Verification functions ([Nip05Verifier.verify()][nostrid.nips.nip05.verifier.Nip05Verifier.verify],
    [verify_challenge_response()][nostrid.nips.nip42.challenge.verify_challenge_response],
    [verify_auth_event()][nostrid.nips.nip98.http_auth.verify_auth_event])
    **never raise** on bad input. NIP-05 returns None for "unverified"; the
    auth protocols return an [AuthResult][nostrid.nips.base.AuthResult]
    with ``valid=False``. Callers must fail closed.

Attributes:
    nip01: Signer capability, event helpers, kind-0 profile parsing.
    nip05: DNS-based identifier verification with a TTL cache.
    nip19: Bech32 codec, key encodings and TLV entities.
    nip42: Challenge-response authentication (kind 22242).
    nip98: Signed HTTP request authorization (kind 27235).
"""

from nostrid.nips.base import AuthFailure, AuthResult
from nostrid.nips.nip05 import Nip05Config, Nip05Verifier
from nostrid.nips.nip42 import AuthChallenge


__all__ = [
    "AuthChallenge",
    "AuthFailure",
    "AuthResult",
    "Nip05Config",
    "Nip05Verifier",
]

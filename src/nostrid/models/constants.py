"""Shared constants for the models layer.

Defines enumerations and protocol constants used across multiple modules.
Placing them here avoids circular dependencies between the models, nips and
did layers.

See Also:
    [nostrid.nips.nip19][nostrid.nips.nip19]: Uses
        [Bech32Prefix][nostrid.models.constants.Bech32Prefix] and
        ``SECP256K1_ORDER``.
    [nostrid.nips.nip42][nostrid.nips.nip42] and
        [nostrid.nips.nip98][nostrid.nips.nip98]: Use
        [EventKind][nostrid.models.constants.EventKind] and the time-window
        constants.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class EventKind(IntEnum):
    """Nostr event kinds handled by nostrid.

    Attributes:
        SET_METADATA: Kind 0 -- user profile metadata (NIP-01), read when
            resolving a DID with profile data.
        CLIENT_AUTH: Kind 22242 -- challenge-response authentication
            (NIP-42).
        HTTP_AUTH: Kind 27235 -- signed HTTP request authorization (NIP-98).
    """

    SET_METADATA = 0
    CLIENT_AUTH = 22_242
    HTTP_AUTH = 27_235


class Bech32Prefix(StrEnum):
    """Human-readable prefixes of NIP-19 bech32 strings.

    ``NPUB``, ``NSEC`` and ``NOTE`` carry a bare 32-byte payload; the others
    carry a TLV-encoded payload decoded by
    [nostrid.nips.nip19.entities][nostrid.nips.nip19.entities].
    """

    NPUB = "npub"
    NSEC = "nsec"
    NOTE = "note"
    NPROFILE = "nprofile"
    NEVENT = "nevent"
    NRELAY = "nrelay"
    NADDR = "naddr"


# Order of the secp256k1 group. A private key is a scalar in [1, n - 1].
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

KEY_HEX_LENGTH = 64
KEY_BYTES_LENGTH = 32

# Challenge-response (NIP-42 style) timing, in seconds.
CHALLENGE_TTL = 300
CHALLENGE_BYTES = 32

# Tolerated clock skew for events dated in the future, in seconds.
FUTURE_SKEW = 60

# Signed HTTP authorization (NIP-98) window, in seconds either side of now.
HTTP_AUTH_WINDOW = 60
HTTP_AUTH_SCHEME = "Nostr"

# NIP-05
NIP05_WELL_KNOWN_PATH = "/.well-known/nostr.json"
NIP05_DEFAULT_TIMEOUT = 10.0
NIP05_DEFAULT_CACHE_TTL = 300.0
NIP05_MAX_RESPONSE_SIZE = 65_536  # 64 KB
NIP05_WILDCARD = "_"

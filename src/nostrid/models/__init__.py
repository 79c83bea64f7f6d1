"""Pure frozen dataclasses and protocol constants with zero I/O.

The models layer is the bottom of the dependency graph. It has no
dependencies on any other nostrid package -- only the Python standard
library. Every model uses ``@dataclass(frozen=True, slots=True)`` and
validates in ``__post_init__`` so invalid instances never escape the
constructor.

Pydantic models that carry protocol semantics live next to the protocol
that produces them (``nostrid.nips``, ``nostrid.did``).

Attributes:
    RawKey: 64-char hex key, one arm of the ``KeyInput`` union.
    EncodedKey: bech32 key string, the other arm of ``KeyInput``.
    Keypair: Private/public key pair whose secret half never reaches ``repr``.
    ParsedIdentifier: Syntactically valid ``local@domain`` pair.
    Nip05Identifier: Identifier resolved against a well-known document.
    EventKind: Event kinds used by the authentication protocols.
    Bech32Prefix: NIP-19 human-readable prefixes.
"""

from .constants import SECP256K1_ORDER, Bech32Prefix, EventKind
from .identifier import Nip05Identifier, ParsedIdentifier
from .keys import EncodedKey, KeyInput, Keypair, RawKey, is_hex_key


__all__ = [
    "SECP256K1_ORDER",
    "Bech32Prefix",
    "EncodedKey",
    "EventKind",
    "KeyInput",
    "Keypair",
    "Nip05Identifier",
    "ParsedIdentifier",
    "RawKey",
    "is_hex_key",
]

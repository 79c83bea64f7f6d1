"""
[NIP-19](https://github.com/nostr-protocol/nips/blob/master/19.md)
bech32-encoded entities.

Attributes:
    bech32: The checksummed text codec (``encode``, ``decode``, ``convert_bits``).
    keys: ``npub``/``nsec``/``note`` conversions, key predicates, key input
        classification and key pair generation.
    entities: TLV entities ``nprofile``, ``nevent``, ``naddr``, ``nrelay``.
"""

from .bech32 import convert_bits, decode, encode
from .entities import (
    AddressPointer,
    DecodedEntity,
    EventPointer,
    ProfilePointer,
    decode_entity,
    decode_naddr,
    decode_nevent,
    decode_nprofile,
    decode_nrelay,
    encode_naddr,
    encode_nevent,
    encode_nprofile,
    encode_nrelay,
)
from .keys import (
    classify_key_input,
    event_id_to_note,
    generate_keypair,
    import_keypair,
    is_valid_npub,
    is_valid_nsec,
    is_valid_privkey,
    is_valid_pubkey,
    note_to_event_id,
    npub_to_pubkey,
    nsec_to_privkey,
    parse_to_hex_pubkey,
    privkey_to_nsec,
    pubkey_to_npub,
)


__all__ = [
    "AddressPointer",
    "DecodedEntity",
    "EventPointer",
    "ProfilePointer",
    "classify_key_input",
    "convert_bits",
    "decode",
    "decode_entity",
    "decode_naddr",
    "decode_nevent",
    "decode_nprofile",
    "decode_nrelay",
    "encode",
    "encode_naddr",
    "encode_nevent",
    "encode_nprofile",
    "encode_nrelay",
    "event_id_to_note",
    "generate_keypair",
    "import_keypair",
    "is_valid_npub",
    "is_valid_nsec",
    "is_valid_privkey",
    "is_valid_pubkey",
    "note_to_event_id",
    "npub_to_pubkey",
    "nsec_to_privkey",
    "parse_to_hex_pubkey",
    "privkey_to_nsec",
    "pubkey_to_npub",
]

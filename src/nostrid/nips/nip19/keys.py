"""
NIP-19 key conversions and validation.

Thin fixed-prefix wrappers around the [bech32 codec][nostrid.nips.nip19.bech32]
for public keys (``npub``), private keys (``nsec``) and event ids
(``note``). Every encoder checks its 64-hex precondition before the codec
runs; every decoder checks the prefix and the 32-byte payload length.

Key generation and public-key derivation are delegated to ``nostr_sdk.Keys``;
this module only owns the encoding layer and the validity bounds.

Examples:
    ```python
    npub = pubkey_to_npub("aa" * 32)
    npub_to_pubkey(npub) == "aa" * 32         # True
    parse_to_hex_pubkey(npub) == "aa" * 32    # True
    is_valid_privkey("00" * 32)               # False: zero scalar
    ```
"""

from __future__ import annotations

from nostr_sdk import Keys, NostrSdkError

from nostrid.core.exceptions import Bech32Error, EncodingError, KeyFormatError
from nostrid.models.constants import KEY_BYTES_LENGTH, SECP256K1_ORDER, Bech32Prefix
from nostrid.models.keys import EncodedKey, KeyInput, Keypair, RawKey, is_hex_key

from . import bech32


# ---------------------------------------------------------------------------
# Fixed-prefix conversions
# ---------------------------------------------------------------------------


def _encode_hex_entity(prefix: Bech32Prefix, hex_value: str, name: str) -> str:
    if not is_hex_key(hex_value):
        raise KeyFormatError(f"{name} must be 64 hex characters")
    return bech32.encode(prefix, bytes.fromhex(hex_value))


def decode_hex_entity(prefix: Bech32Prefix, text: str) -> str:
    """Decode a bare 32-byte entity (``npub``, ``nsec``, ``note``) to lower-case hex."""
    hrp, payload = bech32.decode(text)
    if hrp != prefix:
        raise KeyFormatError(f"Expected {prefix} prefix, got {hrp}")
    if len(payload) != KEY_BYTES_LENGTH:
        raise KeyFormatError(f"Expected {KEY_BYTES_LENGTH}-byte payload, got {len(payload)}")
    return payload.hex()


def pubkey_to_npub(pubkey: str) -> str:
    """Encode a hex public key as ``npub1...``.

    Raises:
        KeyFormatError: If *pubkey* is not 64 hex characters.
    """
    return _encode_hex_entity(Bech32Prefix.NPUB, pubkey, "pubkey")


def npub_to_pubkey(npub: str) -> str:
    """Decode ``npub1...`` to a lower-case hex public key.

    Raises:
        Bech32Error: If the string is not valid bech32.
        KeyFormatError: If the prefix is not ``npub`` or the payload is not 32 bytes.
    """
    return decode_hex_entity(Bech32Prefix.NPUB, npub)


def privkey_to_nsec(privkey: str) -> str:
    """Encode a hex private key as ``nsec1...``.

    Raises:
        KeyFormatError: If *privkey* is not 64 hex characters.
    """
    return _encode_hex_entity(Bech32Prefix.NSEC, privkey, "privkey")


def nsec_to_privkey(nsec: str) -> str:
    """Decode ``nsec1...`` to a lower-case hex private key.

    Raises:
        Bech32Error: If the string is not valid bech32.
        KeyFormatError: If the prefix is not ``nsec`` or the payload is not 32 bytes.
    """
    return decode_hex_entity(Bech32Prefix.NSEC, nsec)


def event_id_to_note(event_id: str) -> str:
    """Encode a hex event id as ``note1...``."""
    return _encode_hex_entity(Bech32Prefix.NOTE, event_id, "event_id")


def note_to_event_id(note: str) -> str:
    """Decode ``note1...`` to a lower-case hex event id."""
    return decode_hex_entity(Bech32Prefix.NOTE, note)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_valid_pubkey(value: object) -> bool:
    """True for a 64-character hex string. No curve check is made."""
    return is_hex_key(value)


def is_valid_privkey(value: object) -> bool:
    """True for a 64-character hex scalar in ``[1, n - 1]`` of secp256k1."""
    if not is_hex_key(value):
        return False
    return 0 < int(value, 16) < SECP256K1_ORDER  # type: ignore[arg-type]


def is_valid_npub(value: object) -> bool:
    """True if *value* decodes as an ``npub`` with a 32-byte payload."""
    if not isinstance(value, str):
        return False
    try:
        npub_to_pubkey(value)
    except EncodingError:
        return False
    return True


def is_valid_nsec(value: object) -> bool:
    """True if *value* decodes as an ``nsec`` holding a valid private scalar."""
    if not isinstance(value, str):
        return False
    try:
        return is_valid_privkey(nsec_to_privkey(value))
    except EncodingError:
        return False


# ---------------------------------------------------------------------------
# Key input classification
# ---------------------------------------------------------------------------


def classify_key_input(value: str) -> KeyInput:
    """Classify user input as a [RawKey][nostrid.models.keys.RawKey] or an
    [EncodedKey][nostrid.models.keys.EncodedKey].

    Only the shape is inspected; an ``EncodedKey`` is not decoded here.

    Raises:
        KeyFormatError: If *value* is neither 64 hex characters nor a
            bech32-shaped string.
    """
    if not isinstance(value, str):
        raise KeyFormatError(f"Key must be a str, got {type(value).__name__}")
    stripped = value.strip()
    if is_hex_key(stripped):
        return RawKey(stripped)
    try:
        return EncodedKey(stripped)
    except ValueError as e:
        raise KeyFormatError(f"Not a hex or bech32 key: {e}") from e


def parse_to_hex_pubkey(value: str) -> str:
    """Normalize a hex or ``npub`` public key to lower-case hex.

    Raises:
        KeyFormatError: If *value* is neither a valid hex key nor a valid npub.
    """
    key = classify_key_input(value)
    if isinstance(key, RawKey):
        return key.hex
    try:
        return npub_to_pubkey(key.text)
    except Bech32Error as e:
        raise KeyFormatError(f"Invalid npub: {e}") from e


# ---------------------------------------------------------------------------
# Key pairs
# ---------------------------------------------------------------------------


def _keypair_from_keys(keys: Keys) -> Keypair:
    private_key = keys.secret_key().to_hex()
    public_key = keys.public_key().to_hex()
    return Keypair(
        private_key=private_key,
        public_key=public_key,
        nsec=privkey_to_nsec(private_key),
        npub=pubkey_to_npub(public_key),
    )


def generate_keypair() -> Keypair:
    """Generate a fresh random key pair with ``nostr_sdk.Keys.generate()``."""
    return _keypair_from_keys(Keys.generate())


def import_keypair(value: str) -> Keypair:
    """Build a key pair from a hex or ``nsec`` private key.

    Raises:
        KeyFormatError: If *value* is malformed or outside the curve order.
    """
    key = classify_key_input(value)
    if isinstance(key, RawKey):
        private_key = key.hex
    else:
        try:
            private_key = nsec_to_privkey(key.text)
        except Bech32Error as e:
            raise KeyFormatError(f"Invalid nsec: {e}") from e
    if not is_valid_privkey(private_key):
        raise KeyFormatError("Private key is outside the secp256k1 scalar range")
    try:
        keys = Keys.parse(private_key)
    except NostrSdkError as e:
        raise KeyFormatError(f"Private key rejected: {e}") from e
    return _keypair_from_keys(keys)

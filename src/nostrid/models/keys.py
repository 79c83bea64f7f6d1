"""
Key material value types.

A key accepted from a user is either raw hex or a bech32 string. The two
shapes are modelled as a tagged union,
``KeyInput = RawKey | EncodedKey``, produced by the single classifier
[classify_key_input()][nostrid.nips.nip19.keys.classify_key_input]. Call
sites match on the type instead of sniffing strings.

See Also:
    [nostrid.nips.nip19.keys][nostrid.nips.nip19.keys]: Conversions between
        the two forms and the key validity predicates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from ._validation import is_hex64, validate_hex64, validate_instance, validate_str_not_empty


def is_hex_key(value: object) -> bool:
    """True if *value* is a 64-character hex string (either case)."""
    return is_hex64(value)


@dataclass(frozen=True, slots=True)
class RawKey:
    """A 32-byte key (public or private) as 64 lower-case hex characters.

    Mixed-case input is accepted and normalized. No curve-order check is
    performed here: that bound applies to private keys only and is enforced
    by [is_valid_privkey()][nostrid.nips.nip19.keys.is_valid_privkey].

    Raises:
        TypeError: If *hex* is not a string.
        ValueError: If *hex* is not exactly 64 hex characters.
    """

    hex: str

    def __post_init__(self) -> None:
        validate_hex64(self.hex, "hex")
        object.__setattr__(self, "hex", self.hex.lower())

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.hex)

    @classmethod
    def from_bytes(cls, data: bytes) -> RawKey:
        return cls(data.hex())


@dataclass(frozen=True, slots=True)
class EncodedKey:
    """A bech32 string as supplied by the user, lower-cased.

    Only the shape is checked at construction (a separator after a
    non-empty prefix). Checksum and payload validation happen when the key
    is decoded.
    """

    text: str

    def __post_init__(self) -> None:
        validate_str_not_empty(self.text, "text")
        text = self.text.strip().lower()
        if text.rfind("1") < 1:
            raise ValueError("text must contain a '1' separator after the prefix")
        object.__setattr__(self, "text", text)

    @property
    def prefix(self) -> str:
        return self.text[: self.text.rfind("1")]


KeyInput: TypeAlias = RawKey | EncodedKey


@dataclass(frozen=True, slots=True)
class Keypair:
    """A private/public key pair in both hex and bech32 form.

    The private key and nsec are excluded from ``repr`` so that a keypair
    can never leak through a log line or a traceback.

    Attributes:
        private_key: 64-char lower-case hex private scalar.
        public_key: 64-char lower-case hex x-only public key.
        nsec: Bech32 ``nsec1...`` form of the private key.
        npub: Bech32 ``npub1...`` form of the public key.
    """

    private_key: str = field(repr=False)
    public_key: str
    nsec: str = field(repr=False)
    npub: str

    def __post_init__(self) -> None:
        validate_hex64(self.private_key, "private_key")
        validate_hex64(self.public_key, "public_key")
        validate_instance(self.nsec, str, "nsec")
        validate_instance(self.npub, str, "npub")
        if not self.nsec.startswith("nsec1"):
            raise ValueError("nsec must start with 'nsec1'")
        if not self.npub.startswith("npub1"):
            raise ValueError("npub must start with 'npub1'")

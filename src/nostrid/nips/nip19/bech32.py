"""
Bech32 codec (BIP-173) as used by
[NIP-19](https://github.com/nostr-protocol/nips/blob/master/19.md).

Encodes a byte payload as ``<prefix>1<data><checksum>``: the payload is
regrouped from 8-bit to 5-bit words, a 6-word BCH checksum is computed over
the expanded prefix and the data words, and every word is written with the
32-character alphabet ``qpzry9x8gf2tvdw0s3jn54khce6mua7l``.

The checksum detects any single-character substitution, which is what makes
a mistyped ``npub`` fail loudly instead of silently naming another key.

Note:
    NIP-19 uses the original bech32 constant (1), not bech32m. Plain keys
    fit comfortably in the BIP-173 length limit of 90 characters; TLV
    entities (``nprofile``, ``nevent``, ...) exceed it and are decoded with
    ``limit=TLV_DECODE_LIMIT``.

See Also:
    [nostrid.nips.nip19.keys][nostrid.nips.nip19.keys]: Fixed-prefix key
        conversions built on this codec.
    [nostrid.nips.nip19.entities][nostrid.nips.nip19.entities]: TLV
        entities built on this codec.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nostrid.core.exceptions import Bech32Error, ChecksumError


if TYPE_CHECKING:
    from collections.abc import Iterable


CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
SEPARATOR = "1"
CHECKSUM_LENGTH = 6
DEFAULT_DECODE_LIMIT = 90
TLV_DECODE_LIMIT = 5000

_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_CHARSET_REV = {c: i for i, c in enumerate(CHARSET)}


# ---------------------------------------------------------------------------
# Checksum
# ---------------------------------------------------------------------------


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod([*_hrp_expand(hrp), *data, 0, 0, 0, 0, 0, 0]) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def _verify_checksum(hrp: str, data: list[int]) -> bool:
    return _polymod([*_hrp_expand(hrp), *data]) == 1


# ---------------------------------------------------------------------------
# Bit regrouping
# ---------------------------------------------------------------------------


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, *, pad: bool) -> list[int]:
    """Regroup a sequence of ``from_bits``-wide words into ``to_bits``-wide words.

    Args:
        data: Input words, each in ``[0, 2**from_bits)``.
        from_bits: Width of the input words.
        to_bits: Width of the output words.
        pad: Zero-pad a trailing partial group (encoding). When False a
            trailing group of ``from_bits`` or more bits, or any non-zero
            padding, is an error (decoding).

    Returns:
        The regrouped words.

    Raises:
        Bech32Error: If an input word is out of range or the padding is invalid.
    """
    acc = 0
    bits = 0
    result: list[int] = []
    maxv = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise Bech32Error(f"Invalid {from_bits}-bit value: {value}")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & maxv)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits:
        raise Bech32Error("Excess padding in data part")
    elif (acc << (to_bits - bits)) & maxv:
        raise Bech32Error("Non-zero padding in data part")
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encode(prefix: str, payload: bytes) -> str:
    """Encode *payload* as a bech32 string with human-readable *prefix*.

    Args:
        prefix: Human-readable part, e.g. ``"npub"``. Must be non-empty
            printable ASCII; it is lower-cased.
        payload: Bytes to encode.

    Returns:
        The lower-case bech32 string.

    Raises:
        Bech32Error: If the prefix is empty or contains characters outside
            the printable ASCII range.
    """
    if not prefix:
        raise Bech32Error("Prefix must not be empty")
    if any(ord(c) < 33 or ord(c) > 126 for c in prefix):
        raise Bech32Error(f"Invalid prefix: {prefix!r}")
    hrp = prefix.lower()
    words = convert_bits(payload, 8, 5, pad=True)
    checksum = _create_checksum(hrp, words)
    return hrp + SEPARATOR + "".join(CHARSET[w] for w in [*words, *checksum])


def decode(text: str, limit: int = DEFAULT_DECODE_LIMIT) -> tuple[str, bytes]:
    """Decode a bech32 string into its prefix and payload.

    Args:
        text: The bech32 string. Upper-case input is accepted; mixed case
            is rejected.
        limit: Maximum accepted total length.

    Returns:
        ``(prefix, payload)`` with the prefix lower-cased.

    Raises:
        Bech32Error: If the string is too long, has mixed case, lacks a
            separator, contains an unknown character, or has invalid padding.
        ChecksumError: If the checksum does not verify.
    """
    if not isinstance(text, str):
        raise Bech32Error(f"Expected str, got {type(text).__name__}")
    if len(text) > limit:
        raise Bech32Error(f"String exceeds {limit} characters")
    if text.lower() != text and text.upper() != text:
        raise Bech32Error("Mixed-case string")
    text = text.lower()

    pos = text.rfind(SEPARATOR)
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(text):
        raise Bech32Error("Missing or misplaced separator")

    hrp = text[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise Bech32Error(f"Invalid prefix: {hrp!r}")

    words: list[int] = []
    for c in text[pos + 1 :]:
        word = _CHARSET_REV.get(c)
        if word is None:
            raise Bech32Error(f"Invalid character: {c!r}")
        words.append(word)

    if not _verify_checksum(hrp, words):
        raise ChecksumError("Invalid checksum")

    payload = bytes(convert_bits(words[:-CHECKSUM_LENGTH], 5, 8, pad=False))
    return hrp, payload

"""
NIP-19 TLV entities: ``nprofile``, ``nevent``, ``naddr`` and ``nrelay``.

Shareable identifiers that carry hints alongside the key or id. The bech32
payload is a sequence of type-length-value records:

```text
type 0  special    32-byte pubkey (nprofile), event id (nevent),
                   d-tag identifier (naddr) or relay URL (nrelay)
type 1  relay      relay URL, ASCII, repeatable
type 2  author     32-byte pubkey (nevent, naddr)
type 3  kind       32-bit unsigned big-endian (nevent, naddr)
```

Unknown types are skipped on decode. Because these strings routinely
exceed 90 characters they are decoded with
``bech32.TLV_DECODE_LIMIT``.

See Also:
    [decode_entity()][nostrid.nips.nip19.entities.decode_entity]: Single
        entry point that dispatches on the prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple

from nostrid.core.exceptions import Bech32Error, KeyFormatError
from nostrid.models.constants import KEY_BYTES_LENGTH, Bech32Prefix
from nostrid.models.keys import is_hex_key

from . import bech32
from .keys import decode_hex_entity


_TLV_SPECIAL = 0
_TLV_RELAY = 1
_TLV_AUTHOR = 2
_TLV_KIND = 3

_MAX_TLV_VALUE = 255


# ---------------------------------------------------------------------------
# Pointer types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ProfilePointer:
    """Decoded ``nprofile``: a public key plus relay hints."""

    pubkey: str
    relays: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EventPointer:
    """Decoded ``nevent``: an event id plus optional relay, author and kind hints."""

    event_id: str
    relays: tuple[str, ...] = ()
    author: str | None = None
    kind: int | None = None


@dataclass(frozen=True, slots=True)
class AddressPointer:
    """Decoded ``naddr``: the coordinate of a parameterized replaceable event."""

    identifier: str
    pubkey: str
    kind: int
    relays: tuple[str, ...] = ()


class DecodedEntity(NamedTuple):
    """Result of [decode_entity()][nostrid.nips.nip19.entities.decode_entity].

    ``value`` is a hex string for ``npub``/``nsec``/``note``, a relay URL
    for ``nrelay``, and a pointer dataclass for the other TLV entities.
    """

    prefix: Bech32Prefix
    value: Any


# ---------------------------------------------------------------------------
# TLV codec
# ---------------------------------------------------------------------------


def _tlv(kind: int, value: bytes) -> bytes:
    if len(value) > _MAX_TLV_VALUE:
        raise Bech32Error(f"TLV value too long: {len(value)} bytes")
    return bytes([kind, len(value)]) + value


def _parse_tlv(payload: bytes) -> dict[int, list[bytes]]:
    result: dict[int, list[bytes]] = {}
    i = 0
    while i < len(payload):
        if i + 2 > len(payload):
            raise Bech32Error("Truncated TLV record")
        kind, length = payload[i], payload[i + 1]
        value = payload[i + 2 : i + 2 + length]
        if len(value) != length:
            raise Bech32Error("Truncated TLV value")
        result.setdefault(kind, []).append(value)
        i += 2 + length
    return result


def _require_hex(value: str, name: str) -> bytes:
    if not is_hex_key(value):
        raise KeyFormatError(f"{name} must be 64 hex characters")
    return bytes.fromhex(value)


def _encode_text(value: str, name: str, encoding: str) -> bytes:
    if not isinstance(value, str):
        raise KeyFormatError(f"{name} must be a string")
    try:
        return value.encode(encoding)
    except UnicodeEncodeError as e:
        raise KeyFormatError(f"{name} must be {encoding.upper()} text") from e


def _kind_bytes(kind: int) -> bytes:
    if not isinstance(kind, int) or isinstance(kind, bool) or not 0 <= kind < 2**32:
        raise KeyFormatError(f"kind must be an unsigned 32-bit integer, got {kind!r}")
    return kind.to_bytes(4, "big")


def _relay_records(relays: tuple[str, ...] | list[str] | None) -> bytes:
    return b"".join(_tlv(_TLV_RELAY, _encode_text(r, "relay", "ascii")) for r in relays or ())


def _key_value(records: dict[int, list[bytes]], kind: int, name: str) -> str | None:
    values = records.get(kind)
    if not values:
        return None
    if len(values[0]) != KEY_BYTES_LENGTH:
        raise KeyFormatError(f"{name} must be {KEY_BYTES_LENGTH} bytes")
    return values[0].hex()


def _kind_value(records: dict[int, list[bytes]]) -> int | None:
    values = records.get(_TLV_KIND)
    if not values:
        return None
    if len(values[0]) != 4:  # noqa: PLR2004
        raise Bech32Error("kind must be 4 bytes")
    return int.from_bytes(values[0], "big")


def _relays(records: dict[int, list[bytes]]) -> tuple[str, ...]:
    try:
        return tuple(v.decode("ascii") for v in records.get(_TLV_RELAY, []))
    except UnicodeDecodeError as e:
        raise Bech32Error("Relay hint is not ASCII") from e


def _decode_tlv(expected: Bech32Prefix, text: str) -> dict[int, list[bytes]]:
    prefix, payload = bech32.decode(text, limit=bech32.TLV_DECODE_LIMIT)
    if prefix != expected:
        raise KeyFormatError(f"Expected {expected} prefix, got {prefix}")
    return _parse_tlv(payload)


# ---------------------------------------------------------------------------
# nprofile
# ---------------------------------------------------------------------------


def encode_nprofile(pubkey: str, relays: tuple[str, ...] | list[str] | None = None) -> str:
    payload = _tlv(_TLV_SPECIAL, _require_hex(pubkey, "pubkey")) + _relay_records(relays)
    return bech32.encode(Bech32Prefix.NPROFILE, payload)


def decode_nprofile(text: str) -> ProfilePointer:
    records = _decode_tlv(Bech32Prefix.NPROFILE, text)
    pubkey = _key_value(records, _TLV_SPECIAL, "pubkey")
    if pubkey is None:
        raise KeyFormatError("nprofile is missing its pubkey")
    return ProfilePointer(pubkey=pubkey, relays=_relays(records))


# ---------------------------------------------------------------------------
# nevent
# ---------------------------------------------------------------------------


def encode_nevent(
    event_id: str,
    relays: tuple[str, ...] | list[str] | None = None,
    author: str | None = None,
    kind: int | None = None,
) -> str:
    payload = _tlv(_TLV_SPECIAL, _require_hex(event_id, "event_id")) + _relay_records(relays)
    if author is not None:
        payload += _tlv(_TLV_AUTHOR, _require_hex(author, "author"))
    if kind is not None:
        payload += _tlv(_TLV_KIND, _kind_bytes(kind))
    return bech32.encode(Bech32Prefix.NEVENT, payload)


def decode_nevent(text: str) -> EventPointer:
    records = _decode_tlv(Bech32Prefix.NEVENT, text)
    event_id = _key_value(records, _TLV_SPECIAL, "event_id")
    if event_id is None:
        raise KeyFormatError("nevent is missing its event id")
    return EventPointer(
        event_id=event_id,
        relays=_relays(records),
        author=_key_value(records, _TLV_AUTHOR, "author"),
        kind=_kind_value(records),
    )


# ---------------------------------------------------------------------------
# naddr
# ---------------------------------------------------------------------------


def encode_naddr(
    identifier: str,
    pubkey: str,
    kind: int,
    relays: tuple[str, ...] | list[str] | None = None,
) -> str:
    payload = (
        _tlv(_TLV_SPECIAL, _encode_text(identifier, "identifier", "utf-8"))
        + _relay_records(relays)
        + _tlv(_TLV_AUTHOR, _require_hex(pubkey, "pubkey"))
        + _tlv(_TLV_KIND, _kind_bytes(kind))
    )
    return bech32.encode(Bech32Prefix.NADDR, payload)


def decode_naddr(text: str) -> AddressPointer:
    records = _decode_tlv(Bech32Prefix.NADDR, text)
    special = records.get(_TLV_SPECIAL)
    pubkey = _key_value(records, _TLV_AUTHOR, "pubkey")
    kind = _kind_value(records)
    if not special or pubkey is None or kind is None:
        raise KeyFormatError("naddr requires identifier, author and kind")
    try:
        identifier = special[0].decode("utf-8")
    except UnicodeDecodeError as e:
        raise Bech32Error("naddr identifier is not UTF-8") from e
    return AddressPointer(identifier=identifier, pubkey=pubkey, kind=kind, relays=_relays(records))


# ---------------------------------------------------------------------------
# nrelay (deprecated in NIP-19, still decoded)
# ---------------------------------------------------------------------------


def encode_nrelay(url: str) -> str:
    payload = _tlv(_TLV_SPECIAL, _encode_text(url, "relay", "ascii"))
    return bech32.encode(Bech32Prefix.NRELAY, payload)


def decode_nrelay(text: str) -> str:
    records = _decode_tlv(Bech32Prefix.NRELAY, text)
    special = records.get(_TLV_SPECIAL)
    if not special:
        raise KeyFormatError("nrelay is missing its URL")
    try:
        return special[0].decode("ascii")
    except UnicodeDecodeError as e:
        raise Bech32Error("nrelay URL is not ASCII") from e


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def decode_entity(text: str) -> DecodedEntity:
    """Decode any NIP-19 string, dispatching on its prefix.

    Raises:
        Bech32Error: If the string is not valid bech32.
        KeyFormatError: If the prefix is unknown or the payload is malformed.
    """
    text = text.strip()
    sep = text.rfind("1")
    try:
        prefix = Bech32Prefix(text[:sep].lower()) if sep > 0 else None
    except ValueError:
        prefix = None
    if prefix is None:
        raise KeyFormatError(f"Unknown NIP-19 prefix in {text[:12]!r}")

    if prefix in (Bech32Prefix.NPUB, Bech32Prefix.NSEC, Bech32Prefix.NOTE):
        return DecodedEntity(prefix, decode_hex_entity(prefix, text))
    decoders = {
        Bech32Prefix.NPROFILE: decode_nprofile,
        Bech32Prefix.NEVENT: decode_nevent,
        Bech32Prefix.NADDR: decode_naddr,
        Bech32Prefix.NRELAY: decode_nrelay,
    }
    return DecodedEntity(prefix, decoders[prefix](text))

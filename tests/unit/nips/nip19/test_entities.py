"""
Unit tests for nips.nip19.entities module.

Tests:
- nprofile / nevent / naddr / nrelay encode and decode
- Optional hints (relays, author, kind) and their absence
- decode_entity() prefix dispatch
- Malformed TLV payloads
- Encoder argument validation (kind range, relay and identifier text)
"""

import pytest

from nostrid.core.exceptions import Bech32Error, EncodingError, KeyFormatError
from nostrid.models.constants import Bech32Prefix
from nostrid.nips.nip19 import bech32
from nostrid.nips.nip19.entities import (
    AddressPointer,
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


PUBKEY = "3bf0c63fcb93463407af97a5e5ee64fa883d107ef9e558472c4eb9aaaefa459d"
NPROFILE = (
    "nprofile1qqsrhuxx8l9ex335q7he0f09aej04zpazpl0ne2cgukyawd24mayt8gpp4mhxue69uhhytnc9e3k7mgpz4mhxue69uhkg6nzv9ejuumpv34kytnrdaksjlyr9p"
)
EVENT_ID = "ab" * 32


# =============================================================================
# nprofile
# =============================================================================


class TestNprofile:
    """Profile pointers."""

    def test_decode_reference_vector(self):
        pointer = decode_nprofile(NPROFILE)
        assert pointer == ProfilePointer(
            pubkey=PUBKEY,
            relays=("wss://r.x.com", "wss://djbas.sadkb.com"),
        )

    def test_encode_reference_vector(self):
        assert encode_nprofile(PUBKEY, ["wss://r.x.com", "wss://djbas.sadkb.com"]) == NPROFILE

    def test_without_relays(self):
        assert decode_nprofile(encode_nprofile(PUBKEY)) == ProfilePointer(pubkey=PUBKEY)

    def test_bad_pubkey(self):
        with pytest.raises(KeyFormatError):
            encode_nprofile("abcd")

    def test_missing_pubkey_record(self):
        text = bech32.encode("nprofile", bytes([1, 3]) + b"wss")
        with pytest.raises(KeyFormatError, match="missing its pubkey"):
            decode_nprofile(text)


# =============================================================================
# nevent
# =============================================================================


class TestNevent:
    """Event pointers."""

    def test_all_hints(self):
        text = encode_nevent(EVENT_ID, relays=["wss://relay.example.com"], author=PUBKEY, kind=1)
        assert text.startswith("nevent1")
        assert decode_nevent(text) == EventPointer(
            event_id=EVENT_ID,
            relays=("wss://relay.example.com",),
            author=PUBKEY,
            kind=1,
        )

    def test_id_only(self):
        pointer = decode_nevent(encode_nevent(EVENT_ID))
        assert pointer.author is None
        assert pointer.kind is None
        assert pointer.relays == ()

    def test_wrong_prefix(self):
        with pytest.raises(KeyFormatError, match="Expected nevent prefix"):
            decode_nevent(encode_nprofile(PUBKEY))


# =============================================================================
# naddr
# =============================================================================


class TestNaddr:
    """Addressable event coordinates."""

    def test_round_trip(self):
        text = encode_naddr("my-article", PUBKEY, 30023, ["wss://relay.example.com"])
        assert decode_naddr(text) == AddressPointer(
            identifier="my-article",
            pubkey=PUBKEY,
            kind=30023,
            relays=("wss://relay.example.com",),
        )

    def test_empty_identifier(self):
        assert decode_naddr(encode_naddr("", PUBKEY, 30023)).identifier == ""

    def test_missing_kind(self):
        payload = bytes([0, 1]) + b"x" + bytes([2, 32]) + bytes.fromhex(PUBKEY)
        with pytest.raises(KeyFormatError, match="requires identifier, author and kind"):
            decode_naddr(bech32.encode("naddr", payload))


# =============================================================================
# nrelay
# =============================================================================


class TestNrelay:
    def test_round_trip(self):
        assert decode_nrelay(encode_nrelay("wss://relay.example.com")) == "wss://relay.example.com"


# =============================================================================
# Dispatch
# =============================================================================


class TestDecodeEntity:
    """Prefix dispatch."""

    def test_npub(self):
        entity = decode_entity("npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg")
        assert entity.prefix is Bech32Prefix.NPUB
        assert entity.value == "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"

    def test_nprofile(self):
        entity = decode_entity(NPROFILE)
        assert entity.prefix is Bech32Prefix.NPROFILE
        assert isinstance(entity.value, ProfilePointer)

    def test_nrelay(self):
        entity = decode_entity(encode_nrelay("wss://r.example.com"))
        assert entity == (Bech32Prefix.NRELAY, "wss://r.example.com")

    def test_unknown_prefix(self):
        with pytest.raises(KeyFormatError, match="Unknown NIP-19 prefix"):
            decode_entity(bech32.encode("lnbc", b"\x00"))

    def test_no_separator(self):
        with pytest.raises(KeyFormatError):
            decode_entity("garbage")


# =============================================================================
# Malformed TLV
# =============================================================================


class TestMalformedTlv:
    def test_truncated_value(self):
        text = bech32.encode("nprofile", bytes([0, 32]) + bytes(10))
        with pytest.raises(Bech32Error, match="Truncated TLV value"):
            decode_nprofile(text)

    def test_truncated_header(self):
        text = bech32.encode("nprofile", bytes([0, 32]) + bytes(32) + bytes([1]))
        with pytest.raises(Bech32Error, match="Truncated TLV record"):
            decode_nprofile(text)

    def test_wrong_key_length(self):
        text = bech32.encode("nprofile", bytes([0, 31]) + bytes(31))
        with pytest.raises(KeyFormatError, match="32 bytes"):
            decode_nprofile(text)

    def test_unknown_records_skipped(self):
        payload = bytes([0, 32]) + bytes.fromhex(PUBKEY) + bytes([9, 2]) + b"zz"
        pointer = decode_nprofile(bech32.encode("nprofile", payload))
        assert pointer.pubkey == PUBKEY

    def test_value_too_long_on_encode(self):
        with pytest.raises(Bech32Error, match="TLV value too long"):
            encode_nrelay("wss://" + "a" * 300)


# =============================================================================
# Encoder input validation
# =============================================================================


class TestEncoderInputs:
    """Malformed encoder arguments raise typed errors."""

    @pytest.mark.parametrize("kind", [-1, 2**32, True, "1"])
    def test_nevent_bad_kind(self, kind):
        with pytest.raises(KeyFormatError, match="kind must be an unsigned 32-bit integer"):
            encode_nevent(EVENT_ID, kind=kind)

    @pytest.mark.parametrize("kind", [-1, 2**32])
    def test_naddr_bad_kind(self, kind):
        with pytest.raises(KeyFormatError):
            encode_naddr("slug", PUBKEY, kind)

    def test_max_kind_accepted(self):
        assert decode_nevent(encode_nevent(EVENT_ID, kind=2**32 - 1)).kind == 2**32 - 1

    def test_non_ascii_relay(self):
        with pytest.raises(KeyFormatError, match="relay must be ASCII text"):
            encode_nprofile(PUBKEY, ["wss://rélay.example.com"])

    def test_non_string_relay(self):
        with pytest.raises(KeyFormatError, match="relay must be a string"):
            encode_nevent(EVENT_ID, relays=[42])

    def test_non_ascii_nrelay(self):
        with pytest.raises(KeyFormatError):
            encode_nrelay("wss://rélay.example.com")

    def test_unencodable_identifier(self):
        with pytest.raises(KeyFormatError, match="identifier must be UTF-8 text"):
            encode_naddr("\ud800", PUBKEY, 30023)

    def test_utf8_identifier_round_trip(self):
        assert decode_naddr(encode_naddr("café", PUBKEY, 30023)).identifier == "café"

    def test_typed_errors_are_encoding_errors(self):
        with pytest.raises(EncodingError):
            encode_nevent(EVENT_ID, kind=-1)

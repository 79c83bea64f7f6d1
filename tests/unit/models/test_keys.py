"""
Unit tests for models.keys module.

Tests:
- is_hex_key() predicate
- RawKey normalization and validation
- EncodedKey shape checks and prefix
- Keypair validation and repr redaction
"""

import pytest

from nostrid.models.keys import EncodedKey, Keypair, RawKey, is_hex_key


PRIVATE_HEX = "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret
NSEC = "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"  # pragma: allowlist secret
PUBLIC_HEX = "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"
NPUB = "npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg"


# =============================================================================
# is_hex_key
# =============================================================================


class TestIsHexKey:
    def test_lower_and_upper(self):
        assert is_hex_key(PUBLIC_HEX)
        assert is_hex_key(PUBLIC_HEX.upper())

    @pytest.mark.parametrize("value", ["", "abc", PUBLIC_HEX + "0", "g" * 64, None, 1])
    def test_invalid(self, value):
        assert not is_hex_key(value)


# =============================================================================
# RawKey
# =============================================================================


class TestRawKey:
    def test_lowercases(self):
        assert RawKey(PUBLIC_HEX.upper()).hex == PUBLIC_HEX

    def test_bytes_round_trip(self):
        key = RawKey(PUBLIC_HEX)
        assert RawKey.from_bytes(key.to_bytes()) == key

    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            RawKey("abcd")

    def test_rejects_non_str(self):
        with pytest.raises(TypeError):
            RawKey(123)  # type: ignore[arg-type]

    def test_frozen(self):
        key = RawKey(PUBLIC_HEX)
        with pytest.raises(AttributeError):
            key.hex = "00" * 32  # type: ignore[misc]


# =============================================================================
# EncodedKey
# =============================================================================


class TestEncodedKey:
    def test_prefix(self):
        assert EncodedKey(NPUB).prefix == "npub"

    def test_normalizes(self):
        assert EncodedKey("  " + NPUB.upper() + " ").text == NPUB

    def test_requires_separator(self):
        with pytest.raises(ValueError, match="separator"):
            EncodedKey("npubabc")

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            EncodedKey("")


# =============================================================================
# Keypair
# =============================================================================


class TestKeypair:
    def test_valid(self):
        pair = Keypair(private_key=PRIVATE_HEX, public_key=PUBLIC_HEX, nsec=NSEC, npub=NPUB)
        assert pair.npub == NPUB

    def test_repr_hides_secret(self):
        pair = Keypair(private_key=PRIVATE_HEX, public_key=PUBLIC_HEX, nsec=NSEC, npub=NPUB)
        text = repr(pair)
        assert PRIVATE_HEX not in text
        assert NSEC not in text
        assert PUBLIC_HEX in text

    def test_rejects_bad_nsec_prefix(self):
        with pytest.raises(ValueError, match="nsec1"):
            Keypair(private_key=PRIVATE_HEX, public_key=PUBLIC_HEX, nsec=NPUB, npub=NPUB)

    def test_rejects_bad_npub_prefix(self):
        with pytest.raises(ValueError, match="npub1"):
            Keypair(private_key=PRIVATE_HEX, public_key=PUBLIC_HEX, nsec=NSEC, npub=NSEC)

"""
Unit tests for nips.nip05.parsing module.

Tests:
- parse_identifier() grammar, normalization, wildcard
- format_identifier(), well_known_url()
- looks_like_nip05(), extract_nip05_from_profile()
- WellKnownDocument validity, key and relay lookup, match()
"""

import pytest

from nostrid.models.identifier import ParsedIdentifier
from nostrid.nips.nip01.profile import ProfileMetadata
from nostrid.nips.nip05.parsing import (
    WellKnownDocument,
    extract_nip05_from_profile,
    format_identifier,
    is_valid_domain,
    looks_like_nip05,
    parse_identifier,
    well_known_url,
)


PUBKEY = "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"


# =============================================================================
# parse_identifier
# =============================================================================


class TestParseIdentifier:
    """Identifier syntax."""

    def test_simple(self):
        assert parse_identifier("bob@example.com") == ParsedIdentifier("bob", "example.com")

    def test_normalized(self):
        assert parse_identifier("  Bob@Example.COM ") == ParsedIdentifier("bob", "example.com")

    def test_dots_dashes_underscores(self):
        assert parse_identifier("bob.smith_jr-2@sub.example.co") == ParsedIdentifier(
            "bob.smith_jr-2", "sub.example.co"
        )

    def test_bare_domain_is_wildcard(self):
        assert parse_identifier("example.com") == ParsedIdentifier("_", "example.com")

    def test_explicit_wildcard(self):
        assert parse_identifier("_@example.com") == ParsedIdentifier("_", "example.com")

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "@example.com",
            "bob@",
            "bob@example",
            "bob@@example.com",
            "bob@a@example.com",
            "bob smith@example.com",
            "bob+tag@example.com",
            "bob@-example.com",
            "bob@example.c",
            "localhost",
        ],
    )
    def test_invalid(self, text):
        assert parse_identifier(text) is None

    def test_non_string(self):
        assert parse_identifier(None) is None  # type: ignore[arg-type]

    def test_domain_length_limit(self):
        long_domain = ("a" * 63 + ".") * 4 + "com"
        assert not is_valid_domain(long_domain)


# =============================================================================
# Formatting
# =============================================================================


class TestFormatting:
    def test_format_identifier(self):
        assert format_identifier("bob", "example.com") == "bob@example.com"

    def test_format_wildcard(self):
        assert format_identifier("_", "example.com") == "example.com"

    def test_well_known_url(self):
        assert well_known_url("bob", "example.com") == (
            "https://example.com/.well-known/nostr.json?name=bob"
        )

    def test_well_known_url_quotes_name(self):
        assert well_known_url("a&b", "example.com").endswith("?name=a%26b")


# =============================================================================
# Heuristics
# =============================================================================


class TestLooksLikeNip05:
    @pytest.mark.parametrize("value", ["bob@example.com", "example.com", " bob@x.io "])
    def test_true(self, value):
        assert looks_like_nip05(value)

    @pytest.mark.parametrize("value", ["", "bob", "bob@localhost", "npub1abc.def", None, 5])
    def test_false(self, value):
        assert not looks_like_nip05(value)


class TestExtractNip05:
    def test_from_dict(self):
        assert extract_nip05_from_profile({"nip05": " bob@example.com "}) == "bob@example.com"

    def test_from_profile_model(self):
        assert extract_nip05_from_profile(ProfileMetadata(nip05="bob@example.com")) == (
            "bob@example.com"
        )

    def test_missing_or_junk(self):
        assert extract_nip05_from_profile({}) is None
        assert extract_nip05_from_profile({"nip05": "nonsense"}) is None
        assert extract_nip05_from_profile(ProfileMetadata()) is None


# =============================================================================
# WellKnownDocument
# =============================================================================


class TestWellKnownDocument:
    """Strict reading of nostr.json."""

    def test_valid(self):
        assert WellKnownDocument({"names": {}}).valid

    @pytest.mark.parametrize("data", [None, [], {}, {"names": []}, {"names": "bob"}])
    def test_invalid(self, data):
        assert not WellKnownDocument(data).valid

    def test_pubkey_lowercased(self):
        doc = WellKnownDocument({"names": {"bob": PUBKEY.upper()}})
        assert doc.pubkey_for("bob") == PUBKEY

    def test_bad_pubkey_ignored(self):
        doc = WellKnownDocument({"names": {"bob": "npub1xyz", "eve": 42}})
        assert doc.pubkey_for("bob") is None
        assert doc.pubkey_for("eve") is None
        assert doc.pubkey_for("nobody") is None

    def test_relays(self):
        doc = WellKnownDocument({"names": {}, "relays": {PUBKEY: ["wss://r1", "wss://r2"]}})
        assert doc.relays_for(PUBKEY) == ("wss://r1", "wss://r2")

    def test_relays_keyed_upper_case(self):
        doc = WellKnownDocument({"names": {}, "relays": {PUBKEY.upper(): ["wss://r1"]}})
        assert doc.relays_for(PUBKEY) == ("wss://r1",)

    def test_malformed_relays_ignored(self):
        doc = WellKnownDocument({"names": {}, "relays": {PUBKEY: "wss://r1"}})
        assert doc.relays_for(PUBKEY) is None

    def test_match(self):
        doc = WellKnownDocument({"names": {"bob": PUBKEY}, "relays": {PUBKEY: ["wss://r"]}})
        result = doc.match(ParsedIdentifier("bob", "example.com"), now=1700000000)

        assert result is not None
        assert result.identifier == "bob@example.com"
        assert result.pubkey == PUBKEY
        assert result.relays == ("wss://r",)
        assert result.verified is True
        assert result.verified_at == 1700000000

    def test_match_wildcard_identifier(self):
        doc = WellKnownDocument({"names": {"_": PUBKEY}})
        result = doc.match(ParsedIdentifier("_", "example.com"))
        assert result is not None
        assert result.identifier == "example.com"

    def test_match_unknown_name(self):
        doc = WellKnownDocument({"names": {"alice": PUBKEY}})
        assert doc.match(ParsedIdentifier("bob", "example.com")) is None

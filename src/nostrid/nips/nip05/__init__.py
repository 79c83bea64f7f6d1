"""
[NIP-05](https://github.com/nostr-protocol/nips/blob/master/05.md)
DNS-based identifier verification.

Attributes:
    parse_identifier: Pure ``local@domain`` parsing (no network).
    Nip05Verifier: Fetches well-known documents, with an injected TTL cache.
    Nip05Config: Timeout, cache TTL and size limit for the verifier.
"""

from .parsing import (
    WellKnownDocument,
    extract_nip05_from_profile,
    format_identifier,
    is_valid_domain,
    looks_like_nip05,
    parse_identifier,
    well_known_url,
)
from .verifier import Nip05Config, Nip05Verifier


__all__ = [
    "Nip05Config",
    "Nip05Verifier",
    "WellKnownDocument",
    "extract_nip05_from_profile",
    "format_identifier",
    "is_valid_domain",
    "looks_like_nip05",
    "parse_identifier",
    "well_known_url",
]

"""
[NIP-98](https://github.com/nostr-protocol/nips/blob/master/98.md) signed
HTTP authorization (kind 27235).
"""

from .http_auth import (
    build_auth_event,
    create_auth_header,
    encode_auth_header,
    hash_payload,
    parse_auth_header,
    verify_auth_event,
    verify_auth_header,
)


__all__ = [
    "build_auth_event",
    "create_auth_header",
    "encode_auth_header",
    "hash_payload",
    "parse_auth_header",
    "verify_auth_event",
    "verify_auth_header",
]

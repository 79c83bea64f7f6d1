"""
[NIP-01](https://github.com/nostr-protocol/nips/blob/master/01.md) event
plumbing shared by the authentication protocols.

Attributes:
    EventSigner: Signing capability, implemented by ``LocalKeySigner`` and
        ``DelegatedSigner``; see ``select_signer()``.
    verify_event: Id and signature check returning ``EventVerification``.
    ProfileMetadata: Lenient parser for kind-0 profile content.
"""

from .events import (
    EventVerification,
    EventVerifier,
    build_event,
    event_created_at,
    event_kind,
    event_pubkey,
    event_to_dict,
    get_tag_value,
    get_tag_values,
    has_tag,
    is_in_time_window,
    parse_event_json,
    verify_event,
)
from .profile import ProfileMetadata
from .signer import DelegatedSigner, EventSigner, LocalKeySigner, select_signer


__all__ = [
    "DelegatedSigner",
    "EventSigner",
    "EventVerification",
    "EventVerifier",
    "LocalKeySigner",
    "ProfileMetadata",
    "build_event",
    "event_created_at",
    "event_kind",
    "event_pubkey",
    "event_to_dict",
    "get_tag_value",
    "get_tag_values",
    "has_tag",
    "is_in_time_window",
    "parse_event_json",
    "select_signer",
    "verify_event",
]

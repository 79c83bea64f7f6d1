"""
Challenge-response authentication (kind 22242, after
[NIP-42](https://github.com/nostr-protocol/nips/blob/master/42.md)).
"""

from .challenge import (
    DEFAULT_AUTH_RELAY,
    AuthChallenge,
    build_challenge_response,
    issue_challenge,
    sign_challenge_response,
    verify_challenge_response,
)


__all__ = [
    "DEFAULT_AUTH_RELAY",
    "AuthChallenge",
    "build_challenge_response",
    "issue_challenge",
    "sign_challenge_response",
    "verify_challenge_response",
]

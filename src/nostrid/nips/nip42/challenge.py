"""
Challenge-response authentication with kind 22242 events.

Follows the ``AUTH`` message shape of
[NIP-42](https://github.com/nostr-protocol/nips/blob/master/42.md), reused
for HTTP login: the server issues a random challenge, the client signs an
event carrying it, and the server verifies the event.

Challenge lifecycle::

    Issued --> Valid
           \\-> Expired     (now > expires_at)
           \\-> Mismatched  (wrong kind, signature, challenge, relay or time)

Expiry is computed from the challenge itself. Remembering which challenges
were issued and consuming each one once is the caller's job; the auth
server does it with
[ChallengeStore][nostrid.services.auth_server.challenges.ChallengeStore].
"""

from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from nostrid.models.constants import CHALLENGE_BYTES, CHALLENGE_TTL, EventKind
from nostrid.nips.base import AuthFailure, AuthResult
from nostrid.nips.nip01.events import (
    build_event,
    event_created_at,
    event_kind,
    event_pubkey,
    get_tag_value,
    is_in_time_window,
    verify_event,
)
from nostrid.utils.url import normalize_relay_url


if TYPE_CHECKING:
    from nostr_sdk import Event, EventBuilder

    from nostrid.nips.nip01.events import EventVerifier
    from nostrid.nips.nip01.signer import EventSigner


# Relay tag used when a challenge was issued without one.
DEFAULT_AUTH_RELAY = "wss://auth.nostrid.invalid"


class AuthChallenge(BaseModel):
    """A server-issued challenge.

    Serialised with ``by_alias=True`` it produces the wire shape
    ``{"challenge", "timestamp", "expiresAt", "relay"}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    challenge: str = Field(pattern=r"^[0-9a-f]{64}$")
    timestamp: int = Field(ge=0)
    expires_at: int = Field(ge=0, alias="expiresAt")
    relay: str | None = None

    def is_expired(self, now: int | None = None) -> bool:
        now = int(time.time()) if now is None else now
        return now > self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def issue_challenge(relay: str | None = None, now: int | None = None) -> AuthChallenge:
    """Create a fresh challenge valid for ``CHALLENGE_TTL`` seconds.

    Args:
        relay: Relay (or service) URL the response must name, if any.
        now: Issue time in Unix seconds. Defaults to the current time.
    """
    timestamp = int(time.time()) if now is None else now
    return AuthChallenge(
        challenge=secrets.token_hex(CHALLENGE_BYTES),
        timestamp=timestamp,
        expires_at=timestamp + CHALLENGE_TTL,
        relay=relay,
    )


def build_challenge_response(challenge: str, relay: str) -> EventBuilder:
    """Unsigned kind 22242 event carrying the ``relay`` and ``challenge`` tags."""
    return build_event(
        EventKind.CLIENT_AUTH,
        [["relay", relay], ["challenge", challenge]],
    )


async def sign_challenge_response(challenge: AuthChallenge, signer: EventSigner) -> Event:
    """Answer *challenge* with an event signed by *signer*.

    Raises:
        SigningError: If the signer fails.
    """
    builder = build_challenge_response(challenge.challenge, challenge.relay or DEFAULT_AUTH_RELAY)
    return await signer.sign(builder)


def _same_relay(expected: str, actual: str | None) -> bool:
    if actual is None:
        return False
    try:
        return normalize_relay_url(expected) == normalize_relay_url(actual)
    except ValueError:
        # Not a ws(s) URL (an http service origin, say): compare verbatim.
        return expected == actual


async def verify_challenge_response(
    event: Event,
    challenge: AuthChallenge,
    now: int | None = None,
    verify: EventVerifier | None = None,
) -> AuthResult:
    """Check a signed response against the challenge it answers.

    Checks run in order and the first failure wins: challenge expiry, event
    kind, signature, challenge tag, relay tag (only if the challenge names a
    relay), and finally the event's own timestamp, which must fall within
    ``CHALLENGE_TTL`` seconds before *now* so a pre-signed event cannot be
    replayed against a later challenge.

    Args:
        event: The signed response.
        challenge: The challenge that was issued.
        now: Verification time in Unix seconds. Defaults to the current time.
        verify: Signature check. Defaults to
            [verify_event()][nostrid.nips.nip01.events.verify_event].

    Returns:
        ``AuthResult(valid=True, pubkey=...)`` only if every check passes.
    """
    now = int(time.time()) if now is None else now
    verify = verify or verify_event

    if challenge.is_expired(now):
        return AuthResult.fail(AuthFailure.CHALLENGE_EXPIRED)

    if event_kind(event) != EventKind.CLIENT_AUTH:
        return AuthResult.fail(AuthFailure.INVALID_KIND)

    verification = await verify(event)
    if not verification.valid:
        return AuthResult.fail(", ".join(verification.errors) or AuthFailure.INVALID_SIGNATURE)

    pubkey = event_pubkey(event)

    if get_tag_value(event, "challenge") != challenge.challenge:
        return AuthResult.fail(AuthFailure.CHALLENGE_MISMATCH, pubkey=pubkey)

    if challenge.relay and not _same_relay(challenge.relay, get_tag_value(event, "relay")):
        return AuthResult.fail(AuthFailure.RELAY_MISMATCH, pubkey=pubkey)

    if not is_in_time_window(event_created_at(event), CHALLENGE_TTL, now):
        return AuthResult.fail(AuthFailure.TIMESTAMP_OUT_OF_RANGE, pubkey=pubkey)

    return AuthResult.ok(pubkey)

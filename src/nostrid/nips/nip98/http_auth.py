"""
Signed HTTP request authorization with kind 27235 events.

Implements [NIP-98](https://github.com/nostr-protocol/nips/blob/master/98.md):
the client signs an event binding the request URL, the HTTP method and
optionally the SHA-256 of the body, and sends it base64-encoded in the
``Authorization`` header::

    Authorization: Nostr <base64(JSON(signed event))>

Each header authenticates one request. The event must be dated within
``HTTP_AUTH_WINDOW`` seconds of the server clock in either direction; there
is no server-side state.

URLs are compared after [normalize_http_url][nostrid.utils.url.normalize_http_url]
on both sides, so the client and the server must agree on the public URL
(scheme, host, port, path and query) of the endpoint.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import time
from typing import TYPE_CHECKING

from nostrid.models.constants import HTTP_AUTH_SCHEME, HTTP_AUTH_WINDOW, EventKind
from nostrid.nips.base import AuthFailure, AuthResult
from nostrid.nips.nip01.events import (
    build_event,
    event_created_at,
    event_kind,
    event_pubkey,
    get_tag_value,
    is_in_time_window,
    parse_event_json,
    verify_event,
)
from nostrid.utils.url import normalize_http_url


if TYPE_CHECKING:
    from nostr_sdk import Event, EventBuilder

    from nostrid.nips.nip01.events import EventVerifier
    from nostrid.nips.nip01.signer import EventSigner


_HEADER_PREFIX = f"{HTTP_AUTH_SCHEME} "


def hash_payload(body: bytes | str) -> str:
    """Lower-case hex SHA-256 of a request body (``str`` is UTF-8 encoded)."""
    data = body.encode() if isinstance(body, str) else body
    return hashlib.sha256(data).hexdigest()


# ---------------------------------------------------------------------------
# Client side
# ---------------------------------------------------------------------------


def build_auth_event(url: str, method: str, payload_hash: str | None = None) -> EventBuilder:
    """Unsigned kind 27235 event with ``u``, ``method`` and optional ``payload`` tags."""
    tags = [["u", url], ["method", method.upper()]]
    if payload_hash:
        tags.append(["payload", payload_hash])
    return build_event(EventKind.HTTP_AUTH, tags)


def encode_auth_header(event: Event) -> str:
    """``Authorization`` header value for a signed event."""
    encoded = base64.b64encode(event.as_json().encode()).decode("ascii")
    return f"{_HEADER_PREFIX}{encoded}"


async def create_auth_header(
    url: str,
    method: str,
    signer: EventSigner,
    payload: bytes | str | None = None,
) -> str:
    """Sign a request and return the ``Authorization`` header value.

    Args:
        url: Absolute URL of the request, as the server will see it.
        method: HTTP method.
        signer: Signing capability.
        payload: Request body. When given, its SHA-256 is bound into the
            event with a ``payload`` tag.

    Raises:
        SigningError: If the signer fails.
    """
    payload_hash = hash_payload(payload) if payload is not None else None
    event = await signer.sign(build_auth_event(url, method, payload_hash))
    return encode_auth_header(event)


# ---------------------------------------------------------------------------
# Server side
# ---------------------------------------------------------------------------


def parse_auth_header(header: str | None) -> Event | None:
    """Decode the event from an ``Authorization`` header value.

    Returns:
        The (unverified) event, or None if the scheme is not ``Nostr``, the
        payload is not base64, or the decoded text is not an event.
    """
    if not isinstance(header, str) or not header.startswith(_HEADER_PREFIX):
        return None
    try:
        decoded = base64.b64decode(header[len(_HEADER_PREFIX) :].strip(), validate=True)
        text = decoded.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    return parse_event_json(text)


async def verify_auth_event(  # noqa: PLR0911
    event: Event,
    url: str,
    method: str,
    payload_hash: str | None = None,
    now: int | None = None,
    verify: EventVerifier | None = None,
) -> AuthResult:
    """Check a signed request event against the request the server received.

    Checks run in order and the first failure wins: kind, timestamp window
    (``HTTP_AUTH_WINDOW`` seconds either side of *now*), signature, ``u`` tag
    against *url*, ``method`` tag against *method* (case-insensitive), and the
    ``payload`` tag when *payload_hash* is given.

    Args:
        event: Event decoded from the header.
        url: Absolute URL of the received request.
        method: HTTP method of the received request.
        payload_hash: SHA-256 hex of the received body, to require a match.
        now: Verification time in Unix seconds. Defaults to the current time.
        verify: Signature check. Defaults to
            [verify_event()][nostrid.nips.nip01.events.verify_event].

    Returns:
        ``AuthResult(valid=True, pubkey=...)`` if the request is authentic.
        The key authenticates this request only.
    """
    now = int(time.time()) if now is None else now
    verify = verify or verify_event

    if event_kind(event) != EventKind.HTTP_AUTH:
        return AuthResult.fail(AuthFailure.INVALID_KIND)

    if not is_in_time_window(event_created_at(event), HTTP_AUTH_WINDOW, now, HTTP_AUTH_WINDOW):
        return AuthResult.fail(AuthFailure.TIMESTAMP_OUT_OF_RANGE)

    verification = await verify(event)
    if not verification.valid:
        return AuthResult.fail(", ".join(verification.errors) or AuthFailure.INVALID_SIGNATURE)

    pubkey = event_pubkey(event)

    event_url = get_tag_value(event, "u")
    if not event_url:
        return AuthResult.fail(AuthFailure.MISSING_URL, pubkey=pubkey)
    try:
        if normalize_http_url(event_url) != normalize_http_url(url):
            return AuthResult.fail(AuthFailure.URL_MISMATCH, pubkey=pubkey)
    except ValueError:
        return AuthResult.fail(AuthFailure.INVALID_URL, pubkey=pubkey)

    event_method = get_tag_value(event, "method")
    if not event_method:
        return AuthResult.fail(AuthFailure.MISSING_METHOD, pubkey=pubkey)
    if event_method.upper() != method.upper():
        return AuthResult.fail(AuthFailure.METHOD_MISMATCH, pubkey=pubkey)

    if payload_hash is not None:
        event_payload = get_tag_value(event, "payload")
        if event_payload is None or event_payload.lower() != payload_hash.lower():
            return AuthResult.fail(AuthFailure.PAYLOAD_MISMATCH, pubkey=pubkey)

    return AuthResult.ok(pubkey)


async def verify_auth_header(
    header: str | None,
    url: str,
    method: str,
    payload_hash: str | None = None,
    now: int | None = None,
    verify: EventVerifier | None = None,
) -> AuthResult:
    """[parse_auth_header()][nostrid.nips.nip98.http_auth.parse_auth_header]
    followed by [verify_auth_event()][nostrid.nips.nip98.http_auth.verify_auth_event]."""
    event = parse_auth_header(header)
    if event is None:
        return AuthResult.fail(AuthFailure.INVALID_HEADER)
    return await verify_auth_event(event, url, method, payload_hash, now, verify)

"""
Helpers for reading and verifying signed events.

The authentication protocols treat a ``nostr_sdk.Event`` as opaque apart
from its author, creation time, kind and a handful of tags. This module is
the only place that reaches into the SDK object for those.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from nostr_sdk import Event, EventBuilder, Kind, NostrSdkError, Tag

from nostrid.models.constants import FUTURE_SKEW


if TYPE_CHECKING:
    from collections.abc import Sequence


logger = logging.getLogger("nostrid.nips.nip01")


@dataclass(frozen=True, slots=True)
class EventVerification:
    """Outcome of [verify_event()][nostrid.nips.nip01.events.verify_event]."""

    valid: bool
    errors: tuple[str, ...] = ()


# Async event check, verify_event() unless a caller injects another.
EventVerifier = Callable[[Event], Awaitable[EventVerification]]


async def verify_event(event: Event) -> EventVerification:
    """Check an event's id and Schnorr signature with ``nostr_sdk``."""
    try:
        ok = event.verify()
    except NostrSdkError as e:
        logger.debug("event_verify_failed error=%s", e)
        return EventVerification(valid=False, errors=(f"Verification failed: {e}",))
    if not ok:
        return EventVerification(valid=False, errors=("Invalid signature",))
    return EventVerification(valid=True)


# ---------------------------------------------------------------------------
# Construction and parsing
# ---------------------------------------------------------------------------


def build_event(kind: int, tags: Sequence[Sequence[str]], content: str = "") -> EventBuilder:
    """Unsigned event builder with the given kind, tags and content."""
    return EventBuilder(Kind(int(kind)), content).tags([Tag.parse(list(t)) for t in tags])


def parse_event_json(value: str | dict[str, Any]) -> Event | None:
    """Parse a signed event from JSON text or a decoded dict.

    Returns None for anything ``nostr_sdk`` rejects. The signature is not
    checked here.
    """
    try:
        text = value if isinstance(value, str) else json.dumps(value)
        return Event.from_json(text)
    except (NostrSdkError, TypeError, ValueError) as e:
        logger.debug("event_parse_failed error=%s", e)
        return None


def event_to_dict(event: Event) -> dict[str, Any]:
    return json.loads(event.as_json())


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------


def event_pubkey(event: Event) -> str:
    return event.author().to_hex()


def event_created_at(event: Event) -> int:
    return event.created_at().as_secs()


def event_kind(event: Event) -> int:
    return event.kind().as_u16()


def get_tag_values(event: Event, name: str) -> list[str]:
    """Values (second element) of every tag named *name*, in order."""
    values = []
    for tag in event.tags().to_vec():
        parts = tag.as_vec()
        if len(parts) >= 2 and parts[0] == name:  # noqa: PLR2004
            values.append(parts[1])
    return values


def get_tag_value(event: Event, name: str) -> str | None:
    """Value of the first tag named *name*, or None."""
    values = get_tag_values(event, name)
    return values[0] if values else None


def has_tag(event: Event, name: str) -> bool:
    return get_tag_value(event, name) is not None


def is_in_time_window(
    created_at: int,
    window: int,
    now: int | None = None,
    future_skew: int = FUTURE_SKEW,
) -> bool:
    """True if ``now - window <= created_at <= now + future_skew``."""
    now = int(time.time()) if now is None else now
    return now - window <= created_at <= now + future_skew

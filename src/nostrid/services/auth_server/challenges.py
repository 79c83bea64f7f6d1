"""Server-side record of issued challenges.

[verify_challenge_response()][nostrid.nips.nip42.challenge.verify_challenge_response]
is stateless; it is this store that makes each challenge usable once. A
login looks the challenge up with ``consume()``, which removes it whether
or not the response then verifies, so a rejected response cannot be
retried against the same challenge.
"""

from __future__ import annotations

from nostrid.core.cache import TTLCache
from nostrid.core.metrics import CACHE_SIZE
from nostrid.models.constants import CHALLENGE_TTL
from nostrid.nips.nip42.challenge import AuthChallenge, issue_challenge


class ChallengeStore:
    """Issued, not yet consumed challenges, expiring after ``ttl`` seconds."""

    CACHE_NAME = "challenge"

    def __init__(self, cache: TTLCache[AuthChallenge] | None = None, ttl: int = CHALLENGE_TTL) -> None:
        self._ttl = ttl
        self._cache: TTLCache[AuthChallenge] = cache if cache is not None else TTLCache(ttl=ttl)

    def issue(self, relay: str | None = None, now: int | None = None) -> AuthChallenge:
        challenge = issue_challenge(relay, now)
        if self._ttl != (challenge.expires_at - challenge.timestamp):
            challenge = challenge.model_copy(update={"expires_at": challenge.timestamp + self._ttl})
        self._cache.set(challenge.challenge, challenge)
        CACHE_SIZE.labels(cache=self.CACHE_NAME).set(len(self._cache))
        return challenge

    def consume(self, challenge: str | None) -> AuthChallenge | None:
        """Remove and return the challenge, or None if unknown or expired."""
        if not challenge:
            return None
        entry = self._cache.pop(challenge)
        CACHE_SIZE.labels(cache=self.CACHE_NAME).set(len(self._cache))
        return entry.value if entry is not None else None

    def __len__(self) -> int:
        return len(self._cache)

"""
Thread-safe time-to-live cache.

[TTLCache][nostrid.core.cache.TTLCache] is the only mutable structure shared
between concurrent verification calls. It is an explicitly owned object:
[Nip05Verifier][nostrid.nips.nip05.verifier.Nip05Verifier],
[DidResolver][nostrid.did.resolver.DidResolver] and the auth server's
[ChallengeStore][nostrid.services.auth_server.challenges.ChallengeStore]
each receive an instance at construction, so tests build isolated caches
with a fake clock instead of patching module state.

Entries are [CacheEntry][nostrid.core.cache.CacheEntry] records, which lets
a stored ``None`` (a cached negative lookup) be told apart from a miss.
Every single-entry operation holds the lock, so insert, evict and pop are
atomic; concurrent writers to the same key are last-write-wins.

Examples:
    ```python
    cache: TTLCache[str] = TTLCache(ttl=300)
    cache.set("bob@example.com", None)
    entry = cache.get("bob@example.com")
    entry is not None and entry.value is None  # True: cached negative lookup
    ```
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable


T = TypeVar("T")

DEFAULT_CACHE_TTL: float = 300.0


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached value and the clock reading at which it was stored."""

    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """Lock-guarded mapping whose entries expire after ``ttl`` seconds.

    Expired entries are dropped lazily, on read. ``max_entries`` bounds the
    map; when full, the oldest entry is evicted before an insert.

    Args:
        ttl: Lifetime of every entry in seconds.
        max_entries: Upper bound on the number of stored entries.
        clock: Callable returning the current time in seconds. Defaults to
            ``time.time``; tests inject a fake.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        *,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.stored_at >= self._ttl

    def get(self, key: str) -> CacheEntry[T] | None:
        """Return the live entry for *key*, or None on a miss or expiry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, value: T) -> None:
        """Store *value* under *key*, replacing any previous entry."""
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k].stored_at)
                del self._entries[oldest]
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def pop(self, key: str) -> CacheEntry[T] | None:
        """Remove and return the live entry for *key* (consume-once reads)."""
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None or self._expired(entry, self._clock()):
                return None
            return entry

    def evict(self, key: str) -> bool:
        """Drop *key*. Returns True if an entry was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Snapshot of the cache: size, TTL and per-entry age in seconds."""
        with self._lock:
            now = self._clock()
            return {
                "size": len(self._entries),
                "ttl": self._ttl,
                "entries": [
                    {"key": key, "age": now - entry.stored_at, "has_value": entry.value is not None}
                    for key, entry in self._entries.items()
                ],
            }

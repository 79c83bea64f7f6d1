"""
``did:nostr`` resolution.

[DidResolver][nostrid.did.resolver.DidResolver] turns a DID string into a
[DidResolutionResult][nostrid.did.models.DidResolutionResult]. It never
raises on bad input or collaborator failures; errors come back in
``did_resolution_metadata.error``:

``invalidDid``
    The string is not a well-formed ``did:nostr`` DID.
``notFound``
    The DID is well-formed but no document could be generated for it.
``internalError``
    An external collaborator (the profile fetcher) failed. Transient;
    the caller may retry.

Plain resolutions (no relays, no profile fetch, no NIP-05 check) are cached
per DID in an injected [TTLCache][nostrid.core.cache.TTLCache]; anything
that depends on per-call options is regenerated every time.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from nostrid.core.cache import TTLCache
from nostrid.core.exceptions import DidError
from nostrid.core.metrics import CACHE_SIZE

from .document import did_to_pubkey, generate_document
from .models import (
    DID_CONTENT_TYPE,
    DidDocument,
    DidDocumentMetadata,
    DidResolutionMetadata,
    DidResolutionResult,
)


if TYPE_CHECKING:
    from collections.abc import Sequence

    from nostrid.models.identifier import Nip05Identifier
    from nostrid.nips.nip01.profile import ProfileMetadata
    from nostrid.nips.nip05.verifier import Nip05Verifier


logger = logging.getLogger("nostrid.did")

DID_CACHE_TTL = 300.0


@runtime_checkable
class ProfileFetcher(Protocol):
    """Source of kind-0 profiles, typically backed by relay queries."""

    async def fetch_profile(
        self, pubkey: str, relays: Sequence[str] | None = None
    ) -> ProfileMetadata | None:
        """Latest profile for *pubkey*, or None if none is known.

        Raises:
            ConnectivityError: If the backing source is unreachable. Any
                exception is reported as an ``internalError`` resolution.
        """
        ...


def _isoformat(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=UTC).isoformat().replace("+00:00", "Z")


class DidResolver:
    """Resolve ``did:nostr`` DIDs to documents.

    Args:
        verifier: NIP-05 verifier used when ``verify_nip05`` is requested.
        profile_fetcher: Profile source used when ``fetch_profile`` is
            requested.
        cache: Cache of plain resolutions. A private one with a 300 s TTL is
            created when omitted.
    """

    CACHE_NAME = "did"

    def __init__(
        self,
        verifier: Nip05Verifier | None = None,
        profile_fetcher: ProfileFetcher | None = None,
        cache: TTLCache[DidDocument] | None = None,
    ) -> None:
        self._verifier = verifier
        self._profile_fetcher = profile_fetcher
        self._cache: TTLCache[DidDocument] = cache if cache is not None else TTLCache(ttl=DID_CACHE_TTL)

    @property
    def cache(self) -> TTLCache[DidDocument]:
        return self._cache

    def _success(self, document: DidDocument, created: float | None = None) -> DidResolutionResult:
        metadata = DidDocumentMetadata(created=_isoformat(created)) if created is not None else DidDocumentMetadata()
        return DidResolutionResult(
            did_document=document,
            did_document_metadata=metadata,
            did_resolution_metadata=DidResolutionMetadata(content_type=DID_CONTENT_TYPE),
        )

    async def _fetch_profile(self, pubkey: str, relays: Sequence[str] | None) -> ProfileMetadata | None:
        if self._profile_fetcher is None:
            return None
        return await self._profile_fetcher.fetch_profile(pubkey, relays)

    async def _verify_nip05(self, pubkey: str, profile: ProfileMetadata | None) -> Nip05Identifier | None:
        if self._verifier is None or profile is None or not profile.nip05:
            return None
        return await self._verifier.verify(profile.nip05, expected_pubkey=pubkey)

    async def resolve(
        self,
        did: str,
        *,
        verify_nip05: bool = False,
        relays: Sequence[str] | None = None,
        fetch_profile: bool = False,
    ) -> DidResolutionResult:
        """Resolve *did* to its document.

        Args:
            did: The DID to resolve.
            verify_nip05: Verify the profile's ``nip05`` claim and include it
                in the document when it checks out. Implies a profile fetch.
            relays: Relay URLs to list as the relay service (and to query
                for the profile).
            fetch_profile: Fetch the kind-0 profile to add lightning and
                website services.
        """
        try:
            pubkey = did_to_pubkey(did)
        except DidError as e:
            return DidResolutionResult.failure("invalidDid", str(e))

        plain = not verify_nip05 and not fetch_profile and not relays
        if plain:
            entry = self._cache.get(did)
            if entry is not None:
                return self._success(entry.value, entry.stored_at)

        profile: ProfileMetadata | None = None
        nip05: Nip05Identifier | None = None
        if fetch_profile or verify_nip05:
            try:
                profile = await self._fetch_profile(pubkey, relays)
            except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
                raise
            except Exception as e:  # profile source error boundary
                logger.warning("did_profile_fetch_failed did=%s error=%s", did, e)
                return DidResolutionResult.failure("internalError", f"Profile fetch failed: {e}")
            if verify_nip05:
                nip05 = await self._verify_nip05(pubkey, profile)

        try:
            document = generate_document(pubkey, profile=profile, nip05=nip05, relays=list(relays or []))
        except DidError as e:
            return DidResolutionResult.failure("notFound", str(e))

        if plain:
            self._cache.set(did, document)
            CACHE_SIZE.labels(cache=self.CACHE_NAME).set(len(self._cache))
            entry = self._cache.get(did)
            return self._success(document, entry.stored_at if entry is not None else None)

        logger.debug("did_resolved did=%s services=%s", did, len(document.service or []))
        return self._success(document, time.time())

    def clear_cache(self) -> None:
        self._cache.clear()
        CACHE_SIZE.labels(cache=self.CACHE_NAME).set(0)

    def evict(self, did: str) -> bool:
        removed = self._cache.evict(did)
        CACHE_SIZE.labels(cache=self.CACHE_NAME).set(len(self._cache))
        return removed

    def cache_stats(self) -> dict[str, Any]:
        """Size and per-DID age (seconds) of cached plain resolutions."""
        stats = self._cache.stats()
        return {
            "size": stats["size"],
            "ttl": stats["ttl"],
            "entries": [{"did": e["key"], "age": e["age"]} for e in stats["entries"]],
        }

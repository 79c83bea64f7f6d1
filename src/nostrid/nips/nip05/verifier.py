"""
NIP-05 verifier with HTTP retrieval and a TTL cache.

Resolves ``name@domain`` to a public key by fetching
``https://<domain>/.well-known/nostr.json?name=<name>`` as described in
[NIP-05](https://github.com/nostr-protocol/nips/blob/master/05.md).

Per lookup::

    Uncached --> Fetching --> Verified
                          \\-> Rejected (unreachable, malformed, unknown name)

The outcome of the fetch is memoized in an injected
[TTLCache][nostrid.core.cache.TTLCache] keyed by the identifier string as
given; a rejected lookup is cached as ``None`` under the same TTL. The
expected-key comparison is applied on every call, after the cache, so one
caller's mismatch never hides the identifier from another caller.

Warning:
    ``fetch()`` and ``verify()`` **never raise** on transport or document
    errors; they return None, and callers must treat None as "unverified".
    ``asyncio.CancelledError`` always propagates.

Note:
    Redirects are not followed (NIP-05 requires fetchers to ignore them) and
    bodies larger than ``max_size`` are rejected. No retries are made.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from pydantic import BaseModel, Field

from nostrid.core.cache import TTLCache
from nostrid.core.exceptions import KeyFormatError
from nostrid.core.metrics import CACHE_SIZE, NIP05_LOOKUPS
from nostrid.models.constants import (
    NIP05_DEFAULT_CACHE_TTL,
    NIP05_DEFAULT_TIMEOUT,
    NIP05_MAX_RESPONSE_SIZE,
    NIP05_WELL_KNOWN_PATH,
    NIP05_WILDCARD,
)
from nostrid.models.identifier import Nip05Identifier  # noqa: TC001
from nostrid.nips.nip19.keys import parse_to_hex_pubkey
from nostrid.utils.http import is_success, read_bounded_json

from .parsing import WellKnownDocument, is_valid_domain, parse_identifier, well_known_url


logger = logging.getLogger("nostrid.nips.nip05")


class Nip05Config(BaseModel):
    """Tunables for [Nip05Verifier][nostrid.nips.nip05.verifier.Nip05Verifier]."""

    timeout: float = Field(default=NIP05_DEFAULT_TIMEOUT, gt=0, le=60)
    cache_ttl: float = Field(default=NIP05_DEFAULT_CACHE_TTL, gt=0)
    max_response_size: int = Field(default=NIP05_MAX_RESPONSE_SIZE, ge=1024)


class Nip05Verifier:
    """Verify NIP-05 identifiers against their domains' well-known documents.

    Args:
        cache: Cache of lookup outcomes. A private one with the default
            TTL (300 s) is created when omitted.
        timeout: Hard timeout for each HTTP request in seconds.
        max_size: Maximum accepted body size in bytes.

    Examples:
        ```python
        verifier = Nip05Verifier()
        result = await verifier.verify("bob@example.com", expected_pubkey=pubkey)
        if result is None:
            ...  # unverified; do not distinguish the cause
        ```
    """

    CACHE_NAME = "nip05"

    def __init__(
        self,
        cache: TTLCache[Nip05Identifier | None] | None = None,
        *,
        timeout: float = NIP05_DEFAULT_TIMEOUT,  # noqa: ASYNC109
        max_size: int = NIP05_MAX_RESPONSE_SIZE,
    ) -> None:
        self._cache: TTLCache[Nip05Identifier | None] = (
            cache if cache is not None else TTLCache(ttl=NIP05_DEFAULT_CACHE_TTL)
        )
        self._timeout = timeout
        self._max_size = max_size

    @classmethod
    def from_config(cls, config: Nip05Config) -> Nip05Verifier:
        return cls(
            TTLCache(ttl=config.cache_ttl),
            timeout=config.timeout,
            max_size=config.max_response_size,
        )

    @property
    def cache(self) -> TTLCache[Nip05Identifier | None]:
        return self._cache

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    @staticmethod
    async def _get_json(url: str, timeout: float, max_size: int) -> dict[str, Any]:  # noqa: ASYNC109
        """GET *url* and return its JSON object body.

        Raises:
            ValueError: On a non-2xx status, an oversized body, invalid JSON,
                or a top-level value that is not an object.
            aiohttp.ClientError: On connection failures.
            TimeoutError: If the request exceeds *timeout*.
        """
        async with (
            aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session,
            session.get(
                url,
                headers={"Accept": "application/json"},
                allow_redirects=False,
            ) as resp,
        ):
            if not is_success(resp.status):
                raise ValueError(f"HTTP {resp.status}")
            data: dict[str, Any] = await read_bounded_json(resp, max_size, require_object=True)
            return data

    @staticmethod
    async def _head(url: str, timeout: float) -> bool:  # noqa: ASYNC109
        async with (
            aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session,
            session.head(url, allow_redirects=False) as resp,
        ):
            return is_success(resp.status)

    async def fetch(self, local_part: str, domain: str) -> dict[str, Any] | None:
        """Fetch the well-known document for *local_part* at *domain*.

        Returns:
            The document if it is a JSON object with a ``names`` object,
            otherwise None. Never raises on network or format errors.
        """
        url = well_known_url(local_part, domain)
        try:
            data = await self._get_json(url, self._timeout, self._max_size)
        except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
            raise
        except (OSError, TimeoutError, aiohttp.ClientError, ValueError) as e:
            logger.debug("nip05_fetch_failed url=%s error=%s", url, str(e) or type(e).__name__)
            return None

        if not WellKnownDocument(data).valid:
            logger.debug("nip05_invalid_document url=%s", url)
            return None
        return data

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    async def _resolve(self, identifier: str) -> tuple[Nip05Identifier | None, str]:
        parsed = parse_identifier(identifier)
        if parsed is None:
            return None, "invalid"
        document = await self.fetch(parsed.local_part, parsed.domain)
        if document is None:
            return None, "unreachable"
        result = WellKnownDocument(document).match(parsed)
        return result, "verified" if result is not None else "rejected"

    async def verify(
        self,
        identifier: str,
        expected_pubkey: str | None = None,
        *,
        use_cache: bool = True,
    ) -> Nip05Identifier | None:
        """Resolve *identifier* and optionally check it names *expected_pubkey*.

        Args:
            identifier: ``name@domain`` or a bare domain.
            expected_pubkey: Hex or npub key the identifier must resolve to.
                Compared case-insensitively.
            use_cache: Read and write the cache. False forces a fresh fetch
                and leaves the cache untouched.

        Returns:
            A verified [Nip05Identifier][nostrid.models.identifier.Nip05Identifier],
            or None when the identifier is unparseable, unreachable, unknown
            to the domain, or bound to a different key.
        """
        entry = self._cache.get(identifier) if use_cache else None
        if entry is not None:
            result = entry.value
            outcome = "verified" if result is not None else "rejected"
        else:
            result, outcome = await self._resolve(identifier)
            if outcome == "invalid":
                logger.debug("nip05_invalid_identifier identifier=%s", identifier)
                return None
            if use_cache:
                self._cache.set(identifier, result)
                CACHE_SIZE.labels(cache=self.CACHE_NAME).set(len(self._cache))

        if result is not None and expected_pubkey is not None:
            try:
                expected = parse_to_hex_pubkey(expected_pubkey)
            except KeyFormatError:
                expected = None
            if expected != result.pubkey:
                logger.debug(
                    "nip05_pubkey_mismatch identifier=%s resolved=%s",
                    identifier,
                    result.pubkey[:16],
                )
                result, outcome = None, "mismatch"

        NIP05_LOOKUPS.labels(result=outcome).inc()
        return result

    async def lookup_pubkey(self, identifier: str) -> str | None:
        """Public key the identifier resolves to, or None."""
        result = await self.verify(identifier)
        return result.pubkey if result is not None else None

    async def get_relays(self, identifier: str) -> list[str] | None:
        """Relay hints published for the identifier's key, or None."""
        result = await self.verify(identifier)
        if result is None or result.relays is None:
            return None
        return list(result.relays)

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    async def discover(self, domain: str) -> dict[str, Any] | None:
        """Fetch the domain's wildcard (``_``) document.

        Most domains only answer for the requested name, so the result rarely
        lists every user.
        """
        domain = domain.strip().lower()
        if not is_valid_domain(domain):
            return None
        return await self.fetch(NIP05_WILDCARD, domain)

    async def domain_supports_nip05(self, domain: str) -> bool:
        """True if ``HEAD https://<domain>/.well-known/nostr.json`` answers 2xx."""
        domain = domain.strip().lower()
        if not is_valid_domain(domain):
            return False
        url = f"https://{domain}{NIP05_WELL_KNOWN_PATH}"
        try:
            return await self._head(url, self._timeout)
        except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
            raise
        except (OSError, TimeoutError, aiohttp.ClientError, ValueError) as e:
            logger.debug("nip05_head_failed url=%s error=%s", url, str(e) or type(e).__name__)
            return False

    # -------------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------------

    def clear_cache(self) -> None:
        self._cache.clear()
        CACHE_SIZE.labels(cache=self.CACHE_NAME).set(0)

    def evict(self, identifier: str) -> bool:
        """Forget one identifier so the next ``verify()`` fetches again."""
        removed = self._cache.evict(identifier)
        CACHE_SIZE.labels(cache=self.CACHE_NAME).set(len(self._cache))
        return removed

    def cache_stats(self) -> dict[str, Any]:
        """Size and per-identifier age (seconds) and verification state."""
        stats = self._cache.stats()
        return {
            "size": stats["size"],
            "ttl": stats["ttl"],
            "entries": [
                {"identifier": e["key"], "age": e["age"], "verified": e["has_value"]}
                for e in stats["entries"]
            ],
        }

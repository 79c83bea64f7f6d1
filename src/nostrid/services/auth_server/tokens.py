"""Session tokens handed out after a successful login.

The auth server only proves key ownership; what a session looks like is
up to the deployment. [TokenIssuer][nostrid.services.auth_server.tokens.TokenIssuer]
is the seam: plug in a JWT signer or an external session service.
[SessionTokenIssuer][nostrid.services.auth_server.tokens.SessionTokenIssuer]
is the in-memory default, suitable for a single process. Refresh tokens
are single use: redeeming one yields a new pair and retires the old
refresh token.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from nostrid.core.cache import TTLCache


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int


@runtime_checkable
class TokenIssuer(Protocol):
    def issue(self, pubkey: str) -> TokenPair: ...

    def resolve(self, access_token: str) -> str | None:
        """Public key the token was issued to, or None if unknown or expired."""
        ...

    def refresh(self, refresh_token: str) -> TokenPair | None:
        """Fresh pair for a live refresh token, or None. A refresh token works once."""
        ...


class SessionTokenIssuer:
    """Random opaque tokens kept in [TTLCache][nostrid.core.cache.TTLCache] instances.

    Args:
        ttl: Access token lifetime in seconds.
        refresh_ttl: Refresh token lifetime in seconds.
    """

    def __init__(self, ttl: int = 3600, refresh_ttl: int = 604_800) -> None:
        self._ttl = ttl
        self._sessions: TTLCache[str] = TTLCache(ttl=ttl)
        self._refresh: TTLCache[str] = TTLCache(ttl=refresh_ttl)

    def issue(self, pubkey: str) -> TokenPair:
        access = secrets.token_urlsafe(32)
        refresh = secrets.token_urlsafe(32)
        self._sessions.set(access, pubkey)
        self._refresh.set(refresh, pubkey)
        return TokenPair(access_token=access, refresh_token=refresh, expires_in=self._ttl)

    def resolve(self, access_token: str) -> str | None:
        entry = self._sessions.get(access_token)
        return entry.value if entry is not None else None

    def refresh(self, refresh_token: str) -> TokenPair | None:
        entry = self._refresh.pop(refresh_token)
        if entry is None:
            return None
        return self.issue(entry.value)

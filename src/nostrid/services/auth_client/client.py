"""
Client for the Nostr login exchange and NIP-98 authorized requests.

Drives the server side implemented by
[AuthServer][nostrid.services.auth_server.service.AuthServer] (or any
server speaking the same wire format)::

    POST {endpoint}/nostr/challenge  -> {"success": true, "data": AuthChallenge}
    POST {endpoint}/nostr/login      -> {"success": true, "data": {user, access_token, ...}}
    POST {endpoint}/nostr/refresh    -> {"success": true, "data": {access_token, refresh_token, ...}}

Login failures reported by the server come back as a
[LoginResponse][nostrid.services.common.models.LoginResponse] with
``success=False``. Transport failures raise
[ConnectivityError][nostrid.core.exceptions.ConnectivityError]
(or [FetchTimeoutError][nostrid.core.exceptions.FetchTimeoutError]); a
login is never retried automatically.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from nostrid.core.exceptions import ConnectivityError, FetchTimeoutError, ProtocolError
from nostrid.nips.nip01.events import event_to_dict
from nostrid.nips.nip42.challenge import AuthChallenge, sign_challenge_response
from nostrid.nips.nip98.http_auth import create_auth_header
from nostrid.services.common.models import LoginResponse
from nostrid.utils.http import DEFAULT_MAX_RESPONSE_SIZE, is_success, read_bounded_json


if TYPE_CHECKING:
    from nostrid.nips.nip01.signer import EventSigner
    from nostrid.nips.nip05.verifier import Nip05Verifier


logger = logging.getLogger("nostrid.services.auth_client")

DEFAULT_TIMEOUT = 10.0


class AuthClient:
    """Log in to a Nostr auth endpoint and sign requests with NIP-98.

    Args:
        endpoint: Base URL of the auth routes, e.g.
            ``https://api.example.com/api/v1/auth``.
        signer: Signing capability for challenge responses and headers.
        timeout: Hard timeout per HTTP request in seconds.
        max_size: Maximum accepted response body size in bytes.

    Examples:
        ```python
        client = AuthClient("https://api.example.com/api/v1/auth", select_signer(nsec))
        response = await client.login(nip05="bob@example.com")
        if response.success:
            token = response.access_token
        ```
    """

    def __init__(
        self,
        endpoint: str,
        signer: EventSigner,
        *,
        timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
        max_size: int = DEFAULT_MAX_RESPONSE_SIZE,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._signer = signer
        self._timeout = timeout
        self._max_size = max_size

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        """Send a request and return its status and JSON object body.

        Raises:
            FetchTimeoutError: If the request exceeds the timeout.
            ConnectivityError: On connection failures or an unreadable body.
        """
        request_headers = {"Accept": "application/json"}
        if body is not None:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})
        try:
            async with (
                aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session,
                session.request(method, url, data=body, headers=request_headers) as resp,
            ):
                data: dict[str, Any] = await read_bounded_json(resp, self._max_size, require_object=True)
                return resp.status, data
        except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
            raise
        except TimeoutError as e:
            raise FetchTimeoutError(f"{method} {url} timed out after {self._timeout}s") from e
        except (OSError, aiohttp.ClientError, ValueError) as e:
            raise ConnectivityError(f"{method} {url} failed: {e}") from e

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    async def request_challenge(self, relay: str | None = None) -> AuthChallenge:
        """Ask the server for a fresh challenge.

        Raises:
            ConnectivityError: On transport failure.
            ProtocolError: If the server refuses or replies malformed.
        """
        body = json.dumps({"relay": relay} if relay else {}).encode()
        status, data = await self._send("POST", f"{self._endpoint}/nostr/challenge", body=body)
        if not is_success(status) or not data.get("success"):
            raise ProtocolError(f"Failed to get authentication challenge (HTTP {status})")
        try:
            return AuthChallenge.model_validate(data.get("data"))
        except ValidationError as e:
            raise ProtocolError(f"Malformed challenge: {e}") from e

    async def complete_login(self, challenge: AuthChallenge, nip05: str | None = None) -> LoginResponse:
        """Sign *challenge* and submit it."""
        event = await sign_challenge_response(challenge, self._signer)
        request = {"pubkey": event.author().to_hex(), "signedEvent": event_to_dict(event)}
        if nip05:
            request["nip05"] = nip05
        status, data = await self._send(
            "POST", f"{self._endpoint}/nostr/login", body=json.dumps(request).encode()
        )
        return self._login_response(status, data, "Login failed")

    async def refresh(self, refresh_token: str) -> LoginResponse:
        """Trade *refresh_token* for a new token pair. The old one stops working."""
        status, data = await self._send(
            "POST",
            f"{self._endpoint}/nostr/refresh",
            body=json.dumps({"refresh_token": refresh_token}).encode(),
        )
        return self._login_response(status, data, "Refresh failed")

    @staticmethod
    def _login_response(status: int, data: dict[str, Any], default_error: str) -> LoginResponse:
        if not is_success(status) or not data.get("success"):
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            logger.debug("login_rejected status=%s error=%s", status, message)
            return LoginResponse(success=False, error=message or default_error)

        payload = data.get("data") or {}
        return LoginResponse(
            success=True,
            user=payload.get("user"),
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
        )

    async def login(
        self,
        nip05: str | None = None,
        *,
        relay: str | None = None,
        verifier: Nip05Verifier | None = None,
    ) -> LoginResponse:
        """Full login: optional local NIP-05 check, challenge, signed response.

        Args:
            nip05: NIP-05 identifier to present to the server.
            relay: Relay URL to request the challenge for.
            verifier: When given with *nip05*, the identifier is checked
                against the signer's key before contacting the server.

        Raises:
            ConnectivityError: On transport failure.
            ProtocolError: If the challenge request is refused.
            SigningError: If the signer fails.
        """
        if nip05 and verifier is not None:
            pubkey = await self._signer.public_key()
            if await verifier.verify(nip05, expected_pubkey=pubkey) is None:
                return LoginResponse(success=False, error="NIP-05 verification failed")

        challenge = await self.request_challenge(relay)
        return await self.complete_login(challenge, nip05)

    # -------------------------------------------------------------------------
    # NIP-98
    # -------------------------------------------------------------------------

    async def authorized_request(
        self,
        method: str,
        url: str,
        body: Any = None,
    ) -> tuple[int, dict[str, Any]]:
        """Send a request carrying a NIP-98 ``Authorization`` header.

        A JSON *body* is serialised once and the same bytes are hashed into
        the header and sent.
        """
        payload = json.dumps(body).encode() if body is not None else None
        header = await create_auth_header(url, method, self._signer, payload)
        return await self._send(method.upper(), url, body=payload, headers={"Authorization": header})

    async def fetch_identity(self, nip05: str | None = None) -> dict[str, Any] | None:
        """The server's view of this signer's identity, or None if refused."""
        url = f"{self._endpoint}/nostr/identity"
        if nip05:
            url = f"{url}?nip05={quote(nip05, safe='')}"
        status, data = await self.authorized_request("GET", url)
        if not is_success(status) or not data.get("success"):
            return None
        return data.get("data")

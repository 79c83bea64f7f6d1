"""Nostr login and DID resolution over HTTP via FastAPI.

Routes (``{prefix}`` defaults to ``/api/v1/auth``):

``POST {prefix}/nostr/challenge``
    Issue a challenge; body ``{"relay"?}``.
``POST {prefix}/nostr/login``
    Exchange a signed challenge response (kind 22242) for session tokens;
    body ``{"pubkey", "signedEvent", "nip05"?}``.
``POST {prefix}/nostr/refresh``
    Trade a refresh token for a new token pair; body ``{"refresh_token"}``.
``GET {prefix}/nostr/identity``
    Identity of the caller, authenticated per request with a NIP-98
    ``Authorization: Nostr ...`` header (or a bearer session token).
``GET /api/v1/did/{did}``
    Resolve a ``did:nostr`` DID.
``GET /health``, ``GET /metrics``
    Liveness and (when enabled) Prometheus exposition.

Every protocol failure is answered with 401 and the envelope
``{"success": false, "error": {"code", "message"}}``; nothing is retried
with relaxed checks.

See Also:
    [verify_challenge_response()][nostrid.nips.nip42.challenge.verify_challenge_response],
    [verify_auth_header()][nostrid.nips.nip98.http_auth.verify_auth_header]:
        The protocol checks behind the login and identity routes.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Self

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from nostrid.core.exceptions import AuthenticationError
from nostrid.core.logger import Logger, short_key
from nostrid.core.metrics import AUTH_ATTEMPTS, render_metrics
from nostrid.core.yaml import load_yaml
from nostrid.did.document import pubkey_to_did
from nostrid.did.resolver import DidResolver
from nostrid.nips.base import AuthFailure, AuthResult
from nostrid.nips.nip01.events import get_tag_value, parse_event_json
from nostrid.nips.nip05.verifier import Nip05Verifier
from nostrid.nips.nip19.keys import pubkey_to_npub
from nostrid.nips.nip42.challenge import verify_challenge_response
from nostrid.nips.nip98.http_auth import hash_payload, verify_auth_header
from nostrid.services.common.models import (
    ChallengeRequest,
    LoginRequest,
    RefreshRequest,
    error_envelope,
    ok_envelope,
)

from .challenges import ChallengeStore
from .configs import AuthServerConfig
from .tokens import SessionTokenIssuer, TokenIssuer


if TYPE_CHECKING:
    from nostrid.models.identifier import Nip05Identifier


_HTTP_ERROR_THRESHOLD = 400
_BEARER = "Bearer "


def _outcome(result: AuthResult) -> str:
    if result.valid:
        return "success"
    try:
        return AuthFailure(result.error).name.lower()
    except ValueError:
        return "invalid_signature"


class AuthServer:
    """HTTP front end for challenge-response login and NIP-98 requests.

    Args:
        config: Server configuration. Defaults apply when omitted.
        verifier: NIP-05 verifier; built from ``config.nip05`` when omitted.
        resolver: DID resolver; shares *verifier* when omitted.
        challenges: Store of issued challenges.
        tokens: Session token issuer.
    """

    def __init__(
        self,
        config: AuthServerConfig | None = None,
        *,
        verifier: Nip05Verifier | None = None,
        resolver: DidResolver | None = None,
        challenges: ChallengeStore | None = None,
        tokens: TokenIssuer | None = None,
    ) -> None:
        self._config = config or AuthServerConfig()
        self._verifier = verifier or Nip05Verifier.from_config(self._config.nip05)
        self._resolver = resolver or DidResolver(verifier=self._verifier)
        self._challenges = challenges or ChallengeStore(ttl=self._config.challenge_ttl)
        self._tokens: TokenIssuer = tokens or SessionTokenIssuer(
            ttl=self._config.token_ttl, refresh_ttl=self._config.refresh_token_ttl
        )
        self._logger = Logger("auth_server")

    @property
    def config(self) -> AuthServerConfig:
        return self._config

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, config_path: str, **kwargs: Any) -> Self:
        """Create a server from a YAML configuration file."""
        return cls.from_dict(load_yaml(config_path), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> Self:
        return cls(config=AuthServerConfig(**data), **kwargs)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _request_url(self, request: Request) -> str:
        """Absolute URL of *request* as the client addressed it."""
        if self._config.public_url is None:
            return str(request.url)
        query = f"?{request.url.query}" if request.url.query else ""
        return f"{self._config.public_url}{request.url.path}{query}"

    def _default_relay(self, request: Request) -> str:
        if self._config.public_url is not None:
            return self._config.public_url
        return f"{request.url.scheme}://{request.url.netloc}"

    @staticmethod
    async def _json_body(request: Request) -> Any:
        body = await request.body()
        if not body.strip():
            return {}
        return await request.json()

    async def _authenticate_request(self, request: Request) -> str:
        """Public key behind a NIP-98 header or a session token.

        Raises:
            AuthenticationError: If neither is present and valid.
        """
        header = request.headers.get("authorization")
        if header is None:
            raise AuthenticationError()

        if header.startswith(_BEARER):
            pubkey = self._tokens.resolve(header[len(_BEARER) :].strip())
            if pubkey is None:
                raise AuthenticationError("Invalid or expired session token", code="INVALID_TOKEN")
            return pubkey

        body = await request.body()
        result = await verify_auth_header(
            header,
            self._request_url(request),
            request.method,
            payload_hash=hash_payload(body) if body else None,
        )
        AUTH_ATTEMPTS.labels(flow="http", outcome=_outcome(result)).inc()
        if not result.valid:
            if result.error == AuthFailure.INVALID_HEADER:
                raise AuthenticationError("Invalid Nostr authorization header", code="INVALID_HEADER")
            raise AuthenticationError(result.error or "Nostr authentication failed")
        return result.pubkey  # type: ignore[return-value]

    async def _verify_nip05(self, identifier: str | None, pubkey: str) -> Nip05Identifier | None:
        if not identifier:
            return None
        result = await self._verifier.verify(identifier, expected_pubkey=pubkey)
        if result is None:
            self._logger.warning("nip05_verification_failed", nip05=identifier, pubkey=short_key(pubkey))
        return result

    @staticmethod
    def _user(pubkey: str, nip05: Nip05Identifier | None, claimed: str | None) -> dict[str, Any]:
        return {
            "pubkey": pubkey,
            "npub": pubkey_to_npub(pubkey),
            "did": pubkey_to_did(pubkey),
            "nip05": nip05.identifier if nip05 is not None else claimed,
            "nip05_verified": nip05 is not None,
        }

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def _issue_challenge(self, request: Request) -> JSONResponse:
        try:
            body = ChallengeRequest.model_validate(await self._json_body(request))
        except (ValidationError, ValueError):
            return JSONResponse(error_envelope("VALIDATION_ERROR", "Invalid request"), status_code=400)
        challenge = self._challenges.issue(body.relay or self._default_relay(request))
        self._logger.debug("challenge_issued", relay=challenge.relay)
        return JSONResponse(ok_envelope(challenge.to_dict()))

    async def _login(self, request: Request) -> JSONResponse:
        try:
            body = LoginRequest.model_validate(await self._json_body(request))
        except (ValidationError, ValueError):
            return JSONResponse(error_envelope("VALIDATION_ERROR", "Invalid request"), status_code=400)

        event = parse_event_json(body.signed_event)
        if event is None:
            raise AuthenticationError("Malformed signed event", code="INVALID_EVENT")

        challenge = self._challenges.consume(get_tag_value(event, "challenge"))
        if challenge is None:
            AUTH_ATTEMPTS.labels(flow="challenge", outcome="challenge_not_found").inc()
            raise AuthenticationError("Challenge not found or expired", code="INVALID_CHALLENGE")

        result = await verify_challenge_response(event, challenge)
        AUTH_ATTEMPTS.labels(flow="challenge", outcome=_outcome(result)).inc()
        if not result.valid or result.pubkey is None:
            self._logger.info("login_rejected", error=result.error, pubkey=short_key(result.pubkey))
            raise AuthenticationError(result.error or "Challenge verification failed")

        if result.pubkey != body.pubkey.lower():
            raise AuthenticationError("Public key mismatch")

        nip05 = await self._verify_nip05(body.nip05, result.pubkey)
        tokens = self._tokens.issue(result.pubkey)
        self._logger.info("login_succeeded", pubkey=short_key(result.pubkey), nip05_verified=nip05 is not None)
        return JSONResponse(
            ok_envelope(
                {
                    "user": self._user(result.pubkey, nip05, body.nip05),
                    "access_token": tokens.access_token,
                    "refresh_token": tokens.refresh_token,
                    "expires_in": tokens.expires_in,
                }
            )
        )

    async def _refresh(self, request: Request) -> JSONResponse:
        try:
            body = RefreshRequest.model_validate(await self._json_body(request))
        except (ValidationError, ValueError):
            return JSONResponse(error_envelope("VALIDATION_ERROR", "Invalid request"), status_code=400)

        tokens = self._tokens.refresh(body.refresh_token)
        if tokens is None:
            AUTH_ATTEMPTS.labels(flow="refresh", outcome="invalid_token").inc()
            raise AuthenticationError("Invalid or expired refresh token", code="INVALID_TOKEN")
        AUTH_ATTEMPTS.labels(flow="refresh", outcome="success").inc()
        return JSONResponse(
            ok_envelope(
                {
                    "access_token": tokens.access_token,
                    "refresh_token": tokens.refresh_token,
                    "expires_in": tokens.expires_in,
                }
            )
        )

    async def _identity(self, request: Request) -> JSONResponse:
        pubkey = await self._authenticate_request(request)
        claimed = request.query_params.get("nip05")
        nip05 = await self._verify_nip05(claimed, pubkey)
        resolution = await self._resolver.resolve(pubkey_to_did(pubkey))
        data = self._user(pubkey, nip05, claimed)
        data["did_document"] = resolution.did_document.to_dict() if resolution.did_document else None
        return JSONResponse(ok_envelope(data))

    async def _resolve_did(self, did: str) -> JSONResponse:
        result = await self._resolver.resolve(did)
        error = result.did_resolution_metadata.error
        if error is not None:
            status = 400 if error == "invalidDid" else 404
            message = result.did_resolution_metadata.error_message or error
            return JSONResponse(error_envelope(error, message), status_code=status)
        return JSONResponse(ok_envelope(result.to_dict()))

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    def build_app(self) -> FastAPI:
        """Construct the FastAPI application."""
        app = FastAPI(title="nostrid auth server")
        prefix = self._config.prefix

        if self._config.cors_origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=self._config.cors_origins,
                allow_methods=["GET", "POST"],
                allow_headers=["Authorization", "Content-Type"],
            )

        @app.middleware("http")
        async def log_requests(request: Request, call_next: Any) -> Response:
            start = time.monotonic()
            try:
                response: Response = await call_next(request)
            except Exception as exc:  # HTTP request error boundary
                self._logger.error("unhandled_error", error=str(exc), path=request.url.path)
                response = JSONResponse(
                    error_envelope("INTERNAL_ERROR", "Internal server error"),
                    status_code=500,
                )
            duration_ms = round((time.monotonic() - start) * 1000, 1)
            if response.status_code >= _HTTP_ERROR_THRESHOLD:
                self._logger.warning(
                    "request_failed",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=duration_ms,
                )
            else:
                self._logger.debug(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=duration_ms,
                )
            return response

        @app.exception_handler(AuthenticationError)
        async def authentication_failed(_request: Request, exc: AuthenticationError) -> JSONResponse:
            return JSONResponse(error_envelope(exc.code, str(exc)), status_code=401)

        @app.get("/health")
        async def health() -> dict[str, str]:
            return {"status": "ok"}

        if self._config.metrics.enabled:

            @app.get(self._config.metrics.path)
            async def metrics() -> Response:
                body, content_type = render_metrics()
                return Response(content=body, media_type=content_type)

        @app.post(f"{prefix}/nostr/challenge")
        async def challenge(request: Request) -> JSONResponse:
            return await self._issue_challenge(request)

        @app.post(f"{prefix}/nostr/login")
        async def login(request: Request) -> JSONResponse:
            return await self._login(request)

        @app.post(f"{prefix}/nostr/refresh")
        async def refresh(request: Request) -> JSONResponse:
            return await self._refresh(request)

        @app.get(f"{prefix}/nostr/identity")
        async def identity(request: Request) -> JSONResponse:
            return await self._identity(request)

        @app.get("/api/v1/did/{did}")
        async def resolve_did(did: str) -> JSONResponse:
            return await self._resolve_did(did)

        return app

    async def serve(self) -> None:
        """Run the application with uvicorn until cancelled."""
        config = uvicorn.Config(
            self.build_app(),
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        self._logger.info("http_server_started", host=self._config.host, port=self._config.port)
        await server.serve()
        self._logger.info("http_server_stopped")


def create_app(config: AuthServerConfig | None = None, **kwargs: Any) -> FastAPI:
    """FastAPI application for *config*; see [AuthServer][nostrid.services.auth_server.service.AuthServer]."""
    return AuthServer(config, **kwargs).build_app()

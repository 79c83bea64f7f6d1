"""Unit tests for services.auth_server.service module.

Tests:
- Health and metrics routes
- POST /nostr/challenge: defaults, explicit relay, validation errors
- POST /nostr/login: full exchange, NIP-05, replay and every rejection
- POST /nostr/refresh: rotation, reuse and validation errors
- GET /nostr/identity: NIP-98 header, bearer token, public_url handling
- GET /api/v1/did/{did}: resolution and error mapping
- Error boundary, CORS, factory methods
"""

from __future__ import annotations

import time
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from nostr_sdk import Keys

from nostrid.did.models import DidResolutionResult
from nostrid.models.identifier import Nip05Identifier
from nostrid.nips.nip98.http_auth import build_auth_event, encode_auth_header
from nostrid.services.auth_server import AuthServer, AuthServerConfig, ChallengeStore, create_app


CHALLENGE = "/api/v1/auth/nostr/challenge"
LOGIN = "/api/v1/auth/nostr/login"
REFRESH = "/api/v1/auth/nostr/refresh"
IDENTITY = "/api/v1/auth/nostr/identity"
IDENTITY_URL = f"http://testserver{IDENTITY}"


def _nip98(keys: Keys, url: str = IDENTITY_URL, method: str = "GET") -> dict[str, str]:
    event = build_auth_event(url, method).sign_with_keys(keys)
    return {"Authorization": encode_auth_header(event)}


def _nip05(pubkey: str) -> Nip05Identifier:
    return Nip05Identifier(
        identifier="bob@example.com",
        local_part="bob",
        domain="example.com",
        pubkey=pubkey,
        verified=True,
    )


def _challenge(client: TestClient, **body) -> dict:
    resp = client.post(CHALLENGE, json=body)
    assert resp.status_code == 200
    return resp.json()["data"]


# ============================================================================
# Infrastructure Routes
# ============================================================================


class TestInfrastructureRoutes:
    def test_health(self, test_client: TestClient) -> None:
        resp = test_client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_metrics_enabled(self, test_client: TestClient) -> None:
        resp = test_client.get("/metrics")
        assert resp.status_code == 200
        assert "nostrid_auth_attempts_total" in resp.text

    def test_metrics_disabled_by_default(self) -> None:
        client = TestClient(create_app())
        assert client.get("/metrics").status_code == 404

    def test_metrics_custom_path(self) -> None:
        client = TestClient(create_app(AuthServerConfig(metrics={"enabled": True, "path": "/internal/metrics"})))
        assert client.get("/internal/metrics").status_code == 200


# ============================================================================
# Challenge Route
# ============================================================================


class TestChallengeRoute:
    def test_issue_default_relay(self, test_client: TestClient, challenge_store: ChallengeStore) -> None:
        resp = test_client.post(CHALLENGE)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert len(data["challenge"]) == 64
        assert data["expiresAt"] - data["timestamp"] == 300
        assert data["relay"] == "http://testserver"
        assert len(challenge_store) == 1

    def test_issue_explicit_relay(self, test_client: TestClient) -> None:
        data = _challenge(test_client, relay="wss://relay.example.com")
        assert data["relay"] == "wss://relay.example.com"

    def test_issue_public_url_relay(self) -> None:
        client = TestClient(create_app(AuthServerConfig(public_url="https://api.example.com/")))
        assert _challenge(client)["relay"] == "https://api.example.com"

    def test_challenges_are_unique(self, test_client: TestClient) -> None:
        assert _challenge(test_client)["challenge"] != _challenge(test_client)["challenge"]

    def test_custom_ttl(self) -> None:
        client = TestClient(create_app(AuthServerConfig(challenge_ttl=60)))
        data = _challenge(client)
        assert data["expiresAt"] - data["timestamp"] == 60

    def test_invalid_body(self, test_client: TestClient) -> None:
        resp = test_client.post(CHALLENGE, json={"relay": ["not", "a", "string"]})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_invalid_json(self, test_client: TestClient) -> None:
        resp = test_client.post(CHALLENGE, content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400


# ============================================================================
# Login Route
# ============================================================================


class TestLoginRoute:
    def test_successful_login(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        challenge = _challenge(test_client)
        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": sign_challenge(challenge)})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["user"]["pubkey"] == pubkey
        assert data["user"]["npub"].startswith("npub1")
        assert data["user"]["did"] == f"did:nostr:{pubkey}"
        assert data["user"]["nip05"] is None
        assert data["user"]["nip05_verified"] is False
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["expires_in"] == 3600

    def test_login_with_wss_relay(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        challenge = _challenge(test_client, relay="wss://relay.example.com")
        event = sign_challenge(challenge, relay="wss://Relay.Example.com/")
        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": event})
        assert resp.status_code == 200

    def test_uppercase_pubkey_accepted(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        challenge = _challenge(test_client)
        resp = test_client.post(LOGIN, json={"pubkey": pubkey.upper(), "signedEvent": sign_challenge(challenge)})
        assert resp.status_code == 200

    def test_verified_nip05(self, test_client: TestClient, mock_verifier, sign_challenge, pubkey: str) -> None:
        mock_verifier.verify.return_value = _nip05(pubkey)
        challenge = _challenge(test_client)
        resp = test_client.post(
            LOGIN,
            json={"pubkey": pubkey, "signedEvent": sign_challenge(challenge), "nip05": "bob@example.com"},
        )
        user = resp.json()["data"]["user"]
        assert user["nip05"] == "bob@example.com"
        assert user["nip05_verified"] is True
        mock_verifier.verify.assert_awaited_once_with("bob@example.com", expected_pubkey=pubkey)

    def test_unverified_nip05_does_not_block_login(
        self, test_client: TestClient, sign_challenge, pubkey: str
    ) -> None:
        challenge = _challenge(test_client)
        resp = test_client.post(
            LOGIN,
            json={"pubkey": pubkey, "signedEvent": sign_challenge(challenge), "nip05": "bob@example.com"},
        )
        assert resp.status_code == 200
        user = resp.json()["data"]["user"]
        assert user["nip05"] == "bob@example.com"
        assert user["nip05_verified"] is False

    def test_replay_rejected(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        event = sign_challenge(_challenge(test_client))
        assert test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": event}).status_code == 200

        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": event})
        assert resp.status_code == 401
        assert resp.json() == {
            "success": False,
            "error": {"code": "INVALID_CHALLENGE", "message": "Challenge not found or expired"},
        }

    def test_unknown_challenge(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        event = sign_challenge({"challenge": "ab" * 32, "relay": "http://testserver"})
        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": event})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_CHALLENGE"

    def test_relay_mismatch_consumes_challenge(
        self, test_client: TestClient, sign_challenge, pubkey: str, challenge_store: ChallengeStore
    ) -> None:
        challenge = _challenge(test_client, relay="wss://relay.example.com")
        event = sign_challenge(challenge, relay="wss://evil.example.com")
        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": event})
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Relay mismatch"
        assert len(challenge_store) == 0

        retry = sign_challenge(challenge)
        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": retry})
        assert resp.json()["error"]["code"] == "INVALID_CHALLENGE"

    def test_pubkey_mismatch(self, test_client: TestClient, sign_challenge) -> None:
        challenge = _challenge(test_client)
        other = Keys.generate().public_key().to_hex()
        resp = test_client.post(LOGIN, json={"pubkey": other, "signedEvent": sign_challenge(challenge)})
        assert resp.status_code == 401
        assert resp.json()["error"] == {"code": "UNAUTHORIZED", "message": "Public key mismatch"}

    def test_expired_challenge(
        self, test_client: TestClient, sign_challenge, pubkey: str, challenge_store: ChallengeStore
    ) -> None:
        challenge = challenge_store.issue("http://testserver", now=int(time.time()) - 1000)
        resp = test_client.post(
            LOGIN, json={"pubkey": pubkey, "signedEvent": sign_challenge(challenge.to_dict())}
        )
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Challenge expired"

    def test_malformed_event(self, test_client: TestClient, pubkey: str) -> None:
        resp = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": {"foo": "bar"}})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_EVENT"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"pubkey": "abc", "signedEvent": {}},
            {"pubkey": "ab" * 32},
        ],
    )
    def test_invalid_body(self, test_client: TestClient, body: dict) -> None:
        resp = test_client.post(LOGIN, json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


# ============================================================================
# Refresh Route
# ============================================================================


class TestRefreshRoute:
    @staticmethod
    def _login(client: TestClient, sign_challenge, pubkey: str) -> dict:
        challenge = _challenge(client)
        resp = client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": sign_challenge(challenge)})
        return resp.json()["data"]

    def test_refresh(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        login = self._login(test_client, sign_challenge, pubkey)
        resp = test_client.post(REFRESH, json={"refresh_token": login["refresh_token"]})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["refresh_token"] != login["refresh_token"]
        assert data["expires_in"] == 3600

        identity = test_client.get(IDENTITY, headers={"Authorization": f"Bearer {data['access_token']}"})
        assert identity.status_code == 200
        assert identity.json()["data"]["pubkey"] == pubkey

    def test_reuse_rejected(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        login = self._login(test_client, sign_challenge, pubkey)
        assert test_client.post(REFRESH, json={"refresh_token": login["refresh_token"]}).status_code == 200

        resp = test_client.post(REFRESH, json={"refresh_token": login["refresh_token"]})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_TOKEN"

    def test_access_token_rejected(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        login = self._login(test_client, sign_challenge, pubkey)
        resp = test_client.post(REFRESH, json={"refresh_token": login["access_token"]})
        assert resp.status_code == 401

    @pytest.mark.parametrize("body", [{}, {"refresh_token": ""}, {"refresh_token": 5}])
    def test_invalid_body(self, test_client: TestClient, body: dict) -> None:
        resp = test_client.post(REFRESH, json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


# ============================================================================
# Identity Route
# ============================================================================


class TestIdentityRoute:
    def test_nip98(self, test_client: TestClient, keys: Keys, pubkey: str) -> None:
        resp = test_client.get(IDENTITY, headers=_nip98(keys))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["pubkey"] == pubkey
        assert data["did"] == f"did:nostr:{pubkey}"
        assert data["nip05_verified"] is False
        assert data["did_document"]["id"] == f"did:nostr:{pubkey}"

    def test_nip98_with_nip05_query(
        self, test_client: TestClient, mock_verifier, keys: Keys, pubkey: str
    ) -> None:
        mock_verifier.verify.return_value = _nip05(pubkey)
        url = f"{IDENTITY_URL}?nip05=bob%40example.com"
        resp = test_client.get(f"{IDENTITY}?nip05=bob%40example.com", headers=_nip98(keys, url))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["nip05"] == "bob@example.com"
        assert data["nip05_verified"] is True

    def test_missing_header(self, test_client: TestClient) -> None:
        resp = test_client.get(IDENTITY)
        assert resp.status_code == 401
        assert resp.json()["error"] == {"code": "UNAUTHORIZED", "message": "Authentication required"}

    def test_invalid_header(self, test_client: TestClient) -> None:
        resp = test_client.get(IDENTITY, headers={"Authorization": "Nostr not-base64!"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_HEADER"

    def test_url_mismatch(self, test_client: TestClient, keys: Keys) -> None:
        resp = test_client.get(IDENTITY, headers=_nip98(keys, "http://testserver/api/v1/other"))
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "URL mismatch"

    def test_method_mismatch(self, test_client: TestClient, keys: Keys) -> None:
        resp = test_client.get(IDENTITY, headers=_nip98(keys, method="POST"))
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Method mismatch"

    def test_public_url(self, keys: Keys, pubkey: str) -> None:
        client = TestClient(create_app(AuthServerConfig(public_url="https://api.example.com")))
        headers = _nip98(keys, f"https://api.example.com{IDENTITY}")
        resp = client.get(IDENTITY, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["pubkey"] == pubkey

    def test_public_url_rejects_internal_url(self, keys: Keys) -> None:
        client = TestClient(create_app(AuthServerConfig(public_url="https://api.example.com")))
        resp = client.get(IDENTITY, headers=_nip98(keys))
        assert resp.status_code == 401

    def test_bearer_token(self, test_client: TestClient, sign_challenge, pubkey: str) -> None:
        challenge = _challenge(test_client)
        login = test_client.post(LOGIN, json={"pubkey": pubkey, "signedEvent": sign_challenge(challenge)})
        token = login.json()["data"]["access_token"]

        resp = test_client.get(IDENTITY, headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["data"]["pubkey"] == pubkey

    def test_unknown_bearer_token(self, test_client: TestClient) -> None:
        resp = test_client.get(IDENTITY, headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_TOKEN"


# ============================================================================
# DID Route
# ============================================================================


class TestDidRoute:
    def test_resolve(self, test_client: TestClient, pubkey: str) -> None:
        resp = test_client.get(f"/api/v1/did/did:nostr:{pubkey}")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["didDocument"]["id"] == f"did:nostr:{pubkey}"
        assert data["didResolutionMetadata"]["contentType"] == "application/did+ld+json"

    def test_invalid_did(self, test_client: TestClient) -> None:
        resp = test_client.get("/api/v1/did/did:nostr:xyz")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalidDid"

    def test_not_found(self, test_client: TestClient, auth_server: AuthServer, pubkey: str) -> None:
        failure = DidResolutionResult.failure("notFound", "No document")
        with patch.object(auth_server._resolver, "resolve", new_callable=AsyncMock, return_value=failure):
            resp = test_client.get(f"/api/v1/did/did:nostr:{pubkey}")
        assert resp.status_code == 404
        assert resp.json()["error"] == {"code": "notFound", "message": "No document"}


# ============================================================================
# Error Boundary and Middleware
# ============================================================================


class TestErrorBoundary:
    def test_unhandled_exception_returns_json_500(
        self, test_client: TestClient, auth_server: AuthServer, pubkey: str
    ) -> None:
        with patch.object(
            auth_server._resolver,
            "resolve",
            new_callable=AsyncMock,
            side_effect=RuntimeError("unexpected failure"),
        ):
            resp = test_client.get(f"/api/v1/did/did:nostr:{pubkey}")

        assert resp.status_code == 500
        assert resp.json()["error"] == {"code": "INTERNAL_ERROR", "message": "Internal server error"}

    def test_cors(self) -> None:
        client = TestClient(create_app(AuthServerConfig(cors_origins=["https://app.example.com"])))
        resp = client.get("/health", headers={"Origin": "https://app.example.com"})
        assert resp.headers["access-control-allow-origin"] == "https://app.example.com"

    def test_no_cors_by_default(self, test_client: TestClient) -> None:
        resp = test_client.get("/health", headers={"Origin": "https://app.example.com"})
        assert "access-control-allow-origin" not in resp.headers

    def test_custom_prefix(self) -> None:
        client = TestClient(create_app(AuthServerConfig(prefix="auth/")))
        assert client.post("/auth/nostr/challenge").status_code == 200
        assert client.post(CHALLENGE).status_code == 404


# ============================================================================
# Factory Methods
# ============================================================================


class TestFactoryMethods:
    def test_defaults(self) -> None:
        server = AuthServer()
        assert server.config == AuthServerConfig()

    def test_from_dict(self) -> None:
        server = AuthServer.from_dict({"port": 9000, "nip05": {"timeout": 5}})
        assert server.config.port == 9000
        assert server.config.nip05.timeout == 5

    def test_from_yaml(self, tmp_path) -> None:
        path = tmp_path / "auth_server.yaml"
        path.write_text("host: 0.0.0.0\nport: 9100\ncors_origins:\n  - https://app.example.com\n")
        server = AuthServer.from_yaml(str(path))
        assert server.config.host == "0.0.0.0"
        assert server.config.port == 9100
        assert server.config.cors_origins == ["https://app.example.com"]

    def test_create_app(self) -> None:
        assert isinstance(create_app(), FastAPI)

    async def test_serve_runs_uvicorn(self) -> None:
        server = AuthServer(AuthServerConfig(port=9123))
        with patch("nostrid.services.auth_server.service.uvicorn.Server") as server_cls:
            server_cls.return_value.serve = AsyncMock()
            await server.serve()
        config = server_cls.call_args.args[0]
        assert config.port == 9123
        server_cls.return_value.serve.assert_awaited_once()

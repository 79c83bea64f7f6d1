"""Shared fixtures for services.auth_server test package."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from nostr_sdk import Keys

from nostrid.nips.nip01.events import event_to_dict
from nostrid.nips.nip05.verifier import Nip05Verifier
from nostrid.nips.nip42.challenge import build_challenge_response
from nostrid.services.auth_server import AuthServer, AuthServerConfig, ChallengeStore


@pytest.fixture
def server_config() -> AuthServerConfig:
    return AuthServerConfig(metrics={"enabled": True})


@pytest.fixture
def mock_verifier() -> MagicMock:
    """NIP-05 verifier that rejects every identifier unless reconfigured."""
    verifier = MagicMock(spec=Nip05Verifier)
    verifier.verify = AsyncMock(return_value=None)
    return verifier


@pytest.fixture
def challenge_store() -> ChallengeStore:
    return ChallengeStore()


@pytest.fixture
def auth_server(
    server_config: AuthServerConfig,
    mock_verifier: MagicMock,
    challenge_store: ChallengeStore,
) -> AuthServer:
    return AuthServer(server_config, verifier=mock_verifier, challenges=challenge_store)


@pytest.fixture
def test_client(auth_server: AuthServer) -> TestClient:
    """FastAPI TestClient from the auth server."""
    return TestClient(auth_server.build_app())


@pytest.fixture
def sign_challenge(keys: Keys) -> Any:
    """Sign a kind 22242 response for a challenge dict as returned by the API."""

    def sign(challenge: dict[str, Any], relay: str | None = None, signer_keys: Keys | None = None) -> dict:
        builder = build_challenge_response(challenge["challenge"], relay or challenge["relay"])
        return event_to_dict(builder.sign_with_keys(signer_keys or keys))

    return sign

"""
Pytest configuration and shared fixtures for nostrid tests.

Provides:
- Known key vectors (hex, nsec, npub) and freshly generated ``Keys``
- A controllable clock for TTL cache tests
- A factory for mocked ``aiohttp.ClientSession`` context managers
"""

from __future__ import annotations

import json
import logging
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from nostr_sdk import Keys

from nostrid.nips.nip01.signer import LocalKeySigner


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Key Vectors
# ============================================================================

# Valid secp256k1 test keys (DO NOT USE IN PRODUCTION)
PRIVATE_KEY_HEX = "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret
PRIVATE_KEY_NSEC = "nsec1vl029mgpspedva04g90vltkh6fvh240zqtv9k0t9af8935ke9laqsnlfe5"  # pragma: allowlist secret
PUBLIC_KEY_HEX = "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"
PUBLIC_KEY_NPUB = "npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg"


@pytest.fixture
def key_vectors() -> dict[str, str]:
    """NIP-19 reference vectors for one private and one public key."""
    return {
        "private_hex": PRIVATE_KEY_HEX,
        "nsec": PRIVATE_KEY_NSEC,
        "public_hex": PUBLIC_KEY_HEX,
        "npub": PUBLIC_KEY_NPUB,
    }


@pytest.fixture
def keys() -> Keys:
    """A freshly generated key pair."""
    return Keys.generate()


@pytest.fixture
def pubkey(keys: Keys) -> str:
    """Hex public key of the ``keys`` fixture."""
    return keys.public_key().to_hex()


@pytest.fixture
def signer(keys: Keys) -> LocalKeySigner:
    """Local signer over the ``keys`` fixture."""
    return LocalKeySigner(keys)


# ============================================================================
# Clock
# ============================================================================


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# aiohttp Mocks
# ============================================================================


def _mock_response(status: int, body: Any) -> MagicMock:
    raw = body if isinstance(body, bytes) else json.dumps(body).encode()
    resp = MagicMock()
    resp.status = status
    content = MagicMock()
    content.read = AsyncMock(side_effect=[raw, b""])
    resp.content = content
    return resp


@pytest.fixture
def mock_http() -> Any:
    """Factory building a mocked ``aiohttp.ClientSession`` class.

    ``mock_http(status, body)`` returns a callable suitable for
    ``patch("<module>.aiohttp.ClientSession", ...)``. ``get``, ``head`` and
    ``request`` on the session all answer with the given status and JSON
    body (or raw bytes). The session mock is reachable as ``.session``.
    """

    def factory(status: int = 200, body: Any = None) -> MagicMock:
        def respond(*_args: Any, **_kwargs: Any) -> MagicMock:
            ctx = MagicMock()
            ctx.__aenter__ = AsyncMock(return_value=_mock_response(status, body or {}))
            ctx.__aexit__ = AsyncMock(return_value=False)
            return ctx

        session = MagicMock()
        session.get = MagicMock(side_effect=respond)
        session.head = MagicMock(side_effect=respond)
        session.request = MagicMock(side_effect=respond)

        session_ctx = MagicMock()
        session_ctx.__aenter__ = AsyncMock(return_value=session)
        session_ctx.__aexit__ = AsyncMock(return_value=False)

        session_cls = MagicMock(return_value=session_ctx)
        session_cls.session = session
        return session_cls

    return factory

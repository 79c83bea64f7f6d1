"""Wire bodies of the Nostr login exchange.

Shared by the auth server (which validates requests) and the auth client
(which builds requests and interprets replies). All server replies use the
envelope ``{"success": bool, "data": ..., "error": {"code", "message"}}``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChallengeRequest(BaseModel):
    """Body of ``POST /nostr/challenge``. The relay is optional."""

    relay: str | None = Field(default=None, max_length=2048)


class LoginRequest(BaseModel):
    """Body of ``POST /nostr/login``."""

    model_config = ConfigDict(populate_by_name=True)

    pubkey: str = Field(pattern=r"^[0-9a-fA-F]{64}$")
    signed_event: dict[str, Any] = Field(alias="signedEvent")
    nip05: str | None = Field(default=None, max_length=320)


class RefreshRequest(BaseModel):
    """Body of ``POST /nostr/refresh``."""

    refresh_token: str = Field(min_length=1, max_length=256)


class ErrorBody(BaseModel):
    code: str
    message: str


class LoginResponse(BaseModel):
    """Outcome of a login attempt as seen by the client."""

    success: bool
    user: dict[str, Any] | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    error: str | None = None


def ok_envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error_envelope(code: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": ErrorBody(code=code, message=message).model_dump()}

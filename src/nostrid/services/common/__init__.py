"""Types shared by the auth server and the auth client."""

from .models import (
    ChallengeRequest,
    ErrorBody,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    error_envelope,
    ok_envelope,
)


__all__ = [
    "ChallengeRequest",
    "ErrorBody",
    "LoginRequest",
    "LoginResponse",
    "RefreshRequest",
    "error_envelope",
    "ok_envelope",
]

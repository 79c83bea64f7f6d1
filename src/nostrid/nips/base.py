"""
Shared result types for the authentication protocols.

    [AuthFailure][nostrid.nips.base.AuthFailure]
        Closed set of reasons a challenge response or a signed HTTP request
        is rejected.
    [AuthResult][nostrid.nips.base.AuthResult]
        Outcome of a verification, with valid/error semantic validation.

Both [nostrid.nips.nip42][nostrid.nips.nip42] and
[nostrid.nips.nip98][nostrid.nips.nip98] return an ``AuthResult`` instead
of raising, so that every protocol violation reaches the caller as data
and the caller must decide (fail closed) what to do with it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, StrictBool, model_validator


class AuthFailure(StrEnum):
    """Reasons an authentication event is rejected.

    The string values are the user-visible error messages.
    """

    CHALLENGE_EXPIRED = "Challenge expired"
    INVALID_KIND = "Invalid event kind"
    INVALID_SIGNATURE = "Invalid signature"
    CHALLENGE_MISMATCH = "Challenge mismatch"
    RELAY_MISMATCH = "Relay mismatch"
    TIMESTAMP_OUT_OF_RANGE = "Event timestamp out of range"
    MISSING_URL = "Missing URL tag"
    URL_MISMATCH = "URL mismatch"
    INVALID_URL = "Invalid URL format"
    MISSING_METHOD = "Missing method tag"
    METHOD_MISMATCH = "Method mismatch"
    PAYLOAD_MISMATCH = "Payload hash mismatch"
    INVALID_HEADER = "Invalid authorization header"


class AuthResult(BaseModel):
    """Outcome of an authentication check.

    Enforces consistency between ``valid``, ``pubkey`` and ``error``:

    * When ``valid=True``, ``pubkey`` is required and ``error`` must be ``None``.
    * When ``valid=False``, ``error`` is required.

    A failed result may still carry the event author's ``pubkey`` for
    logging, but callers must never treat it as authenticated.
    """

    model_config = ConfigDict(frozen=True)

    valid: StrictBool
    pubkey: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def validate_semantic(self) -> Self:
        """Enforce valid/pubkey/error consistency."""
        if self.valid and self.error is not None:
            raise ValueError("error must be None when valid is True")
        if self.valid and not self.pubkey:
            raise ValueError("pubkey is required when valid is True")
        if not self.valid and self.error is None:
            raise ValueError("error is required when valid is False")
        return self

    @classmethod
    def ok(cls, pubkey: str) -> Self:
        return cls(valid=True, pubkey=pubkey)

    @classmethod
    def fail(cls, error: AuthFailure | str, pubkey: str | None = None) -> Self:
        return cls(valid=False, error=str(error), pubkey=pubkey)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary, excluding fields with ``None`` values."""
        return self.model_dump(exclude_none=True)

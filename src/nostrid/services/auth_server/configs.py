"""Auth server configuration models.

See Also:
    [AuthServer][nostrid.services.auth_server.service.AuthServer]: The
        service class that consumes these configurations.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from nostrid.core.metrics import MetricsConfig
from nostrid.models.constants import CHALLENGE_TTL
from nostrid.nips.nip05.verifier import Nip05Config


class AuthServerConfig(BaseModel):
    """Configuration for the auth server.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port for the HTTP server.
        prefix: URL prefix of the auth routes (``{prefix}/nostr/...``).
        cors_origins: Allowed CORS origins. Empty list disables CORS.
        challenge_ttl: Lifetime of an issued challenge in seconds.
        public_url: Externally visible base URL (``https://api.example.com``).
            NIP-98 events sign the URL the client called, so behind a reverse
            proxy this must be set; otherwise the request URL is used as seen.
        token_ttl: Lifetime of issued access tokens in seconds.
        refresh_token_ttl: Lifetime of issued refresh tokens in seconds.
        nip05: NIP-05 verifier settings.
        metrics: Prometheus route settings.
    """

    host: str = Field(default="127.0.0.1", min_length=1, description="HTTP bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP port")
    prefix: str = Field(default="/api/v1/auth", min_length=1)
    cors_origins: list[str] = Field(default_factory=list)
    challenge_ttl: int = Field(default=CHALLENGE_TTL, ge=10, le=3600)
    public_url: str | None = None
    token_ttl: int = Field(default=3600, ge=60)
    refresh_token_ttl: int = Field(default=604_800, ge=60)
    nip05: Nip05Config = Field(default_factory=Nip05Config)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @field_validator("prefix")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            msg = "prefix must not be empty"
            raise ValueError(msg)
        return f"/{v}"

    @field_validator("public_url")
    @classmethod
    def _strip_public_url(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else None

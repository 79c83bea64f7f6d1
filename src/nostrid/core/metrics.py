"""
Prometheus metrics for identity verification and authentication.

Defines module-level metric objects (singletons, thread-safe) shared by the
NIP-05 verifier and the auth server. The auth server exposes them through
its ``/metrics`` route when [MetricsConfig][nostrid.core.metrics.MetricsConfig]
enables it; library callers that never start a server simply accumulate
values in the default registry.

Architecture:
    NIP05_LOOKUPS:   Counter of NIP-05 verifications by outcome
                     (``verified``, ``rejected``, ``unreachable``, ``mismatch``).
    AUTH_ATTEMPTS:   Counter of authentication attempts by flow
                     (``challenge``, ``http``, ``refresh``) and outcome
                     (``success``, ``invalid_token`` or an
                     [AuthFailure][nostrid.nips.base.AuthFailure] name).
    CACHE_SIZE:      Gauge of live entries per cache (``nip05``, ``did``,
                     ``challenge``).
"""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class MetricsConfig(BaseModel):
    """Configuration for the Prometheus metrics route of the auth server."""

    enabled: bool = Field(default=False, description="Expose the metrics route")
    path: str = Field(default="/metrics", pattern=r"^/", description="Metrics route path")


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

NIP05_LOOKUPS = Counter(
    "nostrid_nip05_lookups_total",
    "NIP-05 identifier verifications by outcome",
    ["result"],
)

AUTH_ATTEMPTS = Counter(
    "nostrid_auth_attempts_total",
    "Authentication attempts by flow and outcome",
    ["flow", "outcome"],
)

CACHE_SIZE = Gauge(
    "nostrid_cache_entries",
    "Number of live entries per cache",
    ["cache"],
)


# ---------------------------------------------------------------------------
# Exposition
# ---------------------------------------------------------------------------


def render_metrics() -> tuple[bytes, str]:
    """Return the Prometheus text exposition and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST

"""Core layer: exceptions, logging, configuration loading, caching, metrics.

Depends on nothing else in ``nostrid`` and is used by every other layer.

Attributes:
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][nostrid.core.logger.Logger].
    TTLCache: Lock-guarded time-to-live cache injected into verifiers and
        resolvers. See [TTLCache][nostrid.core.cache.TTLCache].
    YAML: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][nostrid.core.yaml.load_yaml].
    Metrics: Prometheus counters and gauges.
        See [nostrid.core.metrics][nostrid.core.metrics].

See Also:
    [nostrid.core.exceptions][nostrid.core.exceptions]: The exception tree.
"""

from .cache import DEFAULT_CACHE_TTL, CacheEntry, TTLCache
from .exceptions import (
    AuthenticationError,
    Bech32Error,
    ChecksumError,
    ConfigurationError,
    ConnectivityError,
    DidError,
    EncodingError,
    FetchTimeoutError,
    KeyFormatError,
    NostridError,
    ProtocolError,
    SigningError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs, short_key
from .metrics import AUTH_ATTEMPTS, CACHE_SIZE, NIP05_LOOKUPS, MetricsConfig, render_metrics
from .yaml import load_yaml


__all__ = [
    "AUTH_ATTEMPTS",
    "CACHE_SIZE",
    "DEFAULT_CACHE_TTL",
    "NIP05_LOOKUPS",
    "AuthenticationError",
    "Bech32Error",
    "CacheEntry",
    "ChecksumError",
    "ConfigurationError",
    "ConnectivityError",
    "DidError",
    "EncodingError",
    "FetchTimeoutError",
    "KeyFormatError",
    "Logger",
    "MetricsConfig",
    "NostridError",
    "ProtocolError",
    "SigningError",
    "StructuredFormatter",
    "TTLCache",
    "format_kv_pairs",
    "load_yaml",
    "render_metrics",
    "short_key",
]

"""Utility layer: bounded HTTP reads, URL normalization, key loading.

Depends on ``nostrid.core`` and third-party libraries only; importable from
both ``nostrid.nips`` and ``nostrid.services``.
"""

from .http import DEFAULT_MAX_RESPONSE_SIZE, is_success, read_bounded_json
from .keys import ENV_PRIVATE_KEY, KeysConfig, load_keys_from_env
from .url import normalize_http_url, normalize_relay_url


__all__ = [
    "DEFAULT_MAX_RESPONSE_SIZE",
    "ENV_PRIVATE_KEY",
    "KeysConfig",
    "is_success",
    "load_keys_from_env",
    "normalize_http_url",
    "normalize_relay_url",
    "read_bounded_json",
]

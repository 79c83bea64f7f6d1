"""Private key loading from the environment.

Signing commands (``nostrid auth-header``, the auth client) need a private
key. It is read from an environment variable, hex or ``nsec``, and turned
into a ``nostr_sdk.Keys`` at configuration time so a bad key fails at
startup rather than on the first request.

Warning:
    Private keys must never be stored in configuration files or logged.
    [KeysConfig][nostrid.utils.keys.KeysConfig] excludes the loaded keys
    from serialization and ``repr``.

Examples:
    ```python
    os.environ["NOSTRID_PRIVATE_KEY"] = "nsec1..."  # pragma: allowlist secret
    signer = LocalKeySigner(load_keys_from_env("NOSTRID_PRIVATE_KEY"))
    ```
"""

from __future__ import annotations

import os
from typing import Any

from nostr_sdk import Keys, NostrSdkError
from pydantic import BaseModel, ConfigDict, Field, model_validator

from nostrid.core.exceptions import ConfigurationError


ENV_PRIVATE_KEY = "NOSTRID_PRIVATE_KEY"  # pragma: allowlist secret


def load_keys_from_env(env_var: str = ENV_PRIVATE_KEY) -> Keys:
    """Load Nostr keys from an environment variable.

    Args:
        env_var: Name of the environment variable holding a hex or nsec key.

    Returns:
        A ``nostr_sdk.Keys`` instance ready for signing.

    Raises:
        ConfigurationError: If the variable is unset, empty, or not a valid key.
    """
    value = os.getenv(env_var, "").strip()
    if not value:
        raise ConfigurationError(
            f"{env_var} environment variable is required. Generate one with: nostrid keygen"
        )
    try:
        return Keys.parse(value)
    except NostrSdkError as e:
        raise ConfigurationError(f"{env_var} does not hold a valid private key") from e


class KeysConfig(BaseModel):
    """Pydantic model that loads Nostr keys from an environment variable.

    Attributes:
        keys_env: Environment variable name for the private key.
        keys: Loaded ``nostr_sdk.Keys``; populated during validation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    keys_env: str = Field(default=ENV_PRIVATE_KEY, min_length=1)
    keys: Keys = Field(exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _load_keys_from_env(cls, data: Any) -> Any:
        """Populate ``keys`` from the environment unless given explicitly."""
        if isinstance(data, dict) and "keys" not in data:
            data = {**data, "keys": load_keys_from_env(data.get("keys_env", ENV_PRIVATE_KEY))}
        return data

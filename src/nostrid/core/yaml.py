"""YAML configuration loading for nostrid.

Configuration files are parsed with ``yaml.safe_load`` so that YAML tags can
never instantiate arbitrary Python objects. The returned dictionary is not
validated here; callers pass it to a Pydantic model such as
[AuthServerConfig][nostrid.services.auth_server.configs.AuthServerConfig].

Examples:
    ```python
    from nostrid.core.yaml import load_yaml

    config = AuthServerConfig.model_validate(load_yaml("config/auth_server.yaml"))
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration as a dictionary. An empty file yields ``{}``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config root must be a mapping, got {type(data).__name__}: {config_path}"
        )
    return data

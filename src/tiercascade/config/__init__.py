# src/tiercascade/config/__init__.py
"""
Configuration module for the tiercascade library.

Settings come from (lowest to highest precedence):
    - Model defaults
    - The ``[cascade]`` section of a TOML file
    - A pre-parsed dictionary
    - Environment variables with the ``TIERCASCADE_`` prefix, for the
      top-level scalar fields (e.g. ``TIERCASCADE_REDIS_URL``)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import CascadeConfigError
from .models import CascadeOptions, CascadeSettings, ExpirationMode

logger = logging.getLogger(__name__)

ENV_PREFIX = "TIERCASCADE_"
_ENV_FIELDS = ("redis_url", "sqlite_path", "sqlite_table", "memory_max_items")


def load_settings(
    config_dict: dict[str, Any] | None = None,
    config_path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> CascadeSettings:
    """
    Load cascade settings from a dictionary, a TOML file and the environment.

    Args:
        config_dict: Pre-parsed configuration. If it has a ``"cascade"`` key
            that section is used, otherwise the dict itself.
        config_path: Path to a TOML file whose ``[cascade]`` section is read.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Validated CascadeSettings.

    Raises:
        FileNotFoundError: If config_path does not exist.
        CascadeConfigError: If any value fails validation.
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        import tomllib

        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        data = dict(raw.get("cascade", {}))
        logger.debug("Loaded cascade settings from %s", path)

    if config_dict is not None:
        section = config_dict.get("cascade", config_dict)
        data = {**data, **section}

    env = os.environ if environ is None else environ
    for field_name in _ENV_FIELDS:
        value = env.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            data[field_name] = value

    try:
        return CascadeSettings(**data)
    except ValidationError as e:
        raise CascadeConfigError(f"Invalid cascade settings: {e}") from e


__all__ = [
    "CascadeOptions",
    "CascadeSettings",
    "ExpirationMode",
    "load_settings",
]

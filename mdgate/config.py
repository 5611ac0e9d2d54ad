"""Configuration loading for the gateway.

Configuration lives in ``mdgate.yaml`` at the project root. Values in the
file are merged over ``DEFAULT_CONFIG``; command-line flags are applied on
top by the CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "mdgate.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "owner": "RoyalIcing",
    "repo": "Orb",
    "host": "127.0.0.1",
    "port": 8000,
    "git_base_url": "https://github.com",
    "raw_base_url": "https://raw.githubusercontent.com",
    "content_prefix": "site",
    "asset_prefix": "examples",
    "fetch_timeout": 10.0,
    "cache_failures": True,
    "revision": None,
    "site_title": "Orb: Write WebAssembly with Elixir",
    "routes": {},
}


class ConfigError(ValueError):
    """Raised when mdgate.yaml holds a value of the wrong shape."""


def load_config(project_root: Path) -> dict[str, Any]:
    """Load gateway configuration from mdgate.yaml.

    Args:
        project_root: Directory that may contain ``mdgate.yaml``.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If a known key holds a value of the wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    config["routes"] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return _coerce(config)


def _coerce(config: dict[str, Any]) -> dict[str, Any]:
    try:
        config["port"] = int(config["port"])
        config["fetch_timeout"] = float(config["fetch_timeout"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid numeric setting: {exc}") from exc
    if config["fetch_timeout"] <= 0:
        raise ConfigError("fetch_timeout must be positive")
    if not isinstance(config["cache_failures"], bool):
        raise ConfigError("cache_failures must be true or false")
    routes = config.get("routes") or {}
    if not isinstance(routes, dict):
        raise ConfigError("routes must be a mapping of request path to content path")
    config["routes"] = {str(k): str(v) for k, v in routes.items()}
    if config.get("revision") is not None:
        config["revision"] = str(config["revision"])
    return config

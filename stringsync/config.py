#!/usr/bin/env python3
"""
Configuration loading.

Values are layered, later sources winning:
    1. Built-in defaults
    2. YAML config file (--config or STRINGSYNC_CONFIG)
    3. Environment variables (credentials only)
    4. Command line options

Example config file:
```yaml
container_id: iCloud.space.celestia.Celestia
environment: development
key_id: 0123456789abcdef
key_file_path: ~/.cloudkit/eckey.pem
```
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .cloudkit import API_BASE_URL, ApiTokenAuth, ServerKeyAuth
from .errors import ConfigurationError

DEFAULT_CONTAINER_ID = "iCloud.space.celestia.Celestia"
ENVIRONMENTS = ("production", "development")

CONFIG_PATH_VARIABLE = "STRINGSYNC_CONFIG"
ENVIRONMENT_VARIABLES = {
    "STRINGSYNC_API_TOKEN": "api_token",
    "STRINGSYNC_KEY_ID": "key_id",
    "STRINGSYNC_KEY_FILE": "key_file_path",
}


@dataclass
class SyncConfig:
    """Remote store settings and credentials."""
    container_id: str = DEFAULT_CONTAINER_ID
    environment: str = "production"
    database: str = "public"
    base_url: str = API_BASE_URL
    timeout: float = 30.0
    api_token: Optional[str] = None
    key_id: Optional[str] = None
    key_file_path: Optional[str] = None

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}


def _read_config_file(path: Path) -> dict:
    try:
        content = path.expanduser().read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    unknown = set(data) - SyncConfig.field_names()
    if unknown:
        raise ConfigurationError(f"unknown config keys in {path}: {', '.join(sorted(unknown))}")
    return data


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> SyncConfig:
    """
    Build the effective configuration.

    Args:
        path: Optional YAML config file; falls back to $STRINGSYNC_CONFIG
        environ: Environment mapping (defaults to os.environ)
        **overrides: Command line values; None means "not given"

    Returns:
        SyncConfig

    Raises:
        ConfigurationError: On unreadable/invalid files, unknown keys or environment
    """
    environ = os.environ if environ is None else environ
    values: dict = {}

    path = path or environ.get(CONFIG_PATH_VARIABLE)
    if path:
        values.update(_read_config_file(Path(path)))

    for variable, name in ENVIRONMENT_VARIABLES.items():
        if environ.get(variable):
            values[name] = environ[variable]

    unknown = set(overrides) - SyncConfig.field_names()
    if unknown:
        raise ConfigurationError(f"unknown settings: {', '.join(sorted(unknown))}")
    values.update({name: value for name, value in overrides.items() if value is not None})

    config = SyncConfig(**values)
    if config.environment not in ENVIRONMENTS:
        raise ConfigurationError(
            f"unknown environment '{config.environment}' (expected one of: {', '.join(ENVIRONMENTS)})"
        )
    return config


def resolve_auth(config: SyncConfig):
    """
    Pick the authentication method.

    A key pair (key ID + key file) takes precedence over an API token.

    Raises:
        ConfigurationError: If neither is configured
    """
    if config.key_id and config.key_file_path:
        return ServerKeyAuth.from_file(config.key_id, os.path.expanduser(config.key_file_path))
    if config.api_token:
        return ApiTokenAuth(config.api_token)
    raise ConfigurationError("No authentication method is provided")

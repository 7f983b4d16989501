from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import log_level, parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    AudioSettings,
    LoggingSettings,
    NotificationSettings,
    ShortcutSettings,
    StorageSettings,
)

CONFIG_FILE_ENV = "APP_CONFIG_FILE"

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "AudioSettings",
    "LoggingSettings",
    "NotificationSettings",
    "ShortcutSettings",
    "StorageSettings",
    "load_app_config",
    "log_level",
    "resolve_config_path",
]


def resolve_config_path(
    config_path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    env = environ if environ is not None else os.environ
    raw = config_path or env.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def load_app_config(
    config_path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """Load `config.toml`; a missing default file yields the built-in defaults."""
    env = environ if environ is not None else os.environ
    explicit = bool(config_path or env.get(CONFIG_FILE_ENV))
    path = resolve_config_path(config_path, environ=env)

    if not path.exists():
        if explicit:
            raise AppConfigurationError(f"Config file not found: {path}")
        return parse_app_config({}, base_dir=Path.cwd(), source_file=None)
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))

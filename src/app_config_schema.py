"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class StorageSettings:
    """Location of the JSON key-value store from `[storage]`."""
    path: str


@dataclass(frozen=True)
class AudioSettings:
    """Cue playback settings from `[audio]`."""
    enabled: bool = True
    output_device: Optional[int] = None
    volume: float = 0.5


@dataclass(frozen=True)
class NotificationSettings:
    """Desktop notification settings from `[notifications]`."""
    enabled: bool = True
    backend: str = "auto"


@dataclass(frozen=True)
class ShortcutSettings:
    """Key monitoring settings from `[shortcuts]`."""
    terminal_keys: bool = True
    terminal_meta_modifiers: tuple[str, ...] = ("command", "option")
    capability_poll_seconds: float = 2.0


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    storage: StorageSettings
    audio: AudioSettings
    notifications: NotificationSettings
    shortcuts: ShortcutSettings
    logging: LoggingSettings
    source_file: Optional[str]

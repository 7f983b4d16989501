"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    AudioSettings,
    LoggingSettings,
    NotificationSettings,
    ShortcutSettings,
    StorageSettings,
)
from shortcuts.constants import RECOGNIZED_MODIFIERS
from storage import default_store_path

_ALLOWED_NOTIFICATION_BACKENDS = {"auto", "log"}
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: Optional[str],
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        storage=_parse_storage_settings(_section(raw, "storage"), base_dir=base_dir),
        audio=_parse_audio_settings(_section(raw, "audio")),
        notifications=_parse_notification_settings(_section(raw, "notifications")),
        shortcuts=_parse_shortcut_settings(_section(raw, "shortcuts")),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_storage_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StorageSettings:
    path = _as_str(section.get("path", ""), "storage.path")
    return StorageSettings(
        path=_resolve_path(base_dir, path) if path else str(default_store_path()),
    )


def _parse_audio_settings(section: Mapping[str, Any]) -> AudioSettings:
    volume = _as_float(section.get("volume", 0.5), "audio.volume")
    if not 0.0 <= volume <= 1.0:
        raise AppConfigurationError("audio.volume must be between 0 and 1.")
    return AudioSettings(
        enabled=_as_bool(section.get("enabled", True), "audio.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "audio.output_device")
            if "output_device" in section
            else None
        ),
        volume=volume,
    )


def _parse_notification_settings(section: Mapping[str, Any]) -> NotificationSettings:
    return NotificationSettings(
        enabled=_as_bool(section.get("enabled", True), "notifications.enabled"),
        backend=_as_choice(
            section.get("backend", "auto"),
            "notifications.backend",
            _ALLOWED_NOTIFICATION_BACKENDS,
        ),
    )


def _parse_shortcut_settings(section: Mapping[str, Any]) -> ShortcutSettings:
    poll_seconds = _as_float(
        section.get("capability_poll_seconds", 2.0),
        "shortcuts.capability_poll_seconds",
    )
    if poll_seconds <= 0:
        raise AppConfigurationError("shortcuts.capability_poll_seconds must be > 0.")
    return ShortcutSettings(
        terminal_keys=_as_bool(
            section.get("terminal_keys", True),
            "shortcuts.terminal_keys",
        ),
        terminal_meta_modifiers=_as_modifiers(
            section.get("terminal_meta_modifiers", ["command", "option"]),
            "shortcuts.terminal_meta_modifiers",
        ),
        capability_poll_seconds=poll_seconds,
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper()
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def log_level(settings: LoggingSettings) -> int:
    return logging.getLevelName(settings.level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_modifiers(value: Any, field: str) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise AppConfigurationError(f"{field} must be a non-empty list of modifier names.")
    names = []
    for item in value:
        name = _as_str(item, field).lower()
        if name not in RECOGNIZED_MODIFIERS:
            joined = ", ".join(sorted(RECOGNIZED_MODIFIERS))
            raise AppConfigurationError(f"{field} entries must be one of: {joined}.")
        if name not in names:
            names.append(name)
    return tuple(names)


def _as_choice(value: Any, field: str, allowed: set[str]) -> str:
    name = _as_str(value, field).lower()
    if name not in allowed:
        joined = ", ".join(sorted(allowed))
        raise AppConfigurationError(f"{field} must be one of: {joined}.")
    return name


def _resolve_path(base_dir: Path, raw: str) -> str:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)

"""User-adjustable timer settings with immediate persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from shared import ListenerList
from storage import KeyValueStore, StorageError

from .constants import (
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    KEY_AUTO_START_BREAKS,
    KEY_AUTO_START_WORK,
    KEY_LONG_BREAK_DURATION,
    KEY_LONG_BREAK_INTERVAL,
    KEY_SHORT_BREAK_DURATION,
    KEY_SOUND_ENABLED,
    KEY_WORK_DURATION,
    MIN_LONG_BREAK_INTERVAL,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
)


@dataclass(frozen=True)
class PomodoroSettings:
    """Immutable view of the current timer settings."""
    work_minutes: int = DEFAULT_WORK_MINUTES
    short_break_minutes: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL
    auto_start_breaks: bool = False
    auto_start_work: bool = False
    sound_enabled: bool = True

    def duration_minutes(self, phase: str) -> int:
        if phase == PHASE_SHORT_BREAK:
            return self.short_break_minutes
        if phase == PHASE_LONG_BREAK:
            return self.long_break_minutes
        return self.work_minutes

    def duration_seconds(self, phase: str) -> int:
        return self.duration_minutes(phase) * 60


@dataclass(frozen=True)
class SettingsChange:
    """Event emitted after one or more settings fields changed."""
    changed: tuple[str, ...]
    settings: PomodoroSettings


STORAGE_KEYS: dict[str, str] = {
    "work_minutes": KEY_WORK_DURATION,
    "short_break_minutes": KEY_SHORT_BREAK_DURATION,
    "long_break_minutes": KEY_LONG_BREAK_DURATION,
    "long_break_interval": KEY_LONG_BREAK_INTERVAL,
    "auto_start_breaks": KEY_AUTO_START_BREAKS,
    "auto_start_work": KEY_AUTO_START_WORK,
    "sound_enabled": KEY_SOUND_ENABLED,
}

_MINUTE_FIELDS = ("work_minutes", "short_break_minutes", "long_break_minutes")
_BOOL_FIELDS = ("auto_start_breaks", "auto_start_work", "sound_enabled")


class SettingsStore:
    """Owns the persisted settings keys and notifies listeners on change.

    Every setter writes through to the key-value store straight away; a failed
    write is logged and the in-memory value stays in effect for the session.
    """

    def __init__(self, store: KeyValueStore, logger: Optional[logging.Logger] = None):
        self._store = store
        self._logger = logger or logging.getLogger("pomodoro.settings")
        self.changes: ListenerList[SettingsChange] = ListenerList(
            "settings", logger=self._logger
        )
        self._values = self._load()

    @property
    def values(self) -> PomodoroSettings:
        return self._values

    @property
    def work_minutes(self) -> int:
        return self._values.work_minutes

    @work_minutes.setter
    def work_minutes(self, value: int) -> None:
        self.update(work_minutes=value)

    @property
    def short_break_minutes(self) -> int:
        return self._values.short_break_minutes

    @short_break_minutes.setter
    def short_break_minutes(self, value: int) -> None:
        self.update(short_break_minutes=value)

    @property
    def long_break_minutes(self) -> int:
        return self._values.long_break_minutes

    @long_break_minutes.setter
    def long_break_minutes(self, value: int) -> None:
        self.update(long_break_minutes=value)

    @property
    def long_break_interval(self) -> int:
        return self._values.long_break_interval

    @long_break_interval.setter
    def long_break_interval(self, value: int) -> None:
        self.update(long_break_interval=value)

    @property
    def auto_start_breaks(self) -> bool:
        return self._values.auto_start_breaks

    @auto_start_breaks.setter
    def auto_start_breaks(self, value: bool) -> None:
        self.update(auto_start_breaks=value)

    @property
    def auto_start_work(self) -> bool:
        return self._values.auto_start_work

    @auto_start_work.setter
    def auto_start_work(self, value: bool) -> None:
        self.update(auto_start_work=value)

    @property
    def sound_enabled(self) -> bool:
        return self._values.sound_enabled

    @sound_enabled.setter
    def sound_enabled(self, value: bool) -> None:
        self.update(sound_enabled=value)

    def update(self, **changes: Any) -> bool:
        """Apply validated changes; returns False when nothing changed.

        Unknown fields or invalid values reject the whole update.
        """
        validated: dict[str, Any] = {}
        for name, value in changes.items():
            if name not in STORAGE_KEYS:
                self._logger.debug("Ignoring unknown setting: %s", name)
                return False
            coerced = _validate(name, value)
            if coerced is None:
                self._logger.debug("Ignoring invalid value for %s: %r", name, value)
                return False
            validated[name] = coerced

        changed = tuple(
            name for name, value in validated.items() if getattr(self._values, name) != value
        )
        if not changed:
            return False

        self._values = replace(self._values, **{name: validated[name] for name in changed})
        for name in changed:
            self._persist(STORAGE_KEYS[name], getattr(self._values, name))

        self._logger.info(
            "Settings updated: %s",
            ", ".join(f"{name}={getattr(self._values, name)}" for name in changed),
        )
        self.changes.emit(SettingsChange(changed=changed, settings=self._values))
        return True

    def reset_to_defaults(self) -> bool:
        """Restore durations, interval, and auto-start flags; sound stays as chosen."""
        defaults = PomodoroSettings()
        return self.update(
            work_minutes=defaults.work_minutes,
            short_break_minutes=defaults.short_break_minutes,
            long_break_minutes=defaults.long_break_minutes,
            long_break_interval=defaults.long_break_interval,
            auto_start_breaks=defaults.auto_start_breaks,
            auto_start_work=defaults.auto_start_work,
        )

    def duration_seconds(self, phase: str) -> int:
        return self._values.duration_seconds(phase)

    def _load(self) -> PomodoroSettings:
        defaults = PomodoroSettings()
        loaded: dict[str, Any] = {}
        for field in fields(PomodoroSettings):
            key = STORAGE_KEYS[field.name]
            try:
                raw = self._store.get(key)
            except StorageError as error:
                self._logger.warning("Failed to read %s, using default: %s", key, error)
                continue
            if raw is None:
                continue
            value = _validate(field.name, raw)
            if value is None:
                self._logger.warning("Invalid persisted value for %s: %r", key, raw)
                continue
            loaded[field.name] = value
        return replace(defaults, **loaded)

    def _persist(self, key: str, value: Any) -> None:
        try:
            self._store.set(key, value)
        except StorageError as error:
            self._logger.warning("Failed to persist %s: %s", key, error)


def _validate(name: str, value: Any) -> Any:
    if name in _BOOL_FIELDS:
        return value if isinstance(value, bool) else None

    # bool is an int subclass; never accept it as a duration.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    number = int(value)

    if name in _MINUTE_FIELDS:
        return number if number > 0 else None
    if name == "long_break_interval":
        return number if number >= MIN_LONG_BREAK_INTERVAL else None
    return None

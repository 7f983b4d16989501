"""Local key-value persistence shared by tasks, settings, and shortcuts."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

from platformdirs import user_data_dir

from .errors import StorageReadError, StorageWriteError

APP_DATA_NAME = "pomodoro-menubar"
DEFAULT_STORE_FILE = "defaults.json"

_MISSING = object()


def default_store_path() -> Path:
    return Path(user_data_dir(APP_DATA_NAME)) / DEFAULT_STORE_FILE


class KeyValueStore(Protocol):
    """String-keyed store holding JSON-compatible values."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Volatile store used by tests and when no data directory is writable."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._values: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self._values[key] = _roundtrip(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key, _MISSING)
        if value is _MISSING:
            return default
        return _roundtrip(key, value)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = _roundtrip(key, value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._values)


class JsonFileStore:
    """Single JSON document on disk; every write replaces the file atomically."""

    def __init__(self, path: Path | str, logger: Optional[logging.Logger] = None):
        self._path = Path(path).expanduser()
        self._logger = logger or logging.getLogger("storage")
        self._values: Optional[dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        values = self._loaded()
        value = values.get(key, _MISSING)
        if value is _MISSING:
            return default
        return _roundtrip(key, value)

    def set(self, key: str, value: Any) -> None:
        encoded = _roundtrip(key, value)
        values = self._loaded()
        values[key] = encoded
        self._flush(values)

    def delete(self, key: str) -> None:
        values = self._loaded()
        if key not in values:
            return
        del values[key]
        self._flush(values)

    def _loaded(self) -> dict[str, Any]:
        if self._values is not None:
            return self._values

        if not self._path.exists():
            self._values = {}
            return self._values

        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, ValueError) as error:
            raise StorageReadError(f"Failed to read store {self._path}: {error}") from error

        if not isinstance(raw, dict):
            raise StorageReadError(f"Store root must be a JSON object: {self._path}")

        self._values = raw
        self._logger.debug("Loaded %d keys from %s", len(raw), self._path)
        return self._values

    def _flush(self, values: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                dir=str(self._path.parent),
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(values, fh, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as error:
            raise StorageWriteError(f"Failed to write store {self._path}: {error}") from error


def _roundtrip(key: str, value: Any) -> Any:
    # Values are stored as detached JSON copies so callers never share state with the store.
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as error:
        raise StorageWriteError(f"Value for {key!r} is not JSON serializable: {error}") from error

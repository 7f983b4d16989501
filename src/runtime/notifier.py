"""Desktop notification backends."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import threading
from typing import Callable, Optional, Sequence

BACKEND_AUTO = "auto"
BACKEND_LOG = "log"
NOTIFICATION_BACKENDS = frozenset({BACKEND_AUTO, BACKEND_LOG})

_COMMAND_TIMEOUT_SECONDS = 5.0


class LoggingNotifier:
    """Writes notifications to the log only."""
    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("runtime.notifier")

    def notify(self, title: str, body: str) -> None:
        self._logger.info("Notification: %s - %s", title, body)


class DesktopNotifier:
    """Shows a banner through `osascript` (macOS) or `notify-send` (Linux).

    Every notification is mirrored to the log. The helper runs on a worker
    thread and `notify` returns at once; a missing helper binary or a failed
    subprocess is logged and otherwise ignored.
    """

    def __init__(
        self,
        *,
        platform: Optional[str] = None,
        runner: Optional[Callable[..., object]] = None,
        which: Optional[Callable[[str], Optional[str]]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._platform = platform or sys.platform
        self._run = runner or subprocess.run
        self._which = which or shutil.which
        self._logger = logger or logging.getLogger("runtime.notifier")
        self._workers: list[threading.Thread] = []

    def notify(self, title: str, body: str) -> None:
        self._logger.info("Notification: %s - %s", title, body)

        command = self.build_command(title, body)
        if command is None:
            self._logger.debug("No desktop notification helper available")
            return

        self._workers = [worker for worker in self._workers if worker.is_alive()]
        worker = threading.Thread(
            target=self._run_command,
            args=(list(command),),
            name="desktop-notify",
            daemon=True,
        )
        self._workers.append(worker)
        worker.start()

    def close(self, timeout: float = _COMMAND_TIMEOUT_SECONDS) -> None:
        """Wait for helpers that are still running."""
        for worker in self._workers:
            worker.join(timeout)
        self._workers = []

    def build_command(self, title: str, body: str) -> Optional[Sequence[str]]:
        if self._platform == "darwin":
            script = (
                f"display notification {_applescript_string(body)} "
                f"with title {_applescript_string(title)}"
            )
            return ("osascript", "-e", script)

        if self._platform.startswith("linux") and self._which("notify-send"):
            return ("notify-send", title, body)

        return None

    def _run_command(self, command: list[str]) -> None:
        try:
            self._run(
                command,
                check=True,
                capture_output=True,
                timeout=_COMMAND_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.SubprocessError) as error:
            self._logger.warning("Desktop notification failed: %s", error)


def build_notifier(
    backend: str = BACKEND_AUTO,
    *,
    logger: Optional[logging.Logger] = None,
):
    if backend == BACKEND_LOG:
        return LoggingNotifier(logger=logger)
    if backend == BACKEND_AUTO:
        return DesktopNotifier(logger=logger)
    raise ValueError(f"Unknown notification backend: {backend}")


def _applescript_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'

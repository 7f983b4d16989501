"""Capability probes for system-wide key monitoring."""

from __future__ import annotations

import logging
from typing import Optional


class StaticCapabilityProbe:
    """Reports a fixed grant; used when no system-wide monitor is available."""
    def __init__(self, granted: bool = False, logger: Optional[logging.Logger] = None):
        self._granted = granted
        self._logger = logger or logging.getLogger("runtime.capability")

    def is_granted(self) -> bool:
        return self._granted

    def set_granted(self, granted: bool) -> None:
        self._granted = granted

    def request_grant(self) -> None:
        if self._granted:
            return
        self._logger.info(
            "System-wide shortcuts need accessibility permission; "
            "grant it in the system settings and it will be picked up automatically."
        )

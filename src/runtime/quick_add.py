"""Quick-add surface: a toggleable draft line that feeds the task store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from shared import ListenerList
from shortcuts import KeyEvent
from shortcuts.constants import (
    KEY_CODE_DELETE,
    KEY_CODE_ENTER,
    KEY_CODE_ESCAPE,
    KEY_CODE_RETURN,
    KEY_CODE_SPACE,
    MOD_COMMAND,
    MOD_CONTROL,
    MOD_FUNCTION,
    MOD_OPTION,
    MOD_SHIFT,
    SPECIAL_KEY_SYMBOLS,
)
from tasks import MAX_TASK_LENGTH, Task, TaskStore

_COMMAND_MODIFIERS = frozenset({MOD_COMMAND, MOD_CONTROL, MOD_OPTION, MOD_FUNCTION})
# Navigation keys carry a display symbol but produce no text.
_NON_TEXT_KEY_CODES = frozenset(SPECIAL_KEY_SYMBOLS) - {KEY_CODE_SPACE}


@dataclass(frozen=True)
class QuickAddState:
    visible: bool
    draft: str
    last_added: Optional[Task] = None


class QuickAddController:
    """Holds the visibility flag and draft text of the quick-add surface.

    The surface stays open after a task is added so several can be entered in
    a row; escape closes it.
    """

    def __init__(self, task_store: TaskStore, logger: Optional[logging.Logger] = None):
        self._tasks = task_store
        self._logger = logger or logging.getLogger("runtime.quick_add")
        self.changes: ListenerList[QuickAddState] = ListenerList(
            "quick_add", logger=self._logger
        )
        self._visible = False
        self._draft = ""

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def draft(self) -> str:
        return self._draft

    def show(self) -> None:
        if self._visible:
            return
        self._visible = True
        self._emit()

    def hide(self) -> None:
        if not self._visible and not self._draft:
            return
        self._visible = False
        self._draft = ""
        self._emit()

    def toggle(self) -> None:
        if self._visible:
            self.hide()
        else:
            self.show()

    def submit(self) -> Optional[Task]:
        task = self._tasks.add(self._draft)
        if task is None:
            return None
        self._logger.info("Quick-added task: %s", task.text)
        self._draft = ""
        self._emit(last_added=task)
        return task

    def handle_key_event(self, event: KeyEvent) -> bool:
        """Edit the draft from a focused key event; ignored while hidden."""
        if not self._visible:
            return False

        if event.key_code == KEY_CODE_ESCAPE:
            self.hide()
            return True
        if event.key_code in (KEY_CODE_RETURN, KEY_CODE_ENTER):
            self.submit()
            return True
        if event.key_code == KEY_CODE_DELETE:
            if self._draft:
                self._draft = self._draft[:-1]
                self._emit()
            return True

        if event.modifiers & _COMMAND_MODIFIERS:
            return False
        if event.key_code in _NON_TEXT_KEY_CODES:
            return False
        if len(event.key) != 1 or not event.key.isprintable():
            return False
        if len(self._draft) >= MAX_TASK_LENGTH:
            return True

        self._draft += event.key.upper() if _is_shifted_letter(event) else event.key
        self._emit()
        return True

    def _emit(self, last_added: Optional[Task] = None) -> None:
        self.changes.emit(
            QuickAddState(visible=self._visible, draft=self._draft, last_added=last_added)
        )


def _is_shifted_letter(event: KeyEvent) -> bool:
    return MOD_SHIFT in event.modifiers and event.key.isalpha()

"""Ordered task list with write-through persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from itertools import groupby
from typing import Any, Callable, Optional

from shared import ListenerList
from storage import KeyValueStore, StorageError

from .models import MAX_TASK_LENGTH, Task, TaskFormatError

KEY_TODOS = "todos"

CHANGE_ADDED = "added"
CHANGE_TOGGLED = "toggled"
CHANGE_EDITED = "edited"
CHANGE_DELETED = "deleted"
CHANGE_REORDERED = "reordered"
CHANGE_CLEARED = "cleared_completed"


@dataclass(frozen=True)
class TaskListChange:
    """Event emitted after a successful mutation of the task list."""
    kind: str
    tasks: tuple[Task, ...]
    task_id: Optional[str] = None


class TaskStore:
    """Owns the task list; invalid requests are silent no-ops.

    New tasks are appended at the end of the list. Every successful mutation
    persists the whole list under the `todos` key; a failed write is logged and
    the in-memory list remains authoritative.
    """

    def __init__(
        self,
        store: KeyValueStore,
        logger: Optional[logging.Logger] = None,
        *,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._logger = logger or logging.getLogger("tasks")
        self._now = now_fn or (lambda: datetime.now().astimezone())
        self.changes: ListenerList[TaskListChange] = ListenerList(
            "tasks", logger=self._logger
        )
        self._tasks: list[Task] = self._load()

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Optional[Task]:
        index = self._index_of(task_id)
        return self._tasks[index] if index is not None else None

    def add(self, text: str) -> Optional[Task]:
        trimmed = text.strip()
        if not trimmed or len(trimmed) > MAX_TASK_LENGTH:
            self._logger.debug("Rejected task text of length %d", len(trimmed))
            return None

        task = Task.create(trimmed, now=self._now())
        self._tasks.append(task)
        self._commit(CHANGE_ADDED, task.id)
        return task

    def toggle(self, task_id: str) -> Optional[Task]:
        index = self._index_of(task_id)
        if index is None:
            return None

        task = self._tasks[index].toggled(now=self._now())
        self._tasks[index] = task
        self._commit(CHANGE_TOGGLED, task_id)
        return task

    def edit_text(self, task_id: str, new_text: str) -> Optional[Task]:
        index = self._index_of(task_id)
        trimmed = new_text.strip()
        if index is None or not trimmed:
            return None

        task = self._tasks[index].with_text(trimmed)
        self._tasks[index] = task
        self._commit(CHANGE_EDITED, task_id)
        return task

    def delete(self, task_id: str) -> bool:
        index = self._index_of(task_id)
        if index is None:
            return False
        return self.delete_at(index)

    def delete_at(self, index: int) -> bool:
        if not 0 <= index < len(self._tasks):
            return False

        removed = self._tasks.pop(index)
        self._commit(CHANGE_DELETED, removed.id)
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move one task so that it ends up at `to_index`."""
        size = len(self._tasks)
        if not (0 <= from_index < size and 0 <= to_index < size):
            return False
        if from_index == to_index:
            return False

        task = self._tasks.pop(from_index)
        self._tasks.insert(to_index, task)
        self._commit(CHANGE_REORDERED, task.id)
        return True

    def clear_completed(self) -> int:
        remaining = [task for task in self._tasks if not task.is_completed]
        removed = len(self._tasks) - len(remaining)
        if removed == 0:
            return 0

        self._tasks = remaining
        self._commit(CHANGE_CLEARED)
        return removed

    def active_tasks(self) -> list[Task]:
        return [task for task in self._tasks if not task.is_completed]

    def completed_by_day(self) -> list[tuple[date, list[Task]]]:
        """Completed tasks grouped by local completion day, newest day first.

        Within a day the list order is kept.
        """
        completed = [
            task for task in self._tasks if task.is_completed and task.completed_at is not None
        ]
        # sorted() is stable, so tasks of the same day keep their list order.
        ordered = sorted(completed, key=lambda task: _local_day(task), reverse=True)
        return [(day, list(group)) for day, group in groupby(ordered, key=_local_day)]

    def _index_of(self, task_id: str) -> Optional[int]:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    def _commit(self, kind: str, task_id: Optional[str] = None) -> None:
        self._save()
        self._logger.debug("Task list %s (%d tasks)", kind, len(self._tasks))
        self.changes.emit(TaskListChange(kind=kind, tasks=self.tasks, task_id=task_id))

    def _save(self) -> None:
        try:
            self._store.set(KEY_TODOS, [task.to_dict() for task in self._tasks])
        except StorageError as error:
            self._logger.warning("Failed to persist tasks: %s", error)

    def _load(self) -> list[Task]:
        try:
            raw = self._store.get(KEY_TODOS)
        except StorageError as error:
            self._logger.warning("Failed to read tasks, starting empty: %s", error)
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            self._logger.warning("Ignoring malformed task list of type %s", type(raw).__name__)
            return []

        tasks: list[Task] = []
        seen: set[str] = set()
        for entry in raw:
            task = self._decode(entry)
            if task is None:
                continue
            if task.id in seen:
                self._logger.warning("Dropping duplicate task id %s", task.id)
                continue
            seen.add(task.id)
            tasks.append(task)
        self._logger.info("Loaded %d tasks", len(tasks))
        return tasks

    def _decode(self, entry: Any) -> Optional[Task]:
        if not isinstance(entry, dict):
            self._logger.warning("Skipping malformed task entry: %r", entry)
            return None
        try:
            return Task.from_dict(entry)
        except TaskFormatError as error:
            self._logger.warning("Skipping malformed task entry: %s", error)
            return None


def _local_day(task: Task) -> date:
    completed_at = task.completed_at
    if completed_at is None:
        raise ValueError(f"task {task.id} is not completed")
    if completed_at.tzinfo is not None:
        completed_at = completed_at.astimezone()
    return completed_at.date()


def history_label(day: date) -> str:
    """Format a history group heading such as `Monday, Jan 5, 2026`."""
    return f"{day:%A}, {day:%b} {day.day}, {day.year}"

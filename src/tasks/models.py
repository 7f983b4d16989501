"""Task record and its JSON representation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

MAX_TASK_LENGTH = 100

# Numeric timestamps count seconds from the Cocoa reference date.
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


class TaskFormatError(ValueError):
    """Raised when a persisted task record cannot be decoded."""


@dataclass(frozen=True)
class Task:
    """One to-do entry; `completed_at` is set exactly while the task is completed."""
    id: str
    text: str
    is_completed: bool
    created_at: datetime
    completed_at: Optional[datetime] = None

    @classmethod
    def create(cls, text: str, *, now: datetime) -> "Task":
        return cls(
            id=uuid.uuid4().hex,
            text=text,
            is_completed=False,
            created_at=now,
        )

    def toggled(self, *, now: datetime) -> "Task":
        if self.is_completed:
            return replace(self, is_completed=False, completed_at=None)
        return replace(self, is_completed=True, completed_at=now)

    def with_text(self, text: str) -> "Task":
        return replace(self, text=text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "isCompleted": self.is_completed,
            "createdAt": self.created_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Task":
        task_id = raw.get("id")
        if not isinstance(task_id, str) or not task_id:
            raise TaskFormatError("task id must be a non-empty string")

        text = raw.get("text")
        if not isinstance(text, str) or not text.strip():
            raise TaskFormatError(f"task {task_id} has no text")

        is_completed = raw.get("isCompleted", False)
        if not isinstance(is_completed, bool):
            raise TaskFormatError(f"task {task_id} isCompleted must be a boolean")

        created_at = _parse_timestamp(raw.get("createdAt"), f"task {task_id} createdAt")
        completed_raw = raw.get("completedAt")
        completed_at = (
            _parse_timestamp(completed_raw, f"task {task_id} completedAt")
            if completed_raw is not None
            else None
        )

        if is_completed and completed_at is None:
            completed_at = created_at
        if not is_completed:
            completed_at = None

        return cls(
            id=task_id,
            text=text,
            is_completed=is_completed,
            created_at=created_at,
            completed_at=completed_at,
        )


def _parse_timestamp(value: Any, field: str) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as error:
            raise TaskFormatError(f"{field} is not an ISO timestamp: {value!r}") from error
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return (REFERENCE_DATE + timedelta(seconds=value)).astimezone()
        except (OverflowError, OSError, ValueError) as error:
            raise TaskFormatError(f"{field} is out of range: {value!r}") from error
    raise TaskFormatError(f"{field} is missing")

from .models import MAX_TASK_LENGTH, Task, TaskFormatError
from .store import KEY_TODOS, TaskListChange, TaskStore, history_label

__all__ = [
    "KEY_TODOS",
    "MAX_TASK_LENGTH",
    "Task",
    "TaskFormatError",
    "TaskListChange",
    "TaskStore",
    "history_label",
]

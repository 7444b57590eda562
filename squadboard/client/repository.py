# squadboard/client/repository.py
from __future__ import annotations

from typing import Iterable, Optional

from squadboard.client.records import TaskRecord


class TaskRepository:
    """Local task collection shared by every view.

    Iteration order is insertion order; replacing a task keeps its slot.
    """

    def __init__(self, tasks: Iterable[TaskRecord] = ()):
        self._tasks: dict[str, TaskRecord] = {}
        self.load(tasks)

    def load(self, tasks: Iterable[TaskRecord]) -> None:
        self._tasks = {task.id: task for task in tasks}

    def get(self, task_id: str) -> Optional[TaskRecord]:
        return self._tasks.get(task_id)

    def replace(self, task: TaskRecord) -> TaskRecord:
        self._tasks[task.id] = task
        return task

    def prepend(self, task: TaskRecord) -> TaskRecord:
        self._tasks = {task.id: task, **{k: v for k, v in self._tasks.items() if k != task.id}}
        return task

    def remove(self, task_id: str) -> Optional[TaskRecord]:
        return self._tasks.pop(task_id, None)

    def rekey(self, old_id: str, task: TaskRecord) -> TaskRecord:
        """Swap the entry stored under ``old_id`` for ``task`` in the same position."""
        if old_id not in self._tasks:
            return self.replace(task)
        self._tasks = {
            (task.id if key == old_id else key): (task if key == old_id else value)
            for key, value in self._tasks.items()
            if key == old_id or key != task.id
        }
        return task

    def all(self) -> list[TaskRecord]:
        return list(self._tasks.values())

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

"""In-memory TaskStore implementation."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .base import Task, TaskStatus, TaskStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryTaskStore(TaskStore):
    """
    Process-local task store backed by a dict.

    - Ids come from a counter that only moves forward, so deleted ids are never reused.
    - Every read and write works on copies of the stored Task.
    - The clock is injectable so tests can control timestamps.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _utcnow
        self._tasks: Dict[int, Task] = {}
        self._next_id = 1

    async def save(self, task: Task) -> Task:
        now = self._clock()
        if task.id is None:
            stored = replace(task, id=self._next_id, created_at=now, updated_at=now)
            self._next_id += 1
        else:
            existing = self._tasks.get(task.id)
            created_at = existing.created_at if existing else now
            stored = replace(task, created_at=created_at, updated_at=now)
        self._tasks[stored.id] = stored
        return replace(stored)

    async def find_by_id(self, task_id: int) -> Optional[Task]:
        task = self._tasks.get(task_id)
        return replace(task) if task else None

    async def exists_by_id(self, task_id: int) -> bool:
        return task_id in self._tasks

    async def delete_by_id(self, task_id: int) -> None:
        self._tasks.pop(task_id, None)

    async def find_all(self) -> List[Task]:
        return [replace(task) for _, task in sorted(self._tasks.items())]

    async def find_by_status_order_by_created_at_desc(
        self, status: TaskStatus
    ) -> List[Task]:
        matches = [task for task in self._tasks.values() if task.status == status]
        matches.sort(key=lambda task: (task.created_at, task.id), reverse=True)
        return [replace(task) for task in matches]

    async def exists_by_title(self, title: str) -> bool:
        return any(task.title == title for task in self._tasks.values())

    async def count_by_status(self, status: TaskStatus) -> int:
        return sum(1 for task in self._tasks.values() if task.status == status)

    async def count(self) -> int:
        return len(self._tasks)

    async def search_by_keyword(self, keyword: str) -> List[Task]:
        needle = keyword.lower()
        return [
            replace(task)
            for _, task in sorted(self._tasks.items())
            if needle in task.title.lower()
            or (task.description is not None and needle in task.description.lower())
        ]

    async def close(self) -> None:
        """Nothing to release; kept for interface parity."""
        return None

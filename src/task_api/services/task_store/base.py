"""
Task store abstractions and shared types.

This module defines the Task entity, its status enumeration and the core
contract that any task store backend must satisfy so that different
persistence layers (in-memory, Redis, Postgres) can be used interchangeably
by the task service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from task_api.services.errors import InvalidStatusError


class TaskStatus(str, Enum):
    """Enumeration of task lifecycle states."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "TaskStatus":
        """Resolve a free-form string to a status.

        Matching is case-insensitive against either the machine name
        ("in_progress") or the display label ("In Progress"). None or a
        blank string resolves to TODO; anything else raises
        InvalidStatusError.
        """
        if value is None or not value.strip():
            return cls.TODO

        candidate = value.strip().lower()
        for status in cls:
            if candidate in (status.value.lower(), status.display_name.lower()):
                return status
        raise InvalidStatusError(value)


_DISPLAY_NAMES = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.CANCELLED: "Cancelled",
}


@dataclass
class Task:
    """A persisted work item. id and timestamps are owned by the store."""

    title: str
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskStore(ABC):
    """Abstract interface for task persistence backends.

    Backends hand out copies: changing a returned Task has no effect on
    stored state until it is passed back to save().
    """

    @abstractmethod
    async def save(self, task: Task) -> Task:
        """Insert the task when it has no id, otherwise update it.

        Inserts assign id, created_at and updated_at; updates keep
        created_at and refresh updated_at.
        """

    @abstractmethod
    async def find_by_id(self, task_id: int) -> Optional[Task]:
        """Fetch a task by ID."""

    @abstractmethod
    async def exists_by_id(self, task_id: int) -> bool:
        """Return True when a task with this ID exists."""

    @abstractmethod
    async def delete_by_id(self, task_id: int) -> None:
        """Hard-delete a task by ID."""

    @abstractmethod
    async def find_all(self) -> List[Task]:
        """Return every task in insertion order."""

    @abstractmethod
    async def find_by_status_order_by_created_at_desc(
        self, status: TaskStatus
    ) -> List[Task]:
        """Return tasks with the given status, newest first."""

    @abstractmethod
    async def exists_by_title(self, title: str) -> bool:
        """Exact, case-sensitive title lookup."""

    @abstractmethod
    async def count_by_status(self, status: TaskStatus) -> int:
        """Count tasks with the given status."""

    @abstractmethod
    async def count(self) -> int:
        """Count all tasks."""

    @abstractmethod
    async def search_by_keyword(self, keyword: str) -> List[Task]:
        """Case-insensitive substring match on title or description."""

    @abstractmethod
    async def close(self) -> None:
        """Release any underlying resources (connections, pools, etc.)."""

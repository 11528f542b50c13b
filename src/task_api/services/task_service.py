"""
Business rules for tasks: creation, partial updates, deletion, completion,
search and statistics.

The service holds no state of its own. Every operation is a short sequence
of awaited store calls with no transaction spanning them, so a uniqueness
check and the write that follows it can interleave with other requests.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from task_api.services.errors import DuplicateTitleError, TaskNotFoundError
from task_api.services.task_store import Task, TaskStatus, TaskStore, task_store

logger = logging.getLogger(__name__)


@dataclass
class TaskPatch:
    """Fields to apply on top of an existing task. None means "leave as is"."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None


@dataclass(frozen=True)
class TaskStatistics:
    """Per-status counts. Each count is read separately, not from one snapshot."""
    todo_count: int
    in_progress_count: int
    completed_count: int
    cancelled_count: int
    total_count: int


class TaskService:
    """Task lifecycle operations on top of a TaskStore"""

    def __init__(self, task_store: TaskStore = task_store):
        self.task_store = task_store

    async def create_task(self, task: Task) -> Task:
        """
        Persist a new task.

        Raises:
            DuplicateTitleError: another task already has exactly this title
        """
        logger.debug("Creating new task: %s", task.title)
        if await self.task_store.exists_by_title(task.title):
            raise DuplicateTitleError(task.title)

        if task.status is None:
            task.status = TaskStatus.TODO

        saved = await self.task_store.save(task)
        logger.info("Created task with ID: %s", saved.id)
        return saved

    async def get_all_tasks(self) -> List[Task]:
        tasks = await self.task_store.find_all()
        logger.debug("Found %d tasks", len(tasks))
        return tasks

    async def get_task_by_id(self, task_id: int) -> Task:
        task = await self.task_store.find_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def update_task(self, task_id: int, patch: TaskPatch) -> Task:
        """
        Merge the non-None fields of patch into the stored task.

        A blank title is ignored. A changed title is checked for uniqueness
        before it is applied. Description (including "") and status overwrite
        whenever present; any status may follow any other.

        Raises:
            TaskNotFoundError: no task with this ID
            DuplicateTitleError: the new title belongs to another task
        """
        logger.debug("Updating task with ID: %s", task_id)
        existing = await self.get_task_by_id(task_id)

        if patch.title is not None and patch.title.strip():
            if patch.title != existing.title and await self.task_store.exists_by_title(patch.title):
                raise DuplicateTitleError(patch.title)
            existing.title = patch.title

        if patch.description is not None:
            existing.description = patch.description

        if patch.status is not None:
            existing.status = patch.status

        saved = await self.task_store.save(existing)
        logger.info("Updated task with ID: %s", saved.id)
        return saved

    async def delete_task(self, task_id: int) -> None:
        logger.debug("Deleting task with ID: %s", task_id)
        if not await self.task_store.exists_by_id(task_id):
            raise TaskNotFoundError(task_id)
        await self.task_store.delete_by_id(task_id)
        logger.info("Deleted task with ID: %s", task_id)

    async def get_tasks_by_status(self, status: TaskStatus) -> List[Task]:
        logger.debug("Retrieving tasks with status: %s", status.value)
        return await self.task_store.find_by_status_order_by_created_at_desc(status)

    async def search_tasks(self, keyword: Optional[str]) -> List[Task]:
        """Keyword search over title and description; a blank keyword returns every task."""
        logger.debug("Searching tasks with keyword: %s", keyword)
        if keyword is None or not keyword.strip():
            return await self.get_all_tasks()
        return await self.task_store.search_by_keyword(keyword.strip())

    async def complete_task(self, task_id: int) -> Task:
        logger.debug("Marking task as completed: %s", task_id)
        task = await self.get_task_by_id(task_id)
        task.status = TaskStatus.COMPLETED
        saved = await self.task_store.save(task)
        logger.info("Marked task %s as completed", task_id)
        return saved

    async def get_task_statistics(self) -> TaskStatistics:
        logger.debug("Calculating task statistics")
        return TaskStatistics(
            todo_count=await self.task_store.count_by_status(TaskStatus.TODO),
            in_progress_count=await self.task_store.count_by_status(TaskStatus.IN_PROGRESS),
            completed_count=await self.task_store.count_by_status(TaskStatus.COMPLETED),
            cancelled_count=await self.task_store.count_by_status(TaskStatus.CANCELLED),
            total_count=await self.task_store.count(),
        )


# Global task service instance
task_service = TaskService()


def get_task_service() -> TaskService:
    """FastAPI dependency returning the shared service; tests override it."""
    return task_service

"""
Task endpoints: CRUD, completion, search and statistics.
Business failures propagate as typed errors and are rendered by the
exception handlers registered in app.py.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from task_api.models import (
    ApiResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskStatisticsResponse,
    TaskUpdateRequest,
)
from task_api.services.task_service import TaskPatch, TaskService, get_task_service
from task_api.services.task_store import Task, TaskStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=ApiResponse[List[TaskResponse]])
async def list_tasks(
    status_filter: Optional[str] = Query(default=None, alias="status", description="Status name or label"),
    search: Optional[str] = Query(default=None, description="Keyword matched against title and description"),
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[List[TaskResponse]]:
    """
    List tasks.

    A non-blank search wins over a non-blank status filter; with neither,
    every task is returned.
    """
    logger.debug("GET /tasks - status: %s, search: %s", status_filter, search)
    if search is not None and search.strip():
        tasks = await service.search_tasks(search)
    elif status_filter is not None and status_filter.strip():
        tasks = await service.get_tasks_by_status(TaskStatus.parse(status_filter))
    else:
        tasks = await service.get_all_tasks()

    return ApiResponse.ok(
        [TaskResponse.from_task(task) for task in tasks],
        "Tasks retrieved successfully",
    )


# Declared before /{task_id} so "statistics" is not parsed as an id
@router.get("/statistics", response_model=ApiResponse[TaskStatisticsResponse])
async def get_task_statistics(
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskStatisticsResponse]:
    statistics = await service.get_task_statistics()
    return ApiResponse.ok(
        TaskStatisticsResponse.from_statistics(statistics),
        "Task statistics retrieved successfully",
    )


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse])
async def get_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    task = await service.get_task_by_id(task_id)
    return ApiResponse.ok(TaskResponse.from_task(task), "Task retrieved successfully")


@router.post(
    "",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    request: TaskCreateRequest,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """Create a task. A missing or blank status defaults to TODO."""
    logger.debug("POST /tasks - Creating task: %s", request.title)
    task = Task(
        title=request.title,
        description=request.description,
        status=TaskStatus.parse(request.status),
    )
    created = await service.create_task(task)
    return ApiResponse.ok(TaskResponse.from_task(created), "Task created successfully")


@router.put("/{task_id}", response_model=ApiResponse[TaskResponse])
async def update_task(
    task_id: int,
    request: TaskUpdateRequest,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """Apply a partial update; fields left out (or null) keep their current value."""
    patch = TaskPatch(
        title=request.title,
        description=request.description,
        status=(
            TaskStatus.parse(request.status)
            if request.status is not None and request.status.strip()
            else None
        ),
    )
    updated = await service.update_task(task_id, patch)
    return ApiResponse.ok(TaskResponse.from_task(updated), "Task updated successfully")


@router.delete("/{task_id}", response_model=ApiResponse)
async def delete_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse:
    await service.delete_task(task_id)
    return ApiResponse.ok(None, "Task deleted successfully")


@router.patch("/{task_id}/complete", response_model=ApiResponse[TaskResponse])
async def complete_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    task = await service.complete_task(task_id)
    return ApiResponse.ok(TaskResponse.from_task(task), "Task marked as completed")

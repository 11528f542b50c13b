"""
Task request and response models
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from task_api.services.task_service import TaskStatistics
from task_api.services.task_store import Task

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

TITLE_REQUIRED = "Title is required"
TITLE_LENGTH = f"Title must be between 1 and {TITLE_MAX_LENGTH} characters"
DESCRIPTION_LENGTH = f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"


def _check_title_length(value: str) -> str:
    if not 1 <= len(value.strip()) <= TITLE_MAX_LENGTH:
        raise PydanticCustomError("title_length", TITLE_LENGTH)
    return value


def _check_description_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > DESCRIPTION_MAX_LENGTH:
        raise PydanticCustomError("description_length", DESCRIPTION_LENGTH)
    return value


class TaskCreateRequest(BaseModel):
    """Task creation payload. status is parsed later with TaskStatus.parse."""

    title: Optional[str] = Field(None, validate_default=True)
    description: Optional[str] = None
    status: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_present(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise PydanticCustomError("title_required", TITLE_REQUIRED)
        return _check_title_length(value)

    @field_validator("description")
    @classmethod
    def description_size(cls, value: Optional[str]) -> Optional[str]:
        return _check_description_length(value)


class TaskUpdateRequest(BaseModel):
    """Partial update payload; every field is optional"""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_size(cls, value: Optional[str]) -> Optional[str]:
        # whitespace-only titles pass here and are ignored by the service
        if value is None or (value and not value.strip()):
            return value
        return _check_title_length(value)

    @field_validator("description")
    @classmethod
    def description_size(cls, value: Optional[str]) -> Optional[str]:
        return _check_description_length(value)


class TaskResponse(BaseModel):
    """Task view rendered to clients"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    description: Optional[str] = None
    status: str
    status_display: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status.value,
            status_display=task.status.display_name,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskStatisticsResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    todo_count: int
    in_progress_count: int
    completed_count: int
    cancelled_count: int
    total_count: int

    @classmethod
    def from_statistics(cls, statistics: TaskStatistics) -> "TaskStatisticsResponse":
        return cls(
            todo_count=statistics.todo_count,
            in_progress_count=statistics.in_progress_count,
            completed_count=statistics.completed_count,
            cancelled_count=statistics.cancelled_count,
            total_count=statistics.total_count,
        )

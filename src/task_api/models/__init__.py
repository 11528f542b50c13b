from .response import ApiResponse, ErrorResponse
from .task import (
    TaskCreateRequest,
    TaskResponse,
    TaskStatisticsResponse,
    TaskUpdateRequest,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "TaskCreateRequest",
    "TaskResponse",
    "TaskStatisticsResponse",
    "TaskUpdateRequest",
]

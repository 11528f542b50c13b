"""
Typed failures raised by the task service and store layer.
The FastAPI exception handlers in app.py map each one to a status code.
"""


class TaskApiError(Exception):
    """Base class for business-rule failures"""


class TaskNotFoundError(TaskApiError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task not found with ID: {task_id}")


class DuplicateTitleError(TaskApiError):
    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Task with title '{title}' already exists")


class InvalidStatusError(TaskApiError, ValueError):
    """Raised when a status string matches neither a machine name nor a display label."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid task status: {value}")

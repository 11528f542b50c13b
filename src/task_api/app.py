"""
To launch:
uvicorn task_api.app:app --reload
"""
from task_api.utils import load_local_env

load_local_env()

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_api import __version__
from task_api.models import ErrorResponse
from task_api.routes import api_router
from task_api.services.errors import DuplicateTitleError, InvalidStatusError, TaskNotFoundError
from task_api.services.sample_data import seed_sample_tasks, seeding_enabled
from task_api.services.task_store import task_store

logger = logging.getLogger("task_api")
logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())


# Configure uvicorn access logger to drop health probe noise
class HealthPingFilter(logging.Filter):
    def filter(self, record):
        if hasattr(record, 'scope') and record.scope.get('path', '').endswith('/health/ping'):
            return False
        if '/health/ping' in str(record.getMessage()):
            return False
        return True


uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.addFilter(HealthPingFilter())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown"""
    # Startup
    if seeding_enabled():
        await seed_sample_tasks(task_store)
    yield
    # Shutdown: cleanup connections
    await task_store.close()


app = FastAPI(
    title="Task Management API",
    description="CRUD, search and statistics for tasks",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
        if origin.strip()
    ],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


def _error(status_code: int, message: str, errors=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, errors=errors).to_content(),
    )


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


@app.exception_handler(TaskNotFoundError)
async def task_not_found_handler(request: Request, exc: TaskNotFoundError):
    logger.warning("Task not found: %s", exc)
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(DuplicateTitleError)
async def duplicate_title_handler(request: Request, exc: DuplicateTitleError):
    logger.warning("Duplicate task: %s", exc)
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(InvalidStatusError)
async def invalid_status_handler(request: Request, exc: InvalidStatusError):
    logger.warning("Invalid argument: %s", exc)
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).to_content(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error.get("loc", ())), error.get("msg", "Invalid value"))
    logger.warning("Validation failed: %s", errors)
    return _error(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
    )

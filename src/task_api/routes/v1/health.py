"""
Health endpoints for liveness probes.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from task_api import __version__
from task_api.models import ApiResponse

router = APIRouter(prefix="/health", tags=["health"])

APPLICATION_NAME = "Task Management API"


@router.get("", response_model=ApiResponse[Dict[str, Any]])
async def health_check() -> ApiResponse[Dict[str, Any]]:
    """Report application status, name and version."""
    return ApiResponse.ok(
        {
            "status": "UP",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "application": APPLICATION_NAME,
            "version": __version__,
        },
        "Application is healthy",
    )


@router.get("/ping", response_model=ApiResponse[str])
async def ping() -> ApiResponse[str]:
    return ApiResponse.ok("pong", "Service is responding")

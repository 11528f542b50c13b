"""
Response envelope models
"""

from typing import Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for successful responses"""

    success: bool = True
    message: str
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: Optional[T], message: str) -> "ApiResponse[T]":
        return cls(success=True, message=message, data=data)


class ErrorResponse(BaseModel):
    """Envelope for failed responses. errors is only present for field validation failures."""

    success: bool = False
    message: str
    errors: Optional[Dict[str, str]] = None

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)

"""
Audit Quiz Platform - Shared Schemas
camelCase wire format and the JSON response envelope
"""
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Envelope for every successful response."""
    success: bool = True
    message: str = ""
    data: T | None = None


class ErrorResponse(CamelModel):
    """Envelope for every failed response."""
    success: bool = False
    message: str
    errors: dict[str, list[str]] | Any | None = None

"""
Shared schema building blocks: the camelCase base model, pagination envelopes,
small acknowledgement bodies, error and health responses.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every API schema: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int


class PagePagination(Pagination):
    """Pagination block for photo pages, which also report the page count."""

    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PagePagination":
        # ceil without floats
        return cls(page=page, limit=limit, total=total, total_pages=-(-total // limit))


class UserRef(CamelModel):
    """Minimal user reference embedded in photos, comments and collections."""

    id: uuid.UUID
    display_name: str


class MessageResponse(CamelModel):
    message: str


class SuccessResponse(CamelModel):
    success: bool = True


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """
    Body of every non-2xx response.

    `details` is only present for request validation failures.
    """

    error: str = Field(description="Human-readable error description")
    details: Optional[List[ErrorDetail]] = None
    requestId: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    status: str = Field(description="ok when the database answers, otherwise degraded")
    timestamp: datetime
    version: str
    database: str = Field(description="connected | disconnected")
    cache: str = Field(description="connected | disconnected | disabled")
    queue: str = Field(description="enabled | disabled")
    vision: str = Field(description="available | circuit_open | disabled")

"""Shared I/O models: pagination envelope and the realtime message envelope."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar("ItemT")


class Pagination(BaseModel):
    """Pagination metadata returned by list endpoints."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class Page(BaseModel, Generic[ItemT]):
    """A page of items plus its pagination metadata."""

    items: List[ItemT]
    pagination: Pagination


class RealtimeMessage(BaseModel):
    """Envelope for every event pushed over WebSocket or SSE."""

    event: str = Field(description="Event name, e.g. 'discussion:created'")
    data: Any = Field(default=None, description="Event payload")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorResponse(BaseModel):
    """Error envelope for domain failures."""

    detail: str
    code: Optional[str] = None

"""
Common schema types used across the API.
"""

import math
from typing import Any, Generic, Iterable, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: Optional[str] = None
    field: Optional[str] = None


class SuccessResponse(BaseModel):
    """Standard success response."""

    message: str
    data: Optional[Any] = None


class PaginatedData(BaseModel, Generic[T]):
    """One page of a listing plus the totals needed to page through it."""

    model_config = ConfigDict(frozen=True)

    items: Tuple[T, ...] = ()
    total_records: int = 0
    page_size: int

    @computed_field  # type: ignore[misc]
    @property
    def total_pages(self) -> int:
        if self.total_records <= 0 or self.page_size <= 0:
            return 0
        return math.ceil(self.total_records / self.page_size)

    @classmethod
    def create(
        cls,
        items: Iterable[T],
        total_records: int,
        page_size: int,
    ) -> "PaginatedData[T]":
        return cls(
            items=tuple(items),
            total_records=total_records,
            page_size=page_size,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"

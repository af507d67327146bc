# backend/app/schemas/pagination.py
"""
Pagination metadata shared by list endpoints.

Usage:
    from app.schemas.pagination import PaginationMeta

    @router.get("/")
    def list_items(skip: int = Query(0, ge=0), limit: int = Query(100, ge=1, le=1000)):
        ...
        return {
            "items": items,
            "pagination": PaginationMeta.create(total=total, skip=skip, limit=limit),
        }
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """
    Offset pagination with derived page numbers.

    Attributes:
        total: Items matching the query
        skip: Items skipped (offset)
        limit: Page size
        page: 1-indexed current page (computed)
        pages: Page count, at least 1 (computed)
        has_next / has_previous: Navigation flags (computed)
    """

    total: int = Field(..., ge=0, description="Total number of items matching query")
    skip: int = Field(..., ge=0, description="Number of items skipped (offset)")
    limit: int = Field(..., ge=1, description="Maximum items per page")

    @computed_field
    @property
    def page(self) -> int:
        return (self.skip // self.limit) + 1

    @computed_field
    @property
    def pages(self) -> int:
        if self.total <= 0:
            return 1
        return (self.total + self.limit - 1) // self.limit

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.skip + self.limit < self.total

    @computed_field
    @property
    def has_previous(self) -> bool:
        return self.skip > 0

    @classmethod
    def create(cls, total: int, skip: int, limit: int) -> "PaginationMeta":
        return cls(total=total, skip=skip, limit=limit)


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Generic list envelope.

    Example:
        class PortfolioListResponse(PaginatedResponse[PortfolioSummary]):
            pass
    """

    items: list[T] = Field(..., description="List of items for current page")
    pagination: PaginationMeta = Field(..., description="Pagination metadata")

# backend/app/schemas/portfolios.py
"""
Pydantic schemas for Portfolio validation.

These schemas define:
- What data clients must send (Create)
- What data clients can update (Update)
- What data the API returns (Summary, Detail)

The owner always comes from the session, never from the request body.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.holdings import HoldingSummary
from app.schemas.pagination import PaginatedResponse


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PortfolioCreate(BaseModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        examples=["Retirement", "ASX ETFs"],
        description="Name of the portfolio"
    )

    @field_validator('name')
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Normalize name: trim whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class PortfolioUpdate(BaseModel):
    """All fields optional; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class PortfolioResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    created_at: datetime
    updated_at: datetime


class PortfolioSummary(PortfolioResponse):
    """Portfolio with aggregate average-cost metrics (no live prices)."""

    holdings_count: int
    total_cost_base: int = Field(..., description="Sum of holding cost bases in cents")


class PortfolioDetail(PortfolioSummary):
    holdings: list[HoldingSummary]


class PortfolioListResponse(PaginatedResponse[PortfolioSummary]):
    pass

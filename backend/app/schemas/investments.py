# backend/app/schemas/investments.py
"""
Pydantic schemas for the investment catalog.

Investments are shared reference data: any signed-in user can list them,
and a new code can be added once (codes are unique, stored upper-case).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.models import InvestmentType
from app.schemas.validators import validate_code
from app.services.valuation.money import format_percent


class InvestmentCreate(BaseModel):
    """Schema for adding an investment to the catalog."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        examples=["Vanguard Australian Shares Index ETF"],
    )
    code: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Ticker used for price lookups",
        examples=["VAS", "BHP"],
    )
    management_fee: int = Field(
        default=0,
        ge=0,
        le=10_000,
        description="Annual management fee in basis points (7 = 0.07%)",
        examples=[7, 25],
    )
    investment_type: InvestmentType = Field(
        default=InvestmentType.STOCK,
        examples=[InvestmentType.ETF],
    )

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("code")
    @classmethod
    def validate_and_normalize_code(cls, v: str) -> str:
        return validate_code(v)


class InvestmentResponse(BaseModel):
    """Investment as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    management_fee: int
    investment_type: InvestmentType
    created_at: datetime

    @computed_field
    @property
    def management_fee_display(self) -> str:
        return format_percent(self.management_fee)


class InvestmentListResponse(BaseModel):
    items: list[InvestmentResponse]
    total: int

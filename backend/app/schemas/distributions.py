# backend/app/schemas/distributions.py
"""
Pydantic schemas for Distribution validation.

A distribution is income paid on a holding. Amounts are integer cents and
tax withheld can never exceed the gross payment. Reinvested distributions
still need a REINVESTMENT transaction to add units.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.validators import validate_not_future


class DistributionBase(BaseModel):
    date_paid: datetime = Field(
        ...,
        examples=["2024-07-15T00:00:00Z"],
    )
    gross_payment: int = Field(
        ...,
        ge=0,
        description="Gross payment in cents",
        examples=[12345],
    )
    tax_withheld: int = Field(
        default=0,
        ge=0,
        description="Tax withheld in cents",
        examples=[0],
    )
    reinvested: bool = Field(default=False)


class DistributionCreate(DistributionBase):
    """Schema for creating a distribution, and for replacing one via PUT."""

    @field_validator("date_paid")
    @classmethod
    def validate_date_not_in_future(cls, v: datetime) -> datetime:
        return validate_not_future(v, "Payment date")

    @model_validator(mode="after")
    def tax_within_gross(self) -> "DistributionCreate":
        if self.tax_withheld > self.gross_payment:
            raise ValueError("Tax withheld cannot exceed the gross payment")
        return self


class DistributionResponse(DistributionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    holding_id: int
    created_at: datetime
    updated_at: datetime


class DistributionListResponse(BaseModel):
    items: list[DistributionResponse]
    total: int

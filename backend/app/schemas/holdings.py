# backend/app/schemas/holdings.py
"""
Pydantic schemas for Holding validation.

Units, average price and cost base are not columns: routers compute them
from the holding's transactions on every read and pass them in.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.distributions import DistributionResponse
from app.schemas.investments import InvestmentResponse
from app.schemas.transactions import TransactionResponse


class HoldingCreate(BaseModel):
    investment_id: int = Field(..., gt=0, description="Catalog investment to hold")


class HoldingUpdate(BaseModel):
    """Point the holding at a different investment. Transactions are kept."""

    investment_id: int = Field(..., gt=0)


class HoldingSummary(BaseModel):
    """Holding with its average-cost metrics (no live price)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    portfolio_id: int
    investment_id: int
    investment: InvestmentResponse
    units: Decimal = Field(..., description="buys + reinvestments - sells")
    average_price: int = Field(..., description="Average price per unit in cents")
    cost_base: int = Field(..., description="units x average_price in cents")
    created_at: datetime


class HoldingDetail(HoldingSummary):
    transactions: list[TransactionResponse]
    distributions: list[DistributionResponse]


class HoldingListResponse(BaseModel):
    items: list[HoldingSummary]
    total: int

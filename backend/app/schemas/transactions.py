# backend/app/schemas/transactions.py
"""
Pydantic schemas for Transaction validation.

These schemas define:
- What data clients must send (Create, also used for full-replace PUT)
- What data the API returns (Response)
- Batch creation (all or nothing)

Validation layers:
- Field constraints: quantity > 0, price and brokerage >= 0
- Field validators: timestamp normalized to UTC and not in the future
- Router: ownership, and that a sell does not exceed the units held

Money is integer cents. Quantities are Decimal (fractional units allowed).
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models import TransactionType
from app.schemas.pagination import PaginatedResponse
from app.schemas.validators import validate_not_future
from app.services.constants import MAX_BATCH_SIZE


# =============================================================================
# BASE SCHEMA
# =============================================================================

class TransactionBase(BaseModel):
    """Fields common to Create and Response."""

    transaction_type: TransactionType = Field(
        ...,
        examples=[TransactionType.BUY, TransactionType.SELL, TransactionType.REINVESTMENT],
    )

    transaction_date: datetime = Field(
        ...,
        description="When the trade settled (UTC if no offset given)",
        examples=["2024-01-15T00:00:00Z"],
    )

    quantity: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Units traded (must be positive)",
        examples=["10", "152.3341"],
    )

    price_per_unit: int = Field(
        ...,
        ge=0,
        description="Price per unit in cents",
        examples=[10523],
    )

    brokerage: int = Field(
        default=0,
        ge=0,
        description="Brokerage paid in cents (recorded, not part of cost base)",
        examples=[0, 995],
    )


# =============================================================================
# CREATE SCHEMA
# =============================================================================

class TransactionCreate(TransactionBase):
    """
    Schema for creating a transaction, and for replacing one via PUT.

    The holding comes from the URL, never from the body.
    """

    @field_validator("transaction_date")
    @classmethod
    def validate_date_not_in_future(cls, v: datetime) -> datetime:
        """Prevent recording trades that haven't happened yet."""
        return validate_not_future(v, "Transaction date")


class TransactionBatchCreate(BaseModel):
    """Several transactions for one holding, written atomically."""

    transactions: list[TransactionCreate] = Field(
        ...,
        min_length=1,
        max_length=MAX_BATCH_SIZE,
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class TransactionResponse(TransactionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    holding_id: int
    created_at: datetime
    updated_at: datetime


class TransactionListResponse(PaginatedResponse[TransactionResponse]):
    pass


class TransactionBatchResponse(BaseModel):
    created_count: int
    transactions: list[TransactionResponse]

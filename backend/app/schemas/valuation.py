# backend/app/schemas/valuation.py
"""
Pydantic schemas for valuation and tax reports.

These schemas serialize the internal dataclasses from
app/services/valuation/types.py (from_attributes=True), including their
computed properties such as TaxSummary.total_gain.

Money is integer cents; percentages are Decimal with 2 places.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# VALUATION SCHEMAS
# =============================================================================

class HoldingValuationResponse(BaseModel):
    """One holding marked to market."""

    model_config = ConfigDict(from_attributes=True)

    holding_id: int
    investment_id: int
    name: str
    code: str
    units: Decimal
    average_price: int
    cost_base: int
    current_price: int = Field(
        ...,
        description="Live price in cents, or the average price when none was available"
    )
    current_value: int
    unrealised_gain: int
    unrealised_gain_percent: Decimal
    price_is_live: bool = Field(
        ...,
        description="False when current_price fell back to the average price"
    )
    warnings: list[str] = Field(default_factory=list)


class PortfolioValuationResponse(BaseModel):
    """Portfolio totals; the percentage is derived from summed cost and value."""

    model_config = ConfigDict(from_attributes=True)

    portfolio_id: int
    name: str
    holdings: list[HoldingValuationResponse]
    total_cost_base: int
    total_value: int
    total_unrealised_gain: int
    total_unrealised_gain_percent: Decimal
    missing_prices: list[str] = Field(
        default_factory=list,
        description="Codes valued at average price because no quote was available"
    )
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# TAX REPORT SCHEMAS
# =============================================================================

class RealisedGainResponse(BaseModel):
    """One sell matched against one FIFO lot."""

    model_config = ConfigDict(from_attributes=True)

    holding_id: int
    code: str
    acquired_at: dt.datetime
    sold_at: dt.datetime
    quantity: Decimal
    cost_per_unit: int
    sale_price_per_unit: int
    proceeds: int
    cost_base: int
    gain: int
    is_long_term: bool
    days_held: int
    tax_year: str
    sell_transaction_id: int | None = None


class UnmatchedSaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    holding_id: int
    code: str
    sold_at: dt.datetime
    quantity: Decimal
    sell_transaction_id: int | None = None


class UnrealisedLotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    acquired_at: dt.datetime
    quantity: Decimal
    cost_per_unit: int
    cost_base: int
    current_price: int
    current_value: int
    unrealised_gain: int
    is_long_term: bool
    days_held: int


class HoldingTaxSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    holding_id: int
    name: str
    code: str
    units: Decimal
    price_is_live: bool
    lots: list[UnrealisedLotResponse]
    total_cost_base: int
    total_value: int
    total_unrealised_gain: int


class TaxYearSummaryResponse(BaseModel):
    """Financial year (1 July - 30 June) bucket."""

    model_config = ConfigDict(from_attributes=True)

    tax_year: str = Field(..., examples=["2023-24"])
    short_term_gain: int
    long_term_gain: int
    total_gain: int
    distribution_gross: int
    distribution_tax_withheld: int
    distribution_net: int
    distribution_reinvested: int


class TaxSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    portfolio_id: int
    as_of: dt.datetime
    short_term: list[RealisedGainResponse]
    long_term: list[RealisedGainResponse]
    unrealised: list[HoldingTaxSummaryResponse]
    total_short_term_gain: int
    total_long_term_gain: int
    total_gain: int
    total_unrealised_gain: int
    by_tax_year: list[TaxYearSummaryResponse]
    unmatched_sales: list[UnmatchedSaleResponse] = Field(
        default_factory=list,
        description="Units sold beyond the recorded lots; they carry no realised gain"
    )
    warnings: list[str] = Field(default_factory=list)

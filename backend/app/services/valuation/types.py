# backend/app/services/valuation/types.py
"""
Internal data types for the valuation and tax-lot calculators.

These dataclasses are NOT Pydantic schemas; API serialization lives in
app/schemas/valuation.py.

Design Principles:
- Money is integer cents, unit quantities are Decimal
- Value objects are frozen
- Warnings accumulate in lists instead of raising

Type Hierarchy:
    HoldingMetrics        - units, average price, cost base for one holding
    HoldingValuation      - metrics plus live price, value, unrealised gain
    PortfolioValuation    - holdings plus portfolio totals
    TaxLot                - open FIFO lot (mutable while a holding is replayed)
    RealisedGain          - one sell matched against one lot
    UnmatchedSale         - sold units with no lot left to match
    LotReplayResult       - FIFO engine output for one holding
    UnrealisedLot         - open lot marked to market
    HoldingTaxSummary     - open lots of one holding
    TaxYearSummary        - realised gains and distribution income per year
    TaxSummary            - full portfolio tax report
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


# =============================================================================
# METRICS & VALUATION
# =============================================================================

@dataclass(frozen=True)
class HoldingMetrics:
    """
    Average-cost view of a holding.

    Attributes:
        units: buys + reinvestments - sells
        average_price: total acquisition cost / net units, in cents (0 when units <= 0)
        cost_base: units x average_price in cents (0 when units <= 0)
        total_cost: acquisition cost of every buy and reinvestment, in cents
    """

    units: Decimal
    average_price: int
    cost_base: int
    total_cost: int = 0

    @property
    def has_position(self) -> bool:
        return self.units > 0


@dataclass
class HoldingValuation:
    """
    A holding marked to market.

    When no live price is available the average price stands in, so the
    current value equals the cost base and the unrealised gain is zero.
    price_is_live tells the two cases apart.
    """

    holding_id: int | None
    investment_id: int | None
    name: str
    code: str
    units: Decimal
    average_price: int
    cost_base: int
    current_price: int
    current_value: int
    unrealised_gain: int
    unrealised_gain_percent: Decimal
    price_is_live: bool
    warnings: list[str] = field(default_factory=list)


@dataclass
class PortfolioValuation:
    """
    Portfolio totals. The percentage is derived from the summed cost base and
    value, never by adding holding percentages.
    """

    portfolio_id: int | None
    name: str
    holdings: list[HoldingValuation]
    total_cost_base: int
    total_value: int
    total_unrealised_gain: int
    total_unrealised_gain_percent: Decimal
    missing_prices: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# =============================================================================
# FIFO TAX LOTS
# =============================================================================

@dataclass
class TaxLot:
    """Open acquisition batch. quantity only ever decreases and never goes below 0."""

    acquired_at: datetime
    quantity: Decimal
    cost_per_unit: int
    transaction_id: int | None = None


@dataclass(frozen=True)
class RealisedGain:
    holding_id: int | None
    code: str
    acquired_at: datetime
    sold_at: datetime
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


@dataclass(frozen=True)
class UnmatchedSale:
    """Units sold after every open lot was used up. They carry no realised gain."""

    holding_id: int | None
    code: str
    sold_at: datetime
    quantity: Decimal
    sell_transaction_id: int | None = None


@dataclass
class LotReplayResult:
    realised: list[RealisedGain] = field(default_factory=list)
    open_lots: list[TaxLot] = field(default_factory=list)
    unmatched: list[UnmatchedSale] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def remaining_units(self) -> Decimal:
        return sum((lot.quantity for lot in self.open_lots), Decimal("0"))


@dataclass(frozen=True)
class UnrealisedLot:
    acquired_at: datetime
    quantity: Decimal
    cost_per_unit: int
    cost_base: int
    current_price: int
    current_value: int
    unrealised_gain: int
    is_long_term: bool
    days_held: int


@dataclass
class HoldingTaxSummary:
    holding_id: int | None
    name: str
    code: str
    units: Decimal
    price_is_live: bool
    lots: list[UnrealisedLot]
    total_cost_base: int
    total_value: int
    total_unrealised_gain: int


@dataclass
class TaxYearSummary:
    """Realised gains and distribution income for one financial year."""

    tax_year: str
    short_term_gain: int = 0
    long_term_gain: int = 0
    distribution_gross: int = 0
    distribution_tax_withheld: int = 0
    distribution_reinvested: int = 0

    @property
    def total_gain(self) -> int:
        return self.short_term_gain + self.long_term_gain

    @property
    def distribution_net(self) -> int:
        return self.distribution_gross - self.distribution_tax_withheld


@dataclass
class TaxSummary:
    portfolio_id: int | None
    as_of: datetime
    short_term: list[RealisedGain]
    long_term: list[RealisedGain]
    unrealised: list[HoldingTaxSummary]
    by_tax_year: list[TaxYearSummary]
    unmatched_sales: list[UnmatchedSale] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_short_term_gain(self) -> int:
        return sum(record.gain for record in self.short_term)

    @property
    def total_long_term_gain(self) -> int:
        return sum(record.gain for record in self.long_term)

    @property
    def total_gain(self) -> int:
        return self.total_short_term_gain + self.total_long_term_gain

    @property
    def total_unrealised_gain(self) -> int:
        return sum(holding.total_unrealised_gain for holding in self.unrealised)

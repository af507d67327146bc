# backend/app/services/valuation/__init__.py
"""
Valuation Service Package.

This package provides:
- Average-cost holding metrics (units, average price, cost base)
- Holding and portfolio valuation against live prices
- FIFO tax-lot replay and the portfolio tax summary

Usage:
    from app.services.valuation import ValuationService

    service = ValuationService(price_oracle=oracle)
    valuation = service.get_portfolio_valuation(db, portfolio_id=1)
    report = service.get_tax_summary(db, portfolio_id=1)

Architecture:
    valuation/
    ├── __init__.py         # This file - package exports
    ├── money.py            # Cents arithmetic, holding periods, tax years
    ├── types.py            # Internal data classes
    ├── calculators.py      # Metrics, valuation, distribution income
    ├── tax_lots.py         # FIFO lot engine and tax summary
    └── service.py          # ValuationService (orchestrator)

Data Flow:
    Transactions → HoldingMetricsCalculator → HoldingMetrics
    HoldingMetrics + price → HoldingValuationCalculator → HoldingValuation
    HoldingValuations → PortfolioValuationCalculator → PortfolioValuation
    Transactions → FifoLotEngine → realised gains + open lots
    Open lots + prices + distributions → TaxSummaryCalculator → TaxSummary
"""

from app.services.valuation.calculators import (
    HoldingMetricsCalculator,
    HoldingValuationCalculator,
    PortfolioValuationCalculator,
    DistributionIncomeCalculator,
    gain_percent,
    validate_transaction,
)
from app.services.valuation.service import ValuationService
from app.services.valuation.tax_lots import FifoLotEngine, TaxSummaryCalculator
from app.services.valuation.types import (
    HoldingMetrics,
    HoldingValuation,
    PortfolioValuation,
    TaxLot,
    RealisedGain,
    UnmatchedSale,
    LotReplayResult,
    UnrealisedLot,
    HoldingTaxSummary,
    TaxYearSummary,
    TaxSummary,
)

__all__ = [
    # Main service
    "ValuationService",

    # Data types
    "HoldingMetrics",
    "HoldingValuation",
    "PortfolioValuation",
    "TaxLot",
    "RealisedGain",
    "UnmatchedSale",
    "LotReplayResult",
    "UnrealisedLot",
    "HoldingTaxSummary",
    "TaxYearSummary",
    "TaxSummary",

    # Calculators (for testing)
    "HoldingMetricsCalculator",
    "HoldingValuationCalculator",
    "PortfolioValuationCalculator",
    "DistributionIncomeCalculator",
    "FifoLotEngine",
    "TaxSummaryCalculator",
    "gain_percent",
    "validate_transaction",
]

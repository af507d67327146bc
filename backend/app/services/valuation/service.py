# backend/app/services/valuation/service.py
"""
Valuation Service - orchestrates metrics, price lookups and the tax report.

Public API:
- compute_metrics(): average-cost metrics for a list of transactions
- get_holding_valuation(): one holding marked to market
- get_portfolio_valuation(): every holding plus portfolio totals
- get_tax_summary(): FIFO realised gains, open lots and tax-year buckets

Design Principles:
- Price oracle injected via constructor
- One batched price call per request, codes de-duplicated
- No HTTP knowledge: raises domain exceptions, never HTTPException
- Nothing derived is written back; every call recomputes from transactions

Usage:
    service = ValuationService(price_oracle=oracle)
    valuation = service.get_portfolio_valuation(db, portfolio_id=1)
    report = service.get_tax_summary(db, portfolio_id=1)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models import Holding, Portfolio
from app.services.exceptions import HoldingNotFoundError, PortfolioNotFoundError
from app.services.valuation.calculators import (
    HoldingMetricsCalculator,
    HoldingValuationCalculator,
    PortfolioValuationCalculator,
)
from app.services.valuation.money import ensure_utc
from app.services.valuation.tax_lots import TaxSummaryCalculator
from app.services.valuation.types import (
    HoldingMetrics,
    HoldingValuation,
    PortfolioValuation,
    TaxSummary,
)

if TYPE_CHECKING:
    from app.services.protocols import PriceOracleProtocol

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for valuation and tax reporting.

    Attributes:
        _oracle: Injected price oracle
        _metrics_calc: Average-cost metrics
        _holding_calc: Holding mark-to-market
        _portfolio_calc: Portfolio totals
        _tax_calc: FIFO tax summary
    """

    def __init__(self, price_oracle: PriceOracleProtocol) -> None:
        self._oracle = price_oracle

        self._metrics_calc = HoldingMetricsCalculator()
        self._holding_calc = HoldingValuationCalculator()
        self._portfolio_calc = PortfolioValuationCalculator()
        self._tax_calc = TaxSummaryCalculator()

        logger.info("ValuationService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def compute_metrics(self, transactions: Iterable[Any]) -> HoldingMetrics:
        """Units, average price and cost base. No price lookup."""
        return self._metrics_calc.calculate(transactions)

    def get_holding_valuation(self, db: Session, holding_id: int) -> HoldingValuation:
        """
        Value one holding at the current price.

        Raises:
            HoldingNotFoundError: If the holding does not exist
        """
        holding = self._load_holding(db, holding_id)
        metrics = self._metrics_calc.calculate(holding.transactions)

        price = None
        if metrics.has_position:
            price = self._oracle.get_prices([holding.investment.code]).get(
                holding.investment.code.strip().upper()
            )

        return self._value(holding, metrics, price)

    def get_portfolio_valuation(self, db: Session, portfolio_id: int) -> PortfolioValuation:
        """
        Value every holding in a portfolio.

        Holdings with no units are listed with zero value and do not trigger
        a price lookup.

        Raises:
            PortfolioNotFoundError: If the portfolio does not exist
        """
        portfolio = self._load_portfolio(db, portfolio_id)
        holdings = sorted(portfolio.holdings, key=lambda h: h.id)

        metrics_by_holding = {
            h.id: self._metrics_calc.calculate(h.transactions) for h in holdings
        }
        prices = self._fetch_prices(
            h.investment.code for h in holdings if metrics_by_holding[h.id].has_position
        )

        valuations = [
            self._value(h, metrics_by_holding[h.id], prices.get(h.investment.code.strip().upper()))
            for h in holdings
        ]

        result = self._portfolio_calc.calculate(
            valuations,
            portfolio_id=portfolio.id,
            name=portfolio.name,
        )
        if result.missing_prices:
            logger.info(
                f"Portfolio {portfolio_id} valued with fallback prices for: "
                f"{', '.join(result.missing_prices)}"
            )
        return result

    def get_tax_summary(
            self,
            db: Session,
            portfolio_id: int,
            as_of: datetime | None = None,
    ) -> TaxSummary:
        """
        FIFO tax report for a portfolio.

        Args:
            db: Database session
            portfolio_id: Portfolio to report on
            as_of: Reference instant (default: now). Transactions and
                distributions after it are ignored; open lots are classified
                long/short term against it.

        Raises:
            PortfolioNotFoundError: If the portfolio does not exist
        """
        now = ensure_utc(as_of) if as_of is not None else datetime.now(timezone.utc)
        portfolio = self._load_portfolio(db, portfolio_id)
        holdings = list(portfolio.holdings)

        prices = self._fetch_prices(h.investment.code for h in holdings)
        # Tax calculator looks prices up by the stored code
        by_stored_code = {
            h.investment.code: prices.get(h.investment.code.strip().upper())
            for h in holdings
        }

        summary = self._tax_calc.calculate(
            holdings,
            prices=by_stored_code,
            as_of=now,
            portfolio_id=portfolio.id,
        )

        if summary.unmatched_sales:
            logger.warning(
                f"Portfolio {portfolio_id} has {len(summary.unmatched_sales)} sell(s) "
                f"exceeding recorded lots"
            )
        return summary

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _value(
            self,
            holding: Holding,
            metrics: HoldingMetrics,
            price: int | None,
    ) -> HoldingValuation:
        return self._holding_calc.calculate(
            metrics=metrics,
            current_price=price,
            holding_id=holding.id,
            investment_id=holding.investment_id,
            name=holding.investment.name,
            code=holding.investment.code,
        )

    def _fetch_prices(self, codes: Iterable[str]) -> dict[str, int | None]:
        unique = sorted({code.strip().upper() for code in codes if code and code.strip()})
        if not unique:
            return {}
        return self._oracle.get_prices(unique)

    def _load_portfolio(self, db: Session, portfolio_id: int) -> Portfolio:
        """Portfolio with holdings, investments, transactions and distributions in 4 queries."""
        query = (
            select(Portfolio)
            .where(Portfolio.id == portfolio_id)
            .options(
                selectinload(Portfolio.holdings).selectinload(Holding.investment),
                selectinload(Portfolio.holdings).selectinload(Holding.transactions),
                selectinload(Portfolio.holdings).selectinload(Holding.distributions),
            )
        )
        portfolio = db.scalars(query).first()
        if portfolio is None:
            raise PortfolioNotFoundError(portfolio_id)
        return portfolio

    def _load_holding(self, db: Session, holding_id: int) -> Holding:
        query = (
            select(Holding)
            .where(Holding.id == holding_id)
            .options(
                selectinload(Holding.investment),
                selectinload(Holding.transactions),
            )
        )
        holding = db.scalars(query).first()
        if holding is None:
            raise HoldingNotFoundError(holding_id)
        return holding

# backend/app/routers/valuation.py
"""
Valuation and tax report endpoints.

- GET /portfolios/{id}/valuation - Every holding marked to market plus totals
- GET /holdings/{id}/valuation - One holding marked to market
- GET /portfolios/{id}/tax-summary - FIFO realised/unrealised gains by tax year

Prices come from the shared price oracle. A missing quote never fails the
request: the holding is valued at its average price and flagged.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    CurrentUser,
    get_owned_holding,
    get_owned_portfolio,
    get_valuation_service,
)
from app.middleware.rate_limit import limiter
from app.schemas.valuation import (
    HoldingValuationResponse,
    PortfolioValuationResponse,
    TaxSummaryResponse,
)
from app.services.constants import RATE_LIMIT_VALUATION
from app.services.valuation import ValuationService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(tags=["Valuation"])


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/portfolios/{portfolio_id}/valuation",
    response_model=PortfolioValuationResponse,
    summary="Value a portfolio at current prices",
)
@limiter.limit(RATE_LIMIT_VALUATION)
def get_portfolio_valuation(
        request: Request,  # Required for rate limiter
        portfolio_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> PortfolioValuationResponse:
    """
    Holdings with no units are listed at zero value. Codes whose quote
    could not be fetched are listed in **missing_prices**.
    """
    get_owned_portfolio(db, portfolio_id, current_user)
    valuation = service.get_portfolio_valuation(db, portfolio_id)
    return PortfolioValuationResponse.model_validate(valuation)


@router.get(
    "/holdings/{holding_id}/valuation",
    response_model=HoldingValuationResponse,
    summary="Value one holding at the current price",
)
@limiter.limit(RATE_LIMIT_VALUATION)
def get_holding_valuation(
        request: Request,  # Required for rate limiter
        holding_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> HoldingValuationResponse:
    get_owned_holding(db, holding_id, current_user)
    valuation = service.get_holding_valuation(db, holding_id)
    return HoldingValuationResponse.model_validate(valuation)


@router.get(
    "/portfolios/{portfolio_id}/tax-summary",
    response_model=TaxSummaryResponse,
    summary="FIFO capital gains and income by tax year",
)
@limiter.limit(RATE_LIMIT_VALUATION)
def get_tax_summary(
        request: Request,  # Required for rate limiter
        portfolio_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
        as_of: datetime | None = Query(
            default=None,
            description="Report as at this instant (default: now). Later activity is ignored.",
            examples=["2024-06-30T23:59:59Z"],
        ),
) -> TaxSummaryResponse:
    """
    Sells are matched oldest lot first. A gain is long-term when the lot
    was held for more than 365 days.

    Sells that exceed the recorded lots are reported in
    **unmatched_sales** with a warning instead of failing the report.
    """
    get_owned_portfolio(db, portfolio_id, current_user)
    summary = service.get_tax_summary(db, portfolio_id, as_of=as_of)
    return TaxSummaryResponse.model_validate(summary)

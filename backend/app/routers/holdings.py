# backend/app/routers/holdings.py
"""
Holding endpoints.

A holding ties one catalog investment to one portfolio. Units, average price
and cost base are recomputed from the holding's transactions on every read.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    CurrentUser,
    get_owned_holding,
    get_owned_portfolio,
    get_valuation_service,
)
from app.middleware.rate_limit import limiter
from app.models import Holding, Investment
from app.schemas.distributions import DistributionResponse
from app.schemas.holdings import (
    HoldingCreate,
    HoldingDetail,
    HoldingListResponse,
    HoldingSummary,
    HoldingUpdate,
)
from app.schemas.investments import InvestmentResponse
from app.schemas.transactions import TransactionResponse
from app.services.constants import RATE_LIMIT_WRITE
from app.services.valuation import ValuationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Holdings"])


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def build_holding_summary(holding: Holding, service: ValuationService) -> HoldingSummary:
    """Holding plus its average-cost metrics."""
    metrics = service.compute_metrics(holding.transactions)
    return HoldingSummary(
        id=holding.id,
        portfolio_id=holding.portfolio_id,
        investment_id=holding.investment_id,
        investment=InvestmentResponse.model_validate(holding.investment),
        units=metrics.units,
        average_price=metrics.average_price,
        cost_base=metrics.cost_base,
        created_at=holding.created_at,
    )


def build_holding_detail(holding: Holding, service: ValuationService) -> HoldingDetail:
    summary = build_holding_summary(holding, service)
    transactions = sorted(
        holding.transactions,
        key=lambda t: (t.transaction_date, t.id),
        reverse=True,
    )
    distributions = sorted(
        holding.distributions,
        key=lambda d: (d.date_paid, d.id),
        reverse=True,
    )
    return HoldingDetail(
        **summary.model_dump(exclude={"investment"}),
        investment=summary.investment,
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        distributions=[DistributionResponse.model_validate(d) for d in distributions],
    )


def _get_investment_or_400(db: Session, investment_id: int) -> Investment:
    investment = db.get(Investment, investment_id)
    if investment is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Investment {investment_id} does not exist",
        )
    return investment


def _ensure_not_duplicate(db: Session, portfolio_id: int, investment_id: int) -> None:
    existing = db.scalar(
        select(Holding).where(
            Holding.portfolio_id == portfolio_id,
            Holding.investment_id == investment_id,
        )
    )
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Portfolio {portfolio_id} already holds investment {investment_id}",
        )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/portfolios/{portfolio_id}/holdings",
    response_model=HoldingListResponse,
    summary="List holdings in a portfolio",
)
def list_holdings(
        portfolio_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> HoldingListResponse:
    portfolio = get_owned_portfolio(db, portfolio_id, current_user)
    holdings = sorted(portfolio.holdings, key=lambda h: h.id)
    return HoldingListResponse(
        items=[build_holding_summary(h, service) for h in holdings],
        total=len(holdings),
    )


@router.post(
    "/portfolios/{portfolio_id}/holdings",
    response_model=HoldingSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Add a holding to a portfolio",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_holding(
        request: Request,  # Required for rate limiter
        portfolio_id: int,
        data: HoldingCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> HoldingSummary:
    """
    Start tracking an investment in this portfolio.

    Returns **400** if the investment does not exist and **409** if the
    portfolio already holds it.
    """
    portfolio = get_owned_portfolio(db, portfolio_id, current_user)
    _get_investment_or_400(db, data.investment_id)
    _ensure_not_duplicate(db, portfolio.id, data.investment_id)

    holding = Holding(portfolio_id=portfolio.id, investment_id=data.investment_id)
    db.add(holding)
    db.commit()
    db.refresh(holding)

    logger.info(f"Holding {holding.id} created in portfolio {portfolio.id}")
    return build_holding_summary(holding, service)


@router.get(
    "/holdings/{holding_id}",
    response_model=HoldingDetail,
    summary="Get a holding with its transactions and distributions",
)
def get_holding(
        holding_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> HoldingDetail:
    holding = get_owned_holding(db, holding_id, current_user)
    return build_holding_detail(holding, service)


@router.patch(
    "/holdings/{holding_id}",
    response_model=HoldingSummary,
    summary="Change the investment a holding tracks",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_holding(
        request: Request,  # Required for rate limiter
        holding_id: int,
        data: HoldingUpdate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> HoldingSummary:
    holding = get_owned_holding(db, holding_id, current_user)

    if data.investment_id != holding.investment_id:
        _get_investment_or_400(db, data.investment_id)
        _ensure_not_duplicate(db, holding.portfolio_id, data.investment_id)
        holding.investment_id = data.investment_id
        db.commit()
        db.refresh(holding)

    return build_holding_summary(holding, service)


@router.delete(
    "/holdings/{holding_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a holding",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_holding(
        request: Request,  # Required for rate limiter
        holding_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> None:
    """
    Delete a holding with all of its transactions and distributions.
    This action cannot be undone.
    """
    holding = get_owned_holding(db, holding_id, current_user)
    db.delete(holding)
    db.commit()
    logger.info(f"Holding {holding_id} deleted")
    return None

# backend/app/routers/portfolios.py
"""
Portfolio management endpoints.

Provides CRUD operations for the signed-in user's portfolios.
Every query is scoped to the session user; another user's portfolio
answers 403.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.database import get_db
from app.dependencies import CurrentUser, get_owned_portfolio, get_valuation_service
from app.middleware.rate_limit import limiter
from app.models import Holding, Portfolio
from app.routers.holdings import build_holding_summary
from app.schemas.pagination import PaginationMeta
from app.schemas.portfolios import (
    PortfolioCreate,
    PortfolioDetail,
    PortfolioListResponse,
    PortfolioResponse,
    PortfolioSummary,
    PortfolioUpdate,
)
from app.services.constants import MAX_LIST_LIMIT, RATE_LIMIT_WRITE
from app.services.valuation import ValuationService

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolios",
    tags=["Portfolios"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def build_portfolio_summary(portfolio: Portfolio, service: ValuationService) -> PortfolioSummary:
    """Portfolio with holdings count and summed cost base."""
    total_cost_base = sum(
        service.compute_metrics(h.transactions).cost_base for h in portfolio.holdings
    )
    return PortfolioSummary(
        **PortfolioResponse.model_validate(portfolio).model_dump(),
        holdings_count=len(portfolio.holdings),
        total_cost_base=total_cost_base,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/",
    response_model=PortfolioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new portfolio",
    response_description="The created portfolio"
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_portfolio(
        request: Request,  # Required for rate limiter
        data: PortfolioCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Portfolio:
    """
    Create a new portfolio owned by the signed-in user.

    A user can have multiple portfolios (e.g., "Retirement", "Trading").
    """
    portfolio = Portfolio(user_id=current_user.id, **data.model_dump())

    db.add(portfolio)
    db.commit()
    db.refresh(portfolio)

    logger.info(f"Portfolio {portfolio.id} created for user {current_user.id}")
    return portfolio


@router.get(
    "/",
    response_model=PortfolioListResponse,
    summary="List portfolios",
    response_description="The user's portfolios, newest first"
)
def list_portfolios(
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
        search: str | None = Query(
            default=None,
            max_length=100,
            description="Search in portfolio name"
        ),
        # Pagination
        skip: int = Query(default=0, ge=0, description="Number of records to skip"),
        limit: int = Query(default=100, ge=1, le=MAX_LIST_LIMIT, description="Maximum records to return"),
) -> PortfolioListResponse:
    """
    Retrieve the signed-in user's portfolios.

    Each item carries its holdings count and total cost base.
    Supports pagination with **skip** and **limit**.
    """
    query = select(Portfolio).where(Portfolio.user_id == current_user.id)

    if search is not None:
        query = query.where(Portfolio.name.ilike(f"%{search}%"))

    # Order by creation date (newest first)
    query = query.order_by(Portfolio.created_at.desc(), Portfolio.id.desc())

    # Get total count before pagination
    total = db.scalar(select(func.count()).select_from(query.subquery()))

    portfolios = db.scalars(
        query.options(
            selectinload(Portfolio.holdings).selectinload(Holding.transactions)
        ).offset(skip).limit(limit)
    ).all()

    return PortfolioListResponse(
        items=[build_portfolio_summary(p, service) for p in portfolios],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.get(
    "/{portfolio_id}",
    response_model=PortfolioDetail,
    summary="Get a portfolio by ID",
    response_description="The portfolio with its holdings"
)
def get_portfolio(
        portfolio_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
) -> PortfolioDetail:
    """
    Retrieve a single portfolio with its holdings' average-cost metrics.

    Raises **404** if the portfolio does not exist.
    """
    portfolio = get_owned_portfolio(db, portfolio_id, current_user)
    summary = build_portfolio_summary(portfolio, service)
    return PortfolioDetail(
        **summary.model_dump(),
        holdings=[
            build_holding_summary(h, service)
            for h in sorted(portfolio.holdings, key=lambda h: h.id)
        ],
    )


@router.patch(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    summary="Update a portfolio",
    response_description="The updated portfolio"
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_portfolio(
        request: Request,  # Required for rate limiter
        portfolio_id: int,
        portfolio_update: PortfolioUpdate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Portfolio:
    """
    Update an existing portfolio (partial update).

    Only the provided fields will be updated.
    Omitted fields remain unchanged.
    """
    db_portfolio = get_owned_portfolio(db, portfolio_id, current_user)

    update_data = portfolio_update.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(db_portfolio, field, value)

    db.commit()
    db.refresh(db_portfolio)

    return db_portfolio


@router.delete(
    "/{portfolio_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a portfolio",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_portfolio(
        request: Request,  # Required for rate limiter
        portfolio_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> None:
    """
    Delete a portfolio.

    **Warning:** This also deletes its holdings, transactions and
    distributions. This action cannot be undone.
    """
    db_portfolio = get_owned_portfolio(db, portfolio_id, current_user)

    db.delete(db_portfolio)
    db.commit()

    logger.info(f"Portfolio {portfolio_id} deleted")
    return None

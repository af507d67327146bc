# backend/app/routers/investments.py
"""
Investment catalog endpoints.

The catalog is shared by every user: any signed-in user can browse it and
add a code that is not there yet.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser
from app.middleware.rate_limit import limiter
from app.models import Investment, InvestmentType
from app.schemas.investments import (
    InvestmentCreate,
    InvestmentListResponse,
    InvestmentResponse,
)
from app.services.constants import RATE_LIMIT_WRITE

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/investments",
    tags=["Investments"],
)


def get_investment_or_404(db: Session, investment_id: int) -> Investment:
    investment = db.get(Investment, investment_id)
    if investment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Investment {investment_id} not found",
        )
    return investment


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally (escape char: backslash)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get(
    "/",
    response_model=InvestmentListResponse,
    summary="List investments",
)
def list_investments(
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        q: str | None = Query(
            default=None,
            max_length=100,
            description="Partial match on name or code",
        ),
        investment_type: InvestmentType | None = Query(default=None, alias="type"),
) -> InvestmentListResponse:
    """All catalog entries ordered by name."""
    query = select(Investment)

    if q:
        pattern = f"%{_escape_like(q.strip())}%"
        query = query.where(or_(
            Investment.name.ilike(pattern, escape="\\"),
            Investment.code.ilike(pattern, escape="\\"),
        ))

    if investment_type is not None:
        query = query.where(Investment.investment_type == investment_type)

    investments = db.scalars(query.order_by(Investment.name, Investment.id)).all()
    return InvestmentListResponse(
        items=[InvestmentResponse.model_validate(i) for i in investments],
        total=len(investments),
    )


@router.get(
    "/{investment_id}",
    response_model=InvestmentResponse,
    summary="Get an investment by ID",
)
def get_investment(
        investment_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Investment:
    return get_investment_or_404(db, investment_id)


@router.post(
    "/",
    response_model=InvestmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an investment to the catalog",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_investment(
        request: Request,  # Required for rate limiter
        data: InvestmentCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Investment:
    """
    Returns **409** if the code already exists.
    """
    existing = db.scalar(select(Investment).where(Investment.code == data.code))
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Investment with code '{data.code}' already exists (id {existing.id})",
        )

    investment = Investment(**data.model_dump())
    db.add(investment)
    db.commit()
    db.refresh(investment)

    logger.info(f"Investment created: {investment.code} (id {investment.id})")
    return investment

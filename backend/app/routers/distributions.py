# backend/app/routers/distributions.py
"""
Distribution (income) endpoints.

Distributions are recorded against a holding and feed the tax-year income
buckets of the tax summary. They never change units; a reinvested
distribution needs its own REINVESTMENT transaction.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_owned_distribution, get_owned_holding
from app.middleware.rate_limit import limiter
from app.models import Distribution
from app.schemas.distributions import (
    DistributionCreate,
    DistributionListResponse,
    DistributionResponse,
)
from app.services.constants import RATE_LIMIT_WRITE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Distributions"])


@router.get(
    "/holdings/{holding_id}/distributions",
    response_model=DistributionListResponse,
    summary="List distributions of a holding",
)
def list_distributions(
        holding_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> DistributionListResponse:
    """Newest payment first."""
    holding = get_owned_holding(db, holding_id, current_user)
    distributions = sorted(
        holding.distributions,
        key=lambda d: (d.date_paid, d.id),
        reverse=True,
    )
    return DistributionListResponse(
        items=[DistributionResponse.model_validate(d) for d in distributions],
        total=len(distributions),
    )


@router.post(
    "/holdings/{holding_id}/distributions",
    response_model=DistributionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a distribution",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_distribution(
        request: Request,  # Required for rate limiter
        holding_id: int,
        data: DistributionCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Distribution:
    holding = get_owned_holding(db, holding_id, current_user)

    distribution = Distribution(holding_id=holding.id, **data.model_dump())
    db.add(distribution)
    db.commit()
    db.refresh(distribution)

    logger.info(f"Distribution {distribution.id} recorded on holding {holding.id}")
    return distribution


@router.get(
    "/distributions/{distribution_id}",
    response_model=DistributionResponse,
    summary="Get a distribution by ID",
)
def get_distribution(
        distribution_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Distribution:
    return get_owned_distribution(db, distribution_id, current_user)


@router.put(
    "/distributions/{distribution_id}",
    response_model=DistributionResponse,
    summary="Replace a distribution",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_distribution(
        request: Request,  # Required for rate limiter
        distribution_id: int,
        data: DistributionCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Distribution:
    distribution = get_owned_distribution(db, distribution_id, current_user)

    for field, value in data.model_dump().items():
        setattr(distribution, field, value)

    db.commit()
    db.refresh(distribution)
    return distribution


@router.delete(
    "/distributions/{distribution_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a distribution",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_distribution(
        request: Request,  # Required for rate limiter
        distribution_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> None:
    distribution = get_owned_distribution(db, distribution_id, current_user)
    db.delete(distribution)
    db.commit()
    logger.info(f"Distribution {distribution_id} deleted")
    return None

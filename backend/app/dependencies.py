# backend/app/dependencies.py
"""
Dependency injection module for FastAPI.

Provides:
- Singleton service instances (lazily created, shared across requests)
- The current-user dependency (session cookie -> User)
- Ownership helpers that load a resource and check it belongs to the user

Usage in routers:
    from app.dependencies import CurrentUser, get_valuation_service

    @router.get("/{portfolio_id}/valuation")
    def get_valuation(
        portfolio_id: int,
        current_user: CurrentUser,
        service: Annotated[ValuationService, Depends(get_valuation_service)],
    ):
        ...
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models import Distribution, Holding, Portfolio, Transaction, User
from app.services.auth import AuthService
from app.services.exceptions import InvalidCredentialsError, SessionExpiredError
from app.services.pricing import PriceOracle, YahooPriceProvider
from app.services.valuation import ValuationService
from app.utils.context import set_user_id
from app.utils.cookies import get_session_token

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: provider -> oracle -> valuation


@lru_cache(maxsize=1)
def get_price_provider() -> YahooPriceProvider:
    logger.debug("Initializing singleton YahooPriceProvider")
    return YahooPriceProvider(
        exchange_suffix=settings.price_exchange_suffix,
        timeout=settings.price_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_price_oracle() -> PriceOracle:
    """Shared oracle so every request draws from one provider."""
    logger.debug("Initializing singleton PriceOracle")
    return PriceOracle(
        provider=get_price_provider(),
        max_workers=settings.price_max_workers,
        timeout=settings.price_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_valuation_service() -> ValuationService:
    logger.debug("Initializing singleton ValuationService")
    return ValuationService(price_oracle=get_price_oracle())


@lru_cache(maxsize=1)
def get_auth_service() -> AuthService:
    logger.debug("Initializing singleton AuthService")
    return AuthService(session_lifetime=timedelta(days=settings.session_expire_days))


# =============================================================================
# AUTHENTICATION
# =============================================================================


def get_current_user(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """
    Resolve the session cookie to an active user.

    Raises:
        HTTPException 401: No cookie, unknown/revoked/expired session, inactive user
    """
    token = get_session_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        user = auth_service.resolve_session(db, token)
    except (InvalidCredentialsError, SessionExpiredError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    set_user_id(user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


# =============================================================================
# OWNERSHIP CHECKS
# =============================================================================
# Every resource is owned through its portfolio. Missing -> 404, someone
# else's -> 403.


def _check_owner(portfolio: Portfolio, user: User, resource: str) -> None:
    if portfolio.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You don't have permission to access this {resource}",
        )


def get_owned_portfolio(db: Session, portfolio_id: int, user: User) -> Portfolio:
    portfolio = db.get(Portfolio, portfolio_id)
    if portfolio is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Portfolio {portfolio_id} not found",
        )
    _check_owner(portfolio, user, "portfolio")
    return portfolio


def get_owned_holding(db: Session, holding_id: int, user: User) -> Holding:
    holding = db.get(Holding, holding_id)
    if holding is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Holding {holding_id} not found",
        )
    _check_owner(holding.portfolio, user, "holding")
    return holding


def get_owned_transaction(db: Session, transaction_id: int, user: User) -> Transaction:
    transaction = db.get(Transaction, transaction_id)
    if transaction is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Transaction {transaction_id} not found",
        )
    _check_owner(transaction.holding.portfolio, user, "transaction")
    return transaction


def get_owned_distribution(db: Session, distribution_id: int, user: User) -> Distribution:
    distribution = db.get(Distribution, distribution_id)
    if distribution is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Distribution {distribution_id} not found",
        )
    _check_owner(distribution.holding.portfolio, user, "distribution")
    return distribution


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

def clear_service_caches() -> None:
    """Drop the singletons so the next call builds fresh instances (tests)."""
    get_price_provider.cache_clear()
    get_price_oracle.cache_clear()
    get_valuation_service.cache_clear()
    get_auth_service.cache_clear()
    logger.info("Cleared all service singleton caches")

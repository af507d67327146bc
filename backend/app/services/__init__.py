# backend/app/services/__init__.py
"""
Service layer for business logic.

Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive database sessions as parameters (not via Depends)
- Are easily testable via dependency injection

Usage:
    from app.services import ValuationService, PriceOracle, AuthService
    from app.services import PortfolioNotFoundError, MarketDataError

Architecture:
    services/
    ├── __init__.py          # This file - main exports
    ├── exceptions.py        # Domain exceptions
    ├── constants.py         # Business constants and limits
    ├── protocols.py         # Service interfaces (Protocol classes)
    ├── auth/                # Passwords and login sessions
    ├── pricing/             # Price providers and the price oracle
    └── valuation/           # Metrics, valuation, FIFO tax lots
"""

from app.services.exceptions import (
    ServiceError,
    ValidationError,
    NotFoundError,
    PortfolioNotFoundError,
    HoldingNotFoundError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    AuthenticationError,
    InvalidCredentialsError,
    SessionExpiredError,
    UserExistsError,
)
# Valuation before pricing: the Yahoo provider uses the money helpers
from app.services.valuation import ValuationService
from app.services.pricing import PriceOracle, PriceProvider, YahooPriceProvider
from app.services.auth import AuthService, PasswordService

__all__ = [
    # Services
    "ValuationService",
    "PriceOracle",
    "PriceProvider",
    "YahooPriceProvider",
    "AuthService",
    "PasswordService",

    # Exceptions
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "PortfolioNotFoundError",
    "HoldingNotFoundError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "SessionExpiredError",
    "UserExistsError",
]

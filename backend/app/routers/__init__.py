# backend/app/routers/__init__.py
"""
API routers for the Portfolio Tracker.

Each router handles a specific domain:
- auth: Registration, login, logout, current user
- investments: Shared investment catalog (VAS, VGS, etc.)
- portfolios: User portfolio management
- holdings: Investments held in a portfolio
- transactions: Buy/sell/reinvestment records
- distributions: Income paid on a holding
- valuation: Mark-to-market valuation and FIFO tax summary
"""

from app.routers.auth import router as auth_router
from app.routers.distributions import router as distributions_router
from app.routers.holdings import router as holdings_router
from app.routers.investments import router as investments_router
from app.routers.portfolios import router as portfolios_router
from app.routers.transactions import router as transactions_router
from app.routers.valuation import router as valuation_router

__all__ = [
    "auth_router",
    "distributions_router",
    "holdings_router",
    "investments_router",
    "portfolios_router",
    "transactions_router",
    "valuation_router",
]

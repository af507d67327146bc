# backend/app/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

Usage:
    from app.schemas import PortfolioCreate, TransactionCreate, TaxSummaryResponse
"""

from app.schemas.auth import (
    UserRegisterRequest,
    UserLoginRequest,
    UserResponse,
    LoginResponse,
    MessageResponse,
)
from app.schemas.distributions import (
    DistributionCreate,
    DistributionResponse,
    DistributionListResponse,
)
from app.schemas.errors import ErrorDetail, FieldError, ValidationErrorDetail
from app.schemas.holdings import (
    HoldingCreate,
    HoldingUpdate,
    HoldingSummary,
    HoldingDetail,
    HoldingListResponse,
)
from app.schemas.investments import (
    InvestmentCreate,
    InvestmentResponse,
    InvestmentListResponse,
)
from app.schemas.pagination import PaginationMeta, PaginatedResponse
from app.schemas.portfolios import (
    PortfolioCreate,
    PortfolioUpdate,
    PortfolioResponse,
    PortfolioSummary,
    PortfolioDetail,
    PortfolioListResponse,
)
from app.schemas.transactions import (
    TransactionCreate,
    TransactionBatchCreate,
    TransactionResponse,
    TransactionListResponse,
    TransactionBatchResponse,
)
from app.schemas.valuation import (
    HoldingValuationResponse,
    PortfolioValuationResponse,
    RealisedGainResponse,
    UnmatchedSaleResponse,
    UnrealisedLotResponse,
    HoldingTaxSummaryResponse,
    TaxYearSummaryResponse,
    TaxSummaryResponse,
)

__all__ = [
    # Auth
    "UserRegisterRequest",
    "UserLoginRequest",
    "UserResponse",
    "LoginResponse",
    "MessageResponse",
    # Errors
    "ErrorDetail",
    "FieldError",
    "ValidationErrorDetail",
    # Pagination
    "PaginationMeta",
    "PaginatedResponse",
    # Portfolios
    "PortfolioCreate",
    "PortfolioUpdate",
    "PortfolioResponse",
    "PortfolioSummary",
    "PortfolioDetail",
    "PortfolioListResponse",
    # Holdings
    "HoldingCreate",
    "HoldingUpdate",
    "HoldingSummary",
    "HoldingDetail",
    "HoldingListResponse",
    # Investments
    "InvestmentCreate",
    "InvestmentResponse",
    "InvestmentListResponse",
    # Transactions
    "TransactionCreate",
    "TransactionBatchCreate",
    "TransactionResponse",
    "TransactionListResponse",
    "TransactionBatchResponse",
    # Distributions
    "DistributionCreate",
    "DistributionResponse",
    "DistributionListResponse",
    # Valuation
    "HoldingValuationResponse",
    "PortfolioValuationResponse",
    "RealisedGainResponse",
    "UnmatchedSaleResponse",
    "UnrealisedLotResponse",
    "HoldingTaxSummaryResponse",
    "TaxYearSummaryResponse",
    "TaxSummaryResponse",
]

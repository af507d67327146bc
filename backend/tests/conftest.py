# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Environment defaults (set before any app module is imported)
- Database session fixtures (in-memory SQLite)
- Mock price provider
- Sample data factories (ORM rows and plain in-memory transactions)
"""

import os

# Must run before app.config is imported anywhere: disables rate limits
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("APP_NAME", "Test App")

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import (
    Base,
    Distribution,
    Holding,
    Investment,
    InvestmentType,
    Portfolio,
    Transaction,
    TransactionType,
    User,
)
from app.services.exceptions import TickerNotFoundError
from app.services.pricing.base import PriceProvider


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# MOCK PRICE PROVIDER
# =============================================================================

class MockPriceProvider(PriceProvider):
    """
    In-memory PriceProvider.

    Prices are configured per code; unknown codes raise TickerNotFoundError
    like the real provider does.
    """

    def __init__(self, prices: dict[str, int] | None = None):
        self._prices: dict[str, int] = {k.upper(): v for k, v in (prices or {}).items()}
        self._errors: dict[str, Exception] = {}
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    def set_price(self, code: str, cents: int) -> None:
        self._prices[code.upper()] = cents

    def add_error(self, code: str, error: Exception) -> None:
        self._errors[code.upper()] = error

    def fetch_price(self, code: str) -> int:
        self.calls.append(code)
        key = code.upper()
        if key in self._errors:
            raise self._errors[key]
        if key in self._prices:
            return self._prices[key]
        raise TickerNotFoundError(code=code, provider=self.name)


@pytest.fixture
def mock_provider() -> MockPriceProvider:
    """Create a fresh mock provider for each test."""
    return MockPriceProvider()


# =============================================================================
# IN-MEMORY TRANSACTIONS (no database)
# =============================================================================

BASE_DATE = datetime(2022, 1, 1, tzinfo=timezone.utc)


def day(n: int) -> datetime:
    """Day n of the test calendar, day 1 being 2022-01-01 UTC."""
    return BASE_DATE + timedelta(days=n - 1)


@dataclass
class Txn:
    """Duck-typed transaction accepted by the calculators."""
    transaction_type: TransactionType
    transaction_date: datetime
    quantity: Decimal
    price_per_unit: int
    id: int | None = None
    brokerage: int = 0


@dataclass
class Dist:
    date_paid: datetime
    gross_payment: int
    tax_withheld: int = 0
    reinvested: bool = False
    id: int | None = None


@dataclass
class Inv:
    code: str
    name: str = ""


@dataclass
class FakeHolding:
    id: int
    investment: Inv
    transactions: list = field(default_factory=list)
    distributions: list = field(default_factory=list)


def buy(quantity, price: int, when: datetime, txn_id: int | None = None) -> Txn:
    return Txn(TransactionType.BUY, when, Decimal(str(quantity)), price, id=txn_id)


def sell(quantity, price: int, when: datetime, txn_id: int | None = None) -> Txn:
    return Txn(TransactionType.SELL, when, Decimal(str(quantity)), price, id=txn_id)


def reinvest(quantity, price: int, when: datetime, txn_id: int | None = None) -> Txn:
    return Txn(TransactionType.REINVESTMENT, when, Decimal(str(quantity)), price, id=txn_id)


# =============================================================================
# SAMPLE DATA FACTORIES (database)
# =============================================================================

def create_user(
        db: Session,
        email: str = "test@example.com",
        hashed_password: str = "hashed_password",
) -> User:
    """Factory function for creating User entities in the database."""
    user = User(
        email=email,
        hashed_password=hashed_password,
        first_name="Test",
        last_name="User",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_portfolio(db: Session, user: User, name: str = "Test Portfolio") -> Portfolio:
    portfolio = Portfolio(user_id=user.id, name=name)
    db.add(portfolio)
    db.commit()
    db.refresh(portfolio)
    return portfolio


def create_investment(
        db: Session,
        code: str = "VAS",
        name: str = "Vanguard Australian Shares Index ETF",
        management_fee: int = 7,
        investment_type: InvestmentType = InvestmentType.ETF,
) -> Investment:
    investment = Investment(
        code=code,
        name=name,
        management_fee=management_fee,
        investment_type=investment_type,
    )
    db.add(investment)
    db.commit()
    db.refresh(investment)
    return investment


def create_holding(db: Session, portfolio: Portfolio, investment: Investment) -> Holding:
    holding = Holding(portfolio_id=portfolio.id, investment_id=investment.id)
    db.add(holding)
    db.commit()
    db.refresh(holding)
    return holding


def create_transaction(
        db: Session,
        holding: Holding,
        transaction_type: TransactionType = TransactionType.BUY,
        quantity: Decimal | str | int = "10",
        price_per_unit: int = 1000,
        transaction_date: datetime | None = None,
        brokerage: int = 0,
) -> Transaction:
    txn = Transaction(
        holding_id=holding.id,
        transaction_type=transaction_type,
        transaction_date=transaction_date or day(1),
        quantity=Decimal(str(quantity)),
        price_per_unit=price_per_unit,
        brokerage=brokerage,
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    return txn


def create_distribution(
        db: Session,
        holding: Holding,
        gross_payment: int = 10000,
        tax_withheld: int = 0,
        reinvested: bool = False,
        date_paid: datetime | None = None,
) -> Distribution:
    dist = Distribution(
        holding_id=holding.id,
        date_paid=date_paid or day(1),
        gross_payment=gross_payment,
        tax_withheld=tax_withheld,
        reinvested=reinvested,
    )
    db.add(dist)
    db.commit()
    db.refresh(dist)
    return dist


# =============================================================================
# FIXTURE EXPORTS (for convenience imports in tests)
# =============================================================================

@pytest.fixture
def sample_user(db: Session) -> User:
    return create_user(db)


@pytest.fixture
def sample_portfolio(db: Session, sample_user: User) -> Portfolio:
    return create_portfolio(db, sample_user)

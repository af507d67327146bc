# backend/app/models.py
import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, DateTime, ForeignKey, Enum, Numeric, Integer, Boolean, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionType(str, enum.Enum):
    BUY = "buy"
    SELL = "sell"
    # Units acquired by reinvesting a distribution; opens a tax lot like a buy
    REINVESTMENT = "reinvestment"


class InvestmentType(str, enum.Enum):
    STOCK = "stock"
    ETF = "etf"
    MANAGED_FUND = "managed_fund"
    BOND = "bond"
    OTHER = "other"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String)
    first_name: Mapped[str] = mapped_column(String, default="")
    last_name: Mapped[str] = mapped_column(String, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    portfolios: Mapped[list["Portfolio"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )


class UserSession(Base):
    """
    Server-side login session.

    Only the SHA-256 hash of the cookie token is stored, so a database leak
    does not hand out live sessions.
    """
    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    user_agent: Mapped[str | None] = mapped_column(String, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    user: Mapped["User"] = relationship(back_populates="sessions")


class Portfolio(Base):
    __tablename__ = "portfolios"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="portfolios")
    holdings: Mapped[list["Holding"]] = relationship(
        back_populates="portfolio",
        cascade="all, delete-orphan",
    )


class Investment(Base):
    """
    Catalog entry shared by every portfolio (e.g. VAS, an ASX-listed ETF).

    Not owned by any user. The code is the ticker used for live quotes.
    """
    __tablename__ = "investments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String)
    code: Mapped[str] = mapped_column(String, unique=True, index=True)
    management_fee: Mapped[int] = mapped_column(Integer, default=0)  # basis points
    investment_type: Mapped[InvestmentType] = mapped_column(Enum(InvestmentType), default=InvestmentType.STOCK)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    holdings: Mapped[list["Holding"]] = relationship(
        back_populates="investment",
        cascade="all, delete-orphan",
    )


class Holding(Base):
    """
    A position in one Investment inside one Portfolio.

    Units, average price and cost base are never stored; they are
    recomputed from the transactions on every read.
    """
    __tablename__ = "holdings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    portfolio_id: Mapped[int] = mapped_column(ForeignKey("portfolios.id", ondelete="CASCADE"), index=True)
    investment_id: Mapped[int] = mapped_column(ForeignKey("investments.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    portfolio: Mapped["Portfolio"] = relationship(back_populates="holdings")
    investment: Mapped["Investment"] = relationship(back_populates="holdings")
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="holding",
        cascade="all, delete-orphan",
        order_by="[Transaction.transaction_date, Transaction.id]",
    )
    distributions: Mapped[list["Distribution"]] = relationship(
        back_populates="holding",
        cascade="all, delete-orphan",
        order_by="[Distribution.date_paid, Distribution.id]",
    )


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        # FIFO replay reads a holding's transactions in date order
        Index("ix_transaction_holding_date", "holding_id", "transaction_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    holding_id: Mapped[int] = mapped_column(ForeignKey("holdings.id", ondelete="CASCADE"), index=True)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType))
    transaction_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    # Fractional units allowed (managed funds)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 8))
    # Money is integer cents
    price_per_unit: Mapped[int] = mapped_column(Integer)
    # Recorded for reference only, not part of cost base or gain
    brokerage: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    holding: Mapped["Holding"] = relationship(back_populates="transactions")


class Distribution(Base):
    """
    Cash (or reinvested) distribution paid on a holding.

    Does not create units by itself; reinvested units are recorded as a
    separate REINVESTMENT transaction.
    """
    __tablename__ = "distributions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    holding_id: Mapped[int] = mapped_column(ForeignKey("holdings.id", ondelete="CASCADE"), index=True)
    date_paid: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    gross_payment: Mapped[int] = mapped_column(Integer)  # cents
    tax_withheld: Mapped[int] = mapped_column(Integer, default=0)  # cents
    reinvested: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    holding: Mapped["Holding"] = relationship(back_populates="distributions")

#!/usr/bin/env python3
# backend/scripts/seed_sample_data.py
"""
Seed a demo user with one portfolio of ASX ETFs.

Idempotent: existing rows are reused. Login as demo@example.com / Demo@1234.
"""
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

# Setup path to import app modules
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy import select

from app.database import SessionLocal
from app.models import (
    Distribution,
    Holding,
    Investment,
    InvestmentType,
    Portfolio,
    Transaction,
    TransactionType,
    User,
)
from app.services.auth import AuthService, PasswordService
from app.services.valuation import HoldingMetricsCalculator
from app.services.valuation.money import format_currency
from app.utils import setup_logging

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "Demo@1234"

INVESTMENTS = [
    {"code": "VAS", "name": "Vanguard Australian Shares Index ETF", "management_fee": 7, "investment_type": InvestmentType.ETF},
    {"code": "VGS", "name": "Vanguard MSCI Index International Shares ETF", "management_fee": 18, "investment_type": InvestmentType.ETF},
    {"code": "CBA", "name": "Commonwealth Bank of Australia", "management_fee": 0, "investment_type": InvestmentType.STOCK},
]


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def seed() -> None:
    db = SessionLocal()
    try:
        logger.info("Starting database seeding...")

        # 1. Demo user
        user = AuthService().get_user_by_email(db, DEMO_EMAIL)
        if user is None:
            user = User(
                email=DEMO_EMAIL,
                hashed_password=PasswordService.hash_password(DEMO_PASSWORD),
                first_name="Demo",
                last_name="Investor",
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created user: {user.email}")
        else:
            logger.info(f"User exists: {user.email}")

        # 2. Catalog
        investments = {}
        for data in INVESTMENTS:
            investment = db.scalar(select(Investment).where(Investment.code == data["code"]))
            if investment is None:
                investment = Investment(**data)
                db.add(investment)
                db.commit()
                db.refresh(investment)
                logger.info(f"Created investment: {investment.code}")
            investments[data["code"]] = investment

        # 3. Portfolio
        portfolio = db.scalar(select(Portfolio).where(Portfolio.user_id == user.id))
        if portfolio is not None:
            logger.info(f"Portfolio exists: {portfolio.name}, skipping holdings")
            return

        portfolio = Portfolio(user_id=user.id, name="Long Term ETFs")
        db.add(portfolio)
        db.flush()

        # 4. Holdings with a mix of short and long term lots
        vas = Holding(portfolio_id=portfolio.id, investment_id=investments["VAS"].id)
        vgs = Holding(portfolio_id=portfolio.id, investment_id=investments["VGS"].id)
        db.add_all([vas, vgs])
        db.flush()

        db.add_all([
            Transaction(holding_id=vas.id, transaction_type=TransactionType.BUY,
                        transaction_date=_utc(2022, 3, 1), quantity=Decimal("100"),
                        price_per_unit=8950, brokerage=995),
            Transaction(holding_id=vas.id, transaction_type=TransactionType.BUY,
                        transaction_date=_utc(2023, 2, 1), quantity=Decimal("50"),
                        price_per_unit=9200, brokerage=995),
            Transaction(holding_id=vas.id, transaction_type=TransactionType.SELL,
                        transaction_date=_utc(2023, 9, 15), quantity=Decimal("120"),
                        price_per_unit=9500, brokerage=995),
            Transaction(holding_id=vas.id, transaction_type=TransactionType.REINVESTMENT,
                        transaction_date=_utc(2024, 1, 17), quantity=Decimal("1.2345"),
                        price_per_unit=9650),
            Transaction(holding_id=vgs.id, transaction_type=TransactionType.BUY,
                        transaction_date=_utc(2023, 6, 1), quantity=Decimal("40"),
                        price_per_unit=10500, brokerage=995),
        ])
        db.add_all([
            Distribution(holding_id=vas.id, date_paid=_utc(2023, 7, 17),
                         gross_payment=16412, tax_withheld=0, reinvested=False),
            Distribution(holding_id=vas.id, date_paid=_utc(2024, 1, 17),
                         gross_payment=11913, tax_withheld=0, reinvested=True),
        ])
        db.commit()

        logger.info(f"Created portfolio '{portfolio.name}' with 2 holdings")
        calculator = HoldingMetricsCalculator()
        for holding in (vas, vgs):
            db.refresh(holding)
            metrics = calculator.calculate(holding.transactions)
            logger.info(
                f"  {holding.investment.code}: {metrics.units} units, "
                f"cost base {format_currency(metrics.cost_base)}"
            )
        logger.info("Seeding complete")

    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    seed()

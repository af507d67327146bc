"""Initial schema baseline

This migration creates the complete database schema for the Portfolio Tracker.

Tables:
    - users: User accounts
    - user_sessions: Server-side login sessions (token hashes only)
    - portfolios: Portfolios owned by users
    - investments: Shared investment catalog (VAS, VGS, etc.)
    - holdings: An investment held in a portfolio
    - transactions: Buy/sell/reinvestment records (money in cents)
    - distributions: Income paid on a holding

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # USERS
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('email', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False, server_default=''),
        sa.Column('last_name', sa.String(), nullable=False, server_default=''),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # USER SESSIONS
    # ==========================================================================
    op.create_table(
        'user_sessions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True, index=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # PORTFOLIOS
    # ==========================================================================
    op.create_table(
        'portfolios',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # INVESTMENTS
    # ==========================================================================
    op.create_table(
        'investments',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('code', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('management_fee', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('investment_type', sa.Enum('STOCK', 'ETF', 'MANAGED_FUND', 'BOND', 'OTHER', name='investmenttype'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # HOLDINGS
    # ==========================================================================
    op.create_table(
        'holdings',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('portfolio_id', sa.Integer(), sa.ForeignKey('portfolios.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('investment_id', sa.Integer(), sa.ForeignKey('investments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # TRANSACTIONS
    # ==========================================================================
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('holding_id', sa.Integer(), sa.ForeignKey('holdings.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('transaction_type', sa.Enum('BUY', 'SELL', 'REINVESTMENT', name='transactiontype'), nullable=False),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('quantity', sa.Numeric(18, 8), nullable=False),
        sa.Column('price_per_unit', sa.Integer(), nullable=False),
        sa.Column('brokerage', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_transaction_holding_date', 'transactions', ['holding_id', 'transaction_date'])

    # ==========================================================================
    # DISTRIBUTIONS
    # ==========================================================================
    op.create_table(
        'distributions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('holding_id', sa.Integer(), sa.ForeignKey('holdings.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('date_paid', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('gross_payment', sa.Integer(), nullable=False),
        sa.Column('tax_withheld', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reinvested', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('distributions')
    op.drop_index('ix_transaction_holding_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('holdings')
    op.drop_table('investments')
    op.drop_table('portfolios')
    op.drop_table('user_sessions')
    op.drop_table('users')

    # Drop enums
    op.execute('DROP TYPE IF EXISTS transactiontype')
    op.execute('DROP TYPE IF EXISTS investmenttype')

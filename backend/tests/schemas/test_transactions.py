# backend/tests/schemas/test_transactions.py
"""
Tests for transaction schemas and the shared validators behind them.

This module tests:
- Field validation (required fields, numeric constraints)
- Date validation (future dates rejected, naive timestamps read as UTC)
- Batch size limits
- Code and password validators
"""

import pytest
from datetime import date, datetime, timezone, timedelta
from decimal import Decimal

from pydantic import ValidationError

from app.models import TransactionType
from app.schemas.transactions import TransactionBatchCreate, TransactionCreate
from app.schemas.validators import (
    to_utc_datetime,
    validate_code,
    validate_password_strength,
)
from app.services.constants import MAX_BATCH_SIZE


def make_payload(**overrides) -> dict:
    payload = {
        "transaction_type": TransactionType.BUY,
        "transaction_date": datetime(2024, 1, 15, tzinfo=timezone.utc),
        "quantity": Decimal("10"),
        "price_per_unit": 10523,
    }
    payload.update(overrides)
    return payload


# =============================================================================
# TRANSACTION CREATE TESTS
# =============================================================================

class TestTransactionCreate:
    """Tests for TransactionCreate schema."""

    def test_valid_transaction_create(self):
        data = TransactionCreate(**make_payload(brokerage=995))

        assert data.quantity == Decimal("10")
        assert data.price_per_unit == 10523
        assert data.brokerage == 995

    def test_brokerage_defaults_to_zero(self):
        assert TransactionCreate(**make_payload()).brokerage == 0

    def test_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            TransactionCreate()

        error_fields = {e["loc"][0] for e in exc_info.value.errors()}
        assert {"transaction_type", "transaction_date", "quantity", "price_per_unit"} <= error_fields

    def test_type_parsed_from_string(self):
        data = TransactionCreate(**make_payload(transaction_type="reinvestment"))
        assert data.transaction_type == TransactionType.REINVESTMENT

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            TransactionCreate(**make_payload(transaction_type="transfer"))

    def test_fractional_quantity(self):
        data = TransactionCreate(**make_payload(quantity="152.3341"))
        assert data.quantity == Decimal("152.3341")


# =============================================================================
# DATE VALIDATION TESTS
# =============================================================================

class TestDateValidation:
    """Tests for date validation rules."""

    def test_past_date_accepted(self):
        past = datetime.now(timezone.utc) - timedelta(days=30)

        data = TransactionCreate(**make_payload(transaction_date=past))

        assert data.transaction_date <= datetime.now(timezone.utc)

    def test_future_date_rejected(self):
        future = datetime.now(timezone.utc) + timedelta(days=1)

        with pytest.raises(ValidationError) as exc_info:
            TransactionCreate(**make_payload(transaction_date=future))

        assert any("future" in str(e).lower() for e in exc_info.value.errors())

    def test_naive_datetime_gets_utc_timezone(self):
        data = TransactionCreate(**make_payload(transaction_date=datetime(2024, 1, 15, 14, 30)))

        assert data.transaction_date.tzinfo == timezone.utc
        assert data.transaction_date.hour == 14

    def test_offset_converted_to_utc(self):
        sydney = timezone(timedelta(hours=10))

        data = TransactionCreate(
            **make_payload(transaction_date=datetime(2024, 1, 15, 9, 0, tzinfo=sydney))
        )

        assert data.transaction_date == datetime(2024, 1, 14, 23, 0, tzinfo=timezone.utc)
        assert data.transaction_date.utcoffset() == timedelta(0)


# =============================================================================
# NUMERIC VALIDATION TESTS
# =============================================================================

class TestNumericValidation:
    """Tests for quantity, price, and brokerage validation."""

    @pytest.mark.parametrize("quantity", ["0", "-1", "-0.5"])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError):
            TransactionCreate(**make_payload(quantity=quantity))

    def test_zero_price_allowed(self):
        assert TransactionCreate(**make_payload(price_per_unit=0)).price_per_unit == 0

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            TransactionCreate(**make_payload(price_per_unit=-1))

    def test_negative_brokerage_rejected(self):
        with pytest.raises(ValidationError):
            TransactionCreate(**make_payload(brokerage=-5))

    def test_too_many_decimal_places(self):
        with pytest.raises(ValidationError):
            TransactionCreate(**make_payload(quantity="1.123456789"))


# =============================================================================
# BATCH TESTS
# =============================================================================

class TestTransactionBatchCreate:

    def test_accepts_list(self):
        batch = TransactionBatchCreate(transactions=[make_payload(), make_payload(quantity="2")])
        assert len(batch.transactions) == 2

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            TransactionBatchCreate(transactions=[])

    def test_over_limit_rejected(self):
        with pytest.raises(ValidationError):
            TransactionBatchCreate(transactions=[make_payload()] * (MAX_BATCH_SIZE + 1))

    def test_invalid_item_rejected(self):
        with pytest.raises(ValidationError):
            TransactionBatchCreate(transactions=[make_payload(), make_payload(quantity="0")])


# =============================================================================
# VALIDATOR FUNCTION TESTS
# =============================================================================

class TestValidators:

    @pytest.mark.parametrize("raw,expected", [
        (" vas ", "VAS"),
        ("bhp.l", "BHP.L"),
        ("brk-b", "BRK-B"),
    ])
    def test_validate_code(self, raw, expected):
        assert validate_code(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "V A S", ".VAS", "X" * 21])
    def test_validate_code_rejects(self, raw):
        with pytest.raises(ValueError):
            validate_code(raw)

    def test_password_strength_accepts(self):
        assert validate_password_strength("Secret123!") == "Secret123!"

    @pytest.mark.parametrize("password", [
        "secret123!",   # no upper
        "SECRET123!",   # no lower
        "SecretABC!",   # no digit
        "Secret1234",   # no symbol
    ])
    def test_password_strength_rejects(self, password):
        with pytest.raises(ValueError):
            validate_password_strength(password)

    def test_to_utc_from_date(self):
        assert to_utc_datetime(date(2024, 7, 1)) == datetime(2024, 7, 1, tzinfo=timezone.utc)

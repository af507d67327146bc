# tests/services/test_money.py
"""
Tests for cents arithmetic, display formatting and holding-period helpers.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.services.constants import LONG_TERM_HOLDING_MS
from app.services.valuation.money import (
    days_held,
    divide_cents,
    ensure_utc,
    format_currency,
    format_percent,
    held_milliseconds,
    is_eligible_for_cgt_discount,
    is_long_term,
    multiply_cents,
    round_half_up,
    tax_year_label,
    to_cents,
    to_decimal,
)


# =============================================================================
# TEST: ROUNDING AND CENTS
# =============================================================================

class TestRounding:

    @pytest.mark.parametrize("value,expected", [
        (Decimal("0.5"), 1),
        (Decimal("1.5"), 2),
        (Decimal("2.5"), 3),
        (Decimal("2.4999"), 2),
        (Decimal("-0.5"), -1),
        (Decimal("-2.5"), -3),
        (7, 7),
    ])
    def test_round_half_up_away_from_zero(self, value, expected):
        assert round_half_up(value) == expected

    def test_float_goes_through_repr(self):
        """0.1 + 0.2 style noise must not leak into Decimal."""
        assert to_decimal(1.1) == Decimal("1.1")
        assert to_decimal("3.30") == Decimal("3.30")

    @pytest.mark.parametrize("amount,expected", [
        ("12.345", 1235),
        ("12.344", 1234),
        (10.5, 1050),
        (Decimal("0.005"), 1),
        (0, 0),
    ])
    def test_to_cents(self, amount, expected):
        assert to_cents(amount) == expected

    def test_multiply_cents_fractional_units(self):
        # 2.5 x 333 = 832.5 -> 833
        assert multiply_cents(Decimal("2.5"), 333) == 833

    def test_divide_cents(self):
        # 10000 / 3 = 3333.33 -> 3333
        assert divide_cents(10000, 3) == 3333
        # 5 / 2 = 2.5 -> 3
        assert divide_cents(5, 2) == 3


# =============================================================================
# TEST: FORMATTING
# =============================================================================

class TestFormatting:

    def test_format_aud(self):
        assert format_currency(123456) == "$1,234.56"

    def test_format_negative(self):
        assert format_currency(-1230, "EUR") == "-€12.30"

    def test_format_unknown_currency_uses_code(self):
        assert format_currency(500, "xyz") == "XYZ 5.00"

    def test_format_zero(self):
        assert format_currency(0) == "$0.00"

    @pytest.mark.parametrize("bps,expected", [
        (125, "1.25%"),
        (7, "0.07%"),
        (0, "0.00%"),
        (10000, "100.00%"),
    ])
    def test_format_percent(self, bps, expected):
        assert format_percent(bps) == expected


# =============================================================================
# TEST: DATES AND HOLDING PERIODS
# =============================================================================

class TestHoldingPeriods:

    def test_ensure_utc_naive_is_taken_as_utc(self):
        naive = datetime(2024, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_ensure_utc_converts_offsets(self):
        sydney = timezone(timedelta(hours=10))
        moment = datetime(2024, 1, 1, 9, 0, tzinfo=sydney)
        assert ensure_utc(moment) == datetime(2023, 12, 31, 23, 0, tzinfo=timezone.utc)

    def test_ensure_utc_date_is_midnight(self):
        assert ensure_utc(date(2024, 3, 1)) == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_exactly_365_days_is_not_long_term(self):
        acquired = datetime(2023, 1, 1, tzinfo=timezone.utc)
        disposed = acquired + timedelta(milliseconds=LONG_TERM_HOLDING_MS)
        assert held_milliseconds(acquired, disposed) == LONG_TERM_HOLDING_MS
        assert is_long_term(acquired, disposed) is False

    def test_one_millisecond_past_365_days_is_long_term(self):
        acquired = datetime(2023, 1, 1, tzinfo=timezone.utc)
        disposed = acquired + timedelta(milliseconds=LONG_TERM_HOLDING_MS + 1)
        assert is_long_term(acquired, disposed) is True

    def test_leap_year_366_days_is_long_term(self):
        """Threshold is 365 x 24h, not a calendar year."""
        acquired = datetime(2024, 1, 1, tzinfo=timezone.utc)
        disposed = datetime(2024, 12, 31, 0, 0, 1, tzinfo=timezone.utc)
        assert days_held(acquired, disposed) == 365
        assert is_long_term(acquired, disposed) is True

    def test_cgt_discount_calendar_rule(self):
        now = datetime(2024, 6, 15, tzinfo=timezone.utc)
        assert is_eligible_for_cgt_discount(datetime(2023, 6, 14, tzinfo=timezone.utc), now) is True
        assert is_eligible_for_cgt_discount(datetime(2023, 6, 15, tzinfo=timezone.utc), now) is False

    def test_cgt_discount_feb_29_rolls_to_march_1(self):
        now = datetime(2024, 2, 29, tzinfo=timezone.utc)
        assert is_eligible_for_cgt_discount(datetime(2023, 2, 28, tzinfo=timezone.utc), now) is True
        assert is_eligible_for_cgt_discount(datetime(2023, 3, 1, tzinfo=timezone.utc), now) is False

    @pytest.mark.parametrize("moment,expected", [
        (date(2024, 3, 1), "2023-24"),
        (date(2024, 6, 30), "2023-24"),
        (date(2024, 7, 1), "2024-25"),
        (date(1999, 8, 1), "1999-00"),
    ])
    def test_tax_year_label(self, moment, expected):
        assert tax_year_label(moment) == expected

    def test_tax_year_uses_utc(self):
        """1 July 08:00 in Sydney is still 30 June in UTC."""
        sydney = timezone(timedelta(hours=10))
        assert tax_year_label(datetime(2024, 7, 1, 8, 0, tzinfo=sydney)) == "2023-24"

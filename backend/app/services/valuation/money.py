# backend/app/services/valuation/money.py
"""
Money and holding-period helpers.

All money in the application is an integer number of cents. Averages and
products with fractional unit quantities are computed in Decimal and rounded
back to whole cents with ROUND_HALF_UP (halves go away from zero).

Holding period:
    is_long_term() uses a fixed 365 x 24h threshold measured in whole
    milliseconds. It is not calendar-aware: a lot bought on 1 March 2023 and
    sold on 29 February 2024 is 365 days old and therefore NOT long-term.
    is_eligible_for_cgt_discount() is the calendar-year rule shown to users
    and does not drive any calculation.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP

from app.services.constants import (
    CENTS_PER_UNIT,
    DEFAULT_CURRENCY,
    LONG_TERM_HOLDING_MS,
    TAX_YEAR_START_MONTH,
)

_ONE = Decimal("1")
_ONE_MILLISECOND = timedelta(milliseconds=1)

_CURRENCY_SYMBOLS: dict[str, str] = {
    "AUD": "$",
    "NZD": "$",
    "USD": "$",
    "CAD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


# =============================================================================
# DECIMAL / CENTS ARITHMETIC
# =============================================================================

def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Decimal | int | float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(to_decimal(value).quantize(_ONE, rounding=ROUND_HALF_UP))


def to_cents(amount: Decimal | int | float | str) -> int:
    """
    Convert an amount in currency units to integer cents.

    Example:
        >>> to_cents("12.345")
        1235
    """
    return round_half_up(to_decimal(amount) * CENTS_PER_UNIT)


def multiply_cents(quantity: Decimal | int | float, cents: int) -> int:
    """Quantity x per-unit price in cents, rounded to whole cents."""
    return round_half_up(to_decimal(quantity) * cents)


def divide_cents(cents: int, quantity: Decimal | int | float) -> int:
    """Per-unit price in cents from a total; caller guards quantity > 0."""
    return round_half_up(Decimal(cents) / to_decimal(quantity))


# =============================================================================
# DISPLAY FORMATTING
# =============================================================================

def format_currency(cents: int, currency: str = DEFAULT_CURRENCY) -> str:
    """
    Format cents for display.

    Example:
        >>> format_currency(123456)
        '$1,234.56'
        >>> format_currency(-1230, "EUR")
        '-€12.30'
    """
    amount = (Decimal(abs(cents)) / CENTS_PER_UNIT).quantize(Decimal("0.01"))
    code = currency.upper()
    symbol = _CURRENCY_SYMBOLS.get(code)
    body = f"{symbol}{amount:,.2f}" if symbol else f"{code} {amount:,.2f}"
    return f"-{body}" if cents < 0 else body


def format_percent(basis_points: int) -> str:
    """
    Format basis points as a percentage (e.g. management fees).

    Example:
        >>> format_percent(125)
        '1.25%'
    """
    return f"{(Decimal(basis_points) / 100).quantize(Decimal('0.01'))}%"


# =============================================================================
# DATES AND HOLDING PERIODS
# =============================================================================

def ensure_utc(moment: datetime | date) -> datetime:
    """
    Normalise to an aware UTC datetime.

    Naive datetimes (SQLite returns these) are taken to be UTC already.
    Plain dates become midnight UTC.
    """
    if not isinstance(moment, datetime):
        return datetime.combine(moment, time.min, tzinfo=timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def held_milliseconds(acquired: datetime | date, disposed: datetime | date) -> int:
    """Whole milliseconds between acquisition and disposal (floor)."""
    return (ensure_utc(disposed) - ensure_utc(acquired)) // _ONE_MILLISECOND


def days_held(acquired: datetime | date, disposed: datetime | date) -> int:
    return (ensure_utc(disposed) - ensure_utc(acquired)).days


def is_long_term(acquired: datetime | date, disposed: datetime | date) -> bool:
    """True when held for strictly more than 365 x 24 hours."""
    return held_milliseconds(acquired, disposed) > LONG_TERM_HOLDING_MS


def is_eligible_for_cgt_discount(
        acquired: datetime | date,
        now: datetime | None = None,
) -> bool:
    """
    Calendar rule for the 50% CGT discount: bought before this instant last year.

    29 February rolls forward to 1 March of the previous year.
    """
    current = ensure_utc(now or datetime.now(timezone.utc))
    try:
        one_year_ago = current.replace(year=current.year - 1)
    except ValueError:
        one_year_ago = current.replace(year=current.year - 1, month=3, day=1)
    return ensure_utc(acquired) < one_year_ago


def tax_year_label(moment: datetime | date) -> str:
    """
    Australian financial year (1 July to 30 June) containing the moment, in UTC.

    Example:
        >>> tax_year_label(date(2024, 3, 1))
        '2023-24'
    """
    current = ensure_utc(moment)
    start_year = current.year if current.month >= TAX_YEAR_START_MONTH else current.year - 1
    return f"{start_year}-{(start_year + 1) % 100:02d}"

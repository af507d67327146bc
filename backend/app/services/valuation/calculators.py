# backend/app/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator does one thing:
- HoldingMetricsCalculator: units, average price and cost base from transactions
- HoldingValuationCalculator: marks a holding to market (with price fallback)
- PortfolioValuationCalculator: sums holdings into portfolio totals
- DistributionIncomeCalculator: buckets distribution income by tax year

Design Principles:
- Stateless, every input passed explicitly
- Money is integer cents; Decimal for every intermediate product
- Pure: nothing here touches the database or the price oracle

Usage:
    metrics = HoldingMetricsCalculator().calculate(holding.transactions)
    valuation = HoldingValuationCalculator().calculate(
        metrics=metrics,
        current_price=prices.get(code),
        holding_id=holding.id,
        investment_id=investment.id,
        name=investment.name,
        code=investment.code,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from app.models import TransactionType
from app.services.exceptions import ValidationError
from app.services.valuation.money import (
    ensure_utc,
    multiply_cents,
    round_half_up,
    tax_year_label,
    to_decimal,
)
from app.services.valuation.types import (
    HoldingMetrics,
    HoldingValuation,
    PortfolioValuation,
    TaxYearSummary,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_PERCENT_PLACES = Decimal("0.01")

ACQUISITION_TYPES = frozenset({TransactionType.BUY, TransactionType.REINVESTMENT})


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def transaction_type_of(txn: Any) -> TransactionType:
    """Read a transaction's type, accepting the enum or its string value."""
    raw = getattr(txn, "transaction_type", None)
    try:
        return TransactionType(raw)
    except ValueError:
        raise ValidationError(
            f"Unknown transaction type {raw!r} on transaction {getattr(txn, 'id', None)}",
            field="transaction_type",
        )


def _is_non_negative(value: Any) -> bool:
    try:
        number = to_decimal(value)
    except (ArithmeticError, TypeError, ValueError):
        return False
    return number.is_finite() and number >= 0


def validate_transaction(txn: Any) -> TransactionType:
    """
    Check a stored transaction before it enters a calculation.

    Request bodies are validated by Pydantic long before this point, so a
    failure here means corrupt data. The message names the transaction and
    the offending field.

    Returns:
        The normalised TransactionType

    Raises:
        ValidationError: missing date, negative quantity, negative or
            non-integer price, unknown type
    """
    txn_id = getattr(txn, "id", None)
    txn_type = transaction_type_of(txn)

    if getattr(txn, "transaction_date", None) is None:
        raise ValidationError(
            f"Transaction {txn_id} has no transaction date",
            field="transaction_date",
        )

    quantity = getattr(txn, "quantity", None)
    if quantity is None or isinstance(quantity, bool) or not _is_non_negative(quantity):
        raise ValidationError(
            f"Transaction {txn_id} has invalid quantity {quantity!r}; must be >= 0",
            field="quantity",
        )

    price = getattr(txn, "price_per_unit", None)
    if isinstance(price, bool) or not isinstance(price, int) or price < 0:
        raise ValidationError(
            f"Transaction {txn_id} has invalid price_per_unit {price!r}; "
            f"must be a non-negative integer number of cents",
            field="price_per_unit",
        )

    return txn_type


# =============================================================================
# SHARED ARITHMETIC
# =============================================================================

def gain_percent(gain: int, cost_base: int) -> Decimal:
    """
    Gain as a percentage of cost base, to 2 decimal places.

    Returns 0 when cost_base is 0 (or negative) instead of dividing by zero.
    """
    if cost_base <= 0:
        return Decimal("0.00")
    return (Decimal(gain) / Decimal(cost_base) * 100).quantize(
        _PERCENT_PLACES, rounding=ROUND_HALF_UP,
    )


# =============================================================================
# HOLDING METRICS CALCULATOR
# =============================================================================

class HoldingMetricsCalculator:
    """
    Average-cost metrics for one holding.

    units         = sum(buy) + sum(reinvestment) - sum(sell)
    total_cost    = sum(quantity x price) over buys and reinvestments only
    average_price = round(total_cost / units) when units > 0, else 0
    cost_base     = units x average_price when units > 0, else 0

    Sells reduce units but never total_cost, so the average is taken over
    the net position. This is plain summation: transaction order does not
    matter. FIFO costing for tax lives in tax_lots.py.
    """

    def calculate(self, transactions: Iterable[Any]) -> HoldingMetrics:
        units = _ZERO
        total_cost = _ZERO

        for txn in transactions:
            txn_type = validate_transaction(txn)
            quantity = to_decimal(txn.quantity)

            if txn_type in ACQUISITION_TYPES:
                units += quantity
                total_cost += quantity * txn.price_per_unit
            else:
                units -= quantity

        if units <= 0:
            if units < 0:
                logger.debug(f"Holding has negative net units ({units}); metrics zeroed")
            return HoldingMetrics(
                units=units,
                average_price=0,
                cost_base=0,
                total_cost=round_half_up(total_cost),
            )

        average_price = round_half_up(total_cost / units)

        return HoldingMetrics(
            units=units,
            average_price=average_price,
            cost_base=multiply_cents(units, average_price),
            total_cost=round_half_up(total_cost),
        )


# =============================================================================
# HOLDING VALUATION CALCULATOR
# =============================================================================

class HoldingValuationCalculator:
    """
    Marks a holding to market.

    current_value   = units x current_price
    unrealised_gain = current_value - cost_base
    percent         = unrealised_gain / cost_base x 100 (0 when cost_base is 0)

    Missing price:
        The average price stands in. Value collapses to cost base and the
        gain is 0. This degrades quietly; only price_is_live records it.
    """

    def calculate(
            self,
            metrics: HoldingMetrics,
            current_price: int | None,
            holding_id: int | None = None,
            investment_id: int | None = None,
            name: str = "",
            code: str = "",
    ) -> HoldingValuation:
        warnings: list[str] = []
        price_is_live = current_price is not None

        if price_is_live:
            price = current_price
        else:
            price = metrics.average_price
            if metrics.has_position:
                warnings.append(f"No current price for {code}; using average price")

        units = metrics.units if metrics.has_position else _ZERO
        current_value = multiply_cents(units, price)
        unrealised_gain = current_value - metrics.cost_base

        return HoldingValuation(
            holding_id=holding_id,
            investment_id=investment_id,
            name=name,
            code=code,
            units=metrics.units,
            average_price=metrics.average_price,
            cost_base=metrics.cost_base,
            current_price=price,
            current_value=current_value,
            unrealised_gain=unrealised_gain,
            unrealised_gain_percent=gain_percent(unrealised_gain, metrics.cost_base),
            price_is_live=price_is_live,
            warnings=warnings,
        )


# =============================================================================
# PORTFOLIO VALUATION CALCULATOR
# =============================================================================

class PortfolioValuationCalculator:
    """
    Portfolio totals from holding valuations.

    Cost base and value are summed first and the percentage derived from
    those sums. Percentages of individual holdings are never added.
    """

    def calculate(
            self,
            holdings: list[HoldingValuation],
            portfolio_id: int | None = None,
            name: str = "",
    ) -> PortfolioValuation:
        total_cost_base = sum(h.cost_base for h in holdings)
        total_value = sum(h.current_value for h in holdings)
        total_gain = total_value - total_cost_base

        missing = sorted({h.code for h in holdings if not h.price_is_live and h.units > 0})
        warnings = [warning for h in holdings for warning in h.warnings]

        return PortfolioValuation(
            portfolio_id=portfolio_id,
            name=name,
            holdings=holdings,
            total_cost_base=total_cost_base,
            total_value=total_value,
            total_unrealised_gain=total_gain,
            total_unrealised_gain_percent=gain_percent(total_gain, total_cost_base),
            missing_prices=missing,
            warnings=warnings,
        )


# =============================================================================
# DISTRIBUTION INCOME CALCULATOR
# =============================================================================

class DistributionIncomeCalculator:
    """
    Buckets distribution income by financial year.

    Mutates and returns the `years` mapping so realised gains and income
    can share one set of TaxYearSummary rows.
    """

    def calculate(
            self,
            distributions: Iterable[Any],
            years: dict[str, TaxYearSummary] | None = None,
            as_of=None,
    ) -> dict[str, TaxYearSummary]:
        years = {} if years is None else years
        cutoff = ensure_utc(as_of) if as_of is not None else None

        for dist in distributions:
            if dist.date_paid is None:
                raise ValidationError(
                    f"Distribution {getattr(dist, 'id', None)} has no payment date",
                    field="date_paid",
                )
            paid = ensure_utc(dist.date_paid)
            if cutoff is not None and paid > cutoff:
                continue

            label = tax_year_label(paid)
            bucket = years.setdefault(label, TaxYearSummary(tax_year=label))
            bucket.distribution_gross += dist.gross_payment
            bucket.distribution_tax_withheld += dist.tax_withheld or 0
            if dist.reinvested:
                bucket.distribution_reinvested += dist.gross_payment

        return years

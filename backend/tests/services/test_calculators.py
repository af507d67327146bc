# backend/tests/services/test_calculators.py
"""
Unit tests for valuation calculators.

These tests verify the pure calculation logic WITHOUT database dependencies.
Plain dataclasses from conftest stand in for Transaction and Distribution.

Test Coverage:
- validate_transaction: corrupt stored data is rejected with the field named
- HoldingMetricsCalculator: units, average price over net units, cost base
- HoldingValuationCalculator: mark to market, average-price fallback
- PortfolioValuationCalculator: totals and derived percentage
- DistributionIncomeCalculator: tax-year buckets
"""

import itertools
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.models import TransactionType
from app.services.exceptions import ValidationError
from app.services.valuation.calculators import (
    DistributionIncomeCalculator,
    HoldingMetricsCalculator,
    HoldingValuationCalculator,
    PortfolioValuationCalculator,
    gain_percent,
    validate_transaction,
)
from app.services.valuation.types import HoldingMetrics
from tests.conftest import Dist, Txn, buy, day, reinvest, sell


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def metrics_calc() -> HoldingMetricsCalculator:
    return HoldingMetricsCalculator()


@pytest.fixture
def holding_calc() -> HoldingValuationCalculator:
    return HoldingValuationCalculator()


# =============================================================================
# TEST: INPUT VALIDATION
# =============================================================================

class TestValidateTransaction:

    def test_accepts_string_type(self):
        txn = Txn("sell", day(1), Decimal("1"), 100)
        assert validate_transaction(txn) == TransactionType.SELL

    def test_unknown_type(self):
        txn = Txn("dividend", day(1), Decimal("1"), 100, id=7)
        with pytest.raises(ValidationError) as exc_info:
            validate_transaction(txn)
        assert exc_info.value.field == "transaction_type"
        assert "7" in str(exc_info.value)

    def test_missing_date(self):
        txn = Txn(TransactionType.BUY, None, Decimal("1"), 100, id=3)
        with pytest.raises(ValidationError) as exc_info:
            validate_transaction(txn)
        assert exc_info.value.field == "transaction_date"

    @pytest.mark.parametrize("quantity", [Decimal("-1"), None, Decimal("NaN"), "abc"])
    def test_bad_quantity(self, quantity):
        txn = Txn(TransactionType.BUY, day(1), quantity, 100)
        with pytest.raises(ValidationError) as exc_info:
            validate_transaction(txn)
        assert exc_info.value.field == "quantity"

    @pytest.mark.parametrize("price", [-1, 10.5, None, True, "100"])
    def test_bad_price(self, price):
        txn = Txn(TransactionType.BUY, day(1), Decimal("1"), price)
        with pytest.raises(ValidationError) as exc_info:
            validate_transaction(txn)
        assert exc_info.value.field == "price_per_unit"

    def test_zero_quantity_and_price_are_valid(self):
        txn = Txn(TransactionType.BUY, day(1), Decimal("0"), 0)
        assert validate_transaction(txn) == TransactionType.BUY


# =============================================================================
# TEST: HOLDING METRICS
# =============================================================================

class TestHoldingMetricsCalculator:

    def test_empty(self, metrics_calc):
        metrics = metrics_calc.calculate([])
        assert metrics.units == 0
        assert metrics.average_price == 0
        assert metrics.cost_base == 0
        assert metrics.has_position is False

    def test_two_buys(self, metrics_calc):
        metrics = metrics_calc.calculate([
            buy(10, 1000, day(1)),
            buy(10, 1200, day(10)),
        ])
        assert metrics.units == Decimal("20")
        assert metrics.average_price == 1100
        assert metrics.cost_base == 22000
        assert metrics.total_cost == 22000

    def test_reinvestment_counts_as_acquisition(self, metrics_calc):
        metrics = metrics_calc.calculate([
            buy(10, 1000, day(1)),
            reinvest(2, 1300, day(5)),
        ])
        assert metrics.units == Decimal("12")
        # (10000 + 2600) / 12 = 1050
        assert metrics.average_price == 1050
        assert metrics.cost_base == 12600

    def test_sell_reduces_units_not_total_cost(self, metrics_calc):
        """Average is taken over net units, so it rises after a sell."""
        metrics = metrics_calc.calculate([
            buy(10, 1000, day(1)),
            buy(10, 1200, day(10)),
            sell(5, 1500, day(20)),
        ])
        assert metrics.units == Decimal("15")
        assert metrics.total_cost == 22000
        # 22000 / 15 = 1466.67 -> 1467
        assert metrics.average_price == 1467
        assert metrics.cost_base == 15 * 1467

    def test_fully_sold_is_zero(self, metrics_calc):
        metrics = metrics_calc.calculate([
            buy(10, 1000, day(1)),
            sell(10, 1100, day(2)),
        ])
        assert metrics.units == 0
        assert metrics.average_price == 0
        assert metrics.cost_base == 0
        assert metrics.total_cost == 10000

    def test_oversold_does_not_divide(self, metrics_calc):
        metrics = metrics_calc.calculate([
            buy(5, 1000, day(1)),
            sell(8, 1100, day(2)),
        ])
        assert metrics.units == Decimal("-3")
        assert metrics.average_price == 0
        assert metrics.cost_base == 0

    def test_fractional_units_round_half_up(self, metrics_calc):
        metrics = metrics_calc.calculate([
            buy(3, 1000, day(1)),
            buy("0.5", 1001, day(2)),
        ])
        assert metrics.units == Decimal("3.5")
        # 3500.5 / 3.5 = 1000.14 -> 1000
        assert metrics.average_price == 1000
        assert metrics.cost_base == 3500
        assert metrics.total_cost == 3501

    def test_order_independent(self, metrics_calc):
        transactions = [
            buy(10, 1000, day(1)),
            buy("2.5", 1333, day(30)),
            reinvest("0.75", 1410, day(60)),
            sell(4, 1500, day(90)),
        ]
        expected = metrics_calc.calculate(transactions)

        for permutation in itertools.permutations(transactions):
            assert metrics_calc.calculate(list(permutation)) == expected

    def test_rejects_corrupt_transaction(self, metrics_calc):
        with pytest.raises(ValidationError):
            metrics_calc.calculate([buy(10, 1000, day(1)), Txn(TransactionType.BUY, day(2), Decimal("1"), -5)])


# =============================================================================
# TEST: HOLDING VALUATION
# =============================================================================

class TestHoldingValuationCalculator:

    def _metrics(self, units="20", average=1100) -> HoldingMetrics:
        units = Decimal(units)
        return HoldingMetrics(units=units, average_price=average, cost_base=int(units * average))

    def test_live_price(self, holding_calc):
        valuation = holding_calc.calculate(self._metrics(), 1500, holding_id=1, code="VAS")

        assert valuation.current_price == 1500
        assert valuation.current_value == 30000
        assert valuation.unrealised_gain == 8000
        assert valuation.unrealised_gain_percent == Decimal("36.36")
        assert valuation.price_is_live is True
        assert valuation.warnings == []

    def test_loss(self, holding_calc):
        valuation = holding_calc.calculate(self._metrics(), 1000)
        assert valuation.unrealised_gain == -2000
        assert valuation.unrealised_gain_percent == Decimal("-9.09")

    def test_missing_price_falls_back_to_average(self, holding_calc):
        valuation = holding_calc.calculate(self._metrics(), None, code="VAS")

        assert valuation.current_price == 1100
        assert valuation.current_value == 22000
        assert valuation.unrealised_gain == 0
        assert valuation.unrealised_gain_percent == Decimal("0.00")
        assert valuation.price_is_live is False
        assert len(valuation.warnings) == 1
        assert "VAS" in valuation.warnings[0]

    def test_zero_units_no_warning(self, holding_calc):
        metrics = HoldingMetrics(units=Decimal("0"), average_price=0, cost_base=0)
        valuation = holding_calc.calculate(metrics, None, code="VAS")

        assert valuation.current_value == 0
        assert valuation.unrealised_gain == 0
        assert valuation.unrealised_gain_percent == Decimal("0.00")
        assert valuation.warnings == []

    def test_zero_price_is_live(self, holding_calc):
        """A quote of 0 is a real price, not a missing one."""
        valuation = holding_calc.calculate(self._metrics(), 0)
        assert valuation.price_is_live is True
        assert valuation.current_value == 0
        assert valuation.unrealised_gain == -22000
        assert valuation.unrealised_gain_percent == Decimal("-100.00")


class TestGainPercent:

    @pytest.mark.parametrize("gain,cost,expected", [
        (1, 3, Decimal("33.33")),
        (2, 3, Decimal("66.67")),
        (0, 100, Decimal("0.00")),
        (500, 0, Decimal("0.00")),
        (500, -10, Decimal("0.00")),
    ])
    def test_values(self, gain, cost, expected):
        assert gain_percent(gain, cost) == expected


# =============================================================================
# TEST: PORTFOLIO VALUATION
# =============================================================================

class TestPortfolioValuationCalculator:

    def test_totals_and_derived_percent(self, holding_calc):
        a = holding_calc.calculate(
            HoldingMetrics(units=Decimal("20"), average_price=1100, cost_base=22000), 1500, code="VAS",
        )
        b = holding_calc.calculate(
            HoldingMetrics(units=Decimal("10"), average_price=1000, cost_base=10000), None, code="VGS",
        )

        result = PortfolioValuationCalculator().calculate([a, b], portfolio_id=1, name="Main")

        assert result.total_cost_base == 32000
        assert result.total_value == 40000
        assert result.total_unrealised_gain == 8000
        # From the sums, not the average of 36.36% and 0%
        assert result.total_unrealised_gain_percent == Decimal("25.00")
        assert result.missing_prices == ["VGS"]
        assert len(result.warnings) == 1

    def test_empty_portfolio(self):
        result = PortfolioValuationCalculator().calculate([], portfolio_id=1, name="Empty")
        assert result.total_cost_base == 0
        assert result.total_value == 0
        assert result.total_unrealised_gain_percent == Decimal("0.00")
        assert result.missing_prices == []

    def test_zero_unit_holding_not_reported_missing(self, holding_calc):
        empty = holding_calc.calculate(
            HoldingMetrics(units=Decimal("0"), average_price=0, cost_base=0), None, code="CBA",
        )
        result = PortfolioValuationCalculator().calculate([empty])
        assert result.missing_prices == []


# =============================================================================
# TEST: DISTRIBUTION INCOME
# =============================================================================

class TestDistributionIncomeCalculator:

    def test_buckets_by_financial_year(self):

        distributions = [
            Dist(datetime(2023, 7, 17, tzinfo=timezone.utc), 16412),
            Dist(datetime(2024, 1, 17, tzinfo=timezone.utc), 11913, tax_withheld=500, reinvested=True),
            Dist(datetime(2024, 7, 16, tzinfo=timezone.utc), 10000),
        ]
        years = DistributionIncomeCalculator().calculate(distributions)

        assert sorted(years) == ["2023-24", "2024-25"]
        fy24 = years["2023-24"]
        assert fy24.distribution_gross == 28325
        assert fy24.distribution_tax_withheld == 500
        assert fy24.distribution_reinvested == 11913
        assert fy24.distribution_net == 27825
        assert years["2024-25"].distribution_gross == 10000

    def test_as_of_excludes_later_payments(self):

        distributions = [
            Dist(datetime(2023, 7, 17, tzinfo=timezone.utc), 100),
            Dist(datetime(2024, 1, 17, tzinfo=timezone.utc), 200),
        ]
        years = DistributionIncomeCalculator().calculate(
            distributions, as_of=datetime(2023, 12, 31, tzinfo=timezone.utc),
        )
        assert years["2023-24"].distribution_gross == 100

    def test_missing_date_raises(self):
        with pytest.raises(ValidationError):
            DistributionIncomeCalculator().calculate([Dist(None, 100)])

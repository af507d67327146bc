# backend/app/services/valuation/tax_lots.py
"""
FIFO tax-lot engine and portfolio tax summary.

FifoLotEngine replays one holding's transactions in date order:
- BUY and REINVESTMENT append a lot to the tail of the queue
- SELL consumes lots from the head, emitting one RealisedGain per lot touched
- an exhausted lot leaves the queue immediately

Oversell:
    When a sell outlasts the queue the leftover units cannot be matched to
    any cost. No gain is invented for them; they are reported as an
    UnmatchedSale with a warning and the replay carries on.

Missing quotes:
    An open lot without a live price is valued at its own cost per unit,
    so its unrealised gain is exactly 0. The holding-level average price
    (HoldingValuationCalculator's stand-in) is not used here: it divides
    acquisition cost by net units, and after a partial sale it can sit far
    from any open lot's cost, which would report a gain no quote supports.

TaxSummaryCalculator runs the engine over every holding of a portfolio,
marks the remaining lots to market and buckets realised gains and
distribution income by financial year.

Both classes are pure: same inputs, same output, no I/O.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any

from app.models import TransactionType
from app.services.valuation.calculators import (
    ACQUISITION_TYPES,
    DistributionIncomeCalculator,
    validate_transaction,
)
from app.services.valuation.money import (
    days_held,
    ensure_utc,
    is_long_term,
    multiply_cents,
    tax_year_label,
    to_decimal,
)
from app.services.valuation.types import (
    HoldingTaxSummary,
    LotReplayResult,
    RealisedGain,
    TaxLot,
    TaxSummary,
    TaxYearSummary,
    UnmatchedSale,
    UnrealisedLot,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


# =============================================================================
# FIFO LOT ENGINE
# =============================================================================

class FifoLotEngine:
    """
    Replays a single holding's transactions through a FIFO lot queue.

    Sorting is stable, so transactions sharing a timestamp keep the order
    they were given in (the store returns them by date, then id).
    """

    def replay(
            self,
            transactions: Iterable[Any],
            holding_id: int | None = None,
            code: str = "",
            as_of: datetime | None = None,
    ) -> LotReplayResult:
        """
        Args:
            transactions: The holding's transactions, any order
            holding_id: Copied onto every emitted record
            code: Investment code, copied onto every emitted record
            as_of: Ignore transactions dated after this instant

        Returns:
            LotReplayResult with realised gains in sale order, the open lots
            oldest first, and any unmatched sales
        """
        cutoff = ensure_utc(as_of) if as_of is not None else None

        validated = [(validate_transaction(txn), txn) for txn in transactions]
        ordered = sorted(validated, key=lambda pair: ensure_utc(pair[1].transaction_date))

        lots: deque[TaxLot] = deque()
        result = LotReplayResult()

        for txn_type, txn in ordered:
            txn_date = ensure_utc(txn.transaction_date)
            if cutoff is not None and txn_date > cutoff:
                break

            quantity = to_decimal(txn.quantity)
            if quantity == 0:
                continue

            if txn_type in ACQUISITION_TYPES:
                lots.append(TaxLot(
                    acquired_at=txn_date,
                    quantity=quantity,
                    cost_per_unit=txn.price_per_unit,
                    transaction_id=getattr(txn, "id", None),
                ))
            elif txn_type == TransactionType.SELL:
                self._consume(lots, txn, txn_date, quantity, holding_id, code, result)

        result.open_lots = list(lots)
        return result

    def _consume(
            self,
            lots: deque[TaxLot],
            txn: Any,
            sold_at: datetime,
            quantity: Decimal,
            holding_id: int | None,
            code: str,
            result: LotReplayResult,
    ) -> None:
        remaining = quantity
        sale_price = txn.price_per_unit
        txn_id = getattr(txn, "id", None)

        while remaining > 0 and lots:
            lot = lots[0]
            matched = min(lot.quantity, remaining)

            proceeds = multiply_cents(matched, sale_price)
            cost_base = multiply_cents(matched, lot.cost_per_unit)

            result.realised.append(RealisedGain(
                holding_id=holding_id,
                code=code,
                acquired_at=lot.acquired_at,
                sold_at=sold_at,
                quantity=matched,
                cost_per_unit=lot.cost_per_unit,
                sale_price_per_unit=sale_price,
                proceeds=proceeds,
                cost_base=cost_base,
                gain=proceeds - cost_base,
                is_long_term=is_long_term(lot.acquired_at, sold_at),
                days_held=days_held(lot.acquired_at, sold_at),
                tax_year=tax_year_label(sold_at),
                sell_transaction_id=txn_id,
            ))

            lot.quantity -= matched
            remaining -= matched
            if lot.quantity == 0:
                lots.popleft()

        if remaining > 0:
            message = (
                f"Sell of {quantity} {code or 'units'} on {sold_at.date().isoformat()} "
                f"exceeds units held by {remaining}; unmatched units have no cost base"
            )
            logger.warning(message, extra={"holding_id": holding_id, "transaction_id": txn_id})
            result.warnings.append(message)
            result.unmatched.append(UnmatchedSale(
                holding_id=holding_id,
                code=code,
                sold_at=sold_at,
                quantity=remaining,
                sell_transaction_id=txn_id,
            ))


# =============================================================================
# TAX SUMMARY CALCULATOR
# =============================================================================

class TaxSummaryCalculator:
    """
    Portfolio tax report from holdings, prices and a reference instant.

    Holdings are duck-typed: anything with id, investment (name, code),
    transactions and distributions. ORM Holding objects qualify.

    Unrealised lots:
        current price comes from `prices`; a missing price falls back to the
        lot's own cost, making that lot's gain 0.
        gain = quantity x (current_price - cost_per_unit)
        long-term is measured from acquisition to `as_of`.
        Holdings with no units left are omitted; their realised gains stay.
    """

    def __init__(
            self,
            engine: FifoLotEngine | None = None,
            income_calc: DistributionIncomeCalculator | None = None,
    ) -> None:
        self._engine = engine or FifoLotEngine()
        self._income_calc = income_calc or DistributionIncomeCalculator()

    def calculate(
            self,
            holdings: Iterable[Any],
            prices: dict[str, int | None],
            as_of: datetime,
            portfolio_id: int | None = None,
    ) -> TaxSummary:
        now = ensure_utc(as_of)

        short_term: list[RealisedGain] = []
        long_term: list[RealisedGain] = []
        unrealised: list[HoldingTaxSummary] = []
        unmatched: list[UnmatchedSale] = []
        warnings: list[str] = []
        years: dict[str, TaxYearSummary] = {}

        for holding in sorted(holdings, key=lambda h: (h.id is None, h.id or 0)):
            investment = holding.investment
            code = investment.code if investment is not None else ""
            name = investment.name if investment is not None else ""

            replay = self._engine.replay(
                holding.transactions,
                holding_id=holding.id,
                code=code,
                as_of=now,
            )

            for record in replay.realised:
                bucket = years.setdefault(record.tax_year, TaxYearSummary(tax_year=record.tax_year))
                if record.is_long_term:
                    long_term.append(record)
                    bucket.long_term_gain += record.gain
                else:
                    short_term.append(record)
                    bucket.short_term_gain += record.gain

            unmatched.extend(replay.unmatched)
            warnings.extend(replay.warnings)

            self._income_calc.calculate(holding.distributions or [], years=years, as_of=now)

            if replay.remaining_units > 0:
                unrealised.append(self._mark_to_market(
                    holding_id=holding.id,
                    name=name,
                    code=code,
                    lots=replay.open_lots,
                    price=prices.get(code),
                    now=now,
                ))

        return TaxSummary(
            portfolio_id=portfolio_id,
            as_of=now,
            short_term=short_term,
            long_term=long_term,
            unrealised=unrealised,
            by_tax_year=[years[label] for label in sorted(years)],
            unmatched_sales=unmatched,
            warnings=warnings,
        )

    def _mark_to_market(
            self,
            holding_id: int | None,
            name: str,
            code: str,
            lots: list[TaxLot],
            price: int | None,
            now: datetime,
    ) -> HoldingTaxSummary:
        marked: list[UnrealisedLot] = []

        for lot in lots:
            current_price = price if price is not None else lot.cost_per_unit
            marked.append(UnrealisedLot(
                acquired_at=lot.acquired_at,
                quantity=lot.quantity,
                cost_per_unit=lot.cost_per_unit,
                cost_base=multiply_cents(lot.quantity, lot.cost_per_unit),
                current_price=current_price,
                current_value=multiply_cents(lot.quantity, current_price),
                unrealised_gain=multiply_cents(lot.quantity, current_price - lot.cost_per_unit),
                is_long_term=is_long_term(lot.acquired_at, now),
                days_held=days_held(lot.acquired_at, now),
            ))

        return HoldingTaxSummary(
            holding_id=holding_id,
            name=name,
            code=code,
            units=sum((lot.quantity for lot in lots), _ZERO),
            price_is_live=price is not None,
            lots=marked,
            total_cost_base=sum(lot.cost_base for lot in marked),
            total_value=sum(lot.current_value for lot in marked),
            total_unrealised_gain=sum(lot.unrealised_gain for lot in marked),
        )

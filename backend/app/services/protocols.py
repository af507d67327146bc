# backend/app/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- PriceOracle satisfies PriceOracleProtocol without inheriting from it
- Test doubles work without explicit inheritance
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class PriceOracleProtocol(Protocol):
    """Interface required by ValuationService."""

    def get_price(self, code: str) -> int | None:
        ...

    def get_prices(self, codes: Iterable[str]) -> dict[str, int | None]:
        ...

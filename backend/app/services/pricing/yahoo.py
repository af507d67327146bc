# backend/app/services/pricing/yahoo.py
"""
Yahoo Finance price provider.

Codes are stored bare ("VAS") and quoted on one exchange, so the Yahoo
symbol is the code plus the configured suffix ("VAS.AX"). A code that
already carries a suffix ("BHP.L") is used as is.

Price resolution:
    1. Ticker.fast_info last price
    2. Latest non-empty close from the last few days of daily history

Limitations:
- Rate limits exist but are not documented
- Quotes may be delayed 15-20 minutes
"""

import logging
import math
from typing import Any

import yfinance as yf

from app.services.constants import EXTERNAL_API_TIMEOUT_SECONDS
from app.services.exceptions import (
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
)
from app.services.pricing.base import PriceProvider
from app.services.valuation.money import to_cents

logger = logging.getLogger(__name__)


class YahooPriceProvider(PriceProvider):
    """
    yfinance implementation of PriceProvider.

    Example:
        provider = YahooPriceProvider(exchange_suffix="AX")
        provider.fetch_price("VAS")  # 10523 (i.e. $105.23)
    """

    HISTORY_PERIOD: str = "5d"

    def __init__(
            self,
            exchange_suffix: str = "AX",
            timeout: float = EXTERNAL_API_TIMEOUT_SECONDS,
    ) -> None:
        self._suffix = exchange_suffix.strip().lstrip(".").upper()
        self._timeout = timeout
        logger.info(f"YahooPriceProvider initialized (suffix={self._suffix or '-'}, timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    def fetch_price(self, code: str) -> int:
        return self._execute_with_retry(self._fetch_price, code)

    def _fetch_price(self, code: str) -> int:
        """Single attempt (called by retry wrapper)."""
        symbol = self.build_symbol(code)
        logger.debug(f"Fetching price for {symbol}")

        try:
            yf_ticker = yf.Ticker(symbol)
            price = self._last_price(yf_ticker)
            if price is None:
                price = self._latest_close(yf_ticker)
        except Exception as e:
            error_str = str(e).lower()
            if "rate limit" in error_str or "too many requests" in error_str:
                raise RateLimitError(provider=self.name)
            if "not found" in error_str or "delisted" in error_str or "no data" in error_str:
                raise TickerNotFoundError(code=code, provider=self.name)

            logger.error(f"Yahoo Finance error for {symbol}: {e}")
            raise ProviderUnavailableError(provider=self.name, reason=str(e))

        if price is None:
            raise TickerNotFoundError(code=code, provider=self.name)

        return to_cents(price)

    def build_symbol(self, code: str) -> str:
        """
        Yahoo symbol for a stored code.

        Example:
            >>> YahooPriceProvider("AX").build_symbol("vas")
            'VAS.AX'
        """
        code = code.strip().upper()
        if "." in code or not self._suffix:
            return code
        return f"{code}.{self._suffix}"

    def _last_price(self, yf_ticker: Any) -> float | None:
        try:
            return self._positive_or_none(yf_ticker.fast_info.last_price)
        except (KeyError, AttributeError, TypeError):
            return None

    def _latest_close(self, yf_ticker: Any) -> float | None:
        df = yf_ticker.history(period=self.HISTORY_PERIOD, interval="1d", timeout=self._timeout)
        if df is None or df.empty or "Close" not in df:
            return None

        for value in reversed(df["Close"].tolist()):
            price = self._positive_or_none(value)
            if price is not None:
                return price
        return None

    @staticmethod
    def _positive_or_none(value: Any) -> float | None:
        """Positive finite float, or None for NaN, None and non-positive values."""
        if value is None:
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number) or number <= 0:
            return None
        return number

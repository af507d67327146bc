# backend/app/services/pricing/oracle.py
"""
Price oracle: latest quotes for investment codes, failure tolerant.

get_price(code)    -> cents or None
get_prices(codes)  -> {code: cents or None}

Codes are normalised (stripped, upper-case) and de-duplicated before any
lookup, so a portfolio holding VAS twice costs one request. Lookups fan out
on a thread pool; each code succeeds or fails on its own. A provider error
or a lookup still running when the batch timeout expires yields None for
that code only.

The oracle keeps no cache: every call goes to the provider.
"""

import logging
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, wait

from app.services.exceptions import MarketDataError
from app.services.pricing.base import PriceProvider

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


class PriceOracle:
    """
    Batched, concurrent front for a PriceProvider.

    Attributes:
        _provider: Source of quotes
        _max_workers: Upper bound on concurrent lookups per batch
        _timeout: Overall batch deadline in seconds (None waits for all)
    """

    def __init__(
            self,
            provider: PriceProvider,
            max_workers: int = 8,
            timeout: float | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._provider = provider
        self._max_workers = max_workers
        self._timeout = timeout

    @property
    def provider(self) -> PriceProvider:
        return self._provider

    def get_price(self, code: str) -> int | None:
        """Latest price in cents, or None when the provider cannot supply one."""
        code = normalize_code(code)
        if not code:
            return None

        try:
            return self._provider.fetch_price(code)
        except MarketDataError as e:
            logger.warning(f"No price for {code}: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error fetching price for {code}: {e}", exc_info=True)
            return None

    def get_prices(self, codes: Iterable[str]) -> dict[str, int | None]:
        """
        Latest prices for many codes in one round trip.

        Returns:
            Dict keyed by normalised code with an entry for every distinct
            non-blank code requested
        """
        unique = list(dict.fromkeys(c for c in (normalize_code(code) for code in codes) if c))
        if not unique:
            return {}
        # No deadline to enforce: a lone code needs no worker thread
        if len(unique) == 1 and self._timeout is None:
            return {unique[0]: self.get_price(unique[0])}

        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(unique)),
            thread_name_prefix="price-oracle",
        )
        try:
            futures: dict[Future, str] = {
                executor.submit(self.get_price, code): code for code in unique
            }
            done, not_done = wait(futures, timeout=self._timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        prices: dict[str, int | None] = {code: None for code in unique}
        for future in done:
            prices[futures[future]] = future.result()

        if not_done:
            late = sorted(futures[f] for f in not_done)
            logger.warning(f"Price lookup timed out after {self._timeout}s for: {', '.join(late)}")

        found = sum(1 for price in prices.values() if price is not None)
        logger.debug(f"Fetched {found}/{len(unique)} prices")
        return prices

# backend/app/services/pricing/base.py
"""
Abstract interface for price providers.

A provider answers one question: the latest price of a code, in cents.
Everything around it (de-duplication, fan-out, turning failures into a
missing quote) is the PriceOracle's job.

Retry Behavior:
    `_execute_with_retry` wraps a call in exponential backoff. Subclasses
    tune it through class attributes:

    - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
    - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
    - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
    - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

Retryable Exceptions:
    - ProviderUnavailableError: Network issues, timeouts, server errors
    - RateLimitError: API rate limit exceeded

Non-Retryable Exceptions:
    - TickerNotFoundError: The code does not exist
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Callable, Any

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from app.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class PriceProvider(ABC):
    """Abstract base class for price providers."""

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: int = 1
    RETRY_MAX_WAIT: int = 10
    RETRY_MULTIPLIER: int = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name used in logs and error messages (e.g. "yahoo")."""
        pass

    @abstractmethod
    def fetch_price(self, code: str) -> int:
        """
        Latest price for an investment code.

        Args:
            code: Investment code as stored (e.g. "VAS")

        Returns:
            Price per unit in integer cents

        Raises:
            TickerNotFoundError: Code unknown to the provider
            ProviderUnavailableError: Network or API error (retryable)
            RateLimitError: Rate limit exceeded (retryable)
        """
        pass

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function, retrying ProviderUnavailableError and RateLimitError
        with exponential backoff. The last exception is re-raised once the
        attempts run out.
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()

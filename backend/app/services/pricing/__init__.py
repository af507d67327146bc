# backend/app/services/pricing/__init__.py
"""
Price lookup services.

Usage:
    from app.services.pricing import PriceOracle, YahooPriceProvider

    oracle = PriceOracle(YahooPriceProvider(exchange_suffix="AX"), max_workers=8)
    oracle.get_prices(["VAS", "VGS"])  # {"VAS": 10523, "VGS": None}

Architecture:
    PriceProvider (ABC)
    └── YahooPriceProvider (yfinance)

    PriceOracle
    └── de-duplicates codes, fans lookups out, maps failures to None
"""

from app.services.pricing.base import PriceProvider
from app.services.pricing.oracle import PriceOracle, normalize_code
from app.services.pricing.yahoo import YahooPriceProvider

__all__ = [
    "PriceProvider",
    "PriceOracle",
    "YahooPriceProvider",
    "normalize_code",
]

# backend/tests/services/test_price_oracle.py
"""
Tests for PriceOracle.

Test Coverage:
- Code normalisation and de-duplication
- Single-code direct path (no deadline configured)
- Per-code failure isolation (errors become None)
- Batch timeout
- Constructor validation
"""

import logging
import threading
import time

import pytest

from app.services.exceptions import ProviderUnavailableError, RateLimitError
from app.services.pricing.oracle import PriceOracle, normalize_code
from tests.conftest import MockPriceProvider


class SlowProvider(MockPriceProvider):
    """Blocks lookups for codes in `slow` until released."""

    def __init__(self, prices: dict[str, int], slow: set[str]):
        super().__init__(prices)
        self._slow = slow
        self.release = threading.Event()

    def fetch_price(self, code: str) -> int:
        if code in self._slow:
            self.release.wait(timeout=5)
        return super().fetch_price(code)


@pytest.fixture
def oracle(mock_provider) -> PriceOracle:
    mock_provider.set_price("VAS", 10523)
    mock_provider.set_price("VGS", 13210)
    mock_provider.set_price("CBA", 15000)
    return PriceOracle(mock_provider, max_workers=4)


# =============================================================================
# TEST: NORMALISATION
# =============================================================================

class TestNormalizeCode:

    @pytest.mark.parametrize("raw,expected", [
        ("vas", "VAS"),
        ("  VgS ", "VGS"),
        ("", ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_code(raw) == expected


# =============================================================================
# TEST: SINGLE LOOKUP
# =============================================================================

class TestGetPrice:

    def test_known_code(self, oracle, mock_provider):
        assert oracle.get_price(" vas ") == 10523
        assert mock_provider.calls == ["VAS"]

    def test_unknown_code_is_none(self, oracle):
        assert oracle.get_price("XYZ") is None

    def test_blank_code_skips_provider(self, oracle, mock_provider):
        assert oracle.get_price("   ") is None
        assert mock_provider.calls == []

    def test_provider_error_is_none(self, oracle, mock_provider, caplog):
        mock_provider.add_error("VAS", ProviderUnavailableError(provider="mock", reason="down"))

        with caplog.at_level(logging.WARNING, logger="app.services.pricing.oracle"):
            assert oracle.get_price("VAS") is None

        assert "VAS" in caplog.text

    def test_unexpected_error_is_none(self, oracle, mock_provider):
        mock_provider.add_error("VAS", RuntimeError("boom"))
        assert oracle.get_price("VAS") is None


# =============================================================================
# TEST: BATCH LOOKUP
# =============================================================================

class TestGetPrices:

    def test_all_found(self, oracle):
        assert oracle.get_prices(["VAS", "VGS", "CBA"]) == {
            "VAS": 10523,
            "VGS": 13210,
            "CBA": 15000,
        }

    def test_empty_input(self, oracle, mock_provider):
        assert oracle.get_prices([]) == {}
        assert oracle.get_prices(["", "  "]) == {}
        assert mock_provider.calls == []

    def test_duplicates_fetched_once(self, oracle, mock_provider):
        prices = oracle.get_prices(["vas", "VAS", " Vas ", "VGS"])

        assert prices == {"VAS": 10523, "VGS": 13210}
        assert sorted(mock_provider.calls) == ["VAS", "VGS"]

    def test_single_code_direct_path(self, oracle, mock_provider):
        assert oracle.get_prices(["vas", "VAS"]) == {"VAS": 10523}
        assert mock_provider.calls == ["VAS"]

    def test_failures_are_isolated(self, oracle, mock_provider):
        mock_provider.add_error("VGS", RateLimitError(provider="mock"))

        prices = oracle.get_prices(["VAS", "VGS", "CBA", "NOPE"])

        assert prices == {"VAS": 10523, "VGS": None, "CBA": 15000, "NOPE": None}

    def test_accepts_generator(self, oracle):
        codes = (code for code in ["VAS", "CBA"])
        assert oracle.get_prices(codes) == {"VAS": 10523, "CBA": 15000}

    def test_timeout_marks_slow_codes_missing(self, caplog):
        provider = SlowProvider({"VAS": 100, "VGS": 200}, slow={"VGS"})
        oracle = PriceOracle(provider, max_workers=2, timeout=0.2)

        try:
            with caplog.at_level(logging.WARNING, logger="app.services.pricing.oracle"):
                prices = oracle.get_prices(["VAS", "VGS"])
        finally:
            provider.release.set()

        assert prices == {"VAS": 100, "VGS": None}
        assert "timed out" in caplog.text

    def test_timeout_applies_to_single_code(self, caplog):
        provider = SlowProvider({"VGS": 200}, slow={"VGS"})
        oracle = PriceOracle(provider, max_workers=2, timeout=0.2)

        try:
            with caplog.at_level(logging.WARNING, logger="app.services.pricing.oracle"):
                started = time.monotonic()
                prices = oracle.get_prices(["vgs"])
                elapsed = time.monotonic() - started
        finally:
            provider.release.set()

        assert prices == {"VGS": None}
        assert elapsed < 2
        assert "timed out" in caplog.text

    def test_single_code_with_deadline_still_priced(self, mock_provider):
        mock_provider.set_price("VAS", 10523)
        oracle = PriceOracle(mock_provider, max_workers=4, timeout=5)

        assert oracle.get_prices(["VAS"]) == {"VAS": 10523}

    def test_one_worker_still_answers_everything(self, mock_provider):
        mock_provider.set_price("VAS", 1)
        mock_provider.set_price("VGS", 2)
        oracle = PriceOracle(mock_provider, max_workers=1)

        assert oracle.get_prices(["VAS", "VGS", "CBA"]) == {"VAS": 1, "VGS": 2, "CBA": None}


# =============================================================================
# TEST: CONSTRUCTION
# =============================================================================

class TestConstruction:

    @pytest.mark.parametrize("workers", [0, -1])
    def test_rejects_non_positive_workers(self, mock_provider, workers):
        with pytest.raises(ValueError):
            PriceOracle(mock_provider, max_workers=workers)

    def test_exposes_provider(self, mock_provider):
        assert PriceOracle(mock_provider).provider is mock_provider

# backend/app/services/constants.py
"""
Centralized constants for the Portfolio Tracker services.

Usage:
    from app.services.constants import (
        LONG_TERM_HOLDING_MS,
        MAX_BATCH_SIZE,
    )
"""


# =============================================================================
# HOLDING PERIOD
# =============================================================================

# Long-term threshold: strictly more than 365 days of 24 hours, in milliseconds.
# Fixed length; not calendar-aware and not adjusted for leap years.
LONG_TERM_HOLDING_MS: int = 365 * 24 * 60 * 60 * 1000

# Australian financial year starts on 1 July
TAX_YEAR_START_MONTH: int = 7


# =============================================================================
# MONEY
# =============================================================================

CENTS_PER_UNIT: int = 100

# Currency used when formatting amounts for display
DEFAULT_CURRENCY: str = "AUD"


# =============================================================================
# PRICE LOOKUPS
# =============================================================================

# Timeout for a single provider call (seconds)
EXTERNAL_API_TIMEOUT_SECONDS: int = 10


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Read endpoints
RATE_LIMIT_DEFAULT: str = "100/minute"

# Write endpoints (POST, PUT, PATCH, DELETE)
RATE_LIMIT_WRITE: str = "30/minute"

# Valuation and tax reports hit the quote provider
RATE_LIMIT_VALUATION: str = "30/minute"

# Monitoring tools poll health endpoints frequently
RATE_LIMIT_HEALTH: str = "300/minute"

# Brute-force protection on credentials
RATE_LIMIT_AUTH_LOGIN: str = "10/minute"

# Mass account creation
RATE_LIMIT_AUTH_REGISTER: str = "5/minute"


# =============================================================================
# RESOURCE LIMIT CONSTANTS
# =============================================================================

# Maximum number of transactions in a single batch request
MAX_BATCH_SIZE: int = 500

# Upper bound for the pagination limit parameter
MAX_LIST_LIMIT: int = 1000

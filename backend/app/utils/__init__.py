# backend/app/utils/__init__.py
"""
Cross-cutting utilities:
- logging: logging setup with correlation/user IDs
- context: request-scoped context variables
- cookies: session cookie helpers

Usage:
    from app.utils import setup_logging
    from app.utils import get_correlation_id, set_correlation_id
"""

from app.utils.context import (
    get_correlation_id,
    set_correlation_id,
    reset_correlation_id,
    get_user_id,
    set_user_id,
)
from app.utils.logging import setup_logging

__all__ = [
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
    "get_user_id",
    "set_user_id",
]

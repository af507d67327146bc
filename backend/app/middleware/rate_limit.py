# backend/app/middleware/rate_limit.py
"""
Rate limiting with slowapi.

Protects the login form from brute force, account creation from abuse,
and the quote provider from valuation floods. Limits live in
app/services/constants.py.

Key by: Client IP (X-Forwarded-For only when the peer is a trusted proxy)
Storage: In-memory (single instance)

Usage:
    @router.post("/login")
    @limiter.limit(RATE_LIMIT_AUTH_LOGIN)
    def login(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings
from app.services.constants import RATE_LIMIT_DEFAULT

logger = logging.getLogger(__name__)

# Seconds suggested to the client in Retry-After
DEFAULT_RETRY_AFTER = 60


def get_client_ip(request: Request) -> str:
    """
    Client IP for rate limiting and session records.

    Forwarded headers are honoured only when the immediate peer is trusted,
    otherwise any client could spoof its address.
    """
    peer = get_remote_address(request)
    if settings.trust_proxy_headers or peer in settings.trusted_proxy_ips:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
    return peer


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=not settings.is_test,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the standard error envelope, with Retry-After."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"
    logger.warning(f"Rate limit exceeded for {get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": DEFAULT_RETRY_AFTER},
        },
        headers={"Retry-After": str(DEFAULT_RETRY_AFTER)},
    )

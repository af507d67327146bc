# backend/app/utils/cookies.py
"""
Session cookie helpers.

The session token lives in an httpOnly cookie so page scripts cannot read it.
"""

from fastapi import Request, Response

from app.config import settings


def set_session_cookie(response: Response, token: str, max_age_days: int | None = None) -> None:
    """
    Set the session cookie.

    Secure is only set in production; browsers accept non-Secure cookies on
    localhost during development.
    """
    if max_age_days is None:
        max_age_days = settings.session_expire_days

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    # Path must match the one used when setting
    response.delete_cookie(key=settings.session_cookie_name, path="/")


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name)

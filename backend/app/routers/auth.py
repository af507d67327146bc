# backend/app/routers/auth.py
"""
Authentication endpoints.

Provides:
- POST /auth/register - Register new user
- POST /auth/login - Login with email/password, sets the session cookie
- POST /auth/logout - Revoke the session and clear the cookie
- GET /auth/me - Current user profile

The session token only ever travels in an httpOnly cookie.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_auth_service
from app.middleware.rate_limit import get_client_ip, limiter
from app.models import User
from app.schemas.auth import (
    LoginResponse,
    MessageResponse,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)
from app.services.auth import AuthService
from app.services.constants import RATE_LIMIT_AUTH_LOGIN, RATE_LIMIT_AUTH_REGISTER
from app.utils.cookies import clear_session_cookie, get_session_token, set_session_cookie

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
@limiter.limit(RATE_LIMIT_AUTH_REGISTER)
def register(
    request: Request,  # Required for rate limiter
    data: UserRegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """
    Create an account. Does not sign the user in.

    Returns **409** if the email is already registered.
    """
    return auth_service.register(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login with email and password",
)
@limiter.limit(RATE_LIMIT_AUTH_LOGIN)
def login(
    request: Request,  # Required for rate limiter
    response: Response,
    data: UserLoginRequest,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Open a session and set it as an httpOnly cookie.

    Returns **401** for an unknown email, a wrong password or an inactive
    account, without saying which.
    """
    grant = auth_service.login(
        db,
        email=data.email,
        password=data.password,
        user_agent=request.headers.get("User-Agent"),
        ip_address=get_client_ip(request),
    )
    set_session_cookie(response, grant.token)
    return LoginResponse(
        user=UserResponse.model_validate(grant.user),
        expires_at=grant.expires_at,
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
)
def logout(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Revoke the current session. Succeeds even without a session."""
    token = get_session_token(request)
    if token:
        auth_service.logout(db, token)
    clear_session_cookie(response)
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
def get_me(current_user: CurrentUser) -> User:
    return current_user

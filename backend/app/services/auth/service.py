# backend/app/services/auth/service.py
"""
Session-based authentication service.

Handles:
- User registration
- Login (email/password) creating a server-side session
- Logout (revoking the session)
- Resolving a session cookie back to its user

The cookie carries a random token; the database keeps only its SHA-256
hash, so a leaked sessions table cannot be replayed.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import User, UserSession
from app.services.auth.password import PasswordService
from app.services.exceptions import (
    InvalidCredentialsError,
    SessionExpiredError,
    UserExistsError,
)
from app.services.valuation.money import ensure_utc

logger = logging.getLogger(__name__)

# 32 random bytes, URL-safe base64
SESSION_TOKEN_BYTES = 32


@dataclass
class SessionGrant:
    """Result of a successful login: the raw token goes into the cookie."""
    token: str
    expires_at: datetime
    user: User


class AuthService:
    """
    Core authentication service.

    Args:
        session_lifetime: How long a new session stays valid
    """

    def __init__(self, session_lifetime: timedelta = timedelta(days=7)) -> None:
        self._session_lifetime = session_lifetime

    def register(
        self,
        db: Session,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """
        Create a user with a bcrypt-hashed password.

        Password strength is enforced by the request schema.

        Raises:
            UserExistsError: If the email is already registered
        """
        email = email.strip().lower()
        if self.get_user_by_email(db, email) is not None:
            raise UserExistsError(email)

        user = User(
            email=email,
            hashed_password=PasswordService.hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User registered: {user.email}")
        return user

    def login(
        self,
        db: Session,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> SessionGrant:
        """
        Check credentials and open a session.

        Raises:
            InvalidCredentialsError: Unknown email, wrong password or inactive
                account (one message for all three)
        """
        user = self.get_user_by_email(db, email)

        if user is None:
            PasswordService.verify_against_dummy(password)
            raise InvalidCredentialsError()

        if not PasswordService.verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise InvalidCredentialsError()

        if PasswordService.needs_rehash(user.hashed_password):
            user.hashed_password = PasswordService.hash_password(password)

        grant = self.create_session(db, user, user_agent=user_agent, ip_address=ip_address)
        logger.info(f"User logged in: {user.email}")
        return grant

    def create_session(
        self,
        db: Session,
        user: User,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> SessionGrant:
        """Open a session for an already authenticated user."""
        token = secrets.token_urlsafe(SESSION_TOKEN_BYTES)
        expires_at = datetime.now(timezone.utc) + self._session_lifetime

        db.add(UserSession(
            user_id=user.id,
            token_hash=self._hash_token(token),
            expires_at=expires_at,
            user_agent=user_agent[:512] if user_agent else None,
            ip_address=ip_address,
        ))
        db.commit()

        return SessionGrant(token=token, expires_at=expires_at, user=user)

    def logout(self, db: Session, token: str) -> bool:
        """
        Revoke the session behind a token.

        Returns:
            True if a live session was revoked, False if there was none
        """
        session = self._get_session(db, token)
        if session is None or session.revoked_at is not None:
            return False

        session.revoked_at = datetime.now(timezone.utc)
        db.commit()
        logger.info(f"Session revoked for user {session.user_id}")
        return True

    def resolve_session(self, db: Session, token: str) -> User:
        """
        User behind a session token.

        Raises:
            InvalidCredentialsError: Unknown token or inactive user
            SessionExpiredError: Session revoked or past its expiry
        """
        session = self._get_session(db, token)
        if session is None:
            raise InvalidCredentialsError("Invalid session")

        if session.revoked_at is not None:
            raise SessionExpiredError()

        if ensure_utc(session.expires_at) <= datetime.now(timezone.utc):
            raise SessionExpiredError()

        user = session.user
        if user is None or not user.is_active:
            raise InvalidCredentialsError("Invalid session")

        return user

    def get_user_by_email(self, db: Session, email: str) -> User | None:
        return db.execute(
            select(User).where(User.email == email.strip().lower())
        ).scalar_one_or_none()

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _get_session(self, db: Session, token: str) -> UserSession | None:
        if not token:
            return None
        return db.execute(
            select(UserSession).where(UserSession.token_hash == self._hash_token(token))
        ).scalar_one_or_none()

    @staticmethod
    def _hash_token(token: str) -> str:
        """SHA-256 hex digest of a session token."""
        return hashlib.sha256(token.encode()).hexdigest()

# backend/app/services/auth/__init__.py
"""
Authentication services.

This package provides:
- Password hashing and verification (bcrypt via passlib)
- Server-side login sessions (AuthService)

Usage:
    from app.services.auth import AuthService, PasswordService

    hashed = PasswordService.hash_password("Secret123!")
    grant = AuthService().login(db, "user@example.com", "Secret123!")
"""

from app.services.auth.password import PasswordService
from app.services.auth.service import AuthService, SessionGrant

__all__ = [
    "PasswordService",
    "AuthService",
    "SessionGrant",
]

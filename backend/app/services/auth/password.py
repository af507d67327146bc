# backend/app/services/auth/password.py
"""
Password hashing with passlib's bcrypt backend.

Login looks a user up by email before checking the password. When no user
matches, `verify_against_dummy` burns the same bcrypt work so response time
does not reveal which emails are registered.
"""

from passlib.context import CryptContext

_BCRYPT_ROUNDS = 12

_pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=_BCRYPT_ROUNDS,
)

_dummy_hash: str | None = None


class PasswordService:
    """Stateless bcrypt helpers."""

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Example:
            >>> PasswordService.hash_password("Secret123!").startswith("$2b$")
            True
        """
        return _pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Timing-safe comparison. A malformed stored hash counts as a mismatch.
        """
        try:
            return _pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False

    @staticmethod
    def needs_rehash(hashed_password: str) -> bool:
        """True when the stored hash uses weaker settings than the current ones."""
        try:
            return _pwd_context.needs_update(hashed_password)
        except ValueError:
            return False

    @staticmethod
    def verify_against_dummy(plain_password: str) -> bool:
        """Spend one bcrypt verification for an unknown user. Always False."""
        global _dummy_hash
        if _dummy_hash is None:
            _dummy_hash = _pwd_context.hash("not-a-real-password")
        _pwd_context.verify(plain_password, _dummy_hash)
        return False

# backend/app/schemas/auth.py
"""
Authentication request/response schemas.

Defines Pydantic models for:
- User registration
- Login
- Session responses
- Current user
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.schemas.validators import (
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    validate_password_strength,
)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================


class UserRegisterRequest(BaseModel):
    """Request body for user registration."""

    first_name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        examples=["Jane"],
    )
    last_name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        examples=["Citizen"],
    )
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["user@example.com"],
    )
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_LENGTH,
        description="8-128 characters with upper, lower, digit and one of @$!%*?&",
        examples=["MySecurePassword123!"],
    )
    confirm_password: str = Field(..., max_length=PASSWORD_MAX_LENGTH)

    @field_validator("first_name", "last_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "UserRegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class UserLoginRequest(BaseModel):
    """Request body for user login. Strength rules are not re-checked here."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["user@example.com"],
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=PASSWORD_MAX_LENGTH,
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================


class UserResponse(BaseModel):
    """Public user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    is_active: bool
    created_at: datetime


class LoginResponse(BaseModel):
    """Returned by login; the token itself travels only in the cookie."""

    user: UserResponse
    expires_at: datetime


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str = Field(..., examples=["Logged out"])

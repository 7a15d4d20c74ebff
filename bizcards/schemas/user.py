"""User and authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bizcards.security.passwords import BCRYPT_MAX_BYTES, password_fits

PHONE_PATTERN = r"^0[0-9]{1,2}-?\s?[0-9]{3}\s?[0-9]{4}$"


def check_password_bytes(value: str | None) -> str | None:
    """Reject passwords bcrypt would truncate."""
    if value is not None and not password_fits(value):
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, pattern=PHONE_PATTERN)
    is_business: bool = False
    admin_code: str | None = Field(None, max_length=128)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return check_password_bytes(value)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    # Any non-empty password counts as an attempt
    password: str = Field(..., min_length=1, max_length=128)


class UserUpdate(BaseModel):
    """Profile update. Email is immutable; is_admin is honoured for admins only."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, pattern=PHONE_PATTERN)
    password: str | None = Field(None, min_length=8, max_length=128)
    is_business: bool | None = None
    is_admin: bool | None = None

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str | None) -> str | None:
        return check_password_bytes(value)


class ResetLoginAttempts(BaseModel):
    """Admin request to lift a login lockout."""

    email: EmailStr = Field(..., max_length=255)


class Token(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
    phone: str | None
    is_admin: bool
    is_business: bool
    is_blocked: bool
    created_at: datetime


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str

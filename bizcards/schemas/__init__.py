"""Pydantic schemas for API request/response validation."""

from bizcards.schemas.card import Address, CardCreate, CardDeleted, CardResponse, CardUpdate
from bizcards.schemas.user import (
    MessageResponse,
    ResetLoginAttempts,
    Token,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "Address",
    "CardCreate",
    "CardDeleted",
    "CardResponse",
    "CardUpdate",
    "MessageResponse",
    "ResetLoginAttempts",
    "Token",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "UserUpdate",
]

"""User and authentication API endpoints."""

import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bizcards.api.dependencies import (
    get_credential_verifier,
    get_current_user,
    get_tracker,
    require_admin,
    require_not_blocked,
    require_self_or_admin,
)
from bizcards.config import get_settings
from bizcards.database import get_db
from bizcards.models.user import User
from bizcards.schemas.user import (
    MessageResponse,
    ResetLoginAttempts,
    Token,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from bizcards.security.guards import IsAdmin
from bizcards.security.lockout import LoginAttemptTracker
from bizcards.security.tokens import TokenClaims
from bizcards.services import users as user_service
from bizcards.services.auth import CredentialVerifier
from bizcards.services.errors import Forbidden

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _admin_code_matches(code: str) -> bool:
    expected = get_settings().admin_registration_code
    return bool(expected) and secrets.compare_digest(code.encode(), expected.encode())


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    is_admin = False
    if user_data.admin_code is not None:
        if not _admin_code_matches(user_data.admin_code):
            raise Forbidden("Invalid admin registration code")
        is_admin = True

    return user_service.create_user(
        db,
        email=user_data.email,
        password=user_data.password,
        name=user_data.name,
        phone=user_data.phone,
        is_business=user_data.is_business,
        is_admin=is_admin,
    )


@router.post("/login", response_model=Token)
def login(
    credentials: UserLogin,
    verifier: Annotated[CredentialVerifier, Depends(get_credential_verifier)],
):
    """Login with email and password."""
    access_token = verifier.login(credentials.email, credentials.password)
    return Token(access_token=access_token)


@router.patch(
    "/reset-login-attempts",
    response_model=MessageResponse,
    dependencies=[Depends(require_not_blocked)],
)
def reset_login_attempts(
    request_data: ResetLoginAttempts,
    claims: Annotated[TokenClaims, Depends(require_admin)],
    tracker: Annotated[LoginAttemptTracker, Depends(get_tracker)],
):
    """Lift the login lockout of an email (admin only)."""
    tracker.admin_reset(request_data.email)
    logger.info(f"Admin {claims.subject_id} reset login attempts for {request_data.email}")
    return MessageResponse(message="Login attempts reset successfully")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


@router.get("", response_model=list[UserResponse])
def get_users(
    _: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """List all users (admin only)."""
    return user_service.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _: Annotated[TokenClaims, Depends(require_self_or_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a user (self or admin)."""
    return user_service.get_user_or_404(db, user_id)


@router.put(
    "/{user_id}", response_model=UserResponse, dependencies=[Depends(require_not_blocked)]
)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    claims: Annotated[TokenClaims, Depends(require_self_or_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a profile (self or admin). Only admins may grant or revoke admin."""
    if user_data.is_admin is not None:
        IsAdmin().enforce(claims, "Only admins can change admin status")

    user = user_service.get_user_or_404(db, user_id)
    return user_service.update_user(
        db,
        user,
        name=user_data.name,
        phone=user_data.phone,
        password=user_data.password,
        is_business=user_data.is_business,
        is_admin=user_data.is_admin,
    )


@router.patch(
    "/{user_id}/business", response_model=UserResponse, dependencies=[Depends(require_not_blocked)]
)
def toggle_business(
    user_id: int,
    _: Annotated[TokenClaims, Depends(require_self_or_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Switch an account between regular and business (self or admin)."""
    user = user_service.get_user_or_404(db, user_id)
    return user_service.update_user(db, user, is_business=not user.is_business)


@router.patch(
    "/{user_id}/block", response_model=UserResponse, dependencies=[Depends(require_not_blocked)]
)
def block_user(
    user_id: int,
    claims: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Block an account (admin only)."""
    if user_id == claims.subject_id:
        raise Forbidden("Admins cannot block themselves")
    user = user_service.get_user_or_404(db, user_id)
    return user_service.set_blocked(db, user, True)


@router.patch(
    "/{user_id}/unblock", response_model=UserResponse, dependencies=[Depends(require_not_blocked)]
)
def unblock_user(
    user_id: int,
    _: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Unblock an account (admin only)."""
    user = user_service.get_user_or_404(db, user_id)
    return user_service.set_blocked(db, user, False)


@router.delete(
    "/{user_id}", response_model=MessageResponse, dependencies=[Depends(require_not_blocked)]
)
def delete_user(
    user_id: int,
    _: Annotated[TokenClaims, Depends(require_self_or_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete an account with its cards and likes (self or admin)."""
    user = user_service.get_user_or_404(db, user_id)
    user_service.delete_user(db, user)
    return MessageResponse(message=f"User {user_id} deleted")

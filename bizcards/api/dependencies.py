"""FastAPI dependencies for authentication, authorization and services."""

from typing import Annotated

from fastapi import Depends, Path, Request
from sqlalchemy.orm import Session

from bizcards.config import get_settings
from bizcards.database import get_db
from bizcards.models.card import Card
from bizcards.models.user import User
from bizcards.security import guards
from bizcards.security.guards import IsAdmin, IsBusiness, owner_or_admin
from bizcards.security.lockout import LoginAttemptTracker
from bizcards.security.tokens import TokenClaims, TokenProvider, get_token_provider
from bizcards.services.auth import CredentialVerifier, get_login_tracker
from bizcards.services.cards import get_card_or_404
from bizcards.services.errors import Forbidden, InvalidToken
from bizcards.services.users import get_user


def get_tokens() -> TokenProvider:
    """Get token provider instance."""
    return get_token_provider()


def get_current_claims(
    request: Request,
    tokens: Annotated[TokenProvider, Depends(get_tokens)],
) -> TokenClaims:
    """Authenticate the request and attach the claims to request.state."""
    header_name = get_settings().token_header_name
    claims = guards.authenticate(request.headers, tokens, header_name)
    request.state.claims = claims
    return claims


def get_optional_claims(
    request: Request,
    tokens: Annotated[TokenProvider, Depends(get_tokens)],
) -> TokenClaims | None:
    """Claims for requests that may be anonymous. A bad token still fails."""
    header_name = get_settings().token_header_name
    if guards.extract_token(request.headers, header_name) is None:
        return None
    return get_current_claims(request, tokens)


def get_current_user(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Load the account behind the token."""
    user = get_user(db, claims.subject_id)
    if user is None:
        raise InvalidToken("Account no longer exists")
    return user


def require_not_blocked(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Deny administratively blocked accounts.

    Reads the live block flag rather than token claims, so a block applies
    to tokens issued before it.
    """
    if user.is_blocked:
        raise Forbidden("Access denied: user is blocked")
    return user


def require_admin(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
) -> TokenClaims:
    """Allow admins only."""
    IsAdmin().enforce(claims)
    return claims


def require_business(
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
) -> TokenClaims:
    """Allow business accounts only."""
    IsBusiness().enforce(claims)
    return claims


def get_owned_card(
    card_id: Annotated[int, Path()],
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> Card:
    """Load a card the caller owns or administers."""
    card = get_card_or_404(db, card_id)
    owner_or_admin(card.user_id).enforce(claims)
    return card


def require_self_or_admin(
    user_id: Annotated[int, Path()],
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
) -> TokenClaims:
    """Allow the account holder or an admin to act on /users/{user_id}."""
    owner_or_admin(user_id).enforce(claims)
    return claims


def get_tracker(db: Annotated[Session, Depends(get_db)]) -> LoginAttemptTracker:
    """Get login attempt tracker with dependencies."""
    return get_login_tracker(db)


def get_credential_verifier(
    db: Annotated[Session, Depends(get_db)],
    tracker: Annotated[LoginAttemptTracker, Depends(get_tracker)],
    tokens: Annotated[TokenProvider, Depends(get_tokens)],
) -> CredentialVerifier:
    """Get credential verifier with dependencies."""
    return CredentialVerifier(db, tracker=tracker, tokens=tokens)

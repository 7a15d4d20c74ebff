"""Card API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bizcards.api.dependencies import (
    get_current_claims,
    get_optional_claims,
    get_owned_card,
    require_admin,
    require_business,
    require_not_blocked,
)
from bizcards.database import get_db
from bizcards.models.card import Card
from bizcards.models.user import User
from bizcards.schemas.card import CardCreate, CardDeleted, CardResponse, CardUpdate
from bizcards.security.tokens import TokenClaims
from bizcards.services import cards as card_service

router = APIRouter(prefix="/api/v1/cards", tags=["cards"])


@router.get("", response_model=list[CardResponse])
def get_cards(
    claims: Annotated[TokenClaims | None, Depends(get_optional_claims)],
    db: Annotated[Session, Depends(get_db)],
):
    """List cards. Blocked cards are only listed for admins."""
    include_blocked = claims is not None and claims.is_admin
    cards = card_service.list_cards(db, include_blocked=include_blocked)
    return [card_service.card_to_response(card, claims) for card in cards]


@router.get("/my", response_model=list[CardResponse])
def get_my_cards(
    claims: Annotated[TokenClaims, Depends(require_business)],
    user: Annotated[User, Depends(require_not_blocked)],
    db: Annotated[Session, Depends(get_db)],
):
    """List the cards of the current business user."""
    cards = card_service.list_user_cards(db, user.id)
    return [card_service.card_to_response(card, claims) for card in cards]


@router.get("/{card_id}", response_model=CardResponse)
def get_card(
    card_id: int,
    claims: Annotated[TokenClaims | None, Depends(get_optional_claims)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a card. Blocked cards are hidden from everyone but admins."""
    card = card_service.get_visible_card(db, card_id, claims)
    return card_service.card_to_response(card, claims)


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
def create_card(
    card_data: CardCreate,
    claims: Annotated[TokenClaims, Depends(require_business)],
    user: Annotated[User, Depends(require_not_blocked)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a card owned by the current business user."""
    card = card_service.create_card(db, card_data, owner_id=user.id)
    return card_service.card_to_response(card, claims)


@router.put("/{card_id}", response_model=CardResponse)
def update_card(
    card_data: CardUpdate,
    _: Annotated[User, Depends(require_not_blocked)],
    card: Annotated[Card, Depends(get_owned_card)],
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update card content (owner or admin)."""
    card = card_service.update_card(db, card, card_data)
    return card_service.card_to_response(card, claims)


@router.patch("/{card_id}/like", response_model=CardResponse)
def toggle_like(
    card_id: int,
    user: Annotated[User, Depends(require_not_blocked)],
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    db: Annotated[Session, Depends(get_db)],
):
    """Like or unlike a card."""
    card = card_service.get_visible_card(db, card_id, claims)
    card = card_service.toggle_like(db, card, user)
    return card_service.card_to_response(card, claims)


@router.patch("/{card_id}/biz-number", response_model=CardResponse)
def change_biz_number(
    _: Annotated[User, Depends(require_not_blocked)],
    card: Annotated[Card, Depends(get_owned_card)],
    claims: Annotated[TokenClaims, Depends(get_current_claims)],
    db: Annotated[Session, Depends(get_db)],
):
    """Assign a new business number (owner or admin)."""
    card = card_service.change_biz_number(db, card)
    return card_service.card_to_response(card, claims)


@router.patch(
    "/{card_id}/block", response_model=CardResponse, dependencies=[Depends(require_not_blocked)]
)
def block_card(
    card_id: int,
    claims: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Hide a card from the public directory (admin only)."""
    card = card_service.get_card_or_404(db, card_id)
    card = card_service.set_card_blocked(db, card, True)
    return card_service.card_to_response(card, claims)


@router.patch(
    "/{card_id}/unblock", response_model=CardResponse, dependencies=[Depends(require_not_blocked)]
)
def unblock_card(
    card_id: int,
    claims: Annotated[TokenClaims, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Restore a blocked card (admin only)."""
    card = card_service.get_card_or_404(db, card_id)
    card = card_service.set_card_blocked(db, card, False)
    return card_service.card_to_response(card, claims)


@router.delete("/{card_id}", response_model=CardDeleted)
def delete_card(
    _: Annotated[User, Depends(require_not_blocked)],
    card: Annotated[Card, Depends(get_owned_card)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a card (owner or admin)."""
    card_id = card_service.delete_card(db, card)
    return CardDeleted(deleted=True, id=card_id)

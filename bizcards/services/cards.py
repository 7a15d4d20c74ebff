"""Card persistence, business number assignment and response shaping."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bizcards.config import get_settings
from bizcards.models.card import Card
from bizcards.models.user import User
from bizcards.schemas.card import CardCreate, CardResponse, CardUpdate
from bizcards.security.biz_number import BIZ_NUMBER_FIELD, BizNumberAllocator
from bizcards.security.guards import owner_or_admin
from bizcards.security.tokens import TokenClaims
from bizcards.services.errors import NotFound, UniquenessConflict, ValidationFailed

logger = logging.getLogger(__name__)


def biz_number_taken(db: Session, biz_number: int) -> bool:
    """Check whether any card already uses the number."""
    return db.query(Card.id).filter(Card.biz_number == biz_number).first() is not None


def get_biz_number_allocator(db: Session) -> BizNumberAllocator:
    """Allocator configured from settings, checking against the cards table."""
    settings = get_settings()
    return BizNumberAllocator(
        is_taken=lambda candidate: biz_number_taken(db, candidate),
        max_retries=settings.biz_number_max_retries,
        low=settings.biz_number_min,
        high=settings.biz_number_max,
    )


def _commit_card(db: Session, card: Card, biz_number: int) -> Card:
    """Commit, translating a clash on biz_number into UniquenessConflict."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if biz_number_taken(db, biz_number):
            raise UniquenessConflict(
                "Business number already in use", field=BIZ_NUMBER_FIELD
            ) from None
        raise
    db.refresh(card)
    return card


def list_cards(db: Session, include_blocked: bool = False) -> list[Card]:
    """All cards, hiding blocked ones unless requested."""
    query = db.query(Card)
    if not include_blocked:
        query = query.filter(Card.is_blocked == False)  # noqa: E712
    return query.order_by(Card.id).all()


def list_user_cards(db: Session, user_id: int) -> list[Card]:
    """Cards owned by a user."""
    return db.query(Card).filter(Card.user_id == user_id).order_by(Card.id).all()


def get_card(db: Session, card_id: int) -> Card | None:
    """Get a card by id."""
    return db.get(Card, card_id)


def get_card_or_404(db: Session, card_id: int) -> Card:
    """Get a card by id or raise NotFound."""
    card = get_card(db, card_id)
    if card is None:
        raise NotFound("Card not found")
    return card


def get_card_by_biz_number(db: Session, biz_number: int) -> Card | None:
    """Get a card by its business number."""
    return db.query(Card).filter(Card.biz_number == biz_number).first()


def get_visible_card(db: Session, card_id: int, claims: TokenClaims | None) -> Card:
    """Get a card for display; blocked cards exist only for admins."""
    card = get_card(db, card_id)
    if card is None or (card.is_blocked and not (claims and claims.is_admin)):
        raise NotFound("Card not found")
    return card


def create_card(
    db: Session,
    card_data: CardCreate,
    owner_id: int,
    allocator: BizNumberAllocator | None = None,
) -> Card:
    """Create a card with a freshly allocated business number."""
    allocator = allocator or get_biz_number_allocator(db)
    values = card_data.model_dump()
    values["address"] = card_data.address.model_dump()

    def insert(biz_number: int) -> Card:
        card = Card(**values, biz_number=biz_number, user_id=owner_id)
        db.add(card)
        return _commit_card(db, card, biz_number)

    card = allocator.insert_unique(insert)
    logger.info(
        f"Created card {card.id} with business number {card.biz_number} for user {owner_id}"
    )
    return card


def update_card(db: Session, card: Card, card_data: CardUpdate) -> Card:
    """Apply content changes to a card."""
    changes = card_data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("No card fields to update")
    if card_data.address is not None:
        changes["address"] = card_data.address.model_dump()
    for field, value in changes.items():
        setattr(card, field, value)
    db.commit()
    db.refresh(card)
    return card


def change_biz_number(
    db: Session, card: Card, allocator: BizNumberAllocator | None = None
) -> Card:
    """Give a card a new business number."""
    allocator = allocator or get_biz_number_allocator(db)
    card_id = card.id
    previous = card.biz_number

    def assign(biz_number: int) -> Card:
        # Re-read after a rollback expired the instance
        target = get_card_or_404(db, card_id)
        target.biz_number = biz_number
        return _commit_card(db, target, biz_number)

    card = allocator.insert_unique(assign)
    logger.info(f"Card {card_id} business number changed from {previous} to {card.biz_number}")
    return card


def toggle_like(db: Session, card: Card, user: User) -> Card:
    """Like the card, or remove the like if the user already likes it."""
    if user in card.likers:
        card.likers.remove(user)
    else:
        card.likers.append(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request added the same like; membership already holds
        db.rollback()
    db.refresh(card)
    return card


def set_card_blocked(db: Session, card: Card, blocked: bool) -> Card:
    """Block or unblock a card."""
    card.is_blocked = blocked
    db.commit()
    db.refresh(card)
    logger.warning(f"Card {card.id} {'blocked' if blocked else 'unblocked'}")
    return card


def delete_card(db: Session, card: Card) -> int:
    """Delete a card and its likes. Returns the card id."""
    card_id = card.id
    db.delete(card)
    db.commit()
    return card_id


def card_to_response(card: Card, claims: TokenClaims | None = None) -> CardResponse:
    """Shape a card for the API, exposing the owner only to owner and admins."""
    likes = card.like_ids
    show_owner = claims is not None and owner_or_admin(card.user_id).allows(claims)
    return CardResponse(
        id=card.id,
        title=card.title,
        subtitle=card.subtitle,
        description=card.description,
        phone=card.phone,
        email=card.email,
        web=card.web,
        image_url=card.image_url,
        image_alt=card.image_alt,
        address=card.address,
        biz_number=card.biz_number,
        is_blocked=card.is_blocked,
        likes=likes,
        like_count=len(likes),
        user_id=card.user_id if show_owner else None,
        created_at=card.created_at,
        updated_at=card.updated_at,
    )

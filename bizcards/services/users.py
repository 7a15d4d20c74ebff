"""User persistence: lookups, creation and profile changes."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bizcards.models.card import Card, card_likes
from bizcards.models.login_attempt import LoginAttempt
from bizcards.models.user import User
from bizcards.security.lockout import normalize_email
from bizcards.security.passwords import hash_password
from bizcards.services.errors import NotFound, UniquenessConflict

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email, ignoring case."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User | None:
    """Get a user by id."""
    return db.get(User, user_id)


def get_user_or_404(db: Session, user_id: int) -> User:
    """Get a user by id or raise NotFound."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(db: Session) -> list[User]:
    """All users, oldest first."""
    return db.query(User).order_by(User.id).all()


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str | None = None,
    phone: str | None = None,
    is_business: bool = False,
    is_admin: bool = False,
) -> User:
    """Create a new user.

    The unique index on email decides duplicates, so two concurrent
    registrations for one address cannot both succeed.
    """
    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        name=name,
        phone=phone,
        is_business=is_business,
        is_admin=is_admin,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise UniquenessConflict("Email already registered", field="email") from None
    db.refresh(user)
    logger.info(f"Registered user {user.id} (business={user.is_business}, admin={user.is_admin})")
    return user


def update_user(
    db: Session,
    user: User,
    *,
    name: str | None = None,
    phone: str | None = None,
    password: str | None = None,
    is_business: bool | None = None,
    is_admin: bool | None = None,
) -> User:
    """Apply the given profile changes. Authorization is the caller's job."""
    if name is not None:
        user.name = name
    if phone is not None:
        user.phone = phone
    if password is not None:
        user.password_hash = hash_password(password)
    if is_business is not None:
        user.is_business = is_business
    if is_admin is not None:
        user.is_admin = is_admin
    db.commit()
    db.refresh(user)
    return user


def set_blocked(db: Session, user: User, blocked: bool) -> User:
    """Block or unblock an account."""
    user.is_blocked = blocked
    db.commit()
    db.refresh(user)
    logger.warning(f"User {user.id} {'blocked' if blocked else 'unblocked'}")
    return user


def delete_user(db: Session, user: User) -> int:
    """Delete a user with their cards, likes and login attempt record. Returns the user id."""
    user_id = user.id
    email = normalize_email(user.email)
    owned_card_ids = select(Card.id).where(Card.user_id == user_id)
    db.execute(delete(card_likes).where(card_likes.c.card_id.in_(owned_card_ids)))
    db.execute(delete(card_likes).where(card_likes.c.user_id == user_id))
    removed_cards = db.execute(delete(Card).where(Card.user_id == user_id)).rowcount
    # A re-registered address starts without inherited failures
    db.execute(delete(LoginAttempt).where(LoginAttempt.email == email))
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id} with {removed_cards} cards")
    return user_id

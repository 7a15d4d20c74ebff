"""SQLAlchemy models."""

from bizcards.models.card import Card, card_likes
from bizcards.models.login_attempt import LoginAttempt
from bizcards.models.user import User

__all__ = [
    "User",
    "LoginAttempt",
    "Card",
    "card_likes",
]

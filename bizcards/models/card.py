"""Card model."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Table,
    false,
)
from sqlalchemy.orm import relationship

from bizcards.database import Base
from bizcards.models.mixins import TimestampMixin

# Composite primary key: a user likes a card at most once
card_likes = Table(
    "card_likes",
    Base.metadata,
    Column("card_id", Integer, ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Card(Base, TimestampMixin):
    """Business card published by a business account."""

    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(256), nullable=False)
    subtitle = Column(String(256), nullable=False)
    description = Column(String(1024), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(255), nullable=False)
    web = Column(String(512), nullable=True)
    image_url = Column(String(512), nullable=True)
    image_alt = Column(String(256), nullable=True)
    address = Column(JSON, nullable=False, default=dict)
    biz_number = Column(Integer, unique=True, nullable=False, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_blocked = Column(Boolean, nullable=False, default=False, server_default=false())

    # Relationships
    owner = relationship("User", backref="cards")
    likers = relationship("User", secondary=card_likes, lazy="selectin")

    @property
    def like_ids(self) -> list[int]:
        """IDs of users who like this card."""
        return sorted(user.id for user in self.likers)

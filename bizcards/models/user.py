"""User model."""

from sqlalchemy import Boolean, Column, Integer, String, false

from bizcards.database import Base
from bizcards.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Account that can log in, own cards and like cards."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Stored lower-cased so the unique index is case-insensitive
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False, server_default=false())
    is_business = Column(Boolean, nullable=False, default=False, server_default=false())
    is_blocked = Column(Boolean, nullable=False, default=False, server_default=false())

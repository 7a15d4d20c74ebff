"""Login attempt model."""

from sqlalchemy import Column, DateTime, Integer, String

from bizcards.database import Base


class LoginAttempt(Base):
    """Recent failed logins for one email.

    Keyed by email rather than user id so unknown addresses are throttled too.
    A row whose blocked_until lies in the past is treated as absent.
    """

    __tablename__ = "login_attempts"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    last_attempt_at = Column(DateTime(timezone=True), nullable=False)
    blocked_until = Column(DateTime(timezone=True), nullable=True, index=True)

"""Authentication service: login with lockout and token issuance."""

import logging
from datetime import timedelta
from typing import NoReturn

from sqlalchemy.orm import Session

from bizcards.config import get_settings
from bizcards.models.mixins import utcnow
from bizcards.security.lockout import LoginAttemptTracker
from bizcards.security.passwords import dummy_verify, verify_password
from bizcards.security.tokens import TokenProvider, get_token_provider
from bizcards.services.errors import AccountBlocked, AccountLocked, InvalidCredentials
from bizcards.services.users import get_user_by_email

logger = logging.getLogger(__name__)


def get_login_tracker(db: Session) -> LoginAttemptTracker:
    """Lockout tracker configured from settings."""
    settings = get_settings()
    return LoginAttemptTracker(
        db,
        max_attempts=settings.login_max_attempts,
        block_duration=timedelta(hours=settings.login_block_hours),
    )


class CredentialVerifier:
    """Checks email/password pairs and issues session tokens."""

    def __init__(
        self,
        db: Session,
        tracker: LoginAttemptTracker | None = None,
        tokens: TokenProvider | None = None,
    ):
        self.db = db
        self.tracker = tracker or get_login_tracker(db)
        self.tokens = tokens or get_token_provider()

    def login(self, email: str, password: str) -> str:
        """Return a session token or raise.

        Unknown emails and wrong passwords fail identically and both count
        toward the lockout of the email that was tried.
        """
        status = self.tracker.check_status(email)
        if status.blocked:
            raise AccountLocked(status.seconds_remaining)

        user = get_user_by_email(self.db, email)
        if user is None:
            # Burn the same hashing time as a real comparison
            dummy_verify()
            self._fail(email)

        if user.is_blocked:
            logger.info(f"Login refused for administratively blocked user {user.id}")
            raise AccountBlocked()

        if not verify_password(password, user.password_hash):
            self._fail(email)

        self.tracker.record_success(email)
        return self.tokens.issue(user)

    def _fail(self, email: str) -> NoReturn:
        outcome = self.tracker.record_failure(email)
        if outcome.blocked:
            seconds = int((outcome.blocked_until - utcnow()).total_seconds())
            raise AccountLocked(max(seconds, 1))
        raise InvalidCredentials(outcome.remaining_attempts)

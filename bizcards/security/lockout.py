"""Brute-force lockout tracking keyed by login email."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import and_, case, delete, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from bizcards.models.login_attempt import LoginAttempt
from bizcards.models.mixins import ensure_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BLOCK_DURATION = timedelta(hours=24)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def normalize_email(email: str) -> str:
    """Canonical form used as the lockout key."""
    return email.strip().lower()


@dataclass(frozen=True)
class LockoutStatus:
    """Read-only view of an email's lockout state."""

    blocked: bool
    attempts: int = 0
    seconds_remaining: int = 0


@dataclass(frozen=True)
class FailureOutcome:
    """State after recording one failed login."""

    attempts: int
    blocked: bool
    remaining_attempts: int
    blocked_until: datetime | None


class LoginAttemptTracker:
    """Failure counter with a time-bounded block, stored in login_attempts.

    States per email: clean (no row), warning (1..max_attempts-1 failures),
    blocked (failures >= max_attempts and blocked_until in the future).
    A row whose block has expired reads as clean.
    """

    def __init__(
        self,
        db: Session,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        block_duration: timedelta = DEFAULT_BLOCK_DURATION,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if block_duration <= timedelta(0):
            raise ValueError("block_duration must be positive")
        self.db = db
        self.max_attempts = max_attempts
        self.block_duration = block_duration

    def check_status(self, email: str, now: datetime | None = None) -> LockoutStatus:
        """Report whether the email is currently locked. Never writes."""
        now = now or utcnow()
        record = self.db.execute(
            select(LoginAttempt.attempts, LoginAttempt.blocked_until).where(
                LoginAttempt.email == normalize_email(email)
            )
        ).first()
        if record is None:
            return LockoutStatus(blocked=False)

        blocked_until = ensure_utc(record.blocked_until)
        if blocked_until is None:
            return LockoutStatus(blocked=False, attempts=record.attempts)
        if blocked_until <= now:
            # Expired block: the record is void
            return LockoutStatus(blocked=False)

        seconds = int((blocked_until - now).total_seconds())
        return LockoutStatus(
            blocked=True, attempts=record.attempts, seconds_remaining=max(seconds, 1)
        )

    def record_failure(self, email: str, now: datetime | None = None) -> FailureOutcome:
        """Count one failed login in a single upsert statement.

        Concurrent failures for the same email cannot lose updates because the
        increment happens inside the database, never as a read followed by a write.
        """
        now = now or utcnow()
        key = normalize_email(email)
        block_until = now + self.block_duration
        table = LoginAttempt.__table__

        stored_block_expired = and_(
            table.c.blocked_until.isnot(None), table.c.blocked_until <= now
        )
        next_attempts = case((stored_block_expired, 1), else_=table.c.attempts + 1)
        first_blocked_until = block_until if self.max_attempts <= 1 else None

        insert = self._dialect_insert()
        stmt = insert(table).values(
            email=key,
            attempts=1,
            last_attempt_at=now,
            blocked_until=first_blocked_until,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.email],
            set_={
                "attempts": next_attempts,
                "last_attempt_at": now,
                "blocked_until": case(
                    (
                        next_attempts >= self.max_attempts,
                        literal(block_until, type_=table.c.blocked_until.type),
                    ),
                    else_=None,
                ),
            },
        ).returning(table.c.attempts, table.c.blocked_until)

        row = self.db.execute(stmt).one()
        self.db.commit()

        attempts = row.attempts
        blocked = attempts >= self.max_attempts
        if blocked:
            logger.warning(f"Login locked for {key} after {attempts} failed attempts")
        else:
            logger.info(f"Failed login {attempts}/{self.max_attempts} for {key}")

        return FailureOutcome(
            attempts=attempts,
            blocked=blocked,
            remaining_attempts=max(0, self.max_attempts - attempts),
            blocked_until=ensure_utc(row.blocked_until),
        )

    def record_success(self, email: str) -> None:
        """Forget all failures for the email. Idempotent."""
        self._delete(normalize_email(email))

    def admin_reset(self, email: str) -> bool:
        """Lift any lockout for the email. Returns whether a record existed."""
        key = normalize_email(email)
        removed = self._delete(key)
        logger.info(f"Login attempts reset for {key} (record existed: {removed})")
        return removed

    def sweep_expired(self, now: datetime | None = None) -> int:
        """Delete records whose block has expired. Returns the number removed."""
        now = now or utcnow()
        result = self.db.execute(
            delete(LoginAttempt).where(
                LoginAttempt.blocked_until.isnot(None),
                LoginAttempt.blocked_until <= now,
            )
        )
        self.db.commit()
        return result.rowcount or 0

    def _delete(self, key: str) -> bool:
        result = self.db.execute(delete(LoginAttempt).where(LoginAttempt.email == key))
        self.db.commit()
        return bool(result.rowcount)

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise RuntimeError(
                f"Atomic login attempt upsert is not supported on {dialect}"
            ) from None

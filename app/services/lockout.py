"""Failed-login counting and time-boxed account locks."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import utcnow
from app.models.user import User
from app.repositories import UserRepository

logger = logging.getLogger("wanderon_auth")


@dataclass(frozen=True)
class LockoutState:
    """Snapshot of an account's lockout fields."""

    attempts: int
    lock_until: datetime | None

    def is_locked(self, now: datetime) -> bool:
        return self.lock_until is not None and self.lock_until > now


def lockout_state(user: User) -> LockoutState:
    return LockoutState(attempts=user.login_attempts or 0, lock_until=user.lock_until)


class LockoutTracker:
    """Per-account state machine: Unlocked(count) or Locked(until).

    A failure from Unlocked(count) moves to Locked(now + lock) once
    count + 1 reaches the limit, else to Unlocked(count + 1). A failure seen
    after the lock has lapsed moves to Unlocked(1). Success always moves to
    Unlocked(0).
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.max_attempts = settings.MAX_LOGIN_ATTEMPTS
        self.lock_duration = timedelta(minutes=settings.LOCKOUT_MINUTES)

    def is_locked(self, user: User, now: datetime | None = None) -> bool:
        return lockout_state(user).is_locked(now or utcnow())

    def record_failure(self, db: Session, user: User, now: datetime | None = None) -> LockoutState:
        """Count a failed credential check and return the resulting state."""
        now = now or utcnow()
        repo = UserRepository(db)
        repo.record_failed_attempt(
            user.id,
            now=now,
            max_attempts=self.max_attempts,
            lock_deadline=now + self.lock_duration,
        )
        db.commit()
        db.refresh(user)

        state = lockout_state(user)
        if state.is_locked(now):
            logger.warning("Account %s locked until %s after %d failed attempts", user.id, state.lock_until, state.attempts)
        else:
            logger.info("Failed login for account %s (%d/%d)", user.id, state.attempts, self.max_attempts)
        return state

    def reset(self, db: Session, user: User, now: datetime | None = None) -> LockoutState:
        """Clear counter and lock after a successful login and stamp last login."""
        now = now or utcnow()
        UserRepository(db).reset_login_attempts(user.id, now)
        db.commit()
        db.refresh(user)
        return lockout_state(user)


_lockout_tracker: LockoutTracker | None = None


def get_lockout_tracker() -> LockoutTracker:
    """Get singleton lockout tracker instance."""
    global _lockout_tracker
    if _lockout_tracker is None:
        _lockout_tracker = LockoutTracker()
    return _lockout_tracker

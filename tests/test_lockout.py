"""Tests for credential verification and the account lockout state machine."""

from datetime import timedelta

import pytest
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import AccountLocked, InvalidCredentials
from app.models.user import User
from app.services.auth import AuthService
from app.services.lockout import LockoutTracker

MAX_ATTEMPTS = 5


@pytest.fixture(name="auth")
def auth_fixture() -> AuthService:
    return AuthService()


def _fail(auth: AuthService, db: Session, identifier: str = "test@example.com", **kwargs):
    with pytest.raises((InvalidCredentials, AccountLocked)) as exc_info:
        auth.authenticate(db, identifier, "wrong-password", **kwargs)
    return exc_info.value


class TestCredentialVerifier:
    """Outcome of a single authentication attempt."""

    def test_login_by_email(self, auth: AuthService, db_session: Session, test_user: dict):
        """Email identifiers are matched case-insensitively."""
        user = auth.authenticate(db_session, "TEST@Example.com", test_user["password"])
        assert user.id == test_user["user_id"]
        assert user.last_login_at is not None

    def test_login_by_username(self, auth: AuthService, db_session: Session, test_user: dict):
        """Usernames are accepted as identifiers."""
        user = auth.authenticate(db_session, "test_user", test_user["password"])
        assert user.id == test_user["user_id"]

    def test_unknown_identifier_matches_wrong_password(self, auth: AuthService, db_session: Session, test_user: dict):
        """Missing account and wrong password are indistinguishable."""
        with pytest.raises(InvalidCredentials) as missing:
            auth.authenticate(db_session, "nobody@example.com", "whatever")
        wrong = _fail(auth, db_session)
        assert isinstance(wrong, InvalidCredentials)
        assert missing.value.message == wrong.message

    def test_inactive_account_cannot_login(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """Deactivated accounts are treated as unknown."""
        user = get_user(test_user["user_id"])
        user.is_active = False
        db_session.commit()
        with pytest.raises(InvalidCredentials):
            auth.authenticate(db_session, "test@example.com", test_user["password"])


class TestLockoutTransitions:
    """Unlocked(count) / Locked(until) transitions."""

    def test_failures_count_up(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """Each failure below the limit increments the counter."""
        for expected in range(1, MAX_ATTEMPTS):
            assert isinstance(_fail(auth, db_session), InvalidCredentials)
            user = get_user(test_user["user_id"])
            assert user.login_attempts == expected
            assert user.lock_until is None

    def test_limit_locks_account(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """The failure that reaches the limit locks and reports AccountLocked."""
        for _ in range(MAX_ATTEMPTS - 1):
            _fail(auth, db_session)
        assert isinstance(_fail(auth, db_session), AccountLocked)

        user = get_user(test_user["user_id"])
        assert user.login_attempts == MAX_ATTEMPTS
        assert user.lock_until > utcnow() + timedelta(minutes=14)

    def test_correct_password_rejected_while_locked(self, auth: AuthService, db_session: Session, test_user: dict):
        """A locked account rejects even the right password."""
        for _ in range(MAX_ATTEMPTS):
            _fail(auth, db_session)
        with pytest.raises(AccountLocked):
            auth.authenticate(db_session, "test@example.com", test_user["password"])

    def test_locked_attempt_does_not_extend_lock(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """Attempts during the lock window leave lock and counter untouched."""
        for _ in range(MAX_ATTEMPTS):
            _fail(auth, db_session)
        before = get_user(test_user["user_id"])
        lock_until, attempts = before.lock_until, before.login_attempts

        later = utcnow() + timedelta(minutes=5)
        assert isinstance(_fail(auth, db_session, now=later), AccountLocked)
        after = get_user(test_user["user_id"])
        assert after.lock_until == lock_until
        assert after.login_attempts == attempts

    def test_success_after_lock_expiry_resets(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """Once the lock lapses a correct login succeeds and clears the counter."""
        for _ in range(MAX_ATTEMPTS):
            _fail(auth, db_session)

        later = utcnow() + timedelta(minutes=16)
        auth.authenticate(db_session, "test@example.com", test_user["password"], now=later)
        user = get_user(test_user["user_id"])
        assert user.login_attempts == 0
        assert user.lock_until is None

    def test_failure_after_lock_expiry_counts_as_one(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """A failure after the lock lapses starts a fresh window at 1, not 0."""
        for _ in range(MAX_ATTEMPTS):
            _fail(auth, db_session)

        later = utcnow() + timedelta(minutes=16)
        assert isinstance(_fail(auth, db_session, now=later), InvalidCredentials)
        user = get_user(test_user["user_id"])
        assert user.login_attempts == 1
        assert user.lock_until is None

    def test_expired_lock_set_directly(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """An expired lock in storage behaves the same as one that lapsed."""
        user = get_user(test_user["user_id"])
        user.login_attempts = MAX_ATTEMPTS
        user.lock_until = utcnow() - timedelta(minutes=1)
        db_session.commit()

        _fail(auth, db_session)
        user = get_user(test_user["user_id"])
        assert user.login_attempts == 1
        assert user.lock_until is None

    def test_success_resets_counter(self, auth: AuthService, db_session: Session, test_user: dict, get_user):
        """A correct login clears earlier failures."""
        for _ in range(MAX_ATTEMPTS - 2):
            _fail(auth, db_session)
        auth.authenticate(db_session, "test@example.com", test_user["password"])
        assert get_user(test_user["user_id"]).login_attempts == 0


class TestAtomicUpdate:
    """The counter is incremented in storage, not from the in-memory copy."""

    def test_stale_object_still_locks(self, db_session: Session, test_user: dict, get_user):
        """A concurrent failure recorded elsewhere is not lost."""
        tracker = LockoutTracker()
        user = get_user(test_user["user_id"])
        assert user.login_attempts == 0

        # Another request has already recorded four failures
        db_session.execute(
            update(User)
            .where(User.id == user.id)
            .values(login_attempts=MAX_ATTEMPTS - 1)
            .execution_options(synchronize_session=False)
        )
        assert user.login_attempts == 0

        state = tracker.record_failure(db_session, user)
        assert state.attempts == MAX_ATTEMPTS
        assert state.is_locked(utcnow())

    def test_reset_stamps_last_login(self, db_session: Session, test_user: dict, get_user):
        """Reset clears lock fields and records the login time."""
        tracker = LockoutTracker()
        user = get_user(test_user["user_id"])
        user.login_attempts = 3
        user.lock_until = utcnow() + timedelta(minutes=10)
        db_session.commit()

        now = utcnow()
        state = tracker.reset(db_session, user, now)
        assert state.attempts == 0
        assert state.lock_until is None
        assert get_user(test_user["user_id"]).last_login_at == now

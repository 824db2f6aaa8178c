"""Authentication service: registration, credential checks and token issuance."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import AccountLocked, DuplicateEmail, DuplicateUsername, InvalidCredentials
from app.models.user import ROLE_USER, User
from app.repositories import UserRepository
from app.services.hashing import PasswordHasher, get_password_hasher
from app.services.jwt import JWTService, get_jwt_service
from app.services.lockout import LockoutTracker, get_lockout_tracker

logger = logging.getLogger("wanderon_auth")


@dataclass
class AuthResult:
    """A successfully authenticated account and its fresh token."""

    user: User
    token: str


class AuthService:
    """Handles user registration and authentication."""

    def __init__(
        self,
        hasher: PasswordHasher | None = None,
        tokens: JWTService | None = None,
        lockout: LockoutTracker | None = None,
    ) -> None:
        self.hasher = hasher or get_password_hasher()
        self.tokens = tokens or get_jwt_service()
        self.lockout = lockout or get_lockout_tracker()

    def register(
        self,
        db: Session,
        *,
        username: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """Create a new account with role ``user``.

        Raises DuplicateEmail or DuplicateUsername when either is taken; the
        email comparison ignores case.
        """
        repo = UserRepository(db)
        email = email.strip().lower()
        username = username.strip()
        self._ensure_unique(repo, email, username)

        try:
            user = repo.create(
                {
                    "username": username,
                    "email": email,
                    "password_hash": self.hasher.hash(password),
                    "first_name": first_name.strip(),
                    "last_name": last_name.strip(),
                    "role": ROLE_USER,
                    "is_active": True,
                }
            )
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration; report which field collided
            db.rollback()
            self._ensure_unique(repo, email, username)
            raise
        db.refresh(user)

        logger.info("Registered account %s (%s)", user.id, user.username)
        return user

    def authenticate(self, db: Session, identifier: str, password: str, now: datetime | None = None) -> User:
        """Resolve an identifier and check the password, applying lockout rules.

        The order is existence, then lock, then password: a locked account is
        rejected without revealing whether the password would have matched.
        """
        now = now or utcnow()
        user = UserRepository(db).find_active_by_identifier(identifier)
        if user is None:
            raise InvalidCredentials()

        if self.lockout.is_locked(user, now):
            logger.warning("Login attempt for locked account %s", user.id)
            raise AccountLocked()

        if not self.hasher.verify(password, user.password_hash):
            state = self.lockout.record_failure(db, user, now)
            if state.is_locked(now):
                raise AccountLocked()
            raise InvalidCredentials()

        self.lockout.reset(db, user, now)
        return user

    def login(self, db: Session, identifier: str, password: str) -> AuthResult:
        """Authenticate and issue a session token."""
        user = self.authenticate(db, identifier, password)
        return AuthResult(user=user, token=self.issue_token(user))

    def issue_token(self, user: User) -> str:
        return self.tokens.issue(subject_id=user.id, email=user.email, role=user.role)

    def refresh(self, user: User) -> str:
        """Re-issue a token for an already-authenticated account. Lockout state is untouched."""
        return self.issue_token(user)

    def find_active_user(self, db: Session, user_id: int) -> User | None:
        """Fetch the account behind a token, or None if missing or deactivated."""
        return UserRepository(db).get_active_by_id(user_id)

    @staticmethod
    def _ensure_unique(repo: UserRepository, email: str, username: str) -> None:
        if repo.email_exists(email):
            raise DuplicateEmail()
        if repo.username_exists(username):
            raise DuplicateUsername()


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service

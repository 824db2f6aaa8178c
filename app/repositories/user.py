from datetime import datetime
from typing import Any

from sqlalchemy import and_, case, func, null, or_, select, update
from sqlalchemy.orm import Session

from app.models.user import User


class UserRepository:
    """Storage access for accounts.

    Lookups go through the ORM; the lockout counters are only ever changed
    with single conditional UPDATE statements so concurrent failures cannot
    both observe a pre-lock state.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        """Retrieves a User by their primary ID."""
        return self.session.get(User, user_id)

    def get_active_by_id(self, user_id: int) -> User | None:
        """Retrieves an active User by ID, always re-reading the row."""
        stmt = select(User).where(User.id == user_id, User.is_active.is_(True)).execution_options(populate_existing=True)
        return self.session.scalars(stmt).one_or_none()

    def find_active_by_identifier(self, identifier: str) -> User | None:
        """Resolve an email or username to an active account."""
        needle = identifier.strip().lower()
        stmt = select(User).where(
            or_(User.email == needle, func.lower(User.username) == needle),
            User.is_active.is_(True),
        )
        return self.session.scalars(stmt).first()

    def email_exists(self, email: str, exclude_user_id: int | None = None) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        return self.session.scalars(stmt).first() is not None

    def username_exists(self, username: str) -> bool:
        stmt = select(User.id).where(func.lower(User.username) == username.strip().lower())
        return self.session.scalars(stmt).first() is not None

    def create(self, create_data: dict[str, Any]) -> User:
        """Adds a new User and flushes it so the id is assigned."""
        user = User(**create_data)
        self.session.add(user)
        self.session.flush()
        return user

    def update_fields(self, user: User, update_data: dict[str, Any]) -> User:
        """Apply plain profile changes to a tracked User."""
        for key, value in update_data.items():
            setattr(user, key, value)
        self.session.flush()
        return user

    def record_failed_attempt(
        self,
        user_id: int,
        now: datetime,
        max_attempts: int,
        lock_deadline: datetime,
    ) -> None:
        """Increment the failed-attempt counter and lock when the limit is hit.

        One statement, evaluated against the row's current values:
        an expired lock restarts the count at 1, an active lock is left as is,
        otherwise the counter grows and ``lock_deadline`` is set once it
        reaches ``max_attempts``.
        """
        lock_expired = and_(User.lock_until.is_not(None), User.lock_until <= now)
        reaches_limit = and_(User.lock_until.is_(None), User.login_attempts + 1 >= max_attempts)
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                login_attempts=case((lock_expired, 1), else_=User.login_attempts + 1),
                lock_until=case(
                    (lock_expired, null()),
                    (reaches_limit, lock_deadline),
                    else_=User.lock_until,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        self.session.execute(stmt)

    def reset_login_attempts(self, user_id: int, now: datetime) -> None:
        """Clear the counter and lock and stamp the login time."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(login_attempts=0, lock_until=None, last_login_at=now)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(stmt)

    def list_active(self, offset: int, limit: int) -> list[User]:
        stmt = (
            select(User)
            .where(User.is_active.is_(True))
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    def count(self, active: bool) -> int:
        stmt = select(func.count(User.id)).where(User.is_active.is_(active))
        return self.session.scalar(stmt) or 0

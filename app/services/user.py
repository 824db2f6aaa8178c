"""Profile, password and admin operations on existing accounts."""

import logging
import math
from typing import Any

from sqlalchemy.orm import Session

from app.database import utcnow
from app.errors import DuplicateEmail, IncorrectCurrentPassword, NotFound
from app.models.user import User
from app.repositories import UserRepository
from app.services.hashing import PasswordHasher, get_password_hasher

logger = logging.getLogger("wanderon_auth")

RECENT_USERS_LIMIT = 10


class UserService:
    """Handles account changes for authenticated callers."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self.hasher = hasher or get_password_hasher()

    def get_profile(self, db: Session, user_id: int) -> User:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise NotFound()
        return user

    def update_profile(
        self,
        db: Session,
        user: User,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Update name and email fields that were supplied.

        Raises DuplicateEmail if the new email belongs to another account.
        """
        repo = UserRepository(db)
        changes: dict[str, Any] = {}
        if first_name:
            changes["first_name"] = first_name.strip()
        if last_name:
            changes["last_name"] = last_name.strip()
        if email:
            email = email.strip().lower()
            if repo.email_exists(email, exclude_user_id=user.id):
                raise DuplicateEmail()
            changes["email"] = email

        changes["updated_at"] = utcnow()
        repo.update_fields(user, changes)
        db.commit()
        db.refresh(user)
        return user

    def change_password(self, db: Session, user: User, current_password: str, new_password: str) -> None:
        """Replace the password hash after verifying the current password."""
        if not self.hasher.verify(current_password, user.password_hash):
            raise IncorrectCurrentPassword()

        UserRepository(db).update_fields(
            user,
            {"password_hash": self.hasher.hash(new_password), "updated_at": utcnow()},
        )
        db.commit()
        logger.info("Password changed for account %s", user.id)

    def deactivate(self, db: Session, user: User) -> None:
        """Soft delete: the row stays, but the account can no longer sign in."""
        UserRepository(db).update_fields(user, {"is_active": False, "updated_at": utcnow()})
        db.commit()
        logger.info("Account %s deactivated", user.id)

    def list_users(self, db: Session, page: int = 1, limit: int = 10) -> dict[str, Any]:
        """Active accounts, newest first, one page at a time."""
        repo = UserRepository(db)
        page = max(page, 1)
        limit = max(limit, 1)
        users = repo.list_active(offset=(page - 1) * limit, limit=limit)
        total_users = repo.count(active=True)
        total_pages = math.ceil(total_users / limit)
        return {
            "users": users,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_users": total_users,
                "has_next_page": page < total_pages,
                "has_prev_page": page > 1,
            },
        }

    def stats(self, db: Session) -> dict[str, Any]:
        repo = UserRepository(db)
        total_active = repo.count(active=True)
        total_inactive = repo.count(active=False)
        return {
            "total_active_users": total_active,
            "total_inactive_users": total_inactive,
            "total_users": total_active + total_inactive,
            "recent_users": repo.list_active(offset=0, limit=RECENT_USERS_LIMIT),
        }


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service

"""Profile and account management endpoints."""

from fastapi import APIRouter, Depends, Query, Response
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_session_transport, require_admin
from app.models.user import User
from app.schemas.auth import Envelope, serialize_user
from app.schemas.user import PasswordChangeRequest, ProfileUpdateRequest
from app.services.user import get_user_service

router = APIRouter(prefix="/api/user", tags=["Users"])


@router.get("/profile", response_model=Envelope)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Envelope:
    """Return the caller's profile."""
    profile = get_user_service().get_profile(db, user.id)
    return Envelope(data={"user": serialize_user(profile)})


@router.put("/profile", response_model=Envelope)
def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope:
    """Update first name, last name or email."""
    updated = get_user_service().update_profile(
        db,
        user,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
    )
    return Envelope(message="Profile updated successfully", data={"user": serialize_user(updated)})


@router.put("/password", response_model=Envelope)
def change_password(
    body: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope:
    """Change the caller's password."""
    get_user_service().change_password(db, user, body.current_password, body.new_password)
    return Envelope(message="Password changed successfully")


@router.delete("/account", response_model=Envelope)
def delete_account(
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Envelope:
    """Deactivate the caller's account and end the browser session."""
    get_user_service().deactivate(db, user)
    get_session_transport().clear(response)
    return Envelope(message="Account deactivated successfully")


@router.get("/all", response_model=Envelope)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Envelope:
    """List active accounts (admin only)."""
    result = get_user_service().list_users(db, page=page, limit=limit)
    return Envelope(
        data={
            "users": [serialize_user(u) for u in result["users"]],
            "pagination": {to_camel(k): v for k, v in result["pagination"].items()},
        }
    )


@router.get("/stats", response_model=Envelope)
def user_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)) -> Envelope:
    """Account statistics (admin only)."""
    stats = get_user_service().stats(db)
    stats["recent_users"] = [serialize_user(u) for u in stats["recent_users"]]
    return Envelope(data={"stats": {to_camel(k): v for k, v in stats.items()}})

"""Authentication dependencies and session transport for FastAPI routes."""

import logging
from typing import Any

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import get_db
from app.errors import Forbidden, TokenExpired, TokenInvalid, Unauthenticated
from app.models.user import ROLE_ADMIN, User
from app.services.auth import get_auth_service
from app.services.jwt import get_jwt_service

logger = logging.getLogger("wanderon_auth")

AUTH_COOKIE_NAME = "authToken"
INACTIVE_USER_MESSAGE = "Invalid token. User not found or inactive."


class SessionTransport:
    """Moves the session token between client and server.

    The cookie carries no max-age, so it lives for the browser session; the
    token's own ``exp`` is the real bound.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.client_url = settings.CLIENT_URL
        self.production = settings.is_production

    def cookie_options(self) -> dict[str, Any]:
        """Cookie attributes derived from the deployment context.

        ``attach`` and ``clear`` must both use these: browsers ignore a
        deletion whose attributes differ from the original cookie.
        """
        https_client = self.client_url.startswith("https://")
        return {
            "httponly": True,
            "path": "/",
            # Cross-site cookies over HTTPS need SameSite=None; Secure
            "samesite": "none" if https_client else "lax",
            "secure": https_client or self.production,
        }

    def extract(self, request: Request) -> str | None:
        """Token from the auth cookie, else from an ``Authorization: Bearer`` header."""
        token = request.cookies.get(AUTH_COOKIE_NAME)
        if token:
            return token

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:].strip() or None
        return None

    def attach(self, response: Response, token: str) -> None:
        """Set the authentication cookie."""
        response.set_cookie(key=AUTH_COOKIE_NAME, value=token, **self.cookie_options())

    def clear(self, response: Response) -> None:
        """Expire the authentication cookie immediately."""
        response.delete_cookie(key=AUTH_COOKIE_NAME, **self.cookie_options())


_session_transport: SessionTransport | None = None


def get_session_transport() -> SessionTransport:
    """Get singleton session transport instance."""
    global _session_transport
    if _session_transport is None:
        _session_transport = SessionTransport()
    return _session_transport


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Resolve the caller's account from the request token.

    Raises Unauthenticated when no token is present or the account is gone or
    inactive, TokenExpired / TokenInvalid when verification fails. The account
    is always re-read so deactivation takes effect before the token expires.
    """
    token = get_session_transport().extract(request)
    if not token:
        raise Unauthenticated()

    claims = get_jwt_service().verify(token)
    user = get_auth_service().find_active_user(db, claims.subject_id)
    if user is None:
        raise Unauthenticated(INACTIVE_USER_MESSAGE)

    request.state.token = token
    return user


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    """Like ``get_current_user`` but returns None instead of rejecting."""
    token = get_session_transport().extract(request)
    if not token:
        return None

    try:
        claims = get_jwt_service().verify(token)
    except (TokenExpired, TokenInvalid) as e:
        logger.debug("Ignoring unusable token: %s", e.message)
        return None
    return get_auth_service().find_active_user(db, claims.subject_id)


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Require an authenticated account with the admin role."""
    if user.role != ROLE_ADMIN:
        raise Forbidden()
    return user

"""Authentication API endpoints."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_settings
from app.database import get_db, get_session_factory
from app.dependencies import get_current_user, get_optional_user, get_session_transport
from app.models.user import User
from app.rate_limit import AUTH_RATE_LIMIT, LOGIN_RATE_LIMIT, limiter
from app.schemas.auth import Envelope, LoginRequest, RegisterRequest, serialize_user
from app.services.auth import get_auth_service

logger = logging.getLogger("wanderon_auth")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=Envelope, status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
def register(request: Request, response: Response, body: RegisterRequest, db: Session = Depends(get_db)) -> Envelope:
    """Register a new account and start a session."""
    auth_service = get_auth_service()
    user = auth_service.register(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    token = auth_service.issue_token(user)
    get_session_transport().attach(response, token)

    return Envelope(
        message="User registered successfully",
        data={"user": serialize_user(user), "token": token},
    )


@router.post("/login", response_model=Envelope)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> Envelope:
    """Authenticate with email or username and receive a token."""
    result = get_auth_service().login(db, body.identifier, body.password)
    get_session_transport().attach(response, result.token)

    return Envelope(
        message="Login successful",
        data={"user": serialize_user(result.user), "token": result.token},
    )


@router.post("/logout", response_model=Envelope)
def logout(response: Response, user: User = Depends(get_current_user)) -> Envelope:
    """Clear the session cookie. The token itself stays valid until it expires."""
    get_session_transport().clear(response)
    logger.info("Account %s logged out", user.id)
    return Envelope(message="Logged out successfully")


@router.get("/me", response_model=Envelope)
def me(user: User = Depends(get_current_user)) -> Envelope:
    """Return the current account."""
    return Envelope(data={"user": serialize_user(user)})


@router.post("/refresh", response_model=Envelope)
def refresh(response: Response, user: User = Depends(get_current_user)) -> Envelope:
    """Issue a fresh token for the current session."""
    token = get_auth_service().refresh(user)
    get_session_transport().attach(response, token)
    return Envelope(message="Token refreshed successfully", data={"token": token})


def _resolve_session_user(request: Request, session_factory: sessionmaker[Session]) -> dict[str, Any] | None:
    # Own session: on timeout this thread is abandoned and outlives the request
    with session_factory() as db:
        user = get_optional_user(request, db)
        return serialize_user(user) if user is not None else None


@router.get("/check", response_model=Envelope)
async def check(
    request: Request, session_factory: sessionmaker[Session] = Depends(get_session_factory)
) -> Envelope:
    """Report whether the caller holds a usable session. Never rejects."""
    timeout = get_settings().AUTH_CHECK_TIMEOUT_SECONDS
    try:
        user = await asyncio.wait_for(
            asyncio.to_thread(_resolve_session_user, request, session_factory), timeout=timeout
        )
    except TimeoutError:
        logger.warning("Auth check timed out after %.1fs", timeout)
        user = None

    return Envelope(data={"authenticated": user is not None, "user": user})

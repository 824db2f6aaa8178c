"""JWT Token Service."""

import calendar
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import Settings, get_settings
from app.errors import TokenExpired, TokenInvalid

logger = logging.getLogger("wanderon_auth")

_REQUIRED_CLAIMS = ("sub", "email", "role", "iss", "aud", "exp")


@dataclass(frozen=True)
class TokenClaims:
    """Decoded session token payload."""

    subject_id: int
    email: str
    role: str
    issuer: str
    audience: str
    issued_at: datetime | None
    expires_at: datetime


class JWTService:
    """Issues and verifies signed session tokens.

    Tokens are stateless: nothing is stored server-side, so a token stays
    valid until its ``exp`` even after logout or deactivation. Callers that
    need current account state must re-read the account.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.issuer = settings.TOKEN_ISSUER
        self.audience = settings.TOKEN_AUDIENCE
        self.expire_minutes = settings.TOKEN_EXPIRE_MINUTES

    def issue(self, subject_id: int, email: str, role: str, now: datetime | None = None) -> str:
        """Create a signed token for the given account."""
        issued = now or datetime.now(UTC)
        expire = issued + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(subject_id),
            "email": email,
            "role": role,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": calendar.timegm(issued.utctimetuple()),
            "exp": calendar.timegm(expire.utctimetuple()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate a token.

        Raises TokenExpired once ``exp`` has passed and TokenInvalid for any
        other defect (signature, structure, issuer, audience, missing claims).
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            raise TokenExpired() from None
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            raise TokenInvalid() from None

        if any(claim not in payload for claim in _REQUIRED_CLAIMS):
            raise TokenInvalid()
        if payload["iss"] != self.issuer or payload["aud"] != self.audience:
            raise TokenInvalid()
        try:
            subject_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise TokenInvalid() from None

        iat = payload.get("iat")
        return TokenClaims(
            subject_id=subject_id,
            email=payload["email"],
            role=payload["role"],
            issuer=payload["iss"],
            audience=payload["aud"],
            issued_at=datetime.fromtimestamp(iat, UTC) if iat is not None else None,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service

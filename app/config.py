"""Configuration settings for the authentication service."""

import os
import secrets
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Built once per process by ``get_settings()`` and handed to every service;
    nothing in the business logic reads the environment directly.
    """

    # Database
    DATABASE_URL: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./wanderon_auth.db"))

    # JWT
    JWT_SECRET_KEY: str = field(default_factory=lambda: os.getenv("JWT_SECRET_KEY", ""), repr=False)
    JWT_ALGORITHM: str = field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    TOKEN_ISSUER: str = field(default_factory=lambda: os.getenv("TOKEN_ISSUER", "wanderon-auth"))
    TOKEN_AUDIENCE: str = field(default_factory=lambda: os.getenv("TOKEN_AUDIENCE", "wanderon-users"))
    TOKEN_EXPIRE_MINUTES: int = field(default_factory=lambda: _env_int("TOKEN_EXPIRE_MINUTES", 7 * 24 * 60))

    # Lockout
    MAX_LOGIN_ATTEMPTS: int = field(default_factory=lambda: _env_int("MAX_LOGIN_ATTEMPTS", 5))
    LOCKOUT_MINUTES: int = field(default_factory=lambda: _env_int("LOCKOUT_MINUTES", 15))

    # Password hashing
    BCRYPT_ROUNDS: int = field(default_factory=lambda: _env_int("BCRYPT_ROUNDS", 12))

    # Client / cookies
    CLIENT_URL: str = field(default_factory=lambda: os.getenv("CLIENT_URL", "http://localhost:3000"))
    AUTH_CHECK_TIMEOUT_SECONDS: float = field(
        default_factory=lambda: float(os.getenv("AUTH_CHECK_TIMEOUT_SECONDS", "5"))
    )

    # Application
    APP_ENV: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    DEBUG: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # Set when JWT_SECRET_KEY was empty and a random key was generated
    secret_generated: bool = False

    def __post_init__(self) -> None:
        if not self.JWT_SECRET_KEY:
            # Frozen dataclass: bypass __setattr__ for the derived defaults
            object.__setattr__(self, "JWT_SECRET_KEY", secrets.token_urlsafe(32))
            object.__setattr__(self, "secret_generated", True)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.secret_generated:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.MAX_LOGIN_ATTEMPTS < 1:
            errors.append("MAX_LOGIN_ATTEMPTS must be at least 1")
        if self.LOCKOUT_MINUTES < 1:
            errors.append("LOCKOUT_MINUTES must be at least 1")
        if not 4 <= self.BCRYPT_ROUNDS <= 31:
            errors.append("BCRYPT_ROUNDS must be between 4 and 31")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

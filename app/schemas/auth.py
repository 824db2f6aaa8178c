"""Pydantic schemas for authentication endpoints.

Request models only check input shape (length, charset, format). Uniqueness
and lock state are enforced by the services against storage.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 30
NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
EMAIL_MAX_LEN = 255
RESERVED_USERNAMES = frozenset({"admin", "root", "user", "guest", "test", "api", "www", "mail", "support"})

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")
_NAME_RE = re.compile(r"^[A-Za-z\s]+$")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_PASSWORD_SPECIALS = "@$!%*?&"


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, as the SPA sends them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def validate_username(value: str) -> str:
    value = value.strip()
    if not USERNAME_MIN_LEN <= len(value) <= USERNAME_MAX_LEN:
        raise ValueError(f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters")
    if not _USERNAME_RE.match(value):
        raise ValueError("Username can only contain letters, numbers, and underscores")
    if value.lower() in RESERVED_USERNAMES:
        raise ValueError("This username is reserved")
    return value


def validate_email(value: str) -> str:
    value = value.strip().lower()
    if len(value) > EMAIL_MAX_LEN or not _EMAIL_RE.match(value):
        raise ValueError("Please provide a valid email address")
    return value


def validate_name(value: str) -> str:
    value = value.strip()
    if not NAME_MIN_LEN <= len(value) <= NAME_MAX_LEN:
        raise ValueError(f"Name must be between {NAME_MIN_LEN} and {NAME_MAX_LEN} characters")
    if not _NAME_RE.match(value):
        raise ValueError("Name can only contain letters and spaces")
    return value


def validate_password_strength(value: str) -> str:
    if not PASSWORD_MIN_LEN <= len(value) <= PASSWORD_MAX_LEN:
        raise ValueError(f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters")
    if not (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
        and any(c in _PASSWORD_SPECIALS for c in value)
    ):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, "
            f"one number, and one special character ({_PASSWORD_SPECIALS})"
        )
    return value


class RegisterRequest(CamelModel):
    first_name: str
    last_name: str
    username: str
    email: str
    password: str
    confirm_password: str

    @field_validator("first_name", "last_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return validate_name(value)

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        return validate_username(value)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return validate_email(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return validate_password_strength(value)

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(CamelModel):
    identifier: str = Field(min_length=1, max_length=EMAIL_MAX_LEN)
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LEN)


class UserResponse(CamelModel):
    """Outward view of an account; never includes the hash or lockout fields."""

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    last_login: datetime | None = Field(
        default=None, validation_alias="last_login_at", serialization_alias="lastLogin"
    )
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def serialize_user(user: Any) -> dict[str, Any]:
    """JSON-ready camelCase dict for an account."""
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)


class Envelope(BaseModel):
    """Response wrapper shared by every endpoint."""

    status: str = Field(default="success", pattern="^(success|error)$")
    message: str | None = None
    data: Any | None = None
    errors: Any | None = None

"""Pydantic schemas for profile and account endpoints."""

from pydantic import Field, field_validator, model_validator

from app.schemas.auth import PASSWORD_MAX_LEN, CamelModel, validate_email, validate_name, validate_password_strength


class ProfileUpdateRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _check_name(cls, value: str | None) -> str | None:
        return validate_name(value) if value is not None else None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        return validate_email(value) if value is not None else None

    @model_validator(mode="after")
    def _require_change(self) -> "ProfileUpdateRequest":
        if self.first_name is None and self.last_name is None and self.email is None:
            raise ValueError("At least one of firstName, lastName or email is required")
        return self


class PasswordChangeRequest(CamelModel):
    current_password: str = Field(min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str
    confirm_password: str | None = None

    @field_validator("new_password")
    @classmethod
    def _check_new_password(cls, value: str) -> str:
        return validate_password_strength(value)

    @model_validator(mode="after")
    def _passwords_match(self) -> "PasswordChangeRequest":
        if self.confirm_password is not None and self.confirm_password != self.new_password:
            raise ValueError("Passwords do not match")
        return self

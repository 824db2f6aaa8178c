"""Typed service errors, translated to HTTP responses in ``main.py``."""


class AuthServiceError(Exception):
    """Base class for business-rule failures.

    Each subclass fixes the HTTP status and a stable default message, so the
    boundary can translate without inspecting the error further.
    """

    status_code: int = 400
    message: str = "Request failed"

    def __init__(self, message: str | None = None, *, details: list | dict | None = None) -> None:
        if message is not None:
            self.message = message
        self.details = details
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    status_code = 400
    message = "Validation error"


class DuplicateEmail(AuthServiceError):
    status_code = 400
    message = "Email already exists. Please use another email."


class DuplicateUsername(AuthServiceError):
    status_code = 400
    message = "Username already exists. Please use another username."


class IncorrectCurrentPassword(AuthServiceError):
    status_code = 400
    message = "Current password is incorrect"


class InvalidCredentials(AuthServiceError):
    """Raised for both unknown identifiers and wrong passwords."""

    status_code = 401
    message = "Invalid credentials"


class AccountLocked(AuthServiceError):
    status_code = 401
    message = "Account temporarily locked due to too many failed login attempts"


class TokenInvalid(AuthServiceError):
    status_code = 401
    message = "Invalid token."


class TokenExpired(AuthServiceError):
    status_code = 401
    message = "Token expired."


class Unauthenticated(AuthServiceError):
    status_code = 401
    message = "Access denied. No token provided."


class Forbidden(AuthServiceError):
    status_code = 403
    message = "Access denied. Insufficient permissions."


class NotFound(AuthServiceError):
    status_code = 404
    message = "User not found"


class Internal(AuthServiceError):
    status_code = 500
    message = "Internal server error"


__all__ = [
    "AuthServiceError",
    "ValidationError",
    "DuplicateEmail",
    "DuplicateUsername",
    "IncorrectCurrentPassword",
    "InvalidCredentials",
    "AccountLocked",
    "TokenInvalid",
    "TokenExpired",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "Internal",
]
